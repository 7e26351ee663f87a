from functools import lru_cache

from .cache import CacheStore, build_cache
from .config import get_settings
from .db import get_db
from .mail import Mailer
from .services.auth import LoginAttemptTracker

__all__ = ["get_db", "get_cache", "get_mailer", "get_login_tracker"]


@lru_cache
def get_cache() -> CacheStore:
    return build_cache(get_settings())


@lru_cache
def get_mailer() -> Mailer:
    return Mailer(get_settings())


@lru_cache
def get_login_tracker() -> LoginAttemptTracker:
    return LoginAttemptTracker(get_settings().MAX_PASS_FAILURES)
