"""
Cache de respuestas de listados (cache-aside).

Claves: ``{entidad}_{fragmentoUsuario}-{page}-{limit}[_deleted]``. La invalidación
siempre borra todas las páginas de un scope (entidad completa o entidad+usuario).
"""
import json
import logging
import threading
from fnmatch import fnmatchcase
from typing import Any, Callable, Optional

import redis
from cachetools import TTLCache

from .config import Settings

logger = logging.getLogger(__name__)


class CacheStore:
    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def keys(self, pattern: str) -> list[str]:
        raise NotImplementedError

    def delete(self, *keys: str) -> int:
        raise NotImplementedError


class MemoryCache(CacheStore):
    """Backend en proceso (dev/tests). TTLCache no es thread-safe, de ahí el lock."""

    def __init__(self, maxsize: int = 1024, ttl: int = 30):
        self._data = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key, value):
        raw = json.dumps(value, default=str)
        with self._lock:
            self._data[key] = raw

    def keys(self, pattern):
        with self._lock:
            return [k for k in list(self._data.keys()) if fnmatchcase(k, pattern)]

    def delete(self, *keys):
        removed = 0
        with self._lock:
            for k in keys:
                if self._data.pop(k, None) is not None:
                    removed += 1
        return removed


class RedisCache(CacheStore):
    def __init__(self, client: redis.Redis, ttl: int = 30):
        self._client = client
        self._ttl = ttl

    def get(self, key):
        raw = self._client.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key, value):
        self._client.set(key, json.dumps(value, default=str), ex=self._ttl)

    def keys(self, pattern):
        return list(self._client.scan_iter(match=pattern))

    def delete(self, *keys):
        if not keys:
            return 0
        return self._client.delete(*keys)


def build_cache(settings: Settings) -> CacheStore:
    backend = (settings.CACHE_BACKEND or "redis").strip().lower()
    if backend == "memory":
        return MemoryCache(maxsize=settings.CACHE_MAXSIZE, ttl=settings.CACHE_TTL_SECONDS)
    if backend == "redis":
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            username=settings.REDIS_USERNAME,
            password=settings.REDIS_PASSWORD,
            db=settings.REDIS_DB,
            decode_responses=True,
        )
        return RedisCache(client, ttl=settings.CACHE_TTL_SECONDS)
    raise ValueError(f"CACHE_BACKEND inválido: {settings.CACHE_BACKEND!r}. Use 'redis' o 'memory'.")


def user_fragment(user_id: str) -> str:
    return str(user_id).split("-")[0]


def list_cache_key(entity: str, user_id: str, page: int, limit: int, deleted: bool = False) -> str:
    key = f"{entity}_{user_fragment(user_id)}-{page}-{limit}"
    return f"{key}_deleted" if deleted else key


def invalidate_keys(cache: CacheStore, entity: str, user_id: str | None = None) -> int:
    pattern = f"{entity}_{user_fragment(user_id)}-*" if user_id else f"{entity}_*"
    keys = cache.keys(pattern)
    removed = cache.delete(*keys) if keys else 0
    logger.info("Cache invalidada: patrón=%s claves=%d", pattern, removed)
    return removed


def cached_page(cache: CacheStore, key: str, loader: Callable[[], dict]) -> dict:
    hit = cache.get(key)
    if hit is not None:
        return hit
    page = loader()
    cache.set(key, page)
    return page
