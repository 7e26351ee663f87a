import os

# configuración de test antes de importar la app (settings y engine se crean al importar)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["APP_SECRET"] = "test-access-secret"
os.environ["SECRET_JWT_REFRESH"] = "test-refresh-secret"
os.environ["SECRET_JWT_REGISTER"] = "test-register-secret"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["MAX_PASS_FAILURES"] = "3"
os.environ["URL_MAIL_SERVICE"] = "http://mail.test"

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy import select

from helpdesk import models
from helpdesk.cache import MemoryCache
from helpdesk.db import Base, SessionLocal, engine, get_db
from helpdesk.deps import get_cache, get_login_tracker, get_mailer
from helpdesk.main import app
from helpdesk.messages import MailMessagesError
from helpdesk.security import create_access_token, hash_password
from helpdesk.seed import seed_roles
from helpdesk.services.auth import LoginAttemptTracker

API = "/api/v1"
PASSWORD = "Secreta#123"
PASSWORD_HASH = hash_password(PASSWORD)


class FakeMailer:
    """Registra los envíos en vez de llamar al servicio de correo."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, queue, body):
        if self.fail:
            raise HTTPException(status_code=500, detail=MailMessagesError.MAIL_NOT_SENT)
        self.sent.append((queue, dict(body)))

    def last(self, queue):
        return next(body for q, body in reversed(self.sent) if q == queue)


@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    seed_roles(db)
    db.add(models.Role(name="usuario", description="Usuario final"))
    db.commit()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def cache():
    return MemoryCache(maxsize=256, ttl=60)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def tracker():
    return LoginAttemptTracker(3)


@pytest.fixture(scope="function")
def client(test_db, cache, mailer, tracker):
    def override_get_db():
        try:
            yield test_db
        except Exception:
            test_db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_login_tracker] = lambda: tracker
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(test_db):
    counter = {"n": 0}

    def _make(role_name="usuario", email=None, active=True, first_name="Ana", last_name="Pérez"):
        counter["n"] += 1
        role = test_db.execute(select(models.Role).where(models.Role.name == role_name)).scalar_one()
        user = models.User(
            first_name=first_name,
            last_name=last_name,
            email=email or f"user{counter['n']}@example.com",
            password_hash=PASSWORD_HASH,
            role_id=role.id,
            active=active,
        )
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user

    return _make


def auth_headers(user, role_name="usuario"):
    token = create_access_token(user.id, user.email, user.full_name, [role_name])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(make_user):
    return make_user("admin", email="admin@example.com", first_name="Admin", last_name="Root")


@pytest.fixture
def support_user(make_user):
    return make_user("soporte", email="soporte@example.com", first_name="Sara", last_name="Técnica")


@pytest.fixture
def normal_user(make_user):
    return make_user("usuario", email="ana@example.com")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user, "admin")


@pytest.fixture
def support_headers(support_user):
    return auth_headers(support_user, "soporte")


@pytest.fixture
def user_headers(normal_user):
    return auth_headers(normal_user)


@pytest.fixture
def category(test_db):
    c = models.Category(name="Hardware")
    test_db.add(c)
    test_db.commit()
    test_db.refresh(c)
    return c


@pytest.fixture
def subcategory(test_db, category):
    s = models.Subcategory(name="Impresoras", parent=category)
    test_db.add(s)
    test_db.commit()
    test_db.refresh(s)
    return s


@pytest.fixture
def priority(test_db):
    p = models.Priority(name="Alta")
    test_db.add(p)
    test_db.commit()
    test_db.refresh(p)
    return p
