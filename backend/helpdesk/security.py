import secrets
import string
import uuid
import jwt
from datetime import datetime, timedelta, timezone
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError
from .config import get_settings

# Parámetros balance seguridad/rendimiento (OWASP 2023)
ph = PasswordHasher(
    time_cost=2,
    memory_cost=19456,  # 19 MB (en KiB)
    parallelism=1
)

RANDOM_WORD_ALPHABET = string.ascii_lowercase + string.digits


def hash_password(plain: str) -> str:
    return ph.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        ph.verify(hashed, plain)
        return True
    except (VerifyMismatchError, InvalidHashError):
        return False


def check_needs_rehash(hashed: str) -> bool:
    """
    Verifica si un hash de contraseña necesita ser actualizado con los parámetros actuales.
    """
    try:
        return ph.check_needs_rehash(hashed)
    except InvalidHashError:
        return True


def generate_random_word(length: int) -> str:
    return "".join(secrets.choice(RANDOM_WORD_ALPHABET) for _ in range(length))


def new_token_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(sub: str, email: str, name: str | None, roles: list[str]) -> str:
    settings = get_settings()
    now = _now()
    exp = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(sub),
        "email": email,
        "name": name or "",
        "roles": roles,
        "type": "access",
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "iss": settings.API_ISSUER,
        "aud": settings.API_AUDIENCE,
    }
    return jwt.encode(payload, settings.APP_SECRET, algorithm="HS256")


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.APP_SECRET,
        algorithms=["HS256"],
        audience=settings.API_AUDIENCE,
        issuer=settings.API_ISSUER,
        options={"require": ["exp", "iat", "sub", "type"]}
    )
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("wrong token type")
    return payload


def create_refresh_token(sub: str, email: str, name: str | None, roles: list[str]) -> str:
    settings = get_settings()
    now = _now()
    exp = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {
        "sub": str(sub),
        "email": email,
        "name": name or "",
        "roles": roles,
        "type": "refresh",
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "iss": settings.API_ISSUER,
        "aud": settings.API_AUDIENCE,
    }
    return jwt.encode(payload, settings.SECRET_JWT_REFRESH, algorithm="HS256")


def decode_refresh_token(token: str) -> dict:
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.SECRET_JWT_REFRESH,
        algorithms=["HS256"],
        audience=settings.API_AUDIENCE,
        issuer=settings.API_ISSUER,
        options={"require": ["exp", "iat", "sub", "type"]}
    )
    if payload.get("type") != "refresh":
        raise jwt.InvalidTokenError("wrong token type")
    return payload


def create_action_token(email: str, token_id: str, purpose: str, expires_in: timedelta) -> str:
    """Token de un solo uso firmado con SECRET_JWT_REGISTER; el claim "id" permite marcarlo como usado."""
    settings = get_settings()
    now = _now()
    payload = {
        "email": email,
        "id": token_id,
        "purpose": purpose,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_JWT_REGISTER, algorithm="HS256")


def decode_action_token(token: str) -> dict:
    settings = get_settings()
    return jwt.decode(
        token,
        settings.SECRET_JWT_REGISTER,
        algorithms=["HS256"],
        options={"require": ["exp", "email", "id", "purpose"]}
    )
