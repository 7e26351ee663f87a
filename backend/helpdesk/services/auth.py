import logging
import threading

import jwt
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..config import get_settings
from ..mail import QUEUE_FORGOT_PASSWORD, QUEUE_LOGIN, QUEUE_RECOVERY, Mailer
from ..messages import AuthMessages, AuthMessagesError, UserMessagesError
from ..models import TokenPurpose, User
from ..schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    UserOut,
    VerifyRequest,
)
from ..security import (
    check_needs_rehash,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from .roles import get_role_name_for_user
from .tokens import consume_token, issue_token
from .users import get_user_by_email, set_active

logger = logging.getLogger(__name__)


class LoginAttemptTracker:
    """
    Contador de logins fallidos por email, en memoria del proceso.
    Se reinicia al reiniciar el servidor; reemplazable por un store persistente.
    """

    def __init__(self, max_failures: int):
        self.max_failures = max_failures
        self._failures: dict[str, int] = {}
        self._lock = threading.Lock()

    def register_failure(self, email: str) -> bool:
        """Suma un fallo. Devuelve True si se alcanzó el umbral (y reinicia el contador)."""
        with self._lock:
            count = self._failures.get(email, 0) + 1
            if count >= self.max_failures:
                self._failures.pop(email, None)
                return True
            self._failures[email] = count
            return False

    def reset(self, email: str) -> None:
        with self._lock:
            self._failures.pop(email, None)

    def failures(self, email: str) -> int:
        with self._lock:
            return self._failures.get(email, 0)


def _issue_session(db: Session, user: User) -> dict:
    settings = get_settings()
    role_name = get_role_name_for_user(db, user.id)
    roles = [role_name] if role_name else []
    return {
        "access_token": create_access_token(user.id, user.email, user.full_name, roles),
        "refresh_token": create_refresh_token(user.id, user.email, user.full_name, roles),
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


def login(db: Session, tracker: LoginAttemptTracker, body: LoginRequest) -> dict:
    email = str(body.email).lower()
    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail=AuthMessagesError.USER_NOT_FOUND)
    if not user.active:
        raise HTTPException(status_code=404, detail=AuthMessagesError.USER_IS_NOT_ACTIVE)

    if not verify_password(body.password, user.password_hash):
        if tracker.register_failure(email):
            set_active(db, user, False)
            logger.warning("Usuario %s bloqueado tras %d intentos fallidos", email, tracker.max_failures)
            raise HTTPException(status_code=400, detail=AuthMessagesError.USER_BLOCKED)
        logger.info("Login fallido para %s (%d)", email, tracker.failures(email))
        raise HTTPException(status_code=400, detail=AuthMessagesError.PASSWORD_OR_EMAIL_INVALID)

    tracker.reset(email)

    # hash con parámetros antiguos => se regenera aprovechando la contraseña en claro
    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(body.password)
        db.add(user)
        db.commit()
        db.refresh(user)

    return {"user": UserOut.model_validate(user).model_dump(mode="json"), **_issue_session(db, user)}


def verify_account(db: Session, mailer: Mailer, path_token: str, body: VerifyRequest) -> str:
    if path_token != body.token:
        raise HTTPException(status_code=400, detail=AuthMessagesError.TOKEN_INVALID)

    email = str(body.email).lower()
    consume_token(db, body.token, email, TokenPurpose.verify)

    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail=UserMessagesError.USER_NOT_FOUND)
    user.active = True
    db.add(user)

    settings = get_settings()
    mailer.send(QUEUE_LOGIN, {
        "email": email,
        "nombre": user.first_name,
        "lastname": user.last_name,
        "url": f"{settings.APP_FRONT_HOST}/iniciarsesion",
        "subject": f"{user.first_name}, gracias por activar tu cuenta",
    })
    db.commit()
    logger.info("Cuenta verificada: %s", email)
    return AuthMessages.USER_VERIFIED


def forgot_password(db: Session, mailer: Mailer, body: ForgotPasswordRequest) -> str:
    email = str(body.email).lower()
    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail=UserMessagesError.USER_NOT_FOUND)

    token = issue_token(db, email, TokenPurpose.reset)
    settings = get_settings()
    mailer.send(QUEUE_FORGOT_PASSWORD, {
        "email": email,
        "nombre": user.first_name,
        "lastname": user.last_name,
        "url": f"{settings.APP_FRONT_HOST}/change-password/{token}",
        "subject": f"{user.first_name}, sigue los pasos para recuperar tu contraseña",
    })
    db.commit()
    return AuthMessages.FORGOT_PASSWORD_SENT


def change_password(db: Session, mailer: Mailer, path_token: str, body: ChangePasswordRequest) -> str:
    if path_token != body.token:
        raise HTTPException(status_code=400, detail=AuthMessagesError.TOKEN_INVALID)

    email = str(body.email).lower()
    consume_token(db, body.token, email, TokenPurpose.reset)

    user = get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail=UserMessagesError.USER_NOT_FOUND)

    if body.password != body.confirm_password:
        raise HTTPException(status_code=400, detail=UserMessagesError.USER_PASSWORD_NOT_MATCH)

    user.password_hash = hash_password(body.password)
    db.add(user)

    settings = get_settings()
    mailer.send(QUEUE_RECOVERY, {
        "email": email,
        "nombre": user.first_name,
        "lastname": user.last_name,
        "url": f"{settings.APP_FRONT_HOST}/iniciarsesion",
        "subject": f"{user.first_name}, tu contraseña ha sido actualizada",
    })
    db.commit()
    return AuthMessages.PASSWORD_CHANGED


def refresh(body: RefreshRequest) -> dict:
    try:
        claims = decode_refresh_token(body.token)
    except jwt.PyJWTError as e:
        logger.warning("Refresh rechazado: %s", e)
        raise HTTPException(status_code=401, detail=AuthMessagesError.REFRESH_INVALID)

    settings = get_settings()
    roles = claims.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return {
        "access_token": create_access_token(claims["sub"], claims.get("email", ""), claims.get("name"), roles),
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }
