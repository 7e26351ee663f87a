"""Tokens de un solo uso (verificación de email y cambio de contraseña)."""
import logging
from datetime import timedelta

import jwt
from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..messages import AuthMessagesError
from ..models import OneTimeToken, TokenPurpose
from ..security import create_action_token, decode_action_token, new_token_id

logger = logging.getLogger(__name__)


def _expiry_for(purpose: TokenPurpose) -> timedelta:
    settings = get_settings()
    if purpose == TokenPurpose.verify:
        return timedelta(hours=settings.VERIFY_TOKEN_EXPIRE_HOURS)
    return timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)


def issue_token(db: Session, email: str, purpose: TokenPurpose) -> str:
    """Firma el token y lo persiste sin commit; el commit es de quien llama."""
    email = email.lower()
    token_id = new_token_id()
    token = create_action_token(email, token_id, purpose.value, _expiry_for(purpose))
    db.add(OneTimeToken(token=token, email=email, token_id=token_id, purpose=purpose.value))
    db.flush()
    return token


def consume_token(db: Session, token: str, email: str, purpose: TokenPurpose) -> OneTimeToken:
    try:
        payload = decode_action_token(token)
    except jwt.PyJWTError as e:
        logger.warning("Token de un solo uso rechazado: %s", e)
        raise HTTPException(status_code=400, detail=AuthMessagesError.TOKEN_INVALID)

    record = db.execute(
        select(OneTimeToken).where(OneTimeToken.token_id == payload["id"])
    ).scalar_one_or_none()
    if not record:
        logger.warning("Token %s no registrado", payload["id"])
        raise HTTPException(status_code=400, detail=AuthMessagesError.TOKEN_INVALID)

    if record.is_used:
        raise HTTPException(status_code=400, detail=AuthMessagesError.USER_TOKEN_USED)

    if payload["purpose"] != purpose.value or record.purpose != purpose.value:
        raise HTTPException(status_code=400, detail=AuthMessagesError.TOKEN_PURPOSE_INVALID)

    if payload["email"] != email.lower():
        raise HTTPException(status_code=400, detail=AuthMessagesError.USER_MAIL_DIFFERENT)

    record.is_used = True
    db.add(record)
    db.flush()
    return record
