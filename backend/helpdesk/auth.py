# helpdesk/auth.py
import logging
from dataclasses import dataclass

import jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .db import get_db
from .messages import AuthMessagesError
from .models import User
from .security import decode_access_token
from .services.roles import get_role_name_for_user
from .services.users import find_user

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

# Conjuntos de roles declarados por cada ruta
ADMIN_ONLY = frozenset({"admin"})
SUPPORT_STAFF = frozenset({"admin", "soporte"})
ANY_ROLE = frozenset()


@dataclass
class Caller:
    user: User
    role: str | None

    @property
    def id(self) -> str:
        return self.user.id


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=AuthMessagesError.UNAUTHORIZED)
    try:
        payload = decode_access_token(creds.credentials)
    except jwt.PyJWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")

    user = find_user(db, payload["sub"])
    if not user:
        logger.warning("Token válido para usuario inexistente o eliminado: %s", payload["sub"])
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=AuthMessagesError.UNAUTHORIZED)
    return user


def authorize(role_name: str | None, allowed: frozenset[str]) -> bool:
    # conjunto vacío => sin restricción de rol
    if not allowed:
        return True
    return role_name is not None and role_name in allowed


def require_roles(*roles):
    allowed = frozenset(r.strip() for r in roles if r and r.strip())

    def _inner(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Caller:
        # el rol se resuelve contra la BD en cada request, no desde el token
        role_name = get_role_name_for_user(db, user.id)
        if not authorize(role_name, allowed):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=AuthMessagesError.FORBIDDEN)
        return Caller(user=user, role=role_name)
    return _inner
