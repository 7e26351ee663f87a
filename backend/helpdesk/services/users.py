import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..cache import CacheStore, cached_page, invalidate_keys, list_cache_key
from ..config import get_settings
from ..mail import QUEUE_REGISTER, Mailer
from ..messages import UserMessages, UserMessagesError
from ..models import TokenPurpose, User
from ..pagination import PageParams
from ..schemas import UserCreate, UserOut, UserUpdate
from ..security import hash_password, verify_password
from . import common
from .roles import get_role_by_name
from .tokens import issue_token

logger = logging.getLogger(__name__)

CACHE_ENTITY = "users"
TICKETS_CACHE_ENTITY = "tickets"


def find_user(db: Session, user_id: str, deleted: bool = False) -> User | None:
    return common.get_by_id(db, User, user_id, deleted)


def get_user(db: Session, user_id: str, deleted: bool = False) -> User:
    user = find_user(db, user_id, deleted)
    if not user:
        logger.warning("No se encontró el usuario %s", user_id)
        raise HTTPException(status_code=404, detail=UserMessagesError.USER_NOT_FOUND)
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(
        select(User).where(User.email == email.strip().lower(), User.deleted_at.is_(None))
    ).scalar_one_or_none()


def _email_taken(db: Session, email: str, exclude_id: str | None = None) -> bool:
    stmt = select(User.id).where(User.email == email.strip().lower())
    if exclude_id:
        stmt = stmt.where(User.id != exclude_id)
    return db.execute(stmt).first() is not None


def _invalidate(cache: CacheStore):
    invalidate_keys(cache, CACHE_ENTITY)
    # los listados de tickets embeben datos del creador/técnico
    invalidate_keys(cache, TICKETS_CACHE_ENTITY)


def list_users(db: Session, cache: CacheStore, caller_id: str, params: PageParams) -> dict:
    def load():
        stmt = select(User).where(common.deleted_filter(User, params.deleted))
        rows, meta = common.paginate(
            db, stmt, params, (User.created_at.desc(), User.id), (selectinload(User.role),)
        )
        return {"users": [UserOut.model_validate(u).model_dump(mode="json") for u in rows], "meta": meta}

    key = list_cache_key(CACHE_ENTITY, caller_id, params.page, params.limit, params.deleted)
    return cached_page(cache, key, load)


def create_user(db: Session, cache: CacheStore, mailer: Mailer, body: UserCreate) -> str:
    """
    Registra un usuario inactivo, emite el token de verificación y envía el correo de registro.
    Si el correo falla no se hace commit: ni usuario ni token quedan persistidos.
    """
    email = str(body.email).lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=400, detail=UserMessagesError.USER_ALREADY_EXIST)

    role = get_role_by_name(db, body.rol)
    if not role:
        raise HTTPException(status_code=404, detail=UserMessagesError.ROL_NOT_FOUND)

    user = User(
        first_name=body.first_name.strip(),
        last_name=body.last_name.strip(),
        email=email,
        password_hash=hash_password(body.password),
        role_id=role.id,
        phone=body.phone,
        active=False,
    )
    db.add(user)
    db.flush()

    token = issue_token(db, email, TokenPurpose.verify)
    settings = get_settings()
    mailer.send(QUEUE_REGISTER, {
        "email": email,
        "nombre": user.first_name,
        "lastname": user.last_name,
        "url": f"{settings.APP_FRONT_HOST}/verify/{token}",
        "subject": f"{user.first_name}, activa tu cuenta",
    })

    db.commit()
    _invalidate(cache)
    logger.info("Usuario registrado: %s", email)
    return UserMessages.USER_CREATED


def update_user(db: Session, cache: CacheStore, user_id: str, body: UserUpdate) -> str:
    user = get_user(db, user_id)
    data = body.model_dump(exclude_unset=True)

    if data.get("email") is not None:
        email = str(data["email"]).lower()
        if _email_taken(db, email, exclude_id=user_id):
            raise HTTPException(status_code=400, detail=UserMessagesError.USER_ALREADY_EXIST)
        user.email = email

    if data.get("old_password") is not None:
        if not verify_password(data["old_password"], user.password_hash):
            raise HTTPException(status_code=400, detail=UserMessagesError.USER_PASSWORD_NOT_MATCH_OLD)

    if data.get("password") is not None:
        user.password_hash = hash_password(data["password"])

    if data.get("rol") is not None:
        role = get_role_by_name(db, data["rol"])
        if not role:
            raise HTTPException(status_code=404, detail=UserMessagesError.ROL_NOT_FOUND)
        user.role_id = role.id

    for field in ("first_name", "last_name", "phone", "active"):
        if data.get(field) is not None:
            setattr(user, field, data[field])

    db.add(user)
    db.commit()
    _invalidate(cache)
    return UserMessages.USER_UPDATED


def set_active(db: Session, user: User, active: bool) -> None:
    user.active = active
    db.add(user)
    db.commit()


def delete_user(db: Session, cache: CacheStore, user_id: str) -> str:
    get_user(db, user_id)
    if common.soft_delete(db, User, user_id) == 0:
        raise HTTPException(status_code=400, detail=UserMessagesError.USER_NOT_DELETED)
    db.commit()
    _invalidate(cache)
    return UserMessages.USER_REMOVED


def restore_user(db: Session, cache: CacheStore, user_id: str) -> str:
    get_user(db, user_id, deleted=True)
    if common.restore(db, User, user_id) == 0:
        raise HTTPException(status_code=400, detail=UserMessagesError.USER_NOT_RESTORED)
    db.commit()
    _invalidate(cache)
    return UserMessages.USER_RESTORED
