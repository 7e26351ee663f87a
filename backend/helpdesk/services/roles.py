import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..cache import CacheStore, cached_page, invalidate_keys, list_cache_key
from ..messages import RolMessages, RolMessagesError
from ..models import Role, User
from ..pagination import PageParams
from ..schemas import RoleCreate, RoleOut, RoleUpdate
from . import common

logger = logging.getLogger(__name__)

CACHE_ENTITY = "roles"


def get_role_by_name(db: Session, name: str) -> Role | None:
    # comparación sensible a mayúsculas también en MySQL (collation ci)
    rows = db.execute(
        select(Role).where(Role.name == name, Role.deleted_at.is_(None))
    ).scalars().all()
    return next((r for r in rows if r.name == name), None)


def get_role_name_for_user(db: Session, user_id: str) -> str | None:
    return db.execute(
        select(Role.name)
        .join(User, User.role_id == Role.id)
        .where(User.id == user_id, User.deleted_at.is_(None), Role.deleted_at.is_(None))
    ).scalar_one_or_none()


def _name_taken(db: Session, name: str, exclude_id: str | None = None) -> bool:
    stmt = select(Role.id).where(Role.name == name)
    if exclude_id:
        stmt = stmt.where(Role.id != exclude_id)
    return db.execute(stmt).first() is not None


def _invalidate(cache: CacheStore):
    invalidate_keys(cache, CACHE_ENTITY)
    # los listados de usuarios y tickets dependen del rol de cada usuario
    invalidate_keys(cache, "users")
    invalidate_keys(cache, "tickets")


def list_roles(db: Session, cache: CacheStore, caller_id: str, params: PageParams) -> dict:
    def load():
        stmt = select(Role).where(common.deleted_filter(Role, params.deleted))
        rows, meta = common.paginate(db, stmt, params, (Role.created_at.desc(), Role.id))
        return {"roles": [RoleOut.model_validate(r).model_dump(mode="json") for r in rows], "meta": meta}

    key = list_cache_key(CACHE_ENTITY, caller_id, params.page, params.limit, params.deleted)
    return cached_page(cache, key, load)


def get_role(db: Session, role_id: str, deleted: bool = False) -> Role:
    role = common.get_by_id(db, Role, role_id, deleted)
    if not role:
        raise HTTPException(status_code=404, detail=RolMessagesError.ROL_NOT_FOUND)
    return role


def create_role(db: Session, cache: CacheStore, body: RoleCreate) -> str:
    name = body.name.strip()
    if _name_taken(db, name):
        raise HTTPException(status_code=400, detail=RolMessagesError.ROL_ALREADY_EXISTS)
    db.add(Role(name=name, description=body.description))
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    logger.info("Rol creado: %s", name)
    return RolMessages.ROL_CREATED


def update_role(db: Session, cache: CacheStore, role_id: str, body: RoleUpdate) -> str:
    get_role(db, role_id)
    values = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in values:
        values["name"] = values["name"].strip()
        if _name_taken(db, values["name"], exclude_id=role_id):
            raise HTTPException(status_code=400, detail=RolMessagesError.ROL_ALREADY_EXISTS)
    if values and common.update_by_id(db, Role, role_id, values) == 0:
        raise HTTPException(status_code=400, detail=RolMessagesError.ROL_NOT_UPDATED)
    db.commit()
    _invalidate(cache)
    return RolMessages.ROL_UPDATED


def delete_role(db: Session, cache: CacheStore, role_id: str) -> str:
    get_role(db, role_id)
    if common.soft_delete(db, Role, role_id) == 0:
        raise HTTPException(status_code=400, detail=RolMessagesError.ROL_NOT_DELETED)
    db.commit()
    _invalidate(cache)
    return RolMessages.ROL_REMOVED


def restore_role(db: Session, cache: CacheStore, role_id: str) -> str:
    get_role(db, role_id, deleted=True)
    if common.restore(db, Role, role_id) == 0:
        raise HTTPException(status_code=400, detail=RolMessagesError.ROL_NOT_RESTORED)
    db.commit()
    _invalidate(cache)
    return RolMessages.ROL_RESTORED
