from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..cache import CacheStore, cached_page, invalidate_keys, list_cache_key
from ..messages import PriorityMessages, PriorityMessagesError
from ..models import Priority
from ..pagination import PageParams
from ..schemas import ChangeStatus, PriorityCreate, PriorityOut, PriorityUpdate
from . import common

CACHE_ENTITY = "priorities"


def _name_taken(db: Session, name: str, exclude_id: str | None = None) -> bool:
    stmt = select(Priority.id).where(Priority.name == name)
    if exclude_id:
        stmt = stmt.where(Priority.id != exclude_id)
    return db.execute(stmt).first() is not None


def list_priorities(db: Session, cache: CacheStore, caller_id: str, params: PageParams) -> dict:
    def load():
        stmt = select(Priority).where(common.deleted_filter(Priority, params.deleted))
        rows, meta = common.paginate(db, stmt, params, (Priority.created_at.desc(), Priority.id))
        return {"priorities": [PriorityOut.model_validate(p).model_dump(mode="json") for p in rows], "meta": meta}

    key = list_cache_key(CACHE_ENTITY, caller_id, params.page, params.limit, params.deleted)
    return cached_page(cache, key, load)


def list_by_status(db: Session, status: str) -> list[dict]:
    value = status.strip().lower()
    if value not in ("true", "false"):
        raise HTTPException(status_code=400, detail=PriorityMessagesError.INVALID_STATUS)
    rows = db.execute(
        select(Priority)
        .where(Priority.status.is_(value == "true"), Priority.deleted_at.is_(None))
        .order_by(Priority.name)
    ).scalars().all()
    return [PriorityOut.model_validate(p).model_dump(mode="json") for p in rows]


def get_priority(db: Session, priority_id: str, deleted: bool = False) -> Priority:
    priority = common.get_by_id(db, Priority, priority_id, deleted)
    if not priority:
        raise HTTPException(status_code=404, detail=PriorityMessagesError.PRIORITY_NOT_FOUND)
    return priority


def create_priority(db: Session, cache: CacheStore, body: PriorityCreate) -> str:
    name = body.name.strip()
    # unique en BD: también choca con prioridades eliminadas
    if _name_taken(db, name):
        raise HTTPException(status_code=400, detail=PriorityMessagesError.PRIORITY_ALREADY_EXIST)
    db.add(Priority(name=name))
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return PriorityMessages.PRIORITY_CREATED


def update_priority(db: Session, cache: CacheStore, priority_id: str, body: PriorityUpdate) -> str:
    get_priority(db, priority_id)
    values = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in values:
        values["name"] = values["name"].strip()
        if _name_taken(db, values["name"], exclude_id=priority_id):
            raise HTTPException(status_code=400, detail=PriorityMessagesError.PRIORITY_ALREADY_EXIST)
    if values and common.update_by_id(db, Priority, priority_id, values) == 0:
        raise HTTPException(status_code=400, detail=PriorityMessagesError.PRIORITY_NOT_UPDATED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    invalidate_keys(cache, "tickets")
    return PriorityMessages.PRIORITY_UPDATED


def change_status(db: Session, cache: CacheStore, priority_id: str, body: ChangeStatus) -> str:
    get_priority(db, priority_id)
    if common.update_by_id(db, Priority, priority_id, {"status": body.status}) == 0:
        raise HTTPException(status_code=400, detail=PriorityMessagesError.PRIORITY_NOT_UPDATED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return PriorityMessages.PRIORITY_ACTIVED if body.status else PriorityMessages.PRIORITY_DESACTIVED


def delete_priority(db: Session, cache: CacheStore, priority_id: str) -> str:
    get_priority(db, priority_id)
    if common.soft_delete(db, Priority, priority_id) == 0:
        raise HTTPException(status_code=400, detail=PriorityMessagesError.PRIORITY_NOT_DELETED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return PriorityMessages.PRIORITY_REMOVED


def restore_priority(db: Session, cache: CacheStore, priority_id: str) -> str:
    get_priority(db, priority_id, deleted=True)
    if common.restore(db, Priority, priority_id) == 0:
        raise HTTPException(status_code=400, detail=PriorityMessagesError.PRIORITY_NOT_RESTORED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return PriorityMessages.PRIORITY_RESTORED
