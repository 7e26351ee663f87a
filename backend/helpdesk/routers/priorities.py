from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import ADMIN_ONLY, SUPPORT_STAFF, Caller, require_roles
from ..cache import CacheStore
from ..deps import get_cache, get_db
from ..pagination import PageParams, page_params
from ..schemas import ChangeStatus, MessageResponse, PriorityCreate, PriorityOut, PriorityUpdate
from ..services import priorities as priority_service

router = APIRouter(prefix="/priorities", tags=["priorities"])

admin = require_roles(*ADMIN_ONLY)
staff = require_roles(*SUPPORT_STAFF)


@router.get("")
def list_priorities(
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return priority_service.list_priorities(db, cache, caller.id, params)


@router.get("/status/{status}", response_model=list[PriorityOut])
def list_by_status(status: str, db: Session = Depends(get_db), caller: Caller = Depends(staff)):
    return priority_service.list_by_status(db, status)


@router.get("/{priority_id}", response_model=PriorityOut)
def get_priority(
    priority_id: str,
    deleted: bool = False,
    db: Session = Depends(get_db),
    caller: Caller = Depends(staff),
):
    return priority_service.get_priority(db, priority_id, deleted)


@router.post("", response_model=MessageResponse, status_code=201)
def create_priority(
    body: PriorityCreate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=priority_service.create_priority(db, cache, body))


@router.put("/{priority_id}/change-status", response_model=MessageResponse)
def change_status(
    priority_id: str,
    body: ChangeStatus,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=priority_service.change_status(db, cache, priority_id, body))


@router.put("/{priority_id}", response_model=MessageResponse)
def update_priority(
    priority_id: str,
    body: PriorityUpdate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=priority_service.update_priority(db, cache, priority_id, body))


@router.delete("/{priority_id}", response_model=MessageResponse)
def delete_priority(
    priority_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=priority_service.delete_priority(db, cache, priority_id))


@router.post("/{priority_id}", response_model=MessageResponse)
def restore_priority(
    priority_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=priority_service.restore_priority(db, cache, priority_id))
