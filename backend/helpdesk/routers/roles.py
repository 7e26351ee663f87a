from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import ADMIN_ONLY, Caller, require_roles
from ..cache import CacheStore
from ..deps import get_cache, get_db
from ..pagination import PageParams, page_params
from ..schemas import MessageResponse, RoleCreate, RoleOut, RoleUpdate
from ..services import roles as role_service

router = APIRouter(prefix="/roles", tags=["roles"])

admin = require_roles(*ADMIN_ONLY)


@router.get("")
def list_roles(
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return role_service.list_roles(db, cache, caller.id, params)


@router.get("/{role_id}", response_model=RoleOut)
def get_role(role_id: str, deleted: bool = False, db: Session = Depends(get_db), caller: Caller = Depends(admin)):
    return role_service.get_role(db, role_id, deleted)


@router.post("", response_model=MessageResponse, status_code=201)
def create_role(
    body: RoleCreate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=role_service.create_role(db, cache, body))


@router.put("/{role_id}", response_model=MessageResponse)
def update_role(
    role_id: str,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=role_service.update_role(db, cache, role_id, body))


@router.delete("/{role_id}", response_model=MessageResponse)
def delete_role(
    role_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=role_service.delete_role(db, cache, role_id))


@router.post("/{role_id}", response_model=MessageResponse)
def restore_role(
    role_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=role_service.restore_role(db, cache, role_id))
