from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import ADMIN_ONLY, SUPPORT_STAFF, Caller, require_roles
from ..cache import CacheStore
from ..deps import get_cache, get_db
from ..pagination import PageParams, page_params
from ..schemas import CategoryCreate, CategoryOut, CategoryUpdate, ChangeStatus, MessageResponse
from ..services import categories as category_service

router = APIRouter(prefix="/categories", tags=["categories"])

admin = require_roles(*ADMIN_ONLY)
staff = require_roles(*SUPPORT_STAFF)


@router.get("")
def list_categories(
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return category_service.list_categories(db, cache, caller.id, params)


@router.get("/type/{category_type}", response_model=list[CategoryOut])
def list_by_type(category_type: str, db: Session = Depends(get_db), caller: Caller = Depends(staff)):
    return category_service.list_by_type(db, category_type)


@router.get("/subcategories/{parent_id}", response_model=list[CategoryOut])
def list_subcategories(parent_id: str, db: Session = Depends(get_db), caller: Caller = Depends(staff)):
    return category_service.list_subcategories(db, parent_id)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: str,
    deleted: bool = False,
    db: Session = Depends(get_db),
    caller: Caller = Depends(staff),
):
    return category_service.get_category(db, category_id, deleted)


@router.post("", response_model=MessageResponse, status_code=201)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=category_service.create_category(db, cache, body))


@router.post("/{parent_id}/subcategory", response_model=MessageResponse, status_code=201)
def create_subcategory(
    parent_id: str,
    body: CategoryCreate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=category_service.create_subcategory(db, cache, parent_id, body))


@router.put("/{category_id}/change-status", response_model=MessageResponse)
def change_status(
    category_id: str,
    body: ChangeStatus,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=category_service.change_status(db, cache, category_id, body))


@router.put("/{subcategory_id}/{parent_id}/subcategory", response_model=MessageResponse)
def update_subcategory(
    subcategory_id: str,
    parent_id: str,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(
        message=category_service.update_subcategory(db, cache, subcategory_id, parent_id, body)
    )


@router.put("/{category_id}", response_model=MessageResponse)
def update_category(
    category_id: str,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=category_service.update_category(db, cache, category_id, body))


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=category_service.delete_category(db, cache, category_id))


@router.post("/{category_id}", response_model=MessageResponse)
def restore_category(
    category_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=category_service.restore_category(db, cache, category_id))
