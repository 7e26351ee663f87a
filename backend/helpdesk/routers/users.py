from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import ADMIN_ONLY, Caller, require_roles
from ..cache import CacheStore
from ..deps import get_cache, get_db, get_mailer
from ..mail import Mailer
from ..pagination import PageParams, page_params
from ..schemas import MessageResponse, UserCreate, UserOut, UserUpdate
from ..services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])

admin = require_roles(*ADMIN_ONLY)


@router.get("")
def list_users(
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return user_service.list_users(db, cache, caller.id, params)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, deleted: bool = False, db: Session = Depends(get_db), caller: Caller = Depends(admin)):
    return user_service.get_user(db, user_id, deleted)


@router.post("", response_model=MessageResponse, status_code=201)
def create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    mailer: Mailer = Depends(get_mailer),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=user_service.create_user(db, cache, mailer, body))


@router.put("/{user_id}", response_model=MessageResponse)
def update_user(
    user_id: str,
    body: UserUpdate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=user_service.update_user(db, cache, user_id, body))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=user_service.delete_user(db, cache, user_id))


@router.post("/{user_id}", response_model=MessageResponse)
def restore_user(
    user_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(admin),
):
    return MessageResponse(message=user_service.restore_user(db, cache, user_id))
