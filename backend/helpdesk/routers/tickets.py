from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import ADMIN_ONLY, ANY_ROLE, SUPPORT_STAFF, Caller, require_roles
from ..cache import CacheStore
from ..deps import get_cache, get_db
from ..pagination import PageParams, page_params
from ..schemas import AssignTech, MessageResponse, TicketChangeStatus, TicketCreate, TicketOut
from ..services import tickets as ticket_service

router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.get("")
def list_tickets(
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(require_roles(*ANY_ROLE)),
):
    return ticket_service.list_tickets(db, cache, caller.id, params)


@router.get("/code/{code}", response_model=TicketOut)
def get_by_code(code: str, db: Session = Depends(get_db), caller: Caller = Depends(require_roles(*SUPPORT_STAFF))):
    return ticket_service.get_ticket_by_code(db, code)


@router.get("/{ticket_id}", response_model=TicketOut)
def get_ticket(
    ticket_id: str,
    deleted: bool = False,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(*SUPPORT_STAFF)),
):
    return ticket_service.get_ticket(db, ticket_id, deleted)


@router.post("", response_model=MessageResponse, status_code=201)
def create_ticket(
    body: TicketCreate,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(require_roles(*ANY_ROLE)),
):
    return MessageResponse(message=ticket_service.create_ticket(db, cache, body, caller.id))


@router.put("/status/{ticket_id}", response_model=MessageResponse)
def change_status(
    ticket_id: str,
    body: TicketChangeStatus,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(require_roles(*SUPPORT_STAFF)),
):
    return MessageResponse(message=ticket_service.change_status(db, cache, ticket_id, body))


@router.put("/assign/tech/{ticket_id}", response_model=MessageResponse)
def assign_technician(
    ticket_id: str,
    body: AssignTech,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(require_roles(*SUPPORT_STAFF)),
):
    return MessageResponse(message=ticket_service.assign_technician(db, cache, ticket_id, body))


@router.delete("/{ticket_id}", response_model=MessageResponse)
def delete_ticket(
    ticket_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(require_roles(*ADMIN_ONLY)),
):
    return MessageResponse(message=ticket_service.delete_ticket(db, cache, ticket_id))


@router.post("/{ticket_id}", response_model=MessageResponse)
def restore_ticket(
    ticket_id: str,
    db: Session = Depends(get_db),
    cache: CacheStore = Depends(get_cache),
    caller: Caller = Depends(require_roles(*ADMIN_ONLY)),
):
    return MessageResponse(message=ticket_service.restore_ticket(db, cache, ticket_id))
