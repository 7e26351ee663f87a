"""
Ciclo de vida de tickets: alta, cambio de estado, asignación de técnico, soft-delete/restore.

Visibilidad: los roles privilegiados (PRIVILEGED_ROLES) ven todos los tickets; el resto
sólo los que creó. Toda mutación invalida el namespace completo de caché ``tickets_*``
antes de responder.
"""
import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..cache import CacheStore, cached_page, invalidate_keys, list_cache_key
from ..config import get_settings
from ..messages import (
    CategoryMessagesError,
    PriorityMessagesError,
    TicketErrorMessages,
    TicketsMessages,
    UserMessagesError,
)
from ..models import Priority, Ticket
from ..models.base import utcnow
from ..models.ticket import STATUS_CLOSED, STATUS_OPEN, TICKET_CODE_LENGTH
from ..pagination import PageParams
from ..schemas import AssignTech, TicketChangeStatus, TicketCreate, TicketOut
from ..security import generate_random_word
from . import common
from .categories import get_top_level
from .roles import get_role_name_for_user
from .users import find_user

logger = logging.getLogger(__name__)

CACHE_ENTITY = "tickets"
MAX_CODE_ATTEMPTS = 5

_RELATIONS = (
    selectinload(Ticket.priority),
    selectinload(Ticket.category),
    selectinload(Ticket.creator),
    selectinload(Ticket.assigned_technician),
)


def _serialize(ticket: Ticket) -> dict:
    return TicketOut.model_validate(ticket).model_dump(mode="json")


def list_tickets(db: Session, cache: CacheStore, caller_id: str, params: PageParams) -> dict:
    settings = get_settings()
    role_name = get_role_name_for_user(db, caller_id)
    privileged = role_name in settings.privileged_roles

    def load():
        stmt = select(Ticket).where(common.deleted_filter(Ticket, params.deleted))
        if not privileged:
            stmt = stmt.where(Ticket.creator_id == caller_id)
        rows, meta = common.paginate(db, stmt, params, (Ticket.created_at.desc(), Ticket.id), _RELATIONS)
        return {"tickets": [_serialize(t) for t in rows], "meta": meta}

    key = list_cache_key(CACHE_ENTITY, caller_id, params.page, params.limit, params.deleted)
    return cached_page(cache, key, load)


def get_ticket(db: Session, ticket_id: str, deleted: bool = False) -> Ticket:
    ticket = db.execute(
        select(Ticket).options(*_RELATIONS).where(Ticket.id == ticket_id, common.deleted_filter(Ticket, deleted))
    ).scalar_one_or_none()
    if not ticket:
        raise HTTPException(status_code=404, detail=TicketErrorMessages.TICKET_NOT_FOUND)
    return ticket


def get_ticket_by_code(db: Session, code: str, deleted: bool = False) -> Ticket:
    ticket = db.execute(
        select(Ticket).options(*_RELATIONS).where(
            Ticket.ticket_code == code.strip().lower(), common.deleted_filter(Ticket, deleted)
        )
    ).scalar_one_or_none()
    if not ticket:
        raise HTTPException(status_code=404, detail=TicketErrorMessages.TICKET_NOT_FOUND)
    return ticket


def _new_ticket_code(db: Session) -> str:
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_random_word(TICKET_CODE_LENGTH)
        if db.execute(select(Ticket.id).where(Ticket.ticket_code == code)).first() is None:
            return code
        logger.warning("Colisión de ticket_code %s, se regenera", code)
    raise HTTPException(status_code=500, detail=TicketErrorMessages.TICKET_ERROR)


def create_ticket(db: Session, cache: CacheStore, body: TicketCreate, creator_id: str) -> str:
    creator = find_user(db, creator_id)
    if not creator:
        raise HTTPException(status_code=404, detail=UserMessagesError.USER_NOT_FOUND)

    # sólo categorías de primer nivel; un id de subcategoría no es válido aquí
    category = get_top_level(db, body.category_id)
    if not category:
        raise HTTPException(status_code=404, detail=CategoryMessagesError.CATEGORY_NOT_FOUND)

    priority = common.get_by_id(db, Priority, body.priority_id)
    if not priority:
        raise HTTPException(status_code=404, detail=PriorityMessagesError.PRIORITY_NOT_FOUND)

    ticket = Ticket(
        ticket_code=_new_ticket_code(db),
        title=body.title.strip(),
        description=body.description,
        status=STATUS_OPEN,
        comments=f"El usuario: {creator.first_name} {creator.last_name} abrió un nuevo ticket",
        priority_id=priority.id,
        category_id=category.id,
        creator_id=creator.id,
    )
    db.add(ticket)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    logger.info("Ticket %s creado por %s", ticket.ticket_code, creator.email)
    return TicketsMessages.TICKET_CREATED


def change_status(db: Session, cache: CacheStore, ticket_id: str, body: TicketChangeStatus) -> str:
    get_ticket(db, ticket_id)
    status = body.status.strip()
    values = {
        "status": status,
        "closed_date": utcnow() if status == STATUS_CLOSED else None,
    }
    if body.comments is not None:
        values["comments"] = body.comments
    if common.update_by_id(db, Ticket, ticket_id, values) == 0:
        raise HTTPException(status_code=400, detail=TicketErrorMessages.TICKET_NOT_UPDATED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return TicketsMessages.TICKET_CHANGE_STATUS


def assign_technician(db: Session, cache: CacheStore, ticket_id: str, body: AssignTech) -> str:
    get_ticket(db, ticket_id)
    tech = find_user(db, body.assigned_tech_id)
    if not tech:
        raise HTTPException(status_code=404, detail=UserMessagesError.USER_NOT_FOUND)
    values = {"assigned_technician_id": tech.id, "assigned_date": utcnow()}
    if common.update_by_id(db, Ticket, ticket_id, values) == 0:
        raise HTTPException(status_code=400, detail=TicketErrorMessages.TICKET_NOT_UPDATED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return TicketsMessages.TICKET_ASSIGNED


def delete_ticket(db: Session, cache: CacheStore, ticket_id: str) -> str:
    get_ticket(db, ticket_id)
    if common.soft_delete(db, Ticket, ticket_id) == 0:
        raise HTTPException(status_code=400, detail=TicketErrorMessages.TICKET_NOT_DELETED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return TicketsMessages.TICKET_REMOVED


def restore_ticket(db: Session, cache: CacheStore, ticket_id: str) -> str:
    get_ticket(db, ticket_id, deleted=True)
    if common.restore(db, Ticket, ticket_id) == 0:
        raise HTTPException(status_code=400, detail=TicketErrorMessages.TICKET_NOT_RESTORED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return TicketsMessages.TICKET_RESTORED
