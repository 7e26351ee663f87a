"""Helpers compartidos por los servicios: paginación, soft-delete y restore."""
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from ..models.base import utcnow
from ..pagination import PageParams, create_meta


def deleted_filter(model, deleted: bool = False):
    # deleted=True => sólo registros eliminados
    return model.deleted_at.is_not(None) if deleted else model.deleted_at.is_(None)


def get_by_id(db: Session, model, obj_id: str, deleted: bool = False):
    return db.execute(
        select(model).where(model.id == obj_id, deleted_filter(model, deleted))
    ).scalar_one_or_none()


def paginate(db: Session, stmt, params: PageParams, order_by, options=()) -> tuple[list, dict]:
    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    rows = db.execute(
        stmt.options(*options).order_by(*order_by).offset(params.offset).limit(params.limit)
    ).scalars().all()
    return rows, create_meta(params.limit, params.page, total)


def soft_delete(db: Session, model, obj_id: str) -> int:
    return (
        db.query(model)
        .filter(model.id == obj_id, model.deleted_at.is_(None))
        .update({"deleted_at": utcnow()}, synchronize_session=False)
    )


def restore(db: Session, model, obj_id: str) -> int:
    return (
        db.query(model)
        .filter(model.id == obj_id, model.deleted_at.is_not(None))
        .update({"deleted_at": None}, synchronize_session=False)
    )


def update_by_id(db: Session, model, obj_id: str, values: dict) -> int:
    return (
        db.query(model)
        .filter(model.id == obj_id, model.deleted_at.is_(None))
        .update(values, synchronize_session=False)
    )
