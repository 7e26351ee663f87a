import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String

from ..db import Base


def utcnow() -> datetime:
    # columnas DateTime sin zona: guardamos UTC naive
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_uuid() -> str:
    return str(uuid.uuid4())


class AuditMixin:
    id = Column(String(36), primary_key=True, default=new_uuid)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)  # soft-delete


__all__ = ["Base", "AuditMixin", "utcnow", "new_uuid"]
