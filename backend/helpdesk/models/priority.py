from sqlalchemy import Column, String, Boolean

from .base import Base, AuditMixin


class Priority(AuditMixin, Base):
    __tablename__ = "priorities"
    name = Column(String(60), unique=True, nullable=False)
    status = Column(Boolean, nullable=False, default=True)
