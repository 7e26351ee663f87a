from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base, AuditMixin

TICKET_CODE_LENGTH = 15
STATUS_OPEN = "Abierto"
STATUS_CLOSED = "Cerrado"


class Ticket(AuditMixin, Base):
    __tablename__ = "tickets"
    ticket_code = Column(String(TICKET_CODE_LENGTH), unique=True, index=True, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(50), nullable=False, default=STATUS_OPEN)  # texto libre
    comments = Column(Text, nullable=True)

    priority_id = Column(String(36), ForeignKey("priorities.id"), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    assigned_technician_id = Column(String(36), ForeignKey("users.id"), nullable=True)

    assigned_date = Column(DateTime, nullable=True)
    closed_date = Column(DateTime, nullable=True)

    priority = relationship("Priority")
    category = relationship("Category")
    creator = relationship("User", foreign_keys=[creator_id])
    assigned_technician = relationship("User", foreign_keys=[assigned_technician_id])
