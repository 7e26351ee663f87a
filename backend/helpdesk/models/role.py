from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import Base, AuditMixin


class Role(AuditMixin, Base):
    __tablename__ = "roles"
    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(255), nullable=True)

    users = relationship("User", back_populates="role")
