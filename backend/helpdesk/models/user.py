from sqlalchemy import Column, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship, validates

from .base import Base, AuditMixin


class User(AuditMixin, Base):
    __tablename__ = "users"
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=False)
    phone = Column(String(30), nullable=True)
    active = Column(Boolean, nullable=False, default=False)  # se activa al verificar el email

    role = relationship("Role", back_populates="users")

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
