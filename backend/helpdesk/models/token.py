import enum

from sqlalchemy import Column, String, Text, Boolean, DateTime

from .base import Base, new_uuid, utcnow


class TokenPurpose(str, enum.Enum):
    verify = "verify"
    reset = "reset"


class OneTimeToken(Base):
    """Token firmado de un solo uso (verificación de email / cambio de contraseña)."""

    __tablename__ = "tokens"
    id = Column(String(36), primary_key=True, default=new_uuid)
    token = Column(Text, nullable=False)
    email = Column(String(255), nullable=False, index=True)
    token_id = Column(String(36), unique=True, index=True, nullable=False)  # claim "id" del JWT
    purpose = Column(String(20), nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
