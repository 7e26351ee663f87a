import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import Settings
from .models import Role, User
from .security import hash_password

logger = logging.getLogger(__name__)

DEFAULT_ROLES = {
    "admin": "Administrador del sistema",
    "soporte": "Técnico de soporte",
}


def seed_roles(db: Session) -> None:
    existing = set(db.execute(select(Role.name)).scalars().all())
    for name, description in DEFAULT_ROLES.items():
        if name not in existing:
            db.add(Role(name=name, description=description))
            logger.info("Rol sembrado: %s", name)
    db.commit()


def seed_admin(db: Session, settings: Settings) -> None:
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return
    email = settings.ADMIN_EMAIL.strip().lower()
    if db.execute(select(User.id).where(User.email == email)).first():
        return
    role = db.execute(select(Role).where(Role.name == "admin")).scalar_one()
    db.add(User(
        first_name=settings.ADMIN_FIRST_NAME,
        last_name=settings.ADMIN_LAST_NAME,
        email=email,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        role_id=role.id,
        active=True,
    ))
    db.commit()
    logger.info("Usuario administrador sembrado: %s", email)


def run_seed(db: Session, settings: Settings) -> None:
    seed_roles(db)
    seed_admin(db, settings)
