import enum

from sqlalchemy import Column, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship, validates

from .base import Base, AuditMixin


class CategoryType(str, enum.Enum):
    category = "category"
    subcategory = "subcategory"


class Category(AuditMixin, Base):
    """Categoría de primer nivel. Las subcategorías viven en la misma tabla."""

    __tablename__ = "categories"
    name = Column(String(120), nullable=False, index=True)
    type = Column(String(20), nullable=False, default=CategoryType.category.value)
    parent_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    status = Column(Boolean, nullable=False, default=True)

    __mapper_args__ = {
        "polymorphic_on": type,
        "polymorphic_identity": CategoryType.category.value,
    }

    @property
    def is_subcategory(self) -> bool:
        return False


class Subcategory(Category):
    """Sólo admite como padre una categoría de primer nivel (jerarquía de 2 niveles)."""

    __mapper_args__ = {"polymorphic_identity": CategoryType.subcategory.value}

    parent = relationship(
        Category,
        remote_side=[Category.id],
        foreign_keys=[Category.parent_id],
    )

    @validates("parent")
    def _validate_parent(self, key, parent):
        if parent is None or isinstance(parent, Subcategory):
            raise ValueError("Una subcategoría debe colgar de una categoría de primer nivel")
        return parent

    @property
    def is_subcategory(self) -> bool:
        return True
