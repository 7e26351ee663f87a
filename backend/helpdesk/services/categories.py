import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..cache import CacheStore, cached_page, invalidate_keys, list_cache_key
from ..messages import CategoryMessages, CategoryMessagesError
from ..models import Category, CategoryType, Subcategory
from ..pagination import PageParams
from ..schemas import CategoryCreate, CategoryOut, CategoryUpdate, ChangeStatus
from . import common

logger = logging.getLogger(__name__)

CACHE_ENTITY = "categories"


def _out(rows) -> list[dict]:
    return [CategoryOut.model_validate(c).model_dump(mode="json") for c in rows]


def get_top_level(db: Session, category_id: str) -> Category | None:
    """Categoría de primer nivel no eliminada (las subcategorías no cuentan)."""
    return db.execute(
        select(Category).where(
            Category.id == category_id,
            Category.type == CategoryType.category.value,
            Category.deleted_at.is_(None),
        )
    ).scalar_one_or_none()


def _get_subcategory(db: Session, subcategory_id: str) -> Subcategory | None:
    return db.execute(
        select(Subcategory).where(Subcategory.id == subcategory_id, Subcategory.deleted_at.is_(None))
    ).scalar_one_or_none()


def _category_name_taken(db: Session, name: str, exclude_id: str | None = None) -> bool:
    stmt = select(Category.id).where(
        Category.name == name,
        Category.type == CategoryType.category.value,
        Category.deleted_at.is_(None),
    )
    if exclude_id:
        stmt = stmt.where(Category.id != exclude_id)
    return db.execute(stmt).first() is not None


def _subcategory_name_taken(db: Session, name: str, parent_id: str, exclude_id: str | None = None) -> bool:
    stmt = select(Subcategory.id).where(
        Subcategory.name == name,
        Subcategory.parent_id == parent_id,
        Subcategory.deleted_at.is_(None),
    )
    if exclude_id:
        stmt = stmt.where(Subcategory.id != exclude_id)
    return db.execute(stmt).first() is not None


def _validate_parent(db: Session, parent_id: str) -> Category:
    parent = get_top_level(db, parent_id)
    if not parent:
        raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_NOT_EXIST)
    if not parent.status:
        raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_NOT_FOUND_OR_NOT_ACTIVE)
    return parent


def list_categories(db: Session, cache: CacheStore, caller_id: str, params: PageParams) -> dict:
    def load():
        stmt = select(Category).where(common.deleted_filter(Category, params.deleted))
        rows, meta = common.paginate(db, stmt, params, (Category.created_at.desc(), Category.id))
        return {"categories": _out(rows), "meta": meta}

    key = list_cache_key(CACHE_ENTITY, caller_id, params.page, params.limit, params.deleted)
    return cached_page(cache, key, load)


def list_by_type(db: Session, category_type: str) -> list[dict]:
    try:
        kind = CategoryType(category_type.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=CategoryMessagesError.INVALID_TYPE)
    rows = db.execute(
        select(Category)
        .where(Category.type == kind.value, Category.status.is_(True), Category.deleted_at.is_(None))
        .order_by(Category.name)
    ).scalars().all()
    return _out(rows)


def list_subcategories(db: Session, parent_id: str) -> list[dict]:
    if not get_top_level(db, parent_id):
        raise HTTPException(status_code=404, detail=CategoryMessagesError.CATEGORY_NOT_FOUND)
    rows = db.execute(
        select(Subcategory)
        .where(
            Subcategory.parent_id == parent_id,
            Subcategory.status.is_(True),
            Subcategory.deleted_at.is_(None),
        )
        .order_by(Subcategory.name)
    ).scalars().all()
    return _out(rows)


def get_category(db: Session, category_id: str, deleted: bool = False) -> Category:
    category = common.get_by_id(db, Category, category_id, deleted)
    if not category:
        raise HTTPException(status_code=404, detail=CategoryMessagesError.CATEGORY_NOT_FOUND)
    return category


def create_category(db: Session, cache: CacheStore, body: CategoryCreate) -> str:
    name = body.name.strip()
    if _category_name_taken(db, name):
        raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_ALREADY_EXIST)
    db.add(Category(name=name))
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return CategoryMessages.CATEGORY_CREATED


def create_subcategory(db: Session, cache: CacheStore, parent_id: str, body: CategoryCreate) -> str:
    parent = _validate_parent(db, parent_id)
    name = body.name.strip()
    if _subcategory_name_taken(db, name, parent.id):
        raise HTTPException(status_code=400, detail=CategoryMessagesError.SUBCATEGORY_ALREADY_EXIST)
    db.add(Subcategory(name=name, parent=parent))
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return CategoryMessages.SUBCATEGORY_CREATED


def update_category(db: Session, cache: CacheStore, category_id: str, body: CategoryUpdate) -> str:
    if not get_top_level(db, category_id):
        raise HTTPException(status_code=404, detail=CategoryMessagesError.CATEGORY_NOT_FOUND)
    values = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in values:
        values["name"] = values["name"].strip()
        if _category_name_taken(db, values["name"], exclude_id=category_id):
            raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_ALREADY_EXIST)
    if values and common.update_by_id(db, Category, category_id, values) == 0:
        raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_NOT_UPDATED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    invalidate_keys(cache, "tickets")
    return CategoryMessages.CATEGORY_UPDATED


def update_subcategory(
    db: Session, cache: CacheStore, subcategory_id: str, parent_id: str, body: CategoryUpdate
) -> str:
    parent = _validate_parent(db, parent_id)
    sub = _get_subcategory(db, subcategory_id)
    if not sub:
        raise HTTPException(status_code=404, detail=CategoryMessagesError.SUBCATEGORY_NOT_FOUND)

    name = body.name.strip() if body.name is not None else sub.name
    if _subcategory_name_taken(db, name, parent.id, exclude_id=sub.id):
        raise HTTPException(status_code=400, detail=CategoryMessagesError.SUBCATEGORY_ALREADY_EXIST)

    sub.name = name
    sub.parent = parent
    if body.status is not None:
        sub.status = body.status
    db.add(sub)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return CategoryMessages.SUBCATEGORY_UPDATED


def change_status(db: Session, cache: CacheStore, category_id: str, body: ChangeStatus) -> str:
    get_category(db, category_id)
    if common.update_by_id(db, Category, category_id, {"status": body.status}) == 0:
        raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_NOT_UPDATED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return CategoryMessages.CATEGORY_ACTIVED if body.status else CategoryMessages.CATEGORY_DESACTIVED


def delete_category(db: Session, cache: CacheStore, category_id: str) -> str:
    category = get_category(db, category_id)
    is_sub = category.is_subcategory
    if common.soft_delete(db, Category, category_id) == 0:
        raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_NOT_DELETED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return CategoryMessages.SUBCATEGORY_REMOVED if is_sub else CategoryMessages.CATEGORY_REMOVED


def restore_category(db: Session, cache: CacheStore, category_id: str) -> str:
    category = get_category(db, category_id, deleted=True)
    is_sub = category.is_subcategory
    if common.restore(db, Category, category_id) == 0:
        raise HTTPException(status_code=400, detail=CategoryMessagesError.CATEGORY_NOT_RESTORED)
    db.commit()
    invalidate_keys(cache, CACHE_ENTITY)
    return CategoryMessages.SUBCATEGORY_RESTORED if is_sub else CategoryMessages.CATEGORY_RESTORED
