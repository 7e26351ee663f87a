import math
from dataclasses import dataclass

from fastapi import Query

MAX_PAGE_SIZE = 100
MAX_PAGE_NUMBER = 25
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


def calculate_offset(limit: int | None = None, page: int | None = None) -> int:
    limit = limit or DEFAULT_PAGE_SIZE
    page = page or DEFAULT_PAGE
    return (page - 1) * limit


def create_meta(limit: int, page: int, total_count: int) -> dict:
    return {
        "total_pages": math.ceil(total_count / limit) if limit else 0,
        "current_page": page,
        "limit": limit,
        "total_count": total_count,
    }


@dataclass
class PageParams:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE
    deleted: bool = False

    @property
    def offset(self) -> int:
        return calculate_offset(self.limit, self.page)


def page_params(
    page: int = Query(DEFAULT_PAGE, ge=1, le=MAX_PAGE_NUMBER),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    deleted: bool = Query(False),
) -> PageParams:
    return PageParams(page=page, limit=limit, deleted=deleted)
