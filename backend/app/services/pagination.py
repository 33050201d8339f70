"""
Paging and sorting for list endpoints.

``page`` is zero-based. ``sort`` is ``field[,asc|desc]`` over a whitelist of
wire field names; anything else falls back to the endpoint default.
"""
import math
from dataclasses import dataclass

from fastapi import Query
from sqlalchemy.orm import Query as SAQuery

from app.models import Product
from app.schemas.common import Page

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

PRODUCT_SORT_COLUMNS = {
    "id": Product.id,
    "name": Product.name,
    "price": Product.price,
    "dateAdd": Product.date_add,
    "dateUpd": Product.date_upd,
    "quantity": Product.quantity,
}


@dataclass
class PageRequest:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    sort: str | None = None

    @property
    def offset(self) -> int:
        return self.page * self.size


def page_params(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort: str | None = Query(None, description="field[,asc|desc]"),
) -> PageRequest:
    """FastAPI dependency collecting page/size/sort query parameters."""
    return PageRequest(page=page, size=size, sort=sort)


def apply_sort(query: SAQuery, sort: str | None, default: str) -> SAQuery:
    """Order ``query`` by ``sort``, or by ``default`` when the field is unknown."""
    field, direction = _parse_sort(sort) if sort else (None, None)
    if field not in PRODUCT_SORT_COLUMNS:
        field, direction = _parse_sort(default)

    column = PRODUCT_SORT_COLUMNS[field]
    ordered = column.desc() if direction == "desc" else column.asc()
    # id as tie-breaker keeps pages stable
    return query.order_by(ordered, Product.id.desc() if direction == "desc" else Product.id.asc())


def _parse_sort(sort: str) -> tuple[str, str]:
    parts = [p.strip() for p in sort.split(",")]
    field = parts[0]
    direction = parts[1].lower() if len(parts) > 1 and parts[1] else "asc"
    if direction not in ("asc", "desc"):
        direction = "asc"
    return field, direction


def build_page(content: list, total: int, request: PageRequest) -> Page:
    total_pages = math.ceil(total / request.size) if request.size else 0
    return Page(
        content=content,
        total_elements=total,
        total_pages=total_pages,
        number=request.page,
        size=request.size,
        first=request.page == 0,
        last=request.page >= total_pages - 1,
    )
