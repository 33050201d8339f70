from datetime import datetime

from pydantic import Field, field_validator
from app.schemas.common import CamelModel


class CategorySummary(CamelModel):
    id: int
    name: str
    link_rewrite: str


class CategoryResponse(CamelModel):
    id: int
    name: str
    description: str | None = None
    link_rewrite: str
    parent_id: int | None = None
    level_depth: int
    position: int
    active: bool
    is_root_category: bool
    meta_title: str | None = None
    meta_description: str | None = None
    breadcrumb: list[CategorySummary] = []
    date_add: datetime | None = None
    date_upd: datetime | None = None


class CategoryTreeNode(CamelModel):
    id: int
    name: str
    link_rewrite: str
    level_depth: int
    position: int
    children: list["CategoryTreeNode"] = []


class CategoryCreate(CamelModel):
    name: str = Field(..., max_length=255)
    description: str | None = None
    link_rewrite: str | None = Field(None, max_length=255)
    parent_id: int | None = None
    position: int | None = Field(None, ge=0)
    active: bool = True
    meta_title: str | None = None
    meta_description: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class CategoryUpdate(CamelModel):
    """Partial update. ``parent_id`` sent as null moves the category to the root."""
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    link_rewrite: str | None = Field(None, max_length=255)
    parent_id: int | None = None
    position: int | None = Field(None, ge=0)
    active: bool | None = None
    meta_title: str | None = None
    meta_description: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip() if v is not None else v
