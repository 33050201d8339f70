from decimal import Decimal
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Stored as Decimal, sent to clients as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base for every wire schema: snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    data: T | None = None
    message: str | None = None


class Page(CamelModel, Generic[T]):
    content: list[T]
    total_elements: int
    total_pages: int
    number: int
    size: int
    first: bool
    last: bool


def ok(data: Any = None, message: str | None = None) -> dict:
    """Success envelope returned by every JSON route."""
    return {"success": True, "data": data, "message": message}
