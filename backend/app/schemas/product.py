from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator
from app.schemas.common import CamelModel, Money
from app.schemas.category import CategorySummary
from app.schemas.image import ImageResponse


class VariantResponse(CamelModel):
    id: int
    product_id: int
    name: str | None = None
    reference: str | None = None
    ean13: str | None = None
    price: Money  # product price + price impact
    price_impact: Money
    weight_impact: Money
    quantity: int
    in_stock: bool
    default_on: bool


class VariantCreate(CamelModel):
    name: str = Field(..., max_length=255)
    reference: str | None = Field(None, max_length=64)
    ean13: str | None = Field(None, max_length=13)
    price_impact: Decimal = Decimal(0)
    weight_impact: Decimal = Decimal(0)
    quantity: int = Field(0, ge=0)
    default_on: bool = False


class SpecificPriceCreate(CamelModel):
    product_attribute_id: int | None = None
    reduction: Decimal
    reduction_type: str = "AMOUNT"
    from_quantity: int = Field(1, ge=1)
    from_date: datetime | None = None
    to_date: datetime | None = None


class SpecificPriceResponse(CamelModel):
    id: int
    product_id: int
    product_attribute_id: int | None = None
    reduction: Money
    reduction_type: str
    from_quantity: int
    from_date: datetime | None = None
    to_date: datetime | None = None
    active: bool


class ProductListItem(CamelModel):
    """Listing view (product grid)."""
    id: int
    name: str
    description_short: str | None = None
    link_rewrite: str
    price: Money
    sale_price: Money | None = None
    reference: str | None = None
    quantity: int
    in_stock: bool
    on_sale: bool
    cover_image: str | None = None
    default_category: CategorySummary | None = None


class ProductDetail(ProductListItem):
    """Full product page view."""
    description: str | None = None
    wholesale_price: Money | None = None
    ecotax: Money | None = None
    minimal_quantity: int | None = None
    low_stock_threshold: int | None = None
    ean13: str | None = None
    isbn: str | None = None
    upc: str | None = None
    active: bool
    visibility: str
    condition: str
    product_type: str
    online_only: bool
    available_for_order: bool
    show_price: bool
    weight: Money | None = None
    width: Money | None = None
    height: Money | None = None
    depth: Money | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    breadcrumb: list[CategorySummary] = []
    categories: list[CategorySummary] = []
    images: list[ImageResponse] = []
    variants: list[VariantResponse] = []
    date_add: datetime | None = None
    date_upd: datetime | None = None


class ProductFields(CamelModel):
    """Editable product fields shared by create and update."""
    description: str | None = None
    description_short: str | None = None
    link_rewrite: str | None = Field(None, max_length=255)
    wholesale_price: Decimal | None = Field(None, ge=0)
    ecotax: Decimal | None = Field(None, ge=0)
    quantity: int | None = Field(None, ge=0)
    minimal_quantity: int | None = Field(None, ge=1)
    low_stock_threshold: int | None = None
    reference: str | None = Field(None, max_length=64)
    ean13: str | None = Field(None, max_length=13)
    isbn: str | None = Field(None, max_length=32)
    upc: str | None = Field(None, max_length=12)
    weight: Decimal | None = Field(None, ge=0)
    width: Decimal | None = Field(None, ge=0)
    height: Decimal | None = Field(None, ge=0)
    depth: Decimal | None = Field(None, ge=0)
    active: bool | None = None
    visibility: str | None = None
    condition: str | None = None
    product_type: str | None = None
    on_sale: bool | None = None
    online_only: bool | None = None
    available_for_order: bool | None = None
    show_price: bool | None = None
    meta_title: str | None = Field(None, max_length=255)
    meta_description: str | None = None
    default_category_id: int | None = None
    category_ids: list[int] | None = None


class ProductCreate(ProductFields):
    name: str = Field(..., max_length=255)
    price: Decimal = Field(..., ge=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class ProductUpdate(ProductFields):
    """Every field optional; only fields sent with a non-null value are applied."""
    name: str | None = Field(None, max_length=255)
    price: Decimal | None = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip() if v is not None else v
