from app.schemas.common import ApiResponse, Page, Money, ok
from app.schemas.category import (
    CategorySummary, CategoryResponse, CategoryTreeNode, CategoryCreate, CategoryUpdate
)
from app.schemas.image import ImageResponse, ImagePositions
from app.schemas.product import (
    ProductListItem, ProductDetail, ProductCreate, ProductUpdate,
    VariantResponse, VariantCreate, SpecificPriceCreate, SpecificPriceResponse,
)
from app.schemas.auth import LoginRequest, LoginResponse, EmployeeResponse
from app.schemas.migration import LegacyPathResponse, LegacyMigrationResult, S3MigrationResult

__all__ = [
    "ApiResponse", "Page", "Money", "ok",
    "CategorySummary", "CategoryResponse", "CategoryTreeNode", "CategoryCreate", "CategoryUpdate",
    "ImageResponse", "ImagePositions",
    "ProductListItem", "ProductDetail", "ProductCreate", "ProductUpdate",
    "VariantResponse", "VariantCreate", "SpecificPriceCreate", "SpecificPriceResponse",
    "LoginRequest", "LoginResponse", "EmployeeResponse",
    "LegacyPathResponse", "LegacyMigrationResult", "S3MigrationResult",
]
