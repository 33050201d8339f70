from app.models.category import Category
from app.models.product import (
    Product, Visibility, ProductCondition, ProductType, category_products
)
from app.models.product_image import ProductImage
from app.models.product_attribute import ProductAttribute
from app.models.specific_price import SpecificPrice, ReductionType
from app.models.employee import Employee, Profile

__all__ = [
    "Category",
    "Product",
    "Visibility",
    "ProductCondition",
    "ProductType",
    "category_products",
    "ProductImage",
    "ProductAttribute",
    "SpecificPrice",
    "ReductionType",
    "Employee",
    "Profile",
]
