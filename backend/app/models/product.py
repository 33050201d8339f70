import enum

from sqlalchemy import (
    Column, Integer, String, ForeignKey, Boolean, DateTime, Text, Numeric, Enum, Table
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Visibility(str, enum.Enum):
    BOTH = "BOTH"
    CATALOG = "CATALOG"
    SEARCH = "SEARCH"
    NONE = "NONE"


class ProductCondition(str, enum.Enum):
    NEW = "NEW"
    USED = "USED"
    REFURBISHED = "REFURBISHED"


class ProductType(str, enum.Enum):
    STANDARD = "STANDARD"
    PACK = "PACK"
    VIRTUAL = "VIRTUAL"
    COMBINATIONS = "COMBINATIONS"


# Visibility values shown on the storefront (NONE is never listed)
STOREFRONT_VISIBILITIES = (Visibility.BOTH, Visibility.CATALOG, Visibility.SEARCH)


category_products = Table(
    "category_products",
    Base.metadata,
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    description_short = Column(Text)
    link_rewrite = Column(String(255), unique=True, nullable=False, index=True)  # slug

    # Pricing
    price = Column(Numeric(20, 6), nullable=False)
    wholesale_price = Column(Numeric(20, 6))
    ecotax = Column(Numeric(20, 6))

    # Stock
    quantity = Column(Integer, nullable=False, default=0)
    minimal_quantity = Column(Integer, default=1)
    low_stock_threshold = Column(Integer)

    # Reference codes
    reference = Column(String(64), index=True)
    ean13 = Column(String(13))
    isbn = Column(String(32))
    upc = Column(String(12))

    # Physical attributes
    weight = Column(Numeric(20, 6))
    width = Column(Numeric(20, 6))
    height = Column(Numeric(20, 6))
    depth = Column(Numeric(20, 6))

    # Status
    active = Column(Boolean, nullable=False, default=True, index=True)
    visibility = Column(Enum(Visibility, native_enum=False), nullable=False, default=Visibility.BOTH)
    condition = Column(Enum(ProductCondition, native_enum=False), nullable=False, default=ProductCondition.NEW)
    product_type = Column(Enum(ProductType, native_enum=False), nullable=False, default=ProductType.STANDARD)
    on_sale = Column(Boolean, default=False)
    online_only = Column(Boolean, default=False)
    available_for_order = Column(Boolean, default=True)
    show_price = Column(Boolean, default=True)

    # SEO
    meta_title = Column(String(255))
    meta_description = Column(Text)

    default_category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)

    date_add = Column(DateTime(timezone=True), server_default=func.now())
    date_upd = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships (reads go through explicit queries; these drive delete cascades)
    categories = relationship("Category", secondary=category_products)
    images = relationship("ProductImage", back_populates="product", cascade="all, delete-orphan")
    attributes = relationship("ProductAttribute", back_populates="product", cascade="all, delete-orphan")
    specific_prices = relationship("SpecificPrice", back_populates="product", cascade="all, delete-orphan")

    @property
    def in_stock(self) -> bool:
        return (self.quantity or 0) > 0
