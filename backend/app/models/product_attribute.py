from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, Numeric
from sqlalchemy.orm import relationship
from app.database import Base


class ProductAttribute(Base):
    """A product variant (size, colour ...) with price/weight deltas."""
    __tablename__ = "product_attributes"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255))
    reference = Column(String(64))
    ean13 = Column(String(13))
    price_impact = Column(Numeric(20, 6), nullable=False, default=0)  # added to the product price
    weight_impact = Column(Numeric(20, 6), nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=0)
    default_on = Column(Boolean, nullable=False, default=False)

    # Relationships
    product = relationship("Product", back_populates="attributes")

    def final_price(self, base_price) -> Decimal:
        return Decimal(base_price or 0) + Decimal(self.price_impact or 0)

    @property
    def in_stock(self) -> bool:
        return (self.quantity or 0) > 0
