import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Numeric, Enum, Index
from sqlalchemy.orm import relationship
from app.database import Base


class ReductionType(str, enum.Enum):
    AMOUNT = "AMOUNT"
    PERCENTAGE = "PERCENTAGE"


class SpecificPrice(Base):
    """
    Time-windowed discount rule for a product (optionally a single variant).

    Window bounds are inclusive and a missing bound is open. Dates are stored
    as naive UTC.
    """
    __tablename__ = "specific_prices"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    product_attribute_id = Column(Integer, ForeignKey("product_attributes.id", ondelete="CASCADE"), nullable=True)
    reduction = Column(Numeric(20, 6), nullable=False, default=0)
    reduction_type = Column(Enum(ReductionType, native_enum=False), nullable=False, default=ReductionType.AMOUNT)
    from_quantity = Column(Integer, nullable=False, default=1)
    from_date = Column(DateTime)
    to_date = Column(DateTime)

    __table_args__ = (
        Index("idx_specific_prices_product_window", "product_id", "from_date", "to_date"),
    )

    # Relationships
    product = relationship("Product", back_populates="specific_prices")

    def is_active(self, now: datetime) -> bool:
        if self.from_date is not None and now < self.from_date:
            return False
        if self.to_date is not None and now > self.to_date:
            return False
        return True

    def calculate_discounted_price(self, price) -> Decimal:
        price = Decimal(price)
        reduction = Decimal(self.reduction or 0)
        if self.reduction_type == ReductionType.PERCENTAGE:
            discounted = price - price * reduction / Decimal(100)
        else:
            discounted = price - reduction
        return max(discounted, Decimal(0))
