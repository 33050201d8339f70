from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, BigInteger, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    cover = Column(Boolean, nullable=False, default=False)
    legend = Column(String(255))
    filename = Column(String(255), nullable=False)  # generated, unique per product
    original_filename = Column(String(255))
    mime_type = Column(String(100))
    file_size = Column(BigInteger)
    s3_key = Column(String(500))  # set only when stored remotely
    s3_url = Column(String(1000))
    date_add = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_product_images_product_position", "product_id", "position"),
    )

    # Relationships
    product = relationship("Product", back_populates="images")

    @property
    def url(self) -> str:
        """Remote URL when the file lives in S3, else the local serving path."""
        if self.s3_url:
            return self.s3_url
        return f"/images/products/{self.product_id}/{self.filename}"
