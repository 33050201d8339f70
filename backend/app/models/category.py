from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Text
from sqlalchemy.sql import func
from app.database import Base


class Category(Base):
    """
    Catalog category.

    The tree is stored as parent pointers only; children are looked up by
    ``parent_id`` in the service layer.
    """
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    link_rewrite = Column(String(255), unique=True, nullable=False, index=True)  # slug
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    level_depth = Column(Integer, nullable=False, default=0)  # parent.level_depth + 1, 0 for roots
    position = Column(Integer, nullable=False, default=0)  # order among siblings
    active = Column(Boolean, nullable=False, default=True)
    is_root_category = Column(Boolean, nullable=False, default=False)
    meta_title = Column(String(255))
    meta_description = Column(Text)
    date_add = Column(DateTime(timezone=True), server_default=func.now())
    date_upd = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
