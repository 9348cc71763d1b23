from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, DECIMAL
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from marketplace.db.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    store_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, default=True)

    # Derived from active variants, rewritten on every variant mutation
    min_price = Column(DECIMAL(12, 2))
    max_price = Column(DECIMAL(12, 2))
    total_stock = Column(Integer, default=0, nullable=False)
    main_media_public_id = Column(String(255))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    attributes = relationship(
        "ProductAttribute",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductAttribute.display_order"
    )
    variants = relationship("ProductVariant", back_populates="product", cascade="all, delete-orphan")
