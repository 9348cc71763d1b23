from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, DECIMAL, ForeignKey, Table, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from marketplace.db.database import Base

# Association table: one row per (variant, attribute value) of the variant's combination
variant_attribute_value_association = Table(
    'variant_attribute_values',
    Base.metadata,
    Column('variant_id', String(36), ForeignKey('product_variants.id', ondelete="CASCADE"), primary_key=True),
    Column(
        'attribute_value_id',
        String(36),
        ForeignKey('product_attribute_values.id', ondelete="CASCADE"),
        primary_key=True
    )
)


class ProductVariant(Base):
    __tablename__ = "product_variants"
    __table_args__ = (
        UniqueConstraint("product_id", "sku", name="uq_product_variants_product_sku"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(500))  # 'T-Shirt - Red / M'
    sku = Column(String(255))
    price = Column(DECIMAL(12, 2), nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship("Product", back_populates="variants")
    attribute_values = relationship("ProductAttributeValue", secondary=variant_attribute_value_association)
    media = relationship(
        "ProductVariantMedia",
        back_populates="variant",
        cascade="all, delete-orphan",
        order_by="ProductVariantMedia.display_order"
    )
