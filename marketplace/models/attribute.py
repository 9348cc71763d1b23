from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from marketplace.db.database import Base


class ProductAttribute(Base):
    __tablename__ = "product_attributes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)  # 'Color', 'Size', ...
    display_order = Column(Integer, default=0, nullable=False)

    # Relationships
    product = relationship("Product", back_populates="attributes")
    values = relationship(
        "ProductAttributeValue",
        back_populates="attribute",
        cascade="all, delete-orphan",
        order_by="ProductAttributeValue.display_order"
    )


class ProductAttributeValue(Base):
    __tablename__ = "product_attribute_values"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    attribute_id = Column(
        String(36), ForeignKey("product_attributes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value = Column(String(200), nullable=False)  # 'Red', 'XL', ...
    display_order = Column(Integer, default=0, nullable=False)

    # Relationships
    attribute = relationship("ProductAttribute", back_populates="values")
