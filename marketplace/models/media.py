from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from marketplace.db.database import Base


class ProductVariantMedia(Base):
    __tablename__ = "product_variant_media"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    variant_id = Column(String(36), ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False, index=True)
    media_public_id = Column(String(255), nullable=False)  # id on the media host
    file_name = Column(String(255))
    media_type = Column(String(20), nullable=False, default="image")  # 'image', 'video'
    display_order = Column(Integer, default=0, nullable=False)
    is_main = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    variant = relationship("ProductVariant", back_populates="media")
