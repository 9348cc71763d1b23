from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from marketplace.crud.base import CRUDBase
from marketplace.models.product import Product
from marketplace.models.attribute import ProductAttribute, ProductAttributeValue
from marketplace.models.variant import ProductVariant


class ProductCRUD(CRUDBase[Product]):
    async def get_with_details(
        self,
        db: AsyncSession,
        product_id: str,
        *,
        for_update: bool = False
    ) -> Optional[Product]:
        """Get product with attributes, values, variants and variant media.

        With ``for_update`` the product row is locked until the end of the
        transaction, which serializes concurrent mutations of one product.
        """
        stmt = (
            select(Product)
            .options(
                selectinload(Product.attributes).selectinload(ProductAttribute.values),
                selectinload(Product.variants).selectinload(ProductVariant.attribute_values),
                selectinload(Product.variants).selectinload(ProductVariant.media)
            )
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def locate_attributes(self, db: AsyncSession, attribute_ids: List[str]) -> Dict[str, str]:
        """Map attribute IDs to the ID of the product owning them"""
        if not attribute_ids:
            return {}
        stmt = (
            select(ProductAttribute.id, ProductAttribute.product_id)
            .where(ProductAttribute.id.in_(attribute_ids))
        )
        result = await db.execute(stmt)
        return {row.id: row.product_id for row in result}

    async def locate_attribute_values(self, db: AsyncSession, value_ids: List[str]) -> Dict[str, str]:
        """Map attribute value IDs to the ID of the product owning them"""
        if not value_ids:
            return {}
        stmt = (
            select(ProductAttributeValue.id, ProductAttribute.product_id)
            .join(ProductAttribute, ProductAttributeValue.attribute_id == ProductAttribute.id)
            .where(ProductAttributeValue.id.in_(value_ids))
        )
        result = await db.execute(stmt)
        return {row.id: row.product_id for row in result}

    async def locate_variants(self, db: AsyncSession, variant_ids: List[str]) -> Dict[str, str]:
        """Map variant IDs to the ID of the product owning them"""
        if not variant_ids:
            return {}
        stmt = (
            select(ProductVariant.id, ProductVariant.product_id)
            .where(ProductVariant.id.in_(variant_ids))
        )
        result = await db.execute(stmt)
        return {row.id: row.product_id for row in result}


product = ProductCRUD(Product)
