"""Persistence port of the variant regeneration engine.

Services never touch ORM rows directly: they load a ``ProductSnapshot``,
compute a ``ChangeSet`` and hand it back here. ``apply`` turns the change set
into explicit deletes, inserts and updates within the session's transaction;
nothing is visible to other sessions until ``commit``.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import PersistenceError
from marketplace.crud.product import product as product_crud
from marketplace.models.attribute import ProductAttribute, ProductAttributeValue
from marketplace.models.media import ProductVariantMedia
from marketplace.models.product import Product
from marketplace.models.variant import ProductVariant
from marketplace.schemas.entities import (
    AttributeEntity,
    AttributeValueEntity,
    ChangeSet,
    MediaEntity,
    ProductSnapshot,
)
from marketplace.services.mappers import product_to_snapshot

logger = logging.getLogger(__name__)


class CatalogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db
        # ORM rows of the products loaded or added through this repository
        self._products: Dict[str, Product] = {}

    async def load_for_update(self, product_id: str) -> Optional[ProductSnapshot]:
        """Lock the product row and return a snapshot of it with all relations"""
        db_product = await product_crud.get_with_details(self.db, product_id, for_update=True)
        if db_product is None:
            return None
        self._products[db_product.id] = db_product
        return product_to_snapshot(db_product)

    async def load(self, product_id: str) -> Optional[ProductSnapshot]:
        db_product = await product_crud.get_with_details(self.db, product_id)
        if db_product is None:
            return None
        return product_to_snapshot(db_product)

    async def list_products(
        self,
        *,
        skip: int = 0,
        limit: int = 100,
        store_id: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> List[Product]:
        filters = {"store_id": store_id, "is_active": is_active}
        return await product_crud.get_multi(self.db, skip=skip, limit=limit, filters=filters)

    async def locate_attributes(self, attribute_ids: List[str]) -> Dict[str, str]:
        return await product_crud.locate_attributes(self.db, attribute_ids)

    async def locate_attribute_values(self, value_ids: List[str]) -> Dict[str, str]:
        return await product_crud.locate_attribute_values(self.db, value_ids)

    async def locate_variants(self, variant_ids: List[str]) -> Dict[str, str]:
        return await product_crud.locate_variants(self.db, variant_ids)

    def add_product(self, snapshot: ProductSnapshot) -> None:
        """Stage a new product row; its attributes and variants come with the next ``apply``"""
        db_product = Product(
            id=snapshot.id,
            store_id=snapshot.store_id,
            name=snapshot.name,
            description=snapshot.description,
            is_active=snapshot.is_active,
            total_stock=0,
            attributes=[],
            variants=[]
        )
        self.db.add(db_product)
        self._products[db_product.id] = db_product

    async def apply(self, change_set: ChangeSet) -> None:
        """Apply the change set to the session and flush it.

        Deletes are flushed before inserts so a SKU freed by a removed variant
        can be reused by a created one.
        """
        db_product = self._products[change_set.product_id]
        attributes = {attribute.id: attribute for attribute in db_product.attributes}
        values = {value.id: value for attribute in db_product.attributes for value in attribute.values}
        variants = {variant.id: variant for variant in db_product.variants}

        for variant_id in change_set.variant_ids_to_delete:
            db_variant = variants.pop(variant_id)
            db_product.variants.remove(db_variant)
            await self.db.delete(db_variant)
        await self.db.flush()

        for value_id in change_set.value_ids_to_delete:
            db_value = values.pop(value_id)
            db_attribute = attributes.get(db_value.attribute_id)
            if db_attribute is not None and db_value in db_attribute.values:
                db_attribute.values.remove(db_value)
            await self.db.delete(db_value)
        for attribute_id in change_set.attribute_ids_to_delete:
            db_attribute = attributes.pop(attribute_id)
            for db_value in db_attribute.values:
                values.pop(db_value.id, None)
            db_product.attributes.remove(db_attribute)
            await self.db.delete(db_attribute)
        await self.db.flush()

        for attribute in change_set.attributes_to_create:
            db_attribute = self._new_attribute(attribute)
            db_product.attributes.append(db_attribute)
            attributes[db_attribute.id] = db_attribute
            values.update({db_value.id: db_value for db_value in db_attribute.values})

        for value_create in change_set.values_to_create:
            db_value = self._new_value(value_create.value)
            attributes[value_create.attribute_id].values.append(db_value)
            values[db_value.id] = db_value

        for attribute in change_set.attributes_to_update:
            db_attribute = attributes[attribute.id]
            db_attribute.name = attribute.name
            db_attribute.display_order = attribute.display_order

        for value in change_set.values_to_update:
            db_value = values[value.id]
            db_value.value = value.value
            db_value.display_order = value.display_order

        for variant in change_set.variants_to_update:
            db_variant = variants[variant.id]
            db_variant.name = variant.name
            db_variant.sku = variant.sku
            db_variant.price = variant.price
            db_variant.stock_quantity = variant.stock_quantity
            db_variant.is_active = variant.is_active

        for variant in change_set.variants_to_create:
            db_variant = ProductVariant(
                id=variant.id,
                product_id=db_product.id,
                name=variant.name,
                sku=variant.sku,
                price=variant.price,
                stock_quantity=variant.stock_quantity,
                is_active=variant.is_active,
                attribute_values=[values[value_id] for value_id in variant.value_ids],
                media=[self._new_media(media) for media in variant.media]
            )
            db_product.variants.append(db_variant)
            variants[db_variant.id] = db_variant

        for variant in change_set.variant_media_to_replace:
            await self._replace_media(variants[variant.id], variant.media)

        aggregates = change_set.aggregates
        db_product.min_price = aggregates.min_price
        db_product.max_price = aggregates.max_price
        db_product.total_stock = aggregates.total_stock
        db_product.main_media_public_id = aggregates.main_media_public_id

        await self.db.flush()
        logger.debug(
            "Applied change set to product %s: %d variants created, %d updated, %d deleted, %d media lists replaced",
            db_product.id,
            len(change_set.variants_to_create),
            len(change_set.variants_to_update),
            len(change_set.variant_ids_to_delete),
            len(change_set.variant_media_to_replace)
        )

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Commit failed, transaction rolled back: %s", e)
            raise PersistenceError("Failed to save product changes.") from e

    async def rollback(self) -> None:
        await self.db.rollback()

    @staticmethod
    def _new_value(value: AttributeValueEntity) -> ProductAttributeValue:
        return ProductAttributeValue(id=value.id, value=value.value, display_order=value.display_order)

    def _new_attribute(self, attribute: AttributeEntity) -> ProductAttribute:
        return ProductAttribute(
            id=attribute.id,
            name=attribute.name,
            display_order=attribute.display_order,
            values=[self._new_value(value) for value in attribute.values]
        )

    async def _replace_media(self, db_variant: ProductVariant, media: List[MediaEntity]) -> None:
        """Sync a variant's media rows with ``media``: delete missing, update kept, add new"""
        wanted = {item.id: item for item in media}
        for db_media in list(db_variant.media):
            if db_media.id not in wanted:
                db_variant.media.remove(db_media)
                await self.db.delete(db_media)

        existing = {db_media.id: db_media for db_media in db_variant.media}
        for item in media:
            db_media = existing.get(item.id)
            if db_media is None:
                db_variant.media.append(self._new_media(item))
                continue
            db_media.media_public_id = item.media_public_id
            db_media.file_name = item.file_name
            db_media.media_type = item.media_type
            db_media.display_order = item.display_order
            db_media.is_main = item.is_main

    @staticmethod
    def _new_media(media: MediaEntity) -> ProductVariantMedia:
        return ProductVariantMedia(
            id=media.id,
            media_public_id=media.media_public_id,
            file_name=media.file_name,
            media_type=media.media_type,
            display_order=media.display_order,
            is_main=media.is_main
        )
