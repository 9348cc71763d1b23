import logging
from typing import List, Optional

from marketplace.core.config import settings
from marketplace.core.exceptions import NotFoundError
from marketplace.models.product import Product
from marketplace.schemas.entities import ChangeSet, ProductSnapshot, new_id
from marketplace.schemas.product import ProductCreate, ProductDetail
from marketplace.services.catalog_service import CatalogService
from marketplace.services.mappers import attribute_from_create, snapshot_to_detail
from marketplace.services.validation import Rule, new_attribute_rules, validate
from marketplace.services.variant_builder import regenerate_variants

logger = logging.getLogger(__name__)


class ProductService(CatalogService):

    async def create_product(self, product_in: ProductCreate) -> ProductDetail:
        """Create a product with its attributes and one variant per combination"""
        rules = [Rule("product_name_not_blank", lambda: bool(product_in.name.strip()), "Product name cannot be blank.")]
        rules.extend(new_attribute_rules(
            product_in.attributes,
            existing_names=[],
            existing_count=0,
            max_attributes=settings.MAX_ATTRIBUTES_PER_PRODUCT
        ))

        try:
            validate(rules)
            product = ProductSnapshot(
                id=new_id(),
                store_id=product_in.store_id,
                name=product_in.name.strip(),
                description=product_in.description,
                is_active=product_in.is_active,
                attributes=[attribute_from_create(attribute_in) for attribute_in in product_in.attributes]
            )
            change_set = ChangeSet(product_id=product.id, attributes_to_create=product.attributes)
            regenerate_variants(product, change_set, product_in.variants)

            self.repository.add_product(product)
            await self._save(change_set)
        except Exception:
            await self.repository.rollback()
            raise

        logger.info(
            "Created product %s for store %s with %d variants",
            product.id, product.store_id, len(product.variants)
        )
        await self._notify("create_product", product.id)
        return snapshot_to_detail(product)

    async def get_product(self, product_id: str) -> ProductDetail:
        product = await self.repository.load(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return snapshot_to_detail(product)

    async def list_products(
        self,
        skip: int = 0,
        limit: int = 100,
        store_id: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> List[Product]:
        return await self.repository.list_products(skip=skip, limit=limit, store_id=store_id, is_active=is_active)
