from typing import Dict, List

from marketplace.core.exceptions import NotFoundError
from marketplace.schemas.entities import ChangeSet, MediaEntity, ProductSnapshot
from marketplace.schemas.product import VariantMutationResponse
from marketplace.schemas.variant import (
    BulkDeleteVariantsRequest,
    BulkUpdateVariantMediaRequest,
    BulkUpdateVariantsRequest,
    VariantMediaUpdateItem,
)
from marketplace.services.aggregate_calculator import calculate_aggregates
from marketplace.services.catalog_service import CatalogService
from marketplace.services.mappers import product_state, variant_items
from marketplace.services.validation import (
    Rule,
    bulk_delete_variants_rules,
    bulk_update_variant_media_rules,
    bulk_update_variants_rules,
    find_duplicates,
    normalize,
    validate,
)
from marketplace.services.variant_builder import ensure_active_variant
from marketplace.services.variant_labels import ensure_single_main_media


class VariantService(CatalogService):

    async def _resolve_variant_ids(self, product: ProductSnapshot, variant_ids: List[str]) -> None:
        await self._resolve_ids(
            product,
            variant_ids,
            {variant.id for variant in product.variants},
            self.repository.locate_variants,
            "Variant(s)"
        )

    async def bulk_update_variants(
        self,
        product_id: str,
        request: BulkUpdateVariantsRequest
    ) -> VariantMutationResponse:
        """Update price, stock, SKU and active flag of several variants, optionally deleting others"""

        async def build(product: ProductSnapshot):
            validate(bulk_update_variants_rules(request))
            await self._resolve_variant_ids(
                product, [item.id for item in request.variants] + list(request.deleted_variant_ids)
            )
            before = product.model_copy(deep=True)

            deleted_ids = set(request.deleted_variant_ids)
            removed = [variant for variant in product.variants if variant.id in deleted_ids]
            product.variants = [variant for variant in product.variants if variant.id not in deleted_ids]

            updated = []
            for item in request.variants:
                variant = product.find_variant(item.id)
                if item.sku is not None:
                    variant.sku = item.sku.strip()
                if item.price is not None:
                    variant.price = item.price
                if item.stock_quantity is not None:
                    variant.stock_quantity = item.stock_quantity
                if item.is_active is not None:
                    variant.is_active = item.is_active
                updated.append(variant)

            duplicate_skus = find_duplicates([variant.sku for variant in product.variants if variant.sku], key=normalize)
            validate([Rule(
                "skus_unique_in_product",
                lambda: not duplicate_skus,
                f"SKU(s) would not be unique within the product: {', '.join(duplicate_skus)}."
            )])
            if removed:
                ensure_active_variant(product.variants)

            product.aggregates = calculate_aggregates(product.variants)
            change_set = ChangeSet(
                product_id=product.id,
                variants_to_update=updated,
                variant_ids_to_delete=[variant.id for variant in removed],
                aggregates=product.aggregates
            )
            return change_set, VariantMutationResponse(
                **product_state(product),
                updated_variants=variant_items(product, updated),
                removed_variants=variant_items(before, removed)
            )

        return await self._mutate("bulk_update_variants", product_id, build)

    async def delete_variants(
        self,
        product_id: str,
        request: BulkDeleteVariantsRequest
    ) -> VariantMutationResponse:
        """Hard-delete variants; at least one active variant has to remain"""

        async def build(product: ProductSnapshot):
            validate(bulk_delete_variants_rules(request))
            await self._resolve_variant_ids(product, request.variant_ids)
            before = product.model_copy(deep=True)

            deleted_ids = set(request.variant_ids)
            removed = [variant for variant in product.variants if variant.id in deleted_ids]
            product.variants = [variant for variant in product.variants if variant.id not in deleted_ids]
            ensure_active_variant(product.variants)

            product.aggregates = calculate_aggregates(product.variants)
            change_set = ChangeSet(
                product_id=product.id,
                variant_ids_to_delete=[variant.id for variant in removed],
                aggregates=product.aggregates
            )
            return change_set, VariantMutationResponse(
                **product_state(product),
                removed_variants=variant_items(before, removed)
            )

        return await self._mutate("delete_variants", product_id, build)

    async def bulk_update_variant_media(
        self,
        product_id: str,
        request: BulkUpdateVariantMediaRequest
    ) -> VariantMutationResponse:
        """Replace the media list of several variants.

        Items with an id update that media, items without one are added, and
        stored media missing from the list are deleted. Every variant keeps a
        single main media item and the product main media is recomputed.
        """

        async def build(product: ProductSnapshot):
            validate(bulk_update_variant_media_rules(request))
            await self._resolve_variant_ids(product, [entry.variant_id for entry in request.variants])

            unknown = []
            updated = []
            for entry in request.variants:
                variant = product.find_variant(entry.variant_id)
                stored = {media.id: media for media in variant.media}
                unknown.extend(item.id for item in entry.media if item.id is not None and item.id not in stored)
                variant.media = ensure_single_main_media(
                    _merge_media(stored, item) for item in entry.media
                )
                updated.append(variant)
            if unknown:
                raise NotFoundError(f"Media item(s) not found for their variant: {', '.join(unknown)}")

            product.aggregates = calculate_aggregates(product.variants)
            change_set = ChangeSet(
                product_id=product.id,
                variant_media_to_replace=updated,
                aggregates=product.aggregates
            )
            return change_set, VariantMutationResponse(
                **product_state(product),
                updated_variants=variant_items(product, updated)
            )

        return await self._mutate("bulk_update_variant_media", product_id, build)


def _merge_media(stored: Dict[str, MediaEntity], item: VariantMediaUpdateItem) -> MediaEntity:
    """New media for items without an id, otherwise the stored media with the given fields applied"""
    if item.id is None or item.id not in stored:
        return MediaEntity(
            media_public_id=(item.media_public_id or "").strip(),
            file_name=item.file_name,
            media_type=item.media_type or "image",
            display_order=item.display_order or 0,
            is_main=bool(item.is_main)
        )

    media = stored[item.id].model_copy()
    if item.media_public_id is not None:
        media.media_public_id = item.media_public_id.strip()
    if item.file_name is not None:
        media.file_name = item.file_name
    if item.media_type is not None:
        media.media_type = item.media_type
    if item.display_order is not None:
        media.display_order = item.display_order
    if item.is_main is not None:
        media.is_main = item.is_main
    return media
