"""Attribute and attribute value mutations with variant regeneration.

Every operation follows the same sequence inside one transaction: validate
the request, resolve the ids it references, apply the attribute change to the
in-memory snapshot, regenerate and reconcile the variants, recompute the
aggregates and commit the resulting change set.
"""

import logging
from typing import List

from marketplace.core.config import settings
from marketplace.core.exceptions import ConflictError
from marketplace.schemas.attribute import (
    AddAttributeValuesRequest,
    AddAttributesRequest,
    AttributeValueItem,
    DeleteAttributeValuesRequest,
    DeleteAttributesRequest,
    UpdateAttributesRequest,
)
from marketplace.schemas.entities import ChangeSet, ProductSnapshot, ValueCreate
from marketplace.schemas.product import AttributeMutationResponse
from marketplace.services.catalog_service import CatalogService
from marketplace.services.mappers import (
    attribute_from_create,
    attribute_to_item,
    product_state,
    value_from_create,
    value_to_item,
    variant_items,
)
from marketplace.services.validation import (
    add_attribute_values_rules,
    delete_attribute_values_rules,
    delete_attributes_rules,
    new_attribute_rules,
    update_attributes_rules,
    validate,
)
from marketplace.services.variant_builder import regenerate_variants
from marketplace.services.variant_reconciler import ReconciliationPlan

logger = logging.getLogger(__name__)


class AttributeMutationService(CatalogService):

    def _response(
        self,
        before: ProductSnapshot,
        product: ProductSnapshot,
        plan: ReconciliationPlan,
        **changes
    ) -> AttributeMutationResponse:
        return AttributeMutationResponse(
            **product_state(product),
            created_variants=variant_items(product, plan.to_create),
            # removed variants may reference deleted values, render them as they were
            removed_variants=variant_items(before, plan.to_remove),
            **changes
        )

    async def _resolve_attribute_ids(self, product: ProductSnapshot, attribute_ids: List[str]) -> None:
        await self._resolve_ids(
            product,
            attribute_ids,
            {attribute.id for attribute in product.attributes},
            self.repository.locate_attributes,
            "Attribute(s)"
        )

    async def _resolve_value_ids(self, product: ProductSnapshot, value_ids: List[str]) -> None:
        await self._resolve_ids(
            product,
            value_ids,
            set(product.value_index()),
            self.repository.locate_attribute_values,
            "Attribute value(s)"
        )

    async def add_attributes(self, product_id: str, request: AddAttributesRequest) -> AttributeMutationResponse:
        """Add attributes with their values and regenerate the variants"""

        async def build(product: ProductSnapshot):
            validate(new_attribute_rules(
                request.attributes,
                existing_names=[attribute.name for attribute in product.attributes],
                existing_count=len(product.attributes),
                max_attributes=settings.MAX_ATTRIBUTES_PER_PRODUCT
            ))
            before = product.model_copy(deep=True)

            added = [attribute_from_create(attribute_in) for attribute_in in request.attributes]
            product.attributes.extend(added)
            change_set = ChangeSet(product_id=product.id, attributes_to_create=added)

            plan = regenerate_variants(product, change_set, request.variants)
            return change_set, self._response(
                before, product, plan,
                added_attributes=[attribute_to_item(attribute) for attribute in added]
            )

        return await self._mutate("add_attributes", product_id, build)

    async def add_attribute_values(
        self,
        product_id: str,
        request: AddAttributeValuesRequest
    ) -> AttributeMutationResponse:
        """Add values to existing attributes and regenerate the variants"""

        async def build(product: ProductSnapshot):
            validate(add_attribute_values_rules(request, product))
            await self._resolve_attribute_ids(product, [addition.attribute_id for addition in request.additions])
            before = product.model_copy(deep=True)

            change_set = ChangeSet(product_id=product.id)
            added_values: List[AttributeValueItem] = []
            for addition in request.additions:
                attribute = product.find_attribute(addition.attribute_id)
                for value_in in addition.values:
                    value = value_from_create(value_in)
                    attribute.values.append(value)
                    change_set.values_to_create.append(ValueCreate(attribute_id=attribute.id, value=value))
                    added_values.append(value_to_item(attribute.id, value))

            plan = regenerate_variants(product, change_set, request.variants)
            return change_set, self._response(before, product, plan, added_values=added_values)

        return await self._mutate("add_attribute_values", product_id, build)

    async def update_attributes(
        self,
        product_id: str,
        request: UpdateAttributesRequest
    ) -> AttributeMutationResponse:
        """Rename or reorder attributes and values.

        The combination space does not change; variant names follow the new
        names and order.
        """

        async def build(product: ProductSnapshot):
            validate(update_attributes_rules(request, product))
            await self._resolve_attribute_ids(product, [item.id for item in request.attributes])
            await self._resolve_value_ids(product, [item.id for item in request.values])
            before = product.model_copy(deep=True)

            change_set = ChangeSet(product_id=product.id)
            for item in request.attributes:
                attribute = product.find_attribute(item.id)
                if item.name is not None:
                    attribute.name = item.name.strip()
                if item.display_order is not None:
                    attribute.display_order = item.display_order
                change_set.attributes_to_update.append(attribute)

            updated_values: List[AttributeValueItem] = []
            for item in request.values:
                attribute, value = product.find_value(item.id)
                if item.value is not None:
                    value.value = item.value.strip()
                if item.display_order is not None:
                    value.display_order = item.display_order
                change_set.values_to_update.append(value)
                updated_values.append(value_to_item(attribute.id, value))

            plan = regenerate_variants(product, change_set)
            return change_set, self._response(
                before, product, plan,
                updated_attributes=[attribute_to_item(attribute) for attribute in change_set.attributes_to_update],
                updated_values=updated_values
            )

        return await self._mutate("update_attributes", product_id, build)

    async def delete_attributes(
        self,
        product_id: str,
        request: DeleteAttributesRequest
    ) -> AttributeMutationResponse:
        """Delete attributes and replace the variants with the supplied definitions.

        Every old variant carries a value of a deleted attribute, so all of
        them are removed; the request must define one variant per combination
        of the remaining attributes.
        """

        async def build(product: ProductSnapshot):
            validate(delete_attributes_rules(request))
            await self._resolve_attribute_ids(product, request.attribute_ids)

            deleted_ids = set(request.attribute_ids)
            if len(deleted_ids) >= len(product.attributes):
                raise ConflictError("Cannot delete all attributes of a product. At least one attribute must remain.")
            before = product.model_copy(deep=True)

            product.attributes = [attribute for attribute in product.attributes if attribute.id not in deleted_ids]
            change_set = ChangeSet(product_id=product.id, attribute_ids_to_delete=list(request.attribute_ids))

            plan = regenerate_variants(product, change_set, request.variants, require_coverage=True)
            return change_set, self._response(
                before, product, plan,
                deleted_attribute_ids=list(request.attribute_ids)
            )

        return await self._mutate("delete_attributes", product_id, build)

    async def delete_attribute_values(
        self,
        product_id: str,
        request: DeleteAttributeValuesRequest
    ) -> AttributeMutationResponse:
        """Delete attribute values and the variants using them.

        An attribute losing all of its values is deleted as well; the reduced
        combination space then needs replacement variant definitions exactly
        as for ``delete_attributes``.
        """

        async def build(product: ProductSnapshot):
            validate(delete_attribute_values_rules(request))
            await self._resolve_value_ids(product, request.value_ids)
            before = product.model_copy(deep=True)

            deleted_ids = set(request.value_ids)
            change_set = ChangeSet(product_id=product.id)
            emptied = []
            for attribute in product.attributes:
                remaining = [value for value in attribute.values if value.id not in deleted_ids]
                if not remaining:
                    emptied.append(attribute.id)
                elif len(remaining) < len(attribute.values):
                    change_set.value_ids_to_delete.extend(
                        value.id for value in attribute.values if value.id in deleted_ids
                    )
                    attribute.values = remaining

            if emptied and len(emptied) == len(product.attributes):
                raise ConflictError(
                    "Cannot delete every value of every attribute. At least one attribute must keep a value."
                )
            if emptied:
                logger.info("Attributes emptied by value deletion are removed: %s", ", ".join(emptied))
                product.attributes = [attribute for attribute in product.attributes if attribute.id not in emptied]
                change_set.attribute_ids_to_delete = emptied

            plan = regenerate_variants(
                product, change_set, request.variants, require_coverage=bool(emptied)
            )
            return change_set, self._response(
                before, product, plan,
                deleted_value_ids=list(dict.fromkeys(request.value_ids)),
                deleted_attribute_ids=emptied
            )

        return await self._mutate("delete_attribute_values", product_id, build)
