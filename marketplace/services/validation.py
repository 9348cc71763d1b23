"""Request validation rules.

Each rule is a named predicate with the message reported when it fails. All
rules of a request are evaluated, so a rejected request lists every problem
at once instead of only the first one.
"""

import logging
from collections import Counter
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence

from marketplace.core.exceptions import ValidationError
from marketplace.schemas.attribute import (
    AddAttributeValuesRequest,
    AttributeCreate,
    DeleteAttributeValuesRequest,
    DeleteAttributesRequest,
    UpdateAttributesRequest,
)
from marketplace.schemas.entities import ProductSnapshot
from marketplace.schemas.variant import (
    BulkDeleteVariantsRequest,
    BulkUpdateVariantMediaRequest,
    BulkUpdateVariantsRequest,
)

logger = logging.getLogger(__name__)


class Rule(NamedTuple):
    name: str
    predicate: Callable[[], bool]
    message: str


def normalize(text: str) -> str:
    """Comparison form of names and values: trimmed, case-insensitive"""
    return text.strip().casefold()


def find_duplicates(items: Sequence[str], key: Callable[[str], str] = lambda item: item) -> List[str]:
    counts = Counter(key(item) for item in items)
    seen = set()
    duplicates = []
    for item in items:
        k = key(item)
        if counts[k] > 1 and k not in seen:
            seen.add(k)
            duplicates.append(item)
    return duplicates


def evaluate(rules: Sequence[Rule]) -> List[str]:
    """Run every rule and return the messages of the failing ones"""
    failed = [rule for rule in rules if not rule.predicate()]
    if failed:
        logger.warning("Validation failed: %s", ", ".join(rule.name for rule in failed))
    return [rule.message for rule in failed]


def validate(rules: Sequence[Rule]) -> None:
    errors = evaluate(rules)
    if errors:
        raise ValidationError(errors)


def _ids_rules(ids: List[str], label: str, required: bool = True) -> List[Rule]:
    rules = []
    if required:
        rules.append(Rule(
            f"{label}_ids_required",
            lambda: bool(ids),
            f"At least one {label.replace('_', ' ')} ID is required."
        ))
    duplicates = find_duplicates(ids)
    rules.append(Rule(
        f"{label}_ids_unique",
        lambda: not duplicates,
        f"Duplicate {label.replace('_', ' ')} IDs are not allowed: {', '.join(duplicates)}."
    ))
    return rules


def new_attribute_rules(
    attributes: List[AttributeCreate],
    existing_names: Iterable[str],
    existing_count: int,
    max_attributes: int
) -> List[Rule]:
    """Rules for attributes created with a product or added to one"""
    names = [attribute.name for attribute in attributes]
    duplicate_names = find_duplicates(names, key=normalize)
    taken = {normalize(name) for name in existing_names}
    clashing = [name for name in names if normalize(name) in taken]

    rules = [
        Rule("attributes_required", lambda: bool(attributes), "At least one attribute is required."),
        Rule(
            "attribute_limit",
            lambda: existing_count + len(attributes) <= max_attributes,
            f"A product can have a maximum of {max_attributes} attributes. "
            f"Current: {existing_count}, attempting to add: {len(attributes)}."
        ),
        Rule(
            "attribute_names_not_blank",
            lambda: all(name.strip() for name in names),
            "Attribute names cannot be blank."
        ),
        Rule(
            "attribute_names_unique",
            lambda: not duplicate_names,
            f"Duplicate attribute names in request: {', '.join(duplicate_names)}."
        ),
        Rule(
            "attribute_names_available",
            lambda: not clashing,
            f"Attribute name(s) already exist for this product: {', '.join(clashing)}."
        ),
    ]

    for attribute in attributes:
        rules.extend(_value_rules(attribute.name, [v.value for v in attribute.values], existing=[]))
    return rules


def _value_rules(attribute_name: str, values: List[str], existing: Iterable[str]) -> List[Rule]:
    duplicates = find_duplicates(values, key=normalize)
    taken = {normalize(value) for value in existing}
    clashing = [value for value in values if normalize(value) in taken]
    return [
        Rule(
            "attribute_values_required",
            lambda: bool(values),
            f"Attribute '{attribute_name}' requires at least one value."
        ),
        Rule(
            "attribute_values_not_blank",
            lambda: all(value.strip() for value in values),
            f"Attribute '{attribute_name}' has blank values."
        ),
        Rule(
            "attribute_values_unique",
            lambda: not duplicates,
            f"Attribute values must be unique. Attribute '{attribute_name}' repeats: {', '.join(duplicates)}."
        ),
        Rule(
            "attribute_values_available",
            lambda: not clashing,
            f"Attribute value(s) already exist for attribute '{attribute_name}': {', '.join(clashing)}."
        ),
    ]


def add_attribute_values_rules(request: AddAttributeValuesRequest, product: ProductSnapshot) -> List[Rule]:
    attribute_ids = [addition.attribute_id for addition in request.additions]
    duplicates = find_duplicates(attribute_ids)
    rules = [
        Rule(
            "additions_required",
            lambda: bool(request.additions),
            "At least one attribute value addition is required."
        ),
        Rule(
            "additions_unique",
            lambda: not duplicates,
            "Each attribute can only be updated once per request."
        ),
    ]
    for addition in request.additions:
        attribute = product.find_attribute(addition.attribute_id)
        # unknown attributes are reported as not found once the request is resolved
        name = attribute.name if attribute else addition.attribute_id
        existing = [value.value for value in attribute.values] if attribute else []
        rules.extend(_value_rules(name, [v.value for v in addition.values], existing))
    return rules


def update_attributes_rules(request: UpdateAttributesRequest, product: ProductSnapshot) -> List[Rule]:
    rules = [
        Rule(
            "changes_required",
            lambda: bool(request.attributes or request.values),
            "At least one attribute or attribute value change is required."
        ),
    ]
    rules.extend(_ids_rules([item.id for item in request.attributes], "attribute", required=False))
    rules.extend(_ids_rules([item.id for item in request.values], "attribute_value", required=False))

    renamed = [item.name for item in request.attributes if item.name is not None]
    revalued = [item.value for item in request.values if item.value is not None]
    rules.append(Rule(
        "attribute_names_not_blank",
        lambda: all(name.strip() for name in renamed),
        "Attribute names cannot be blank."
    ))
    rules.append(Rule(
        "attribute_values_not_blank",
        lambda: all(value.strip() for value in revalued),
        "Attribute values cannot be blank."
    ))

    # Uniqueness is checked on the state the request would produce
    new_names: Dict[str, str] = {item.id: item.name for item in request.attributes if item.name is not None}
    final_names = [new_names.get(attribute.id, attribute.name) for attribute in product.attributes]
    duplicate_names = find_duplicates(final_names, key=normalize)
    rules.append(Rule(
        "attribute_names_unique",
        lambda: not duplicate_names,
        f"Attribute name(s) would not be unique within the product: {', '.join(duplicate_names)}."
    ))

    new_values: Dict[str, str] = {item.id: item.value for item in request.values if item.value is not None}
    for attribute in product.attributes:
        final_values = [new_values.get(value.id, value.value) for value in attribute.values]
        duplicates = find_duplicates(final_values, key=normalize)
        rules.append(Rule(
            "attribute_values_unique",
            lambda duplicates=duplicates: not duplicates,
            f"Attribute values must be unique. Attribute '{attribute.name}' would repeat: {', '.join(duplicates)}."
        ))
    return rules


def delete_attributes_rules(request: DeleteAttributesRequest) -> List[Rule]:
    rules = _ids_rules(request.attribute_ids, "attribute")
    rules.append(Rule(
        "variants_required",
        lambda: bool(request.variants),
        "At least one product variant is required."
    ))
    return rules


def delete_attribute_values_rules(request: DeleteAttributeValuesRequest) -> List[Rule]:
    return _ids_rules(request.value_ids, "attribute_value")


def bulk_update_variants_rules(request: BulkUpdateVariantsRequest) -> List[Rule]:
    updated_ids = [item.id for item in request.variants]
    both = sorted(set(updated_ids) & set(request.deleted_variant_ids))
    skus = [item.sku for item in request.variants if item.sku is not None]
    duplicate_skus = find_duplicates(skus, key=normalize)

    rules = [
        Rule(
            "changes_required",
            lambda: bool(request.variants or request.deleted_variant_ids),
            "At least one variant is required for bulk update."
        ),
        Rule(
            "update_or_delete",
            lambda: not both,
            f"Variants cannot be updated and deleted in the same request: {', '.join(both)}."
        ),
        Rule(
            "skus_unique",
            lambda: not duplicate_skus,
            f"Duplicate SKUs in request: {', '.join(duplicate_skus)}."
        ),
    ]
    rules.extend(_ids_rules(updated_ids, "variant", required=False))
    rules.extend(_ids_rules(request.deleted_variant_ids, "deleted_variant", required=False))
    return rules


def bulk_delete_variants_rules(request: BulkDeleteVariantsRequest) -> List[Rule]:
    return _ids_rules(request.variant_ids, "variant")


def bulk_update_variant_media_rules(request: BulkUpdateVariantMediaRequest) -> List[Rule]:
    rules = _ids_rules([entry.variant_id for entry in request.variants], "variant")
    for entry in request.variants:
        media_ids = [item.id for item in entry.media if item.id is not None]
        duplicates = find_duplicates(media_ids)
        unnamed = [item for item in entry.media if item.id is None and not (item.media_public_id or "").strip()]
        rules.extend([
            Rule(
                "variant_media_required",
                lambda entry=entry: bool(entry.media),
                f"At least one media item is required for variant {entry.variant_id}."
            ),
            Rule(
                "variant_media_ids_unique",
                lambda duplicates=duplicates: not duplicates,
                f"Duplicate media IDs for variant {entry.variant_id}: {', '.join(duplicates)}."
            ),
            Rule(
                "new_media_public_id_required",
                lambda unnamed=unnamed: not unnamed,
                f"Media public ID is required for new media items of variant {entry.variant_id}."
            ),
        ])
    return rules


def sku_collisions(skus: Iterable[Optional[str]], taken: Iterable[Optional[str]]) -> List[str]:
    """SKUs from ``skus`` already used by ``taken``, compared case-insensitively"""
    used = {normalize(sku) for sku in taken if sku}
    return [sku for sku in skus if sku and normalize(sku) in used]
