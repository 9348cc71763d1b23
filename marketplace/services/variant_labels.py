import re
from typing import Iterable, List, Set

from marketplace.schemas.entities import MediaEntity, ProductSnapshot, VariantEntity

_SKU_UNSAFE = re.compile(r"[^A-Z0-9]+")


def ordered_value_labels(product: ProductSnapshot, value_ids: Iterable[str]) -> List[str]:
    """Values of a combination, in attribute display order"""
    wanted = set(value_ids)
    labels = []
    for attribute in sorted(product.attributes, key=lambda a: a.display_order):
        for value in attribute.values:
            if value.id in wanted:
                labels.append(value.value)
    return labels


def combination_label(product: ProductSnapshot, value_ids: Iterable[str]) -> str:
    return " / ".join(ordered_value_labels(product, value_ids))


def build_variant_name(product: ProductSnapshot, variant: VariantEntity) -> str:
    """Variant name: Product Name - Value 1 / Value 2"""
    labels = ordered_value_labels(product, variant.value_ids)
    if not labels:
        return product.name
    return f"{product.name} - {' / '.join(labels)}"


def _sku_part(text: str) -> str:
    return _SKU_UNSAFE.sub("-", text.upper()).strip("-")


def generate_sku(product: ProductSnapshot, variant: VariantEntity, taken: Set[str]) -> str:
    """Generate SKU code: PRODUCT-VALUE1-VALUE2, suffixed until unique within the product"""
    parts = [_sku_part(product.name)] + [_sku_part(label) for label in ordered_value_labels(product, variant.value_ids)]
    base = "-".join(part for part in parts if part) or "SKU"
    sku = base
    counter = 2
    while sku.upper() in taken:
        sku = f"{base}-{counter}"
        counter += 1
    taken.add(sku.upper())
    return sku


def ensure_single_main_media(media: Iterable[MediaEntity]) -> List[MediaEntity]:
    """Keep exactly one main media item, the first flagged one by display order.

    When nothing is flagged the first item by display order becomes main.
    """
    ordered = sorted(media, key=lambda item: item.display_order)
    if not ordered:
        return ordered

    main_seen = False
    for item in ordered:
        if item.is_main and not main_seen:
            main_seen = True
        elif item.is_main:
            item.is_main = False

    if not main_seen:
        ordered[0].is_main = True
    return ordered
