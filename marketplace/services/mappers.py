"""Conversions between ORM rows, in-memory entities and API schemas."""

from typing import Any, Dict, List

from marketplace.models.attribute import ProductAttribute, ProductAttributeValue
from marketplace.models.media import ProductVariantMedia
from marketplace.models.product import Product
from marketplace.models.variant import ProductVariant
from marketplace.schemas.attribute import AttributeCreate, AttributeItem, AttributeValueCreate, AttributeValueItem
from marketplace.schemas.entities import (
    AttributeEntity,
    AttributeValueEntity,
    MediaEntity,
    ProductAggregates,
    ProductSnapshot,
    VariantEntity,
)
from marketplace.schemas.product import ProductDetail
from marketplace.schemas.variant import VariantItem, VariantMediaCreate, VariantMediaItem, VariantSelectionItem
from marketplace.services.combination_generator import sort_by_combination


# ORM -> entity

def value_to_entity(value: ProductAttributeValue) -> AttributeValueEntity:
    return AttributeValueEntity(id=value.id, value=value.value, display_order=value.display_order)


def attribute_to_entity(attribute: ProductAttribute) -> AttributeEntity:
    return AttributeEntity(
        id=attribute.id,
        name=attribute.name,
        display_order=attribute.display_order,
        values=[value_to_entity(value) for value in attribute.values]
    )


def media_to_entity(media: ProductVariantMedia) -> MediaEntity:
    return MediaEntity(
        id=media.id,
        media_public_id=media.media_public_id,
        file_name=media.file_name,
        media_type=media.media_type,
        display_order=media.display_order,
        is_main=media.is_main
    )


def variant_to_entity(variant: ProductVariant) -> VariantEntity:
    return VariantEntity(
        id=variant.id,
        name=variant.name,
        sku=variant.sku,
        price=variant.price,
        stock_quantity=variant.stock_quantity,
        is_active=variant.is_active,
        value_ids=[value.id for value in variant.attribute_values],
        media=[media_to_entity(media) for media in variant.media]
    )


def product_to_snapshot(product: Product) -> ProductSnapshot:
    """Build the in-memory snapshot of a product loaded with all its relations.

    Variants are listed in combination order.
    """
    attributes = [attribute_to_entity(attribute) for attribute in product.attributes]
    variants = [variant_to_entity(variant) for variant in product.variants]
    return ProductSnapshot(
        id=product.id,
        store_id=product.store_id,
        name=product.name,
        description=product.description,
        is_active=product.is_active,
        attributes=attributes,
        variants=sort_by_combination(variants, attributes),
        aggregates=ProductAggregates(
            min_price=product.min_price,
            max_price=product.max_price,
            total_stock=product.total_stock or 0,
            main_media_public_id=product.main_media_public_id
        )
    )


# request -> entity

def value_from_create(value_in: AttributeValueCreate) -> AttributeValueEntity:
    return AttributeValueEntity(value=value_in.value.strip(), display_order=value_in.display_order)


def attribute_from_create(attribute_in: AttributeCreate) -> AttributeEntity:
    return AttributeEntity(
        name=attribute_in.name.strip(),
        display_order=attribute_in.display_order,
        values=[value_from_create(value_in) for value_in in attribute_in.values]
    )


def media_from_create(media_in: VariantMediaCreate) -> MediaEntity:
    return MediaEntity(
        media_public_id=media_in.media_public_id,
        file_name=media_in.file_name,
        media_type=media_in.media_type,
        display_order=media_in.display_order,
        is_main=media_in.is_main
    )


# entity -> response

def value_to_item(attribute_id: str, value: AttributeValueEntity) -> AttributeValueItem:
    return AttributeValueItem(
        id=value.id,
        attribute_id=attribute_id,
        value=value.value,
        display_order=value.display_order
    )


def attribute_to_item(attribute: AttributeEntity) -> AttributeItem:
    return AttributeItem(
        id=attribute.id,
        name=attribute.name,
        display_order=attribute.display_order,
        values=[
            value_to_item(attribute.id, value)
            for value in sorted(attribute.values, key=lambda v: v.display_order)
        ]
    )


def media_to_item(media: MediaEntity) -> VariantMediaItem:
    return VariantMediaItem(
        id=media.id,
        media_public_id=media.media_public_id,
        file_name=media.file_name,
        media_type=media.media_type,
        display_order=media.display_order,
        is_main=media.is_main
    )


def variant_to_item(product: ProductSnapshot, variant: VariantEntity) -> VariantItem:
    """Response item of a variant; its selections follow attribute display order"""
    index = product.value_index()
    pairs = [index[value_id] for value_id in variant.value_ids if value_id in index]
    pairs.sort(key=lambda pair: pair[0].display_order)
    return VariantItem(
        id=variant.id,
        name=variant.name,
        sku=variant.sku,
        price=variant.price,
        stock_quantity=variant.stock_quantity,
        is_active=variant.is_active,
        selections=[
            VariantSelectionItem(
                attribute_id=attribute.id,
                attribute_name=attribute.name,
                value_id=value.id,
                value=value.value
            )
            for attribute, value in pairs
        ],
        media=[media_to_item(media) for media in sorted(variant.media, key=lambda m: m.display_order)]
    )


def product_state(product: ProductSnapshot) -> Dict[str, Any]:
    """Fields shared by every response that carries a product's full state"""
    return {
        "product_id": product.id,
        "attributes": [
            attribute_to_item(attribute)
            for attribute in sorted(product.attributes, key=lambda a: a.display_order)
        ],
        "variants": [variant_to_item(product, variant) for variant in product.variants],
        "min_price": product.aggregates.min_price,
        "max_price": product.aggregates.max_price,
        "total_stock": product.aggregates.total_stock,
        "main_media_public_id": product.aggregates.main_media_public_id,
    }


def snapshot_to_detail(product: ProductSnapshot) -> ProductDetail:
    return ProductDetail(
        store_id=product.store_id,
        name=product.name,
        description=product.description,
        is_active=product.is_active,
        **product_state(product)
    )


def variant_items(product: ProductSnapshot, variants: List[VariantEntity]) -> List[VariantItem]:
    return [variant_to_item(product, variant) for variant in variants]
