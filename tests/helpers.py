from typing import List

from marketplace.schemas.attribute import AttributeCreate, AttributeValueCreate
from marketplace.schemas.product import ProductCreate, ProductState


def tshirt_payload(store_id: str = "store-1") -> ProductCreate:
    """T-Shirt with Color {Red, Blue} and Size {S, M}"""
    return ProductCreate(
        store_id=store_id,
        name="T-Shirt",
        attributes=[
            AttributeCreate(
                name="Color",
                display_order=0,
                values=[
                    AttributeValueCreate(value="Red", display_order=0),
                    AttributeValueCreate(value="Blue", display_order=1),
                ]
            ),
            AttributeCreate(
                name="Size",
                display_order=1,
                values=[
                    AttributeValueCreate(value="S", display_order=0),
                    AttributeValueCreate(value="M", display_order=1),
                ]
            ),
        ]
    )


def labels(variants) -> List[str]:
    """Combination labels of response variant items, e.g. 'Red / S'"""
    return [" / ".join(selection.value for selection in variant.selections) for variant in variants]


def value_id(product: ProductState, attribute_name: str, value: str) -> str:
    attribute = next(a for a in product.attributes if a.name == attribute_name)
    return next(v.id for v in attribute.values if v.value == value)


def attribute_id(product: ProductState, attribute_name: str) -> str:
    return next(a.id for a in product.attributes if a.name == attribute_name)


def variant_id(product: ProductState, label: str) -> str:
    return next(v.id for v, text in zip(product.variants, labels(product.variants)) if text == label)
