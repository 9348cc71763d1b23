"""In-memory catalog entities.

The variant regeneration engine works on these plain models instead of ORM
rows: a product is loaded into a ``ProductSnapshot``, mutated in memory, and
the resulting changes are handed to the persistence layer as an explicit
``ChangeSet``.
"""

from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional, Tuple
import uuid

from pydantic import BaseModel, Field


def new_id() -> str:
    return str(uuid.uuid4())


class AttributeValueEntity(BaseModel):
    id: str = Field(default_factory=new_id)
    value: str
    display_order: int = 0


class AttributeEntity(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    display_order: int = 0
    values: List[AttributeValueEntity] = []


class MediaEntity(BaseModel):
    id: str = Field(default_factory=new_id)
    media_public_id: str
    file_name: Optional[str] = None
    media_type: str = "image"
    display_order: int = 0
    is_main: bool = False


class VariantEntity(BaseModel):
    id: str = Field(default_factory=new_id)
    name: Optional[str] = None
    sku: Optional[str] = None
    price: Decimal = Decimal("0")
    stock_quantity: int = 0
    is_active: bool = True
    value_ids: List[str] = []
    media: List[MediaEntity] = []

    @property
    def key(self) -> FrozenSet[str]:
        """Combination key: the set of attribute value ids, order independent"""
        return frozenset(self.value_ids)


class ProductAggregates(BaseModel):
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    total_stock: int = 0
    main_media_public_id: Optional[str] = None


class ProductSnapshot(BaseModel):
    id: str
    store_id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
    attributes: List[AttributeEntity] = []
    variants: List[VariantEntity] = []
    aggregates: ProductAggregates = Field(default_factory=ProductAggregates)

    def find_attribute(self, attribute_id: str) -> Optional[AttributeEntity]:
        for attribute in self.attributes:
            if attribute.id == attribute_id:
                return attribute
        return None

    def find_value(self, value_id: str) -> Optional[Tuple[AttributeEntity, AttributeValueEntity]]:
        for attribute in self.attributes:
            for value in attribute.values:
                if value.id == value_id:
                    return attribute, value
        return None

    def find_variant(self, variant_id: str) -> Optional[VariantEntity]:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def value_index(self) -> Dict[str, Tuple[AttributeEntity, AttributeValueEntity]]:
        """Map every value id to its (attribute, value) pair"""
        return {
            value.id: (attribute, value)
            for attribute in self.attributes
            for value in attribute.values
        }


class ValueCreate(BaseModel):
    attribute_id: str
    value: AttributeValueEntity


class ChangeSet(BaseModel):
    """Explicit create/update/delete commands for one product, applied atomically"""
    product_id: str

    attributes_to_create: List[AttributeEntity] = []
    attributes_to_update: List[AttributeEntity] = []
    attribute_ids_to_delete: List[str] = []

    values_to_create: List[ValueCreate] = []
    values_to_update: List[AttributeValueEntity] = []
    value_ids_to_delete: List[str] = []

    variants_to_create: List[VariantEntity] = []
    variants_to_update: List[VariantEntity] = []
    variant_ids_to_delete: List[str] = []
    # variants whose media list replaces the stored one
    variant_media_to_replace: List[VariantEntity] = []

    aggregates: ProductAggregates = Field(default_factory=ProductAggregates)
