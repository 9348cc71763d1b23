from pydantic import BaseModel, Field
from typing import Optional, List

from marketplace.schemas.variant import VariantDefinition


class AttributeValueCreate(BaseModel):
    value: str = Field(..., min_length=1, max_length=200, description="Attribute value (e.g., 'Red', 'XL')")
    display_order: int = Field(0, ge=0, description="Position of the value within its attribute")


class AttributeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Attribute name (e.g., 'Color', 'Size')")
    display_order: int = Field(0, ge=0, description="Position of the attribute within the product")
    values: List[AttributeValueCreate] = Field([], description="Selectable values of the attribute")


class AddAttributesRequest(BaseModel):
    """Schema for adding attributes to a product and regenerating its variants"""
    attributes: List[AttributeCreate] = Field([], description="Attributes to add")
    variants: List[VariantDefinition] = Field(
        [], description="Optional price/stock/SKU/media for the variants created by the new combinations"
    )


class AttributeValueAddition(BaseModel):
    attribute_id: str = Field(..., description="Existing attribute receiving the values")
    values: List[AttributeValueCreate] = Field([], description="Values to add")


class AddAttributeValuesRequest(BaseModel):
    """Schema for adding values to existing attributes and regenerating variants"""
    additions: List[AttributeValueAddition] = Field([], description="Values to add, grouped per attribute")
    variants: List[VariantDefinition] = Field(
        [], description="Optional price/stock/SKU/media for the variants created by the new combinations"
    )


class AttributeUpdateItem(BaseModel):
    id: str
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    display_order: Optional[int] = Field(None, ge=0)


class AttributeValueUpdateItem(BaseModel):
    id: str
    value: Optional[str] = Field(None, min_length=1, max_length=200)
    display_order: Optional[int] = Field(None, ge=0)


class UpdateAttributesRequest(BaseModel):
    """Schema for renaming/reordering attributes and attribute values in bulk"""
    attributes: List[AttributeUpdateItem] = Field([], description="Attribute changes")
    values: List[AttributeValueUpdateItem] = Field([], description="Attribute value changes")


class DeleteAttributesRequest(BaseModel):
    """Schema for deleting attributes.

    Removing an attribute reshapes the combination space, so the caller
    supplies one variant definition per remaining combination.
    """
    attribute_ids: List[str] = Field([], description="Attributes to delete")
    variants: List[VariantDefinition] = Field([], description="Replacement variants for the reduced combinations")


class DeleteAttributeValuesRequest(BaseModel):
    """Schema for deleting attribute values.

    Variants are only required when a deletion empties an attribute, which
    removes the attribute as well.
    """
    value_ids: List[str] = Field([], description="Attribute values to delete")
    variants: List[VariantDefinition] = Field([], description="Replacement variants when an attribute is emptied")


class AttributeValueItem(BaseModel):
    id: str
    attribute_id: str
    value: str
    display_order: int


class AttributeItem(BaseModel):
    id: str
    name: str
    display_order: int
    values: List[AttributeValueItem] = []
