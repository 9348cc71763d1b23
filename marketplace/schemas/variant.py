from pydantic import BaseModel, Field
from typing import Optional, List
from decimal import Decimal


class AttributeSelection(BaseModel):
    attribute_name: str = Field(..., min_length=1, max_length=100, description="Attribute name (e.g., 'Color')")
    value: str = Field(..., min_length=1, max_length=200, description="Selected value (e.g., 'Red')")


class VariantMediaCreate(BaseModel):
    media_public_id: str = Field(..., min_length=1, max_length=255, description="Media id on the media host")
    file_name: Optional[str] = Field(None, max_length=255)
    media_type: str = Field("image", pattern="^(image|video)$")
    display_order: int = Field(0, ge=0)
    is_main: bool = Field(False, description="Whether this is the variant's main media")


class VariantDefinition(BaseModel):
    """Price, stock and media for the variant of one attribute combination"""
    sku: Optional[str] = Field(None, min_length=1, max_length=255, description="SKU (generated when omitted)")
    price: Decimal = Field(Decimal("0"), ge=0, description="Variant price")
    stock_quantity: int = Field(0, ge=0, description="Stock quantity")
    is_active: bool = Field(True, description="Whether the variant can be sold")
    attribute_selections: List[AttributeSelection] = Field(
        [], description="One selected value per product attribute"
    )
    media: List[VariantMediaCreate] = Field([], description="Variant media")


class VariantUpdateItem(BaseModel):
    id: str
    sku: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class BulkUpdateVariantsRequest(BaseModel):
    """Schema for updating several variants of a product at once"""
    variants: List[VariantUpdateItem] = Field([], description="Variant changes")
    deleted_variant_ids: List[str] = Field([], description="Variants to delete in the same transaction")


class BulkDeleteVariantsRequest(BaseModel):
    variant_ids: List[str] = Field([], description="Variants to delete")


class VariantMediaUpdateItem(BaseModel):
    """Media item of a variant media update; without an id it is added as new media"""
    id: Optional[str] = Field(None, description="Existing media to update")
    media_public_id: Optional[str] = Field(None, min_length=1, max_length=255)
    file_name: Optional[str] = Field(None, max_length=255)
    media_type: Optional[str] = Field(None, pattern="^(image|video)$")
    display_order: Optional[int] = Field(None, ge=0)
    is_main: Optional[bool] = None


class VariantMediaUpdate(BaseModel):
    variant_id: str
    media: List[VariantMediaUpdateItem] = Field([], description="Full media list; media left out are deleted")


class BulkUpdateVariantMediaRequest(BaseModel):
    variants: List[VariantMediaUpdate] = Field([], description="Media lists per variant")


class VariantMediaItem(BaseModel):
    id: str
    media_public_id: str
    file_name: Optional[str] = None
    media_type: str
    display_order: int
    is_main: bool


class VariantSelectionItem(BaseModel):
    attribute_id: str
    attribute_name: str
    value_id: str
    value: str


class VariantItem(BaseModel):
    id: str
    name: Optional[str] = None
    sku: Optional[str] = None
    price: Decimal
    stock_quantity: int
    is_active: bool
    selections: List[VariantSelectionItem] = Field([], description="Combination, in attribute order")
    media: List[VariantMediaItem] = []
