from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from decimal import Decimal
from datetime import datetime

from marketplace.schemas.attribute import AttributeCreate, AttributeItem, AttributeValueItem
from marketplace.schemas.variant import VariantDefinition, VariantItem


class ProductCreate(BaseModel):
    store_id: str = Field(..., min_length=1, max_length=36, description="Owning store ID")
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    is_active: bool = Field(True, description="Whether product is active")
    attributes: List[AttributeCreate] = Field([], description="Up to 3 attributes with their values")
    variants: List[VariantDefinition] = Field(
        [], description="Optional price/stock/SKU/media per generated combination"
    )


class ProductResponse(BaseModel):
    id: str
    store_id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    total_stock: int = 0
    main_media_public_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductState(BaseModel):
    """Full post-mutation state of a product's attributes, variants and aggregates"""
    product_id: str
    attributes: List[AttributeItem] = []
    variants: List[VariantItem] = []
    min_price: Optional[Decimal] = Field(None, description="Lowest price over active variants")
    max_price: Optional[Decimal] = Field(None, description="Highest price over active variants")
    total_stock: int = Field(0, description="Stock summed over active variants")
    main_media_public_id: Optional[str] = None


class ProductDetail(ProductState):
    store_id: str
    name: str
    description: Optional[str] = None
    is_active: bool


class AttributeMutationResponse(ProductState):
    """Response for attribute and attribute value mutations"""
    added_attributes: List[AttributeItem] = []
    updated_attributes: List[AttributeItem] = []
    deleted_attribute_ids: List[str] = []
    added_values: List[AttributeValueItem] = []
    updated_values: List[AttributeValueItem] = []
    deleted_value_ids: List[str] = []
    created_variants: List[VariantItem] = []
    removed_variants: List[VariantItem] = []


class VariantMutationResponse(ProductState):
    """Response for bulk variant updates and deletions"""
    updated_variants: List[VariantItem] = []
    removed_variants: List[VariantItem] = []
