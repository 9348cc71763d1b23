from .product import (
    ProductCreate, ProductResponse, ProductState, ProductDetail,
    AttributeMutationResponse, VariantMutationResponse
)
from .attribute import (
    AttributeCreate, AttributeValueCreate, AddAttributesRequest, AttributeValueAddition,
    AddAttributeValuesRequest, AttributeUpdateItem, AttributeValueUpdateItem, UpdateAttributesRequest,
    DeleteAttributesRequest, DeleteAttributeValuesRequest, AttributeItem, AttributeValueItem
)
from .variant import (
    AttributeSelection, VariantMediaCreate, VariantDefinition, VariantUpdateItem,
    BulkUpdateVariantsRequest, BulkDeleteVariantsRequest, VariantMediaUpdateItem, VariantMediaUpdate,
    BulkUpdateVariantMediaRequest, VariantItem, VariantMediaItem, VariantSelectionItem
)

__all__ = [
    "ProductCreate", "ProductResponse", "ProductState", "ProductDetail",
    "AttributeMutationResponse", "VariantMutationResponse",
    "AttributeCreate", "AttributeValueCreate", "AddAttributesRequest", "AttributeValueAddition",
    "AddAttributeValuesRequest", "AttributeUpdateItem", "AttributeValueUpdateItem", "UpdateAttributesRequest",
    "DeleteAttributesRequest", "DeleteAttributeValuesRequest", "AttributeItem", "AttributeValueItem",
    "AttributeSelection", "VariantMediaCreate", "VariantDefinition", "VariantUpdateItem",
    "BulkUpdateVariantsRequest", "BulkDeleteVariantsRequest", "VariantMediaUpdateItem", "VariantMediaUpdate",
    "BulkUpdateVariantMediaRequest", "VariantItem", "VariantMediaItem",
    "VariantSelectionItem"
]
