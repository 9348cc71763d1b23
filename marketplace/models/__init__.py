from .product import Product
from .attribute import ProductAttribute, ProductAttributeValue
from .variant import ProductVariant, variant_attribute_value_association
from .media import ProductVariantMedia

__all__ = [
    "Product",
    "ProductAttribute",
    "ProductAttributeValue",
    "ProductVariant",
    "variant_attribute_value_association",
    "ProductVariantMedia"
]
