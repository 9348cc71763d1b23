from .product import ProductCRUD
from .catalog import CatalogRepository

__all__ = ["ProductCRUD", "CatalogRepository"]
