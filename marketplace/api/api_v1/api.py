from fastapi import APIRouter

from marketplace.api.api_v1.endpoints import (
    products,
    attributes,
    variants
)

api_router = APIRouter()

api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(attributes.router, prefix="/products", tags=["attributes"])
api_router.include_router(variants.router, prefix="/products", tags=["variants"])
