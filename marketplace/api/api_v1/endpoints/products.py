from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from marketplace.db.database import get_db
from marketplace.schemas.product import ProductCreate, ProductDetail, ProductResponse
from marketplace.services.product_service import ProductService

router = APIRouter()


@router.get("/", response_model=List[ProductResponse])
async def get_products(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    store_id: Optional[str] = Query(None, description="Filter by store ID"),
    is_active: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Get all products with filtering options"""
    service = ProductService(db)
    return await service.list_products(skip=skip, limit=limit, store_id=store_id, is_active=is_active)


@router.post("/", response_model=ProductDetail, status_code=201)
async def create_product(
    product_in: ProductCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a product with up to 3 attributes.

    One variant is generated per combination of attribute values. `variants`
    may override price, stock, SKU, active flag and media of any of them.
    """
    service = ProductService(db)
    return await service.create_product(product_in)


@router.get("/{product_id}", response_model=ProductDetail)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a product with its attributes, variants and aggregates"""
    service = ProductService(db)
    return await service.get_product(product_id)
