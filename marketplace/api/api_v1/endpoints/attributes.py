from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.database import get_db
from marketplace.schemas.attribute import (
    AddAttributeValuesRequest,
    AddAttributesRequest,
    DeleteAttributeValuesRequest,
    DeleteAttributesRequest,
    UpdateAttributesRequest,
)
from marketplace.schemas.product import AttributeMutationResponse
from marketplace.services.attribute_mutation_service import AttributeMutationService

router = APIRouter()


@router.post("/{product_id}/attributes", response_model=AttributeMutationResponse)
async def add_attributes(
    product_id: str,
    request: AddAttributesRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Add attributes to a product.

    Existing variants lack a value for the new attributes, so they are
    replaced by one variant per new combination.
    """
    service = AttributeMutationService(db)
    return await service.add_attributes(product_id, request)


@router.put("/{product_id}/attributes", response_model=AttributeMutationResponse)
async def update_attributes(
    product_id: str,
    request: UpdateAttributesRequest,
    db: AsyncSession = Depends(get_db)
):
    """Rename or reorder attributes and attribute values"""
    service = AttributeMutationService(db)
    return await service.update_attributes(product_id, request)


@router.post("/{product_id}/attributes/bulk-delete", response_model=AttributeMutationResponse)
async def delete_attributes(
    product_id: str,
    request: DeleteAttributesRequest,
    db: AsyncSession = Depends(get_db)
):
    """Delete attributes; `variants` must define every remaining combination"""
    service = AttributeMutationService(db)
    return await service.delete_attributes(product_id, request)


@router.post("/{product_id}/attribute-values", response_model=AttributeMutationResponse)
async def add_attribute_values(
    product_id: str,
    request: AddAttributeValuesRequest,
    db: AsyncSession = Depends(get_db)
):
    """Add values to existing attributes; new combinations get new variants"""
    service = AttributeMutationService(db)
    return await service.add_attribute_values(product_id, request)


@router.post("/{product_id}/attribute-values/bulk-delete", response_model=AttributeMutationResponse)
async def delete_attribute_values(
    product_id: str,
    request: DeleteAttributeValuesRequest,
    db: AsyncSession = Depends(get_db)
):
    """Delete attribute values together with the variants using them"""
    service = AttributeMutationService(db)
    return await service.delete_attribute_values(product_id, request)
