from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.database import get_db
from marketplace.schemas.product import VariantMutationResponse
from marketplace.schemas.variant import BulkDeleteVariantsRequest, BulkUpdateVariantMediaRequest, BulkUpdateVariantsRequest
from marketplace.services.variant_service import VariantService

router = APIRouter()


@router.put("/{product_id}/variants", response_model=VariantMutationResponse)
async def bulk_update_variants(
    product_id: str,
    request: BulkUpdateVariantsRequest,
    db: AsyncSession = Depends(get_db)
):
    """Update several variants at once, optionally deleting others in the same transaction"""
    service = VariantService(db)
    return await service.bulk_update_variants(product_id, request)


@router.post("/{product_id}/variants/bulk-delete", response_model=VariantMutationResponse)
async def delete_variants(
    product_id: str,
    request: BulkDeleteVariantsRequest,
    db: AsyncSession = Depends(get_db)
):
    """Delete variants; at least one active variant has to remain"""
    service = VariantService(db)
    return await service.delete_variants(product_id, request)


@router.put("/{product_id}/variants/media", response_model=VariantMutationResponse)
async def bulk_update_variant_media(
    product_id: str,
    request: BulkUpdateVariantMediaRequest,
    db: AsyncSession = Depends(get_db)
):
    """Replace the media of several variants; media left out of a list are deleted"""
    service = VariantService(db)
    return await service.bulk_update_variant_media(product_id, request)
