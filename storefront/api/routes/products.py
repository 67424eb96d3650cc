from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies.database import get_db
from storefront.models.dto.cart import Size
from storefront.models.dto.inventory import VariantListResponse, VariantStockEnvelope
from storefront.services import inventory_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/{product_id}/variants", response_model=VariantListResponse)
async def list_variants(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return {"variants": await inventory_service.list_variants(db, product_id)}


@router.get("/{product_id}/stock", response_model=VariantStockEnvelope)
async def get_variant_stock(
    product_id: UUID,
    size: Size = Query(...),
    color: str = Query(..., min_length=1, max_length=50),
    db: AsyncSession = Depends(get_db),
):
    variant = await inventory_service.get_variant_stock(db, product_id, size, color)
    return {"variant": variant}
