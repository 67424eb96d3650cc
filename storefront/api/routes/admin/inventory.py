import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies.auth import require_admin
from storefront.api.dependencies.database import get_db
from storefront.core.config import settings
from storefront.models.dto.inventory import LowStockResponse, StockUpdate, StockUpdateResponse
from storefront.models.orm.user import User
from storefront.services import inventory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["admin-inventory"])


@router.put("/variants/{variant_id}/stock", response_model=StockUpdateResponse)
async def set_variant_stock(
    variant_id: UUID,
    body: StockUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    variant = await inventory_service.set_variant_stock(db, variant_id, body.stock)
    logger.info("Admin %s edited stock of variant %s", admin.id, variant_id)
    return {"message": "Stock updated", "variant": variant}


@router.get("/low-stock", response_model=LowStockResponse)
async def list_low_stock(
    threshold: int | None = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if threshold is None:
        threshold = settings.low_stock_threshold
    variants = await inventory_service.list_low_stock(db, threshold)
    return {"threshold": threshold, "variants": variants}
