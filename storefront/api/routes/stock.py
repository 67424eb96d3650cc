from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies.auth import get_current_user
from storefront.api.dependencies.database import get_db
from storefront.models.dto.inventory import StockCheckRequest, StockCheckResponse
from storefront.models.orm.user import User
from storefront.services import inventory_service

router = APIRouter(prefix="/stock", tags=["stock"])


@router.post("/check", response_model=StockCheckResponse)
async def check_stock(
    body: StockCheckRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await inventory_service.check_stock_availability(
        db, [item.model_dump() for item in body.items]
    )
    return {"message": "Stock availability checked", **result}
