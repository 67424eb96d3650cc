from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies.auth import get_current_user
from storefront.api.dependencies.database import get_db
from storefront.models.dto.cart import (
    CartClearResponse,
    CartCountResponse,
    CartItemAdd,
    CartItemEnvelope,
    CartItemUpdate,
    CartListResponse,
    CartTotalResponse,
)
from storefront.models.orm.user import User
from storefront.services import cart_service

router = APIRouter(prefix="/cart", tags=["cart"])


@router.post("/add", response_model=CartItemEnvelope, status_code=201)
async def add_to_cart(
    body: CartItemAdd,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    cart_item = await cart_service.add_to_cart(
        db, user.id, body.product_id, body.size, body.color, body.quantity,
    )
    return {"message": "Item added to cart successfully", "cart_item": cart_item}


@router.get("", response_model=CartListResponse)
async def get_cart(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"cart_items": await cart_service.get_cart(db, user.id)}


@router.put("/update", response_model=CartItemEnvelope)
async def update_cart_item(
    body: CartItemUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    cart_item = await cart_service.update_cart_item(
        db, user.id, body.cart_item_id, body.quantity
    )
    return {"message": "Cart item updated successfully", "cart_item": cart_item}


@router.delete("/remove/{cart_item_id}", response_model=CartItemEnvelope)
async def remove_from_cart(
    cart_item_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    cart_item = await cart_service.remove_from_cart(db, user.id, cart_item_id)
    return {"message": "Item removed from cart successfully", "cart_item": cart_item}


@router.delete("/clear", response_model=CartClearResponse)
async def clear_cart(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    deleted = await cart_service.clear_cart(db, user.id)
    return {"message": "Cart cleared successfully", "deleted_count": deleted}


@router.get("/count", response_model=CartCountResponse)
async def get_cart_item_count(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"count": await cart_service.get_cart_item_count(db, user.id)}


@router.get("/total", response_model=CartTotalResponse)
async def get_cart_total(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await cart_service.get_cart_total(db, user.id)
