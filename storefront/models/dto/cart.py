from typing import Literal
from uuid import UUID

from pydantic import Field

from storefront.models.dto.common import CamelModel, SuccessResponse
from storefront.models.orm.product_variant import SIZES

Size = Literal[SIZES]


class CartItemAdd(CamelModel):
    product_id: UUID
    size: Size
    color: str = Field(min_length=1, max_length=50)
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(CamelModel):
    cart_item_id: UUID
    quantity: int = Field(ge=1)


class CartLineResponse(CamelModel):
    id: UUID
    product_id: UUID
    product_name: str
    price_cents: int
    image_url: str | None = None
    size: str
    color: str
    quantity: int
    line_total_cents: int
    sku: str | None = None
    current_stock: int
    is_available: bool


class CartItemEnvelope(SuccessResponse):
    cart_item: CartLineResponse


class CartListResponse(SuccessResponse):
    cart_items: list[CartLineResponse]


class CartClearResponse(SuccessResponse):
    deleted_count: int


class CartCountResponse(SuccessResponse):
    count: int


class CartTotalResponse(SuccessResponse):
    subtotal_cents: int
    total_item_count: int
    available_item_count: int
    available_items: list[CartLineResponse]
    unavailable_items: list[CartLineResponse]
    items: list[CartLineResponse]
