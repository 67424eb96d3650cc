from uuid import UUID

from pydantic import Field

from storefront.models.dto.cart import Size
from storefront.models.dto.common import CamelModel, SuccessResponse


class VariantResponse(CamelModel):
    id: UUID
    product_id: UUID
    size: str
    color: str
    stock: int
    sku: str
    available: bool


class VariantStockResponse(VariantResponse):
    product_name: str


class VariantListResponse(SuccessResponse):
    variants: list[VariantResponse]


class VariantStockEnvelope(SuccessResponse):
    variant: VariantStockResponse


class StockUpdate(CamelModel):
    stock: int = Field(ge=0)


class StockUpdateResponse(SuccessResponse):
    variant: VariantResponse


class LowStockResponse(SuccessResponse):
    threshold: int
    variants: list[VariantStockResponse]


class StockCheckItem(CamelModel):
    product_id: UUID
    size: Size
    color: str = Field(min_length=1, max_length=50)
    quantity: int = Field(ge=1)


class StockCheckRequest(CamelModel):
    items: list[StockCheckItem] = Field(min_length=1)


class StockCheckResult(CamelModel):
    product_id: UUID
    size: str
    color: str
    requested_quantity: int
    available_stock: int | None = None
    sku: str | None = None
    available: bool
    error: str | None = None


class StockCheckResponse(SuccessResponse):
    all_items_available: bool
    stock_checks: list[StockCheckResult]
    unavailable_items: list[StockCheckResult]
