"""Access to the per-variant stock counters.

Every function runs on the caller's session so stock changes commit or roll
back together with the cart line they belong to.
"""
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.orm.product import Product
from storefront.models.orm.product_variant import ProductVariant


async def find_variant(
    db: AsyncSession, product_id: UUID, size: str, color: str, *, for_update: bool = False
) -> ProductVariant | None:
    stmt = select(ProductVariant).where(
        ProductVariant.product_id == product_id,
        ProductVariant.size == size,
        ProductVariant.color == color,
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_by_id(
    db: AsyncSession, variant_id: UUID, *, for_update: bool = False
) -> ProductVariant | None:
    stmt = select(ProductVariant).where(ProductVariant.id == variant_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def decrement_stock(db: AsyncSession, variant_id: UUID, amount: int) -> int | None:
    """Take ``amount`` off the shelf. Returns the new stock, or None if short.

    The ``stock >= amount`` guard is evaluated by the database in the same
    statement as the write, so two writers can never both succeed on the last
    units.
    """
    result = await db.execute(
        update(ProductVariant)
        .where(ProductVariant.id == variant_id, ProductVariant.stock >= amount)
        .values(stock=ProductVariant.stock - amount)
        .returning(ProductVariant.stock)
    )
    return result.scalar_one_or_none()


async def increment_stock(db: AsyncSession, variant_id: UUID, amount: int) -> int:
    result = await db.execute(
        update(ProductVariant)
        .where(ProductVariant.id == variant_id)
        .values(stock=ProductVariant.stock + amount)
        .returning(ProductVariant.stock)
    )
    return result.scalar_one()


async def set_stock(db: AsyncSession, variant: ProductVariant, stock: int) -> ProductVariant:
    variant.stock = stock
    await db.flush()
    return variant


async def list_for_product(db: AsyncSession, product_id: UUID) -> list[ProductVariant]:
    result = await db.execute(
        select(ProductVariant)
        .where(ProductVariant.product_id == product_id)
        .order_by(ProductVariant.color, ProductVariant.size)
    )
    return list(result.scalars().all())


async def list_low_stock(
    db: AsyncSession, threshold: int
) -> list[tuple[ProductVariant, Product]]:
    result = await db.execute(
        select(ProductVariant, Product)
        .join(Product, ProductVariant.product_id == Product.id)
        .where(ProductVariant.stock <= threshold)
        .order_by(ProductVariant.stock.asc(), Product.name)
    )
    return [(variant, product) for variant, product in result.all()]
