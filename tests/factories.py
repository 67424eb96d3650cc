import asyncio
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

from storefront.models.orm.cart_item import CartItem
from storefront.models.orm.product import Product
from storefront.models.orm.product_variant import ProductVariant
from storefront.models.orm.user import User


def make_user(*, user_id=None, email="user@example.com", role="customer", is_active=True):
    return User(
        id=user_id or uuid.uuid4(),
        email=email,
        display_name="Test User",
        role=role,
        is_active=is_active,
    )


def make_product(*, product_id=None, name="Bias T-shirt Black", price_cents=50000, is_active=True):
    product_id = product_id or uuid.uuid4()
    return Product(
        id=product_id,
        name=name,
        slug=f"{name.lower().replace(' ', '-')}-{product_id.hex[:6]}",
        description="100% cotton",
        category="T-Shirts",
        price_cents=price_cents,
        image_urls=["https://cdn.example.com/shirt.png"],
        is_active=is_active,
    )


def make_variant(*, product_id, size="M", color="Black", stock=5, sku=None):
    return ProductVariant(
        id=uuid.uuid4(),
        product_id=product_id,
        size=size,
        color=color,
        stock=stock,
        sku=sku or f"SKU-{size}-{color}-{uuid.uuid4().hex[:6]}".upper(),
    )


def make_cart_item(*, user_id, product_id, size="M", color="Black", quantity=1, created_at=None):
    return CartItem(
        id=uuid.uuid4(),
        user_id=user_id,
        product_id=product_id,
        size=size,
        color=color,
        quantity=quantity,
        created_at=created_at or datetime.now(timezone.utc),
    )


# ── Test doubles ─────────────────────────────────────────────────────────────


class FakeStore:
    """In-memory stand-in for the repository modules.

    Each repository call yields to the event loop once, like a real database
    round trip would. ``decrement_stock`` checks and writes without yielding in
    between, which is what the guarded UPDATE gives us in PostgreSQL.
    """

    def __init__(self):
        self.users: dict[uuid.UUID, User] = {}
        self.products: dict[uuid.UUID, Product] = {}
        self.variants: dict[uuid.UUID, ProductVariant] = {}
        self.cart_items: dict[uuid.UUID, CartItem] = {}
        self.stock_reads: list[int] = []
        # (product_id, size, color) of every variant read FOR UPDATE, in order.
        self.variant_locks: list[tuple] = []
        # Set to an asyncio.Barrier to force concurrent callers to read
        # variant stock before any of them writes.
        self.read_barrier: asyncio.Barrier | None = None

        self.user_repo = SimpleNamespace(get_by_id=self._get_user)
        self.product_repo = SimpleNamespace(get_by_id=self._get_product)
        self.variant_repo = SimpleNamespace(
            find_variant=self._find_variant,
            get_by_id=self._get_variant,
            decrement_stock=self._decrement_stock,
            increment_stock=self._increment_stock,
            set_stock=self._set_stock,
            list_for_product=self._list_for_product,
            list_low_stock=self._list_low_stock,
        )
        self.cart_repo = SimpleNamespace(
            find=self._find_line,
            get_by_id=self._get_line,
            create=self._create_line,
            update_quantity=self._update_quantity,
            delete_item=self._delete_line,
            delete_for_user=self._delete_for_user,
            list_for_user=self._list_for_user,
            count_quantity=self._count_quantity,
            list_stale=self._list_stale,
        )

    # ── seeding ──

    def add_user(self, **kwargs) -> User:
        user = make_user(**kwargs)
        self.users[user.id] = user
        return user

    def add_product(self, **kwargs) -> Product:
        product = make_product(**kwargs)
        self.products[product.id] = product
        return product

    def add_variant(self, product: Product, **kwargs) -> ProductVariant:
        variant = make_variant(product_id=product.id, **kwargs)
        self.variants[variant.id] = variant
        return variant

    def add_cart_item(self, **kwargs) -> CartItem:
        item = make_cart_item(**kwargs)
        self.cart_items[item.id] = item
        return item

    # ── inspection ──

    def lines_for(self, variant: ProductVariant) -> list[CartItem]:
        return [
            item for item in self.cart_items.values()
            if (item.product_id, item.size, item.color)
            == (variant.product_id, variant.size, variant.color)
        ]

    def reserved(self, variant: ProductVariant) -> int:
        return sum(item.quantity for item in self.lines_for(variant))

    def units(self, variant: ProductVariant) -> int:
        """Shelf stock plus everything held in carts."""
        return variant.stock + self.reserved(variant)

    # ── users / products ──

    async def _get_user(self, db, user_id):
        await asyncio.sleep(0)
        return self.users.get(user_id)

    async def _get_product(self, db, product_id):
        await asyncio.sleep(0)
        return self.products.get(product_id)

    # ── variants ──

    async def _find_variant(self, db, product_id, size, color, *, for_update=False):
        await asyncio.sleep(0)
        if for_update:
            self.variant_locks.append((product_id, size, color))
        for variant in self.variants.values():
            if (variant.product_id, variant.size, variant.color) == (product_id, size, color):
                self.stock_reads.append(variant.stock)
                if self.read_barrier is not None:
                    await self.read_barrier.wait()
                return variant
        return None

    async def _get_variant(self, db, variant_id, *, for_update=False):
        await asyncio.sleep(0)
        return self.variants.get(variant_id)

    async def _decrement_stock(self, db, variant_id, amount):
        await asyncio.sleep(0)
        variant = self.variants.get(variant_id)
        if variant is None or variant.stock < amount:
            return None
        variant.stock -= amount
        return variant.stock

    async def _increment_stock(self, db, variant_id, amount):
        await asyncio.sleep(0)
        variant = self.variants[variant_id]
        variant.stock += amount
        return variant.stock

    async def _set_stock(self, db, variant, stock):
        variant.stock = stock
        return variant

    async def _list_for_product(self, db, product_id):
        return [v for v in self.variants.values() if v.product_id == product_id]

    async def _list_low_stock(self, db, threshold):
        rows = [
            (v, self.products[v.product_id])
            for v in self.variants.values() if v.stock <= threshold
        ]
        return sorted(rows, key=lambda row: row[0].stock)

    # ── cart lines ──

    async def _find_line(self, db, user_id, product_id, size, color):
        await asyncio.sleep(0)
        for item in self.cart_items.values():
            if (item.user_id, item.product_id, item.size, item.color) == (
                user_id, product_id, size, color
            ):
                return item
        return None

    async def _get_line(self, db, cart_item_id, *, for_update=False):
        await asyncio.sleep(0)
        return self.cart_items.get(cart_item_id)

    async def _create_line(self, db, *, user_id, product_id, size, color, quantity):
        for item in self.cart_items.values():
            if (item.user_id, item.product_id, item.size, item.color) == (
                user_id, product_id, size, color
            ):
                raise RuntimeError("unique constraint uq_cart_user_product_size_color violated")
        item = make_cart_item(
            user_id=user_id, product_id=product_id, size=size, color=color, quantity=quantity,
        )
        self.cart_items[item.id] = item
        return item

    async def _update_quantity(self, db, cart_item, quantity):
        cart_item.quantity = quantity
        return cart_item

    async def _delete_line(self, db, cart_item):
        del self.cart_items[cart_item.id]

    async def _delete_for_user(self, db, user_id, *, only_ids=None):
        doomed = [
            i for i in self.cart_items.values()
            if i.user_id == user_id and (only_ids is None or i.id in only_ids)
        ]
        for item in doomed:
            del self.cart_items[item.id]
        return len(doomed)

    async def _list_for_user(self, db, user_id):
        rows = []
        for item in self.cart_items.values():
            if item.user_id != user_id:
                continue
            variant = next(
                (
                    v for v in self.variants.values()
                    if (v.product_id, v.size, v.color) == (item.product_id, item.size, item.color)
                ),
                None,
            )
            rows.append((item, self.products[item.product_id], variant))
        return sorted(rows, key=lambda row: row[0].created_at, reverse=True)

    async def _count_quantity(self, db, user_id):
        return sum(i.quantity for i in self.cart_items.values() if i.user_id == user_id)

    async def _list_stale(self, db, cutoff):
        return [i for i in self.cart_items.values() if i.created_at < cutoff]
