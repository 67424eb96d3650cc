from storefront.models.orm.base import Base
from storefront.models.orm.cart_item import CartItem
from storefront.models.orm.product import Product
from storefront.models.orm.product_variant import ProductVariant
from storefront.models.orm.user import User

__all__ = ["Base", "CartItem", "Product", "ProductVariant", "User"]
