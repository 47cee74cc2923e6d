"""
Cart Module

Session shopping cart with write-through persistence, plus the food image
resolver the cart uses to pick display images.

Usage:
    from storefront.services.cart import CartStore
    from storefront.services.storage import get_storage

    cart = CartStore(get_storage(), storage_key="west-row-kitchen-cart:abc123")
"""

from storefront.services.cart.images import get_food_image, get_all_food_images
from storefront.services.cart.store import (
    CartStore,
    CartLine,
    CartState,
    CatalogItem,
    to_price,
)

__all__ = [
    "CartStore",
    "CartLine",
    "CartState",
    "CatalogItem",
    "to_price",
    "get_food_image",
    "get_all_food_images",
]
