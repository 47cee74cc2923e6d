"""
                        Services Module

Business logic for the storefront. Provider-backed services follow the
hybrid pattern: a Mock implementation (development) and a Real one
(production), selected by a cached factory.

Services:
    - cart: Session cart with write-through persistence
    - restaurant_status: Open/closed evaluation and periodic monitor
    - delivery: Delivery dispatch (mock, DoorDash)
    - storage: Key-value persistence (memory, locked JSON file)
    - location: Delivery location store
"""

from storefront.services.cart import CartStore
from storefront.services.location import LocationStore

__all__ = ["CartStore", "LocationStore"]
