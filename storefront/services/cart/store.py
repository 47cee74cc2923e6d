"""
Cart Store

Holds the basket for one browsing session and mirrors it to key-value
storage after every mutation, so the cart survives page reloads.

Design:
    - The store owns its lines; callers get copies
    - Storage is injected (any BaseKeyValueStorage)
    - total / item_count are recomputed from the lines on every read
    - Persistence is best-effort: storage failures are logged, never raised

Usage:
    from storefront.services.cart import CartStore
    from storefront.services.storage import get_storage

    cart = CartStore(get_storage())
    line = cart.add_item(catalog_item, restaurant_name="Pappi's Pizza")
    cart.update_quantity(line.line_id, 3)
    print(cart.total, cart.item_count)

Version: 1.0.0
"""

import json
import logging
import uuid
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterator, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from storefront.core.config import get_settings
from storefront.services.cart.images import get_food_image
from storefront.services.storage.base import BaseKeyValueStorage, StorageError

logger = logging.getLogger(__name__)

ImageResolver = Callable[[str], Optional[str]]


def to_price(value: Any) -> Decimal:
    """
    Convert a catalog price (number, numeric string or Decimal) to Decimal.

    Raises:
        ValueError: If the value is not a finite, non-negative number
    """
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid price: {value!r}") from e

    if not price.is_finite():
        raise ValueError(f"Invalid price: {value!r}")
    if price < 0:
        raise ValueError(f"Price must be non-negative, got {price}")
    return price


@dataclass
class CatalogItem:
    """
    A menu item as returned by the catalog.

    Attributes:
        id: Catalog identifier of the menu item
        name: Display name
        price: Unit price (number or numeric string)
        restaurant_id: Restaurant the item belongs to
        image: Catalog image, used when the name lookup finds nothing
    """
    id: str
    name: str
    price: Union[Decimal, float, int, str]
    restaurant_id: str
    image: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CatalogItem":
        """Build from a catalog record (accepts camelCase restaurantId)."""
        if "restaurant_id" in data:
            restaurant_id = data["restaurant_id"]
        else:
            restaurant_id = data["restaurantId"]
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=data["price"],
            restaurant_id=str(restaurant_id),
            image=data.get("image"),
        )


@dataclass
class CartLine:
    """
    One purchasable unit in the basket.

    Attributes:
        line_id: Identifier generated when the line was created
        menu_item_id: Catalog item this line represents
        name: Item name at add-time
        unit_price: Non-negative price per unit
        quantity: Always >= 1 while the line is in a cart
        restaurant_id: Restaurant the item came from
        restaurant_name: Display name of that restaurant
        image: Display image resolved at add-time
    """
    line_id: str
    menu_item_id: str
    name: str
    unit_price: Decimal
    quantity: int
    restaurant_id: str
    restaurant_name: Optional[str] = None
    image: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "line_id": self.line_id,
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "restaurant_id": self.restaurant_id,
            "restaurant_name": self.restaurant_name,
            "image": self.image,
        }


class StoredCartLine(BaseModel):
    """Shape a persisted line record must have to be restored."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    line_id: str = Field(..., min_length=1)
    menu_item_id: str = Field(..., min_length=1)
    name: str
    unit_price: Decimal = Field(..., ge=0, allow_inf_nan=False)
    quantity: int = Field(..., ge=1)
    restaurant_id: str
    restaurant_name: Optional[str] = None
    image: Optional[str] = None

    def to_line(self) -> CartLine:
        return CartLine(**self.model_dump())


_STORED_CART_ADAPTER = TypeAdapter(list[StoredCartLine])


@dataclass
class CartState:
    """
    Snapshot of a cart.

    total and item_count are derived from the lines; there is no other
    source of truth for them.
    """
    lines: tuple[CartLine, ...] = ()
    is_open: bool = False

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "lines": [line.to_dict() for line in self.lines],
            "total": str(self.total),
            "item_count": self.item_count,
            "is_open": self.is_open,
        }


class CartStore:
    """
    Session cart with write-through persistence.

    Attributes:
        storage_key: Key the serialized lines are stored under
        merge_duplicates: When True, adding an item already in the cart
            (same menu item, restaurant and unit price) increments that
            line instead of appending a new one

    Example:
        >>> cart = CartStore(InMemoryStorage())
        >>> line = cart.add_item(CatalogItem("m1", "Pho Bo", "12.50", "r1"))
        >>> cart.update_quantity(line.line_id, 2)
        >>> cart.total
        Decimal('25.00')
    """

    def __init__(
        self,
        storage: BaseKeyValueStorage,
        storage_key: Optional[str] = None,
        image_resolver: ImageResolver = get_food_image,
        merge_duplicates: bool = True,
    ):
        self._storage = storage
        self.storage_key = storage_key or get_settings().cart_storage_key
        self._image_resolver = image_resolver
        self.merge_duplicates = merge_duplicates
        self._is_open = False
        self._lines: list[CartLine] = self._load()

        logger.debug(
            f"CartStore loaded '{self.storage_key}' "
            f"({len(self._lines)} lines, backend={storage.backend_name})"
        )

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _load(self) -> list[CartLine]:
        """Restore lines from storage, discarding malformed content."""
        try:
            raw = self._storage.get_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to read cart from storage: {e}")
            return []

        if raw is None:
            return []

        try:
            records = _STORED_CART_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                f"Discarding malformed cart under '{self.storage_key}' "
                f"({e.error_count()} validation errors)"
            )
            self._reset_storage()
            return []

        return [record.to_line() for record in records]

    def _reset_storage(self) -> None:
        try:
            self._storage.remove_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to reset cart storage: {e}")

    def _persist(self) -> None:
        """Write the full cart. Failures are logged; memory stays authoritative."""
        try:
            payload = json.dumps([line.to_dict() for line in self._lines])
            self._storage.set_item(self.storage_key, payload)
        except (StorageError, TypeError, ValueError) as e:
            logger.error(f"Failed to save cart to storage: {e}")

    # =========================================================================
    # QUERIES
    # =========================================================================

    def _find(self, line_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.line_id == line_id:
                return line
        return None

    @property
    def lines(self) -> tuple[CartLine, ...]:
        """Copies of the current lines, in display order."""
        return tuple(replace(line) for line in self._lines)

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def state(self) -> CartState:
        return CartState(lines=self.lines, is_open=self._is_open)

    def get_line(self, line_id: str) -> Optional[CartLine]:
        line = self._find(line_id)
        return replace(line) if line else None

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_item(
        self,
        item: Union[CatalogItem, Mapping[str, Any]],
        restaurant_name: Optional[str] = None,
        price_override: Optional[Any] = None,
    ) -> CartLine:
        """
        Add one unit of a catalog item.

        Args:
            item: Catalog item (or catalog record mapping)
            restaurant_name: Display name of the item's restaurant
            price_override: Price to charge instead of the catalog price

        Returns:
            A copy of the new or incremented line

        Raises:
            ValueError: If the price is negative or not a number
        """
        if not isinstance(item, CatalogItem):
            item = CatalogItem.from_dict(item)

        unit_price = to_price(item.price if price_override is None else price_override)
        image = self._image_resolver(item.name) or item.image or None

        if self.merge_duplicates:
            for line in self._lines:
                if (line.menu_item_id == item.id
                        and line.restaurant_id == item.restaurant_id
                        and line.unit_price == unit_price):
                    line.quantity += 1
                    line.image = line.image or image
                    logger.debug(f"Cart: {line.name} x{line.quantity}")
                    self._persist()
                    return replace(line)

        line = CartLine(
            line_id=uuid.uuid4().hex,
            menu_item_id=item.id,
            name=item.name,
            unit_price=unit_price,
            quantity=1,
            restaurant_id=item.restaurant_id,
            restaurant_name=restaurant_name,
            image=image,
        )
        self._lines.append(line)
        logger.debug(f"Cart: added {line.name} ({line.line_id})")

        self._persist()
        return replace(line)

    def remove_item(self, line_id: str) -> None:
        """Remove a line. Unknown ids are ignored."""
        remaining = [line for line in self._lines if line.line_id != line_id]
        if len(remaining) == len(self._lines):
            return

        self._lines = remaining
        logger.debug(f"Cart: removed {line_id}")
        self._persist()

    def update_quantity(self, line_id: str, quantity: int) -> None:
        """
        Set a line's quantity.

        A quantity of zero or less removes the line. Unknown ids are ignored.
        """
        quantity = int(quantity)
        if quantity <= 0:
            self.remove_item(line_id)
            return

        line = self._find(line_id)
        if line is None:
            return

        line.quantity = quantity
        self._persist()

    def clear(self) -> None:
        """Empty the cart."""
        self._lines = []
        logger.debug(f"Cart: cleared '{self.storage_key}'")
        self._persist()

    def set_open(self, is_open: bool) -> None:
        """Toggle the cart sidebar flag (not persisted)."""
        self._is_open = bool(is_open)
