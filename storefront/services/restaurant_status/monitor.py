"""
Restaurant Status Monitor

Keeps evaluated statuses current for a set of restaurants while a consumer
is alive: evaluates immediately, again whenever an input changes, and then
on a fixed cadence (60s by default) to track day and hour rollover.

The periodic refresh runs as an asyncio task owned by the monitor. It must
be stopped when the consumer goes away; ``async with`` does this.

Usage:
    async with RestaurantStatusMonitor({"r1": status_input}) as monitor:
        print(monitor.statuses["r1"].verdict)

Version: 1.0.0
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Mapping, Optional

from storefront.core.config import get_settings
from storefront.services.restaurant_status.evaluator import (
    RestaurantStatusInput,
    RestaurantStatusResult,
    evaluate_restaurant_status,
)

logger = logging.getLogger(__name__)

StatusCallback = Callable[[dict[str, RestaurantStatusResult]], None]
Clock = Callable[[], datetime]


class RestaurantStatusMonitor:
    """
    Periodic re-evaluation of restaurant statuses.

    Attributes:
        interval_seconds: Seconds between scheduled refreshes
        on_update: Called with all statuses after every refresh
        clock: Returns the instant to evaluate at (None = current time)
    """

    def __init__(
        self,
        restaurants: Optional[Mapping[str, RestaurantStatusInput]] = None,
        interval_seconds: Optional[float] = None,
        on_update: Optional[StatusCallback] = None,
        clock: Optional[Clock] = None,
    ):
        if interval_seconds is None:
            interval_seconds = get_settings().status_refresh_seconds
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval_seconds = interval_seconds
        self.on_update = on_update
        self.clock = clock
        self._restaurants: dict[str, RestaurantStatusInput] = dict(restaurants or {})
        self._statuses: dict[str, RestaurantStatusResult] = {}
        self._task: Optional[asyncio.Task] = None

    @property
    def statuses(self) -> dict[str, RestaurantStatusResult]:
        """Latest result per restaurant id."""
        return dict(self._statuses)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def get_status(self, restaurant_id: str) -> Optional[RestaurantStatusResult]:
        return self._statuses.get(restaurant_id)

    def refresh(self) -> dict[str, RestaurantStatusResult]:
        """Re-evaluate every restaurant now."""
        now = self.clock() if self.clock else None
        self._statuses = {
            restaurant_id: evaluate_restaurant_status(status_input, now=now)
            for restaurant_id, status_input in self._restaurants.items()
        }

        if self.on_update is not None:
            try:
                self.on_update(self.statuses)
            except Exception:
                logger.exception("Status update callback failed")

        return self.statuses

    def update_restaurant(
        self,
        restaurant_id: str,
        status_input: RestaurantStatusInput,
    ) -> RestaurantStatusResult:
        """Replace one restaurant's input and re-evaluate immediately."""
        self._restaurants[restaurant_id] = status_input
        self.refresh()
        return self._statuses[restaurant_id]

    def set_restaurants(
        self,
        restaurants: Mapping[str, RestaurantStatusInput],
    ) -> dict[str, RestaurantStatusResult]:
        """Replace the whole set and re-evaluate immediately."""
        self._restaurants = dict(restaurants)
        return self.refresh()

    def remove_restaurant(self, restaurant_id: str) -> None:
        self._restaurants.pop(restaurant_id, None)
        self._statuses.pop(restaurant_id, None)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.refresh()

    def start(self) -> None:
        """Evaluate now and schedule periodic refreshes. Needs a running loop."""
        if self.is_running:
            return

        self.refresh()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(
            f"Status monitor started "
            f"({len(self._restaurants)} restaurants, every {self.interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Cancel the periodic refresh."""
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Status monitor stopped")

    async def __aenter__(self) -> "RestaurantStatusMonitor":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
