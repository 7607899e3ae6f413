# backend/modules/orders/services/order_feed.py

"""
Live order feed.

Every committed order write is published here as validated snapshots.
Each subscriber gets its own OrderSubscription: an async iterator that
keeps a local projection (order id -> latest snapshot) of the orders
matching its filter and yields the whole matching set after every
relevant change.

The feed is an ordinary object handed to the store and to whoever wants
to subscribe; there is no module-level registry.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..enums.order_enums import OPEN_ORDER_STATUSES, OrderStatus
from ..schemas.order_schemas import OrderRead

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass(frozen=True)
class OrderFilter:
    restaurant_id: int
    statuses: Optional[Tuple[OrderStatus, ...]] = None
    order_ids: Optional[FrozenSet[int]] = None

    @property
    def is_bounded(self) -> bool:
        """True when only open or explicitly listed orders can match"""
        if self.order_ids is not None:
            return True
        return self.statuses is not None and all(
            status in OPEN_ORDER_STATUSES for status in self.statuses
        )

    def matches(self, order: OrderRead) -> bool:
        if order.restaurant_id != self.restaurant_id:
            return False
        if self.statuses is not None and order.status not in self.statuses:
            return False
        if self.order_ids is not None and order.id not in self.order_ids:
            return False
        return True


class OrderSubscription:
    """
    Live stream of the order set matching one filter.

    The first iteration yields the initial set immediately; every later
    iteration waits for a change and yields the updated set, oldest order
    first. Changes that arrive while the consumer is busy are coalesced
    into a single update.
    """

    def __init__(self, feed: "OrderFeed", order_filter: OrderFilter):
        self.feed = feed
        self.filter = order_filter
        self._projection: Dict[int, OrderRead] = {}
        self._queue: asyncio.Queue = asyncio.Queue()
        self._initial_sent = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> List[OrderRead]:
        return sorted(self._projection.values(), key=lambda o: (o.created_at, o.id))

    def seed(self, orders: Iterable[OrderRead]) -> None:
        for order in orders:
            if self.filter.matches(order):
                self._projection[order.id] = order

    def apply(self, orders: Iterable[OrderRead], force: bool = False) -> bool:
        """Fold changed snapshots into the projection; wake the consumer if relevant"""
        if self._closed:
            return False

        changed = force
        for order in orders:
            if self.filter.matches(order):
                current = self._projection.get(order.id)
                # Never go backwards if publishes race
                if current is None or current.version <= order.version:
                    self._projection[order.id] = order
                    changed = True
            elif order.id in self._projection:
                del self._projection[order.id]
                changed = True

        if changed:
            self._queue.put_nowait(True)
        return changed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.feed.discard(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[OrderRead]:
        if not self._initial_sent:
            self._initial_sent = True
            return self.snapshot()

        if self._closed and self._queue.empty():
            raise StopAsyncIteration

        token = await self._queue.get()
        if token is _CLOSED:
            raise StopAsyncIteration

        # Coalesce anything else already queued
        while not self._queue.empty():
            if self._queue.get_nowait() is _CLOSED:
                break
        return self.snapshot()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class OrderFeed:
    """Fan-out of committed order snapshots to open subscriptions"""

    def __init__(self):
        self._subscriptions: Set[OrderSubscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def open(
        self, order_filter: OrderFilter, initial: Iterable[OrderRead] = ()
    ) -> OrderSubscription:
        subscription = OrderSubscription(self, order_filter)
        subscription.seed(initial)
        self._subscriptions.add(subscription)
        logger.debug(
            f"Subscription opened for restaurant {order_filter.restaurant_id} "
            f"({len(self._subscriptions)} active)"
        )
        return subscription

    def discard(self, subscription: OrderSubscription) -> None:
        self._subscriptions.discard(subscription)

    def publish(self, orders: Iterable[OrderRead]) -> int:
        """Push committed snapshots; returns how many subscriptions were woken"""
        orders = list(orders)
        if not orders:
            return 0
        woken = 0
        for subscription in list(self._subscriptions):
            if subscription.apply(orders):
                woken += 1
        return woken

    def notify(self, restaurant_id: int) -> int:
        """
        Wake every subscription of a restaurant without an order change.

        Used when state derived alongside orders (table overrides) changes.
        """
        woken = 0
        for subscription in list(self._subscriptions):
            if subscription.filter.restaurant_id == restaurant_id:
                subscription.apply((), force=True)
                woken += 1
        return woken

    def close_all(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.close()
