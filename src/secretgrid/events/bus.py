"""Synchronous publish/subscribe bus shared by the controller and its observers.

All browsing state is owned by a single thread, so handlers run inline on
the publishing thread in subscription order.  A failing handler is logged and
skipped; it never interrupts delivery to the remaining subscribers.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, DefaultDict, List, Optional, Type


def _new_id() -> str:
    return uuid.uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class Event:
    """Base class for everything published on the bus."""

    timestamp: datetime = field(default_factory=_utc_now)
    event_id: str = field(default_factory=_new_id)


Handler = Callable[[Event], None]


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`.

    ``cancel()`` is safe to call more than once and from inside a handler.
    """

    event_type: Type[Event]
    handler: Handler
    bus: Optional["EventBus"] = field(default=None, repr=False)
    active: bool = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        if self.bus is not None:
            self.bus.unsubscribe(self)


class EventBus:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._subscriptions: DefaultDict[Type[Event], List[Subscription]] = defaultdict(list)

    def subscribe(self, event_type: Type[Event], handler: Handler) -> Subscription:
        subscription = Subscription(event_type, handler, bus=self)
        self._subscriptions[event_type].append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.active = False
        registered = self._subscriptions.get(subscription.event_type)
        if registered and subscription in registered:
            registered.remove(subscription)

    def publish(self, event: Event) -> None:
        event_type = type(event)
        # Snapshot: handlers may subscribe or cancel while being notified.
        for subscription in tuple(self._subscriptions.get(event_type, ())):
            if not subscription.active:
                continue
            try:
                subscription.handler(event)
            except Exception as exc:
                self._logger.error("Handler failed for %s: %s", event_type.__name__, exc)

    def subscriber_count(self, event_type: Type[Event]) -> int:
        return sum(1 for sub in self._subscriptions.get(event_type, ()) if sub.active)


__all__ = ["Event", "EventBus", "Handler", "Subscription"]
