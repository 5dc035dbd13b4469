"""Lifecycle shared by viewmodels: bus subscriptions and outgoing signals."""

from __future__ import annotations

from typing import Callable, List, Type

from secretgrid.events.bus import Event, EventBus, Subscription
from secretgrid.gui.viewmodels.signal import ObservableProperty, Signal


class BaseViewModel:
    """Track what a viewmodel is attached to so :meth:`dispose` can detach it.

    After disposal the viewmodel neither receives bus events nor notifies
    views; late callbacks (such as fetch completions) should check
    :attr:`disposed` and bail out.
    """

    def __init__(self) -> None:
        self._bus_subscriptions: List[Subscription] = []
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe_event(
        self,
        event_bus: EventBus,
        event_type: Type[Event],
        handler: Callable[[Event], None],
    ) -> Subscription:
        subscription = event_bus.subscribe(event_type, handler)
        self._bus_subscriptions.append(subscription)
        return subscription

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        while self._bus_subscriptions:
            self._bus_subscriptions.pop().cancel()
        for attribute in vars(self).values():
            if isinstance(attribute, Signal):
                attribute.disconnect_all()
            elif isinstance(attribute, ObservableProperty):
                attribute.changed.disconnect_all()
