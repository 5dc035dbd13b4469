from .bus import Event, EventBus, Subscription
from .grid_events import (
    CacheRefreshedEvent,
    ContextSelectedEvent,
    RemotePageLoadedEvent,
)

__all__ = [
    "CacheRefreshedEvent",
    "ContextSelectedEvent",
    "Event",
    "EventBus",
    "RemotePageLoadedEvent",
    "Subscription",
]
