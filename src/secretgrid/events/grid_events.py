from dataclasses import dataclass
from typing import Optional

from .bus import Event


@dataclass(kw_only=True)
class RemotePageLoadedEvent(Event):
    page_index: int = 0
    item_count: int = 0
    has_more: bool = False
    from_cache: bool = False


@dataclass(kw_only=True)
class CacheRefreshedEvent(Event):
    item_count: int = 0
    has_more: bool = False


@dataclass(kw_only=True)
class ContextSelectedEvent(Event):
    """Published by profile/region pickers; the grid switches source on it."""

    profile: Optional[str] = None
    region: Optional[str] = None
