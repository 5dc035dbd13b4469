from __future__ import annotations

from typing import Iterable, Tuple

from secretgrid.domain.models import Item


def apply_filter(items: Iterable[Item], query: str) -> Tuple[Item, ...]:
    """Return the items whose name contains *query*, ignoring case.

    Order is preserved.  An empty query keeps every item.  Always pass the
    unfiltered page here; filtering an already filtered result would make a
    shortened query unable to bring items back.
    """
    items = tuple(items)
    if not query:
        return items
    needle = query.casefold()
    return tuple(item for item in items if needle in item.name.casefold())


__all__ = ["apply_filter"]
