from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from secretgrid.config import (
    CELL_SPACING,
    DEFAULT_CELL_HEIGHT,
    MAX_CELL_WIDTH,
    MIN_CELL_WIDTH,
)


@dataclass(frozen=True)
class Item:
    """One secret as listed by the remote source.

    ``id`` is the opaque identity used for detail lookups (an ARN for a
    cloud secrets store); ``name`` is what the grid displays and filters on.
    """

    id: str
    name: str
    description: Optional[str] = None
    last_modified: Optional[datetime] = None
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the tag mapping as well so the item is immutable end to end.
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))

    def __hash__(self) -> int:
        return hash((self.id, self.name))


@dataclass(frozen=True)
class RemotePage:
    """A batch of items plus the token needed to fetch the batch after it."""

    items: Tuple[Item, ...] = ()
    continuation_token: Optional[Any] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def has_continuation(self) -> bool:
        return self.continuation_token is not None

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class LayoutConstraints:
    min_cell_width: int = MIN_CELL_WIDTH
    max_cell_width: int = MAX_CELL_WIDTH
    cell_height: int = DEFAULT_CELL_HEIGHT
    spacing: int = CELL_SPACING


@dataclass(frozen=True)
class GridShape:
    columns: int = 1
    rows: int = 1
    cell_width: int = MIN_CELL_WIDTH

    @property
    def capacity(self) -> int:
        return self.columns * self.rows
