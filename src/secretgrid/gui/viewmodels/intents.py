"""The closed set of inputs the grid viewmodel understands.

Every user action, resize and fetch completion reaches the viewmodel as one
of these frozen dataclasses.  ``ALL_INTENTS`` enumerates them so the
viewmodel can verify at construction time that each has a handler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union, get_args

from secretgrid.application.interfaces import CredentialContext
from secretgrid.domain.models import RemotePage


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class MoveUp:
    pass


@dataclass(frozen=True)
class MoveDown:
    pass


@dataclass(frozen=True)
class MoveLeft:
    pass


@dataclass(frozen=True)
class MoveRight:
    pass


@dataclass(frozen=True)
class NextScreenPage:
    pass


@dataclass(frozen=True)
class PrevScreenPage:
    pass


@dataclass(frozen=True)
class EnterFilterMode:
    pass


@dataclass(frozen=True)
class FilterChar:
    char: str


@dataclass(frozen=True)
class FilterBackspace:
    pass


@dataclass(frozen=True)
class ExitFilterMode:
    """Leave filter mode and drop the query."""


@dataclass(frozen=True)
class AcceptFilter:
    """Leave filter mode but keep the query applied."""


@dataclass(frozen=True)
class NextRemotePage:
    pass


@dataclass(frozen=True)
class PrevRemotePage:
    pass


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class FetchCompleted:
    request_id: int
    page: Optional[RemotePage] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class OpenDetail:
    pass


@dataclass(frozen=True)
class CloseDetail:
    pass


@dataclass(frozen=True)
class LoadDetail:
    pass


@dataclass(frozen=True)
class DetailCompleted:
    request_id: int
    value: Optional[Any] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class SwitchContext:
    context: CredentialContext


@dataclass(frozen=True)
class ClearStatus:
    pass


GridIntent = Union[
    Resize,
    MoveUp,
    MoveDown,
    MoveLeft,
    MoveRight,
    NextScreenPage,
    PrevScreenPage,
    EnterFilterMode,
    FilterChar,
    FilterBackspace,
    ExitFilterMode,
    AcceptFilter,
    NextRemotePage,
    PrevRemotePage,
    Refresh,
    FetchCompleted,
    OpenDetail,
    CloseDetail,
    LoadDetail,
    DetailCompleted,
    SwitchContext,
    ClearStatus,
]

ALL_INTENTS = get_args(GridIntent)
