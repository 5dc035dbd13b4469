from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional


class FetchKind(str, Enum):
    PAGE = "page"
    DETAIL = "detail"


@dataclass(frozen=True)
class FetchOutcome:
    request_id: int
    kind: FetchKind
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FetchRequest:
    """A source call plus the callback that must receive its outcome.

    ``call`` may run on any thread.  ``deliver`` must be invoked on the thread
    that owns the controller; dispatchers are responsible for that hop.
    """

    request_id: int
    kind: FetchKind
    call: Callable[[], Any]
    deliver: Callable[[FetchOutcome], None]

    def execute(self) -> FetchOutcome:
        try:
            value = self.call()
        except Exception as exc:
            return FetchOutcome(self.request_id, self.kind, error=exc)
        return FetchOutcome(self.request_id, self.kind, value=value)
