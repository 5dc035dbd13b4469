"""Dispatchers that run source calls and hand the outcome back to the owner.

The controller never calls the source itself.  It wraps each call in a
:class:`FetchRequest` and submits it here; how and when the call runs is the
dispatcher's business.  The Qt thread-pool dispatcher lives in
``secretgrid.gui.ui.tasks``.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Protocol

from secretgrid.application.dtos import FetchRequest

LOGGER = logging.getLogger(__name__)


class FetchDispatcher(Protocol):
    def submit(self, request: FetchRequest) -> None: ...


class ImmediateDispatcher:
    """Run every request inline and deliver before ``submit`` returns."""

    def submit(self, request: FetchRequest) -> None:
        LOGGER.debug("Running %s request %d inline", request.kind.value, request.request_id)
        request.deliver(request.execute())


class QueuedDispatcher:
    """Hold requests until the owner pumps them.

    Useful for cooperative loops and for exercising out-of-order completion:
    :meth:`run_next` completes the oldest request, :meth:`run_latest` the
    newest, and :meth:`drain` everything in submission order.
    """

    def __init__(self) -> None:
        self._pending: Deque[FetchRequest] = deque()
        self.submitted = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, request: FetchRequest) -> None:
        self._pending.append(request)
        self.submitted += 1

    def run_next(self) -> bool:
        if not self._pending:
            return False
        request = self._pending.popleft()
        request.deliver(request.execute())
        return True

    def run_latest(self) -> bool:
        if not self._pending:
            return False
        request = self._pending.pop()
        request.deliver(request.execute())
        return True

    def drain(self) -> int:
        count = 0
        while self.run_next():
            count += 1
        return count


__all__ = ["FetchDispatcher", "ImmediateDispatcher", "QueuedDispatcher"]
