"""Background worker that runs one source call off the UI thread."""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Tuple

from PySide6.QtCore import QCoreApplication, QObject, QRunnable, QThreadPool, Signal, Slot

from ....application.dtos import FetchOutcome, FetchRequest
from ....config import FETCH_TIMEOUT_MS
from ....errors import FetchError

LOGGER = logging.getLogger(__name__)


class FetchWorkerSignals(QObject):
    """Signal container for :class:`PageFetchWorker` events."""

    finished = Signal(object)  # FetchOutcome

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)


class PageFetchWorker(QRunnable):
    """Execute a :class:`FetchRequest` on a pool thread and emit its outcome."""

    def __init__(self, request: FetchRequest, signals: FetchWorkerSignals) -> None:
        super().__init__()
        self.setAutoDelete(True)
        self._request = request
        self._signals = signals

    @property
    def signals(self) -> FetchWorkerSignals:
        return self._signals

    def run(self) -> None:
        outcome = self._request.execute()
        if outcome.error is not None:
            LOGGER.warning(
                "%s request %d failed: %s",
                self._request.kind.value,
                self._request.request_id,
                outcome.error,
            )
        self._signals.finished.emit(outcome)


class QtFetchDispatcher(QObject):
    """Run fetch requests on a ``QThreadPool``.

    The dispatcher lives on the thread that owns the viewmodel.  Workers emit
    from pool threads, so their ``finished`` signal reaches
    :meth:`_on_finished` through a queued connection and each request's
    ``deliver`` callback runs back on the owning thread.
    """

    def __init__(self, pool: Optional[QThreadPool] = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self._pending: Dict[int, Tuple[FetchRequest, FetchWorkerSignals]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, request: FetchRequest) -> None:
        signals = FetchWorkerSignals()
        signals.finished.connect(self._on_finished)
        # Hold the signals object until delivery so Qt does not collect it.
        self._pending[request.request_id] = (request, signals)
        self._pool.start(PageFetchWorker(request, signals))

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)

    def drain(self, timeout_ms: int = FETCH_TIMEOUT_MS) -> None:
        """Block until every submitted request has been delivered.

        Used by callers without a running event loop, such as the CLI.
        Raises :class:`FetchError` when the pool does not finish in time.
        """
        deadline = time.monotonic() + timeout_ms / 1000
        while self._pending:
            remaining = int((deadline - time.monotonic()) * 1000)
            if remaining <= 0 or not self._pool.waitForDone(remaining):
                raise FetchError(f"{len(self._pending)} request(s) still pending after {timeout_ms} ms")
            QCoreApplication.processEvents()

    @Slot(object)
    def _on_finished(self, outcome: FetchOutcome) -> None:
        entry = self._pending.pop(outcome.request_id, None)
        if entry is None:
            LOGGER.debug("No pending request for outcome %d", outcome.request_id)
            return
        request, signals = entry
        signals.deleteLater()
        request.deliver(outcome)


__all__ = ["FetchWorkerSignals", "PageFetchWorker", "QtFetchDispatcher"]
