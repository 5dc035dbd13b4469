"""Clear the browser status line a short while after it is set."""

from __future__ import annotations

from PySide6.QtCore import QObject, QTimer

from ...config import STATUS_CLEAR_DELAY_MS
from ..viewmodels import intents
from ..viewmodels.grid_browser_viewmodel import GridBrowserViewModel


class StatusClearTimer(QObject):
    """Send ``ClearStatus`` to *viewmodel* once a status message has aged.

    Every new non-empty message restarts the countdown, so only the latest
    message is shown for the full delay.
    """

    def __init__(
        self,
        viewmodel: GridBrowserViewModel,
        delay_ms: int = STATUS_CLEAR_DELAY_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._viewmodel = viewmodel
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._on_timeout)
        viewmodel.status_message.changed.connect(self._on_status_changed)

    @property
    def timer(self) -> QTimer:
        return self._timer

    def _on_status_changed(self, message: str, _old: str) -> None:
        if message:
            self._timer.start()
        else:
            self._timer.stop()

    def _on_timeout(self) -> None:
        if not self._viewmodel.disposed:
            self._viewmodel.handle(intents.ClearStatus())


__all__ = ["StatusClearTimer"]
