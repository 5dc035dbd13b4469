"""Pure Python signals for the grid viewmodel.

``Signal`` calls its slots synchronously on the emitting thread, which is
always the thread that owns the viewmodel.  ``ObservableProperty`` wraps a
value and emits ``changed(new, old)`` whenever the value is replaced by an
unequal one.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List

LOGGER = logging.getLogger(__name__)

Slot = Callable[..., Any]


class Signal:
    """Ordered slot list; a slot that raises is logged and the rest still run."""

    def __init__(self) -> None:
        self._slots: List[Slot] = []

    def connect(self, slot: Slot) -> None:
        if slot in self._slots:
            return
        self._slots.append(slot)

    def disconnect(self, slot: Slot) -> None:
        self._slots.remove(slot)

    def disconnect_all(self) -> None:
        self._slots = []

    def emit(self, *args: Any, **kwargs: Any) -> None:
        # Iterate over a snapshot so slots may disconnect themselves.
        for slot in tuple(self._slots):
            try:
                slot(*args, **kwargs)
            except Exception:
                LOGGER.exception("Slot %r raised while handling a signal", slot)

    @property
    def handler_count(self) -> int:
        return len(self._slots)


class ObservableProperty:
    def __init__(self, initial: Any = None) -> None:
        self._current = initial
        self.changed = Signal()

    @property
    def value(self) -> Any:
        return self._current

    @value.setter
    def value(self, new: Any) -> None:
        old = self._current
        if old == new:
            return
        self._current = new
        self.changed.emit(new, old)
