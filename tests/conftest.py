import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Qt must never try to reach a display server during tests.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from secretgrid.domain.models import Item  # noqa: E402
from secretgrid.events.bus import EventBus  # noqa: E402


def _make_items(count: int, prefix: str = "secret") -> List[Item]:
    return [
        Item(
            id=f"arn:aws:secretsmanager:eu-west-1:123456789012:secret:{prefix}-{index}",
            name=f"{prefix}-{index}",
            last_modified=datetime(2024, 1, 1 + index % 28, tzinfo=timezone.utc),
        )
        for index in range(count)
    ]


@pytest.fixture
def make_items():
    """Factory for items named ``<prefix>-<n>`` with ARN-style ids."""

    return _make_items


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture(scope="session")
def qapp():
    """Provide a ``QCoreApplication`` for tests that need an event loop."""

    pytest.importorskip("PySide6", reason="PySide6 is required", exc_type=ImportError)
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
