"""Background tasks and workers."""

from __future__ import annotations

from .page_fetch_worker import FetchWorkerSignals, PageFetchWorker, QtFetchDispatcher

__all__ = ["FetchWorkerSignals", "PageFetchWorker", "QtFetchDispatcher"]
