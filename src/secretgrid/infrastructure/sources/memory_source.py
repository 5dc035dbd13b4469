"""Token-paged source backed by an in-memory list of items."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional

from secretgrid.application.interfaces import CredentialContext, ISource
from secretgrid.config import DEFAULT_PAGE_SIZE
from secretgrid.domain.models import Item, RemotePage
from secretgrid.errors import FetchError

LOGGER = logging.getLogger(__name__)


class InMemorySource(ISource):
    """Serve *items* in pages, using the next offset as continuation token.

    Tokens are opaque strings to callers.  ``list_calls`` records the token
    of every ``list_page`` call so tests can assert how often the source was
    hit, and :meth:`fail_next` queues errors for upcoming calls.
    """

    def __init__(
        self,
        items: Iterable[Item] = (),
        details: Optional[Mapping[str, str]] = None,
        context: Optional[CredentialContext] = None,
    ) -> None:
        self._items: List[Item] = list(items)
        self._details: Dict[str, str] = dict(details or {})
        self.context = context or CredentialContext()
        self.list_calls: List[Optional[Any]] = []
        self.detail_calls: List[str] = []
        self._failures: Deque[Exception] = deque()

    @property
    def items(self) -> List[Item]:
        return list(self._items)

    def fail_next(self, error: Optional[Exception] = None, times: int = 1) -> None:
        for _ in range(times):
            self._failures.append(error or FetchError("source unavailable"))

    def list_page(self, continuation_token: Optional[Any], page_size: int = DEFAULT_PAGE_SIZE) -> RemotePage:
        self.list_calls.append(continuation_token)
        self._raise_pending_failure()

        offset = self._decode_token(continuation_token)
        size = max(1, page_size)
        chunk = self._items[offset:offset + size]
        next_offset = offset + size
        next_token = str(next_offset) if next_offset < len(self._items) else None
        LOGGER.debug(
            "Listing %d items from offset %d (next token %s)", len(chunk), offset, next_token
        )
        return RemotePage(items=tuple(chunk), continuation_token=next_token)

    def get_item_detail(self, item_id: str) -> str:
        self.detail_calls.append(item_id)
        self._raise_pending_failure()
        try:
            return self._details[item_id]
        except KeyError:
            raise FetchError(f"secret {item_id!r} has no value") from None

    # -- internal ----------------------------------------------------------

    def _raise_pending_failure(self) -> None:
        if self._failures:
            raise self._failures.popleft()

    def _decode_token(self, token: Optional[Any]) -> int:
        if token is None:
            return 0
        try:
            offset = int(token)
        except (TypeError, ValueError):
            raise FetchError(f"invalid continuation token {token!r}") from None
        if offset < 0 or offset > len(self._items):
            raise FetchError(f"continuation token {token!r} is out of range")
        return offset
