"""History of remotely fetched pages, replayed instead of re-fetched.

Pages are appended in fetch order and never inserted mid-sequence, so index
``n`` always holds the page reached by following ``n`` continuation tokens
from the start.  Moving back and forth across visited pages is free; only
stepping past the last cached page calls the source.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from secretgrid.domain.models import RemotePage
from secretgrid.errors import EmptyCacheError, FetchError

LOGGER = logging.getLogger(__name__)

FetchFn = Callable[[Optional[Any]], RemotePage]


class RemotePageCache:
    """Stateful remote-page history.

    The synchronous :meth:`advance` / :meth:`refresh` pair drives a fetch
    function directly.  Callers that fetch asynchronously use the split
    primitives instead: :meth:`step_forward` for cached pages,
    :meth:`pending_token` to learn what to fetch, and :meth:`append` once the
    response arrives.
    """

    def __init__(self) -> None:
        self._pages: List[RemotePage] = []
        self._current_index: int = 0

    # -- properties --------------------------------------------------------

    @property
    def pages(self) -> Tuple[RemotePage, ...]:
        return tuple(self._pages)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def is_empty(self) -> bool:
        return not self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def current_page(self) -> RemotePage:
        if not self._pages:
            raise EmptyCacheError("No remote page has been fetched yet")
        return self._pages[self._current_index]

    def has_next(self) -> bool:
        if not self._pages:
            return False
        if self._current_index + 1 < len(self._pages):
            return True
        return self._pages[self._current_index].has_continuation

    def has_previous(self) -> bool:
        return self._current_index > 0

    # -- synchronous API ---------------------------------------------------

    def advance(self, fetch_fn: FetchFn) -> Optional[RemotePage]:
        """Move to the next page, fetching it only when it is not cached.

        Returns ``None`` without calling *fetch_fn* when there is no next
        page.  A failed fetch raises :class:`FetchError` and leaves the
        cache exactly as it was.
        """
        cached = self.step_forward()
        if cached is not None:
            return cached

        token = self.pending_token()
        if token is None:
            return None

        page = self._call(fetch_fn, token)
        self.append(page)
        return page

    def retreat(self) -> Optional[RemotePage]:
        """Step back one page; never fetches."""
        if not self._pages:
            return None
        if self._current_index > 0:
            self._current_index -= 1
        return self._pages[self._current_index]

    def refresh(self, fetch_fn: FetchFn) -> RemotePage:
        """Drop every cached page and fetch the first one again.

        On failure the cache stays empty; there is no current page until a
        later refresh succeeds.
        """
        self.clear()
        page = self._call(fetch_fn, None)
        self._pages.append(page)
        LOGGER.info("Remote cache refreshed with %d items", len(page))
        return page

    # -- split primitives for asynchronous callers --------------------------

    def step_forward(self) -> Optional[RemotePage]:
        """Move to the next page if it is already cached."""
        if self._current_index + 1 < len(self._pages):
            self._current_index += 1
            LOGGER.debug("Replaying cached remote page %d", self._current_index)
            return self._pages[self._current_index]
        return None

    def pending_token(self) -> Optional[Any]:
        """Token a fetch would need to reach the next page, if one is needed."""
        if not self._pages or self._current_index + 1 < len(self._pages):
            return None
        return self._pages[self._current_index].continuation_token

    def append(self, page: RemotePage) -> None:
        """Record *page* as the successor of the current page and move to it.

        The first page of an empty cache is installed at index 0.
        """
        if not self._pages:
            self._pages.append(page)
            self._current_index = 0
            return
        if self._current_index != len(self._pages) - 1:
            raise ValueError(
                "Pages can only be appended while positioned on the last cached page"
            )
        self._pages.append(page)
        self._current_index += 1

    def clear(self) -> None:
        self._pages.clear()
        self._current_index = 0

    # -- internal ----------------------------------------------------------

    @staticmethod
    def _call(fetch_fn: FetchFn, token: Optional[Any]) -> RemotePage:
        try:
            return fetch_fn(token)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(str(exc)) from exc
