"""Grid browser ViewModel (MVVM), the single owner of browsing state.

Layout, filtering, screen navigation and the remote page cache are plain
objects held here.  Every change arrives through :meth:`handle` as one of the
intents in :mod:`secretgrid.gui.viewmodels.intents`, so the whole state can
be driven and inspected without a rendering surface.

Source calls never run inside :meth:`handle`.  They are wrapped in a
:class:`FetchRequest` carrying a fresh request id and given to the
dispatcher; the outcome comes back later as a ``FetchCompleted`` or
``DetailCompleted`` intent.  Only the most recently issued page request and
detail request are honoured, and a completion with any other id is dropped.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type

from secretgrid.application.dtos import FetchKind, FetchOutcome, FetchRequest
from secretgrid.application.interfaces import CredentialContext, ISource
from secretgrid.application.services.dispatch import FetchDispatcher
from secretgrid.application.services.remote_page_cache import RemotePageCache
from secretgrid.config import (
    CHROME_HEIGHT,
    CHROME_WIDTH,
    DEFAULT_PAGE_SIZE,
    INITIAL_VIEWPORT,
)
from secretgrid.domain.models import GridShape, Item, LayoutConstraints, RemotePage
from secretgrid.domain.services.filtering import apply_filter
from secretgrid.domain.services.layout import compute_for
from secretgrid.domain.services.navigation import NavigationState
from secretgrid.errors import FetchError, SecretGridError, SourceUnavailableError, UnknownIntentError
from secretgrid.errors.handler import ErrorHandler, ErrorSeverity
from secretgrid.events.bus import EventBus
from secretgrid.events.grid_events import (
    CacheRefreshedEvent,
    ContextSelectedEvent,
    RemotePageLoadedEvent,
)
from secretgrid.gui.viewmodels import intents
from secretgrid.gui.viewmodels.base import BaseViewModel
from secretgrid.gui.viewmodels.signal import ObservableProperty, Signal

LOGGER = logging.getLogger(__name__)

SourceFactory = Callable[[CredentialContext], ISource]


class Screen(str, Enum):
    LIST = "list"
    DETAIL = "detail"


class _PageRequestKind(str, Enum):
    REFRESH = "refresh"
    ADVANCE = "advance"


class GridBrowserViewModel(BaseViewModel):
    """Browse a token-paged secret list in a viewport-sized grid."""

    def __init__(
        self,
        source_factory: SourceFactory,
        dispatcher: FetchDispatcher,
        event_bus: EventBus,
        *,
        context: Optional[CredentialContext] = None,
        constraints: Optional[LayoutConstraints] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        chrome: Tuple[int, int] = (CHROME_WIDTH, CHROME_HEIGHT),
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        super().__init__()
        self._source_factory = source_factory
        self._dispatcher = dispatcher
        self._event_bus = event_bus
        self._context = context or CredentialContext()
        self._constraints = constraints or LayoutConstraints()
        self._page_size = page_size
        self._chrome = chrome
        self._source: Optional[ISource] = None

        self._cache = RemotePageCache()
        self._navigation = NavigationState(compute_for(*INITIAL_VIEWPORT, self._constraints))
        self._query = ""
        self._filtering = False
        self._detail_item: Optional[Item] = None

        self._request_seq = 0
        self._page_in_flight: Optional[int] = None
        self._page_request_kind: Optional[_PageRequestKind] = None
        self._detail_in_flight: Optional[int] = None

        # Observable properties
        self.loading = ObservableProperty(False)
        self.error_message = ObservableProperty("")
        self.status_message = ObservableProperty("")
        self.screen = ObservableProperty(Screen.LIST)
        self.detail_value = ObservableProperty(None)

        # Signals
        self.state_changed = Signal()
        self.context_changed = Signal()  # emits (CredentialContext)

        self._errors = error_handler or ErrorHandler(LOGGER, event_bus)
        self._errors.register_ui_callback(self._show_error)

        self._handlers: Dict[Type, Callable[[Any], None]] = {
            intents.Resize: self._on_resize,
            intents.MoveUp: self._on_move_up,
            intents.MoveDown: self._on_move_down,
            intents.MoveLeft: self._on_move_left,
            intents.MoveRight: self._on_move_right,
            intents.NextScreenPage: self._on_next_screen_page,
            intents.PrevScreenPage: self._on_prev_screen_page,
            intents.EnterFilterMode: self._on_enter_filter_mode,
            intents.FilterChar: self._on_filter_char,
            intents.FilterBackspace: self._on_filter_backspace,
            intents.ExitFilterMode: self._on_exit_filter_mode,
            intents.AcceptFilter: self._on_accept_filter,
            intents.NextRemotePage: self._on_next_remote_page,
            intents.PrevRemotePage: self._on_prev_remote_page,
            intents.Refresh: self._on_refresh,
            intents.FetchCompleted: self._on_fetch_completed,
            intents.OpenDetail: self._on_open_detail,
            intents.CloseDetail: self._on_close_detail,
            intents.LoadDetail: self._on_load_detail,
            intents.DetailCompleted: self._on_detail_completed,
            intents.SwitchContext: self._on_switch_context,
            intents.ClearStatus: self._on_clear_status,
        }
        missing = set(intents.ALL_INTENTS) - set(self._handlers)
        if missing:
            names = ", ".join(sorted(cls.__name__ for cls in missing))
            raise UnknownIntentError(f"No handler registered for: {names}")

        self.subscribe_event(event_bus, ContextSelectedEvent, self._on_context_selected)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Build the source for the current context and fetch the first page."""
        self.handle(intents.SwitchContext(self._context))

    def handle(self, intent: intents.GridIntent) -> None:
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise UnknownIntentError(f"Unsupported intent: {intent!r}")
        handler(intent)
        self.state_changed.emit()

    def notify(self, message: str) -> None:
        """Show a transient status line until ``ClearStatus`` arrives."""
        self.status_message.value = message

    # ------------------------------------------------------------------
    # Read-only view of the state
    # ------------------------------------------------------------------

    @property
    def context(self) -> CredentialContext:
        return self._context

    @property
    def cache(self) -> RemotePageCache:
        return self._cache

    @property
    def navigation(self) -> NavigationState:
        return self._navigation

    @property
    def shape(self) -> GridShape:
        return self._navigation.shape

    @property
    def constraints(self) -> LayoutConstraints:
        return self._constraints

    @property
    def page_request_in_flight(self) -> Optional[int]:
        return self._page_in_flight

    @property
    def detail_item(self) -> Optional[Item]:
        return self._detail_item

    def visible_items(self) -> Tuple[Item, ...]:
        return self._navigation.visible_items()

    def selected(self) -> Optional[Item]:
        return self._navigation.selected_item()

    def page_indicator(self) -> Tuple[int, int]:
        return self._navigation.page_indicator()

    def remote_page_indicator(self) -> Tuple[int, int]:
        """``(current remote page number, remote pages cached so far)``."""
        if self._cache.is_empty:
            return (0, 0)
        return (self._cache.current_index + 1, len(self._cache))

    def has_more(self) -> bool:
        return self._cache.has_next()

    def has_previous(self) -> bool:
        return self._cache.has_previous()

    def is_filtering(self) -> bool:
        return self._filtering

    def filter_query(self) -> str:
        return self._query

    # ------------------------------------------------------------------
    # Layout and navigation
    # ------------------------------------------------------------------

    def _on_resize(self, intent: intents.Resize) -> None:
        chrome_width, chrome_height = self._chrome
        shape = compute_for(
            intent.width - chrome_width,
            intent.height - chrome_height,
            self._constraints,
        )
        self._navigation.set_shape(shape)

    def _on_move_up(self, _intent: intents.MoveUp) -> None:
        if self.screen.value is Screen.LIST:
            self._navigation.move_up()

    def _on_move_down(self, _intent: intents.MoveDown) -> None:
        if self.screen.value is Screen.LIST:
            self._navigation.move_down()

    def _on_move_left(self, _intent: intents.MoveLeft) -> None:
        if self.screen.value is Screen.LIST:
            self._navigation.move_left()

    def _on_move_right(self, _intent: intents.MoveRight) -> None:
        if self.screen.value is Screen.LIST:
            self._navigation.move_right()

    def _on_next_screen_page(self, _intent: intents.NextScreenPage) -> None:
        if self.screen.value is Screen.LIST:
            self._navigation.next_screen_page()

    def _on_prev_screen_page(self, _intent: intents.PrevScreenPage) -> None:
        if self.screen.value is Screen.LIST:
            self._navigation.prev_screen_page()

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def _on_enter_filter_mode(self, _intent: intents.EnterFilterMode) -> None:
        if self.screen.value is Screen.LIST:
            self._filtering = True

    def _on_filter_char(self, intent: intents.FilterChar) -> None:
        if not self._filtering or len(intent.char) != 1:
            return
        self._set_query(self._query + intent.char)

    def _on_filter_backspace(self, _intent: intents.FilterBackspace) -> None:
        if self._filtering and self._query:
            self._set_query(self._query[:-1])

    def _on_exit_filter_mode(self, _intent: intents.ExitFilterMode) -> None:
        if not (self._filtering or self._query):
            return
        self._filtering = False
        self._set_query("")

    def _on_accept_filter(self, _intent: intents.AcceptFilter) -> None:
        self._filtering = False

    def _set_query(self, query: str) -> None:
        self._query = query
        self._reload_items()

    def _reload_items(self) -> None:
        # Always filter the unfiltered page; never the previous result.
        items = () if self._cache.is_empty else self._cache.current_page().items
        self._navigation.set_items(apply_filter(items, self._query))

    # ------------------------------------------------------------------
    # Remote pages
    # ------------------------------------------------------------------

    def _on_refresh(self, _intent: intents.Refresh) -> None:
        source = self._source
        if source is None:
            self._errors.handle(
                SourceUnavailableError("Source client not initialized"),
                message="Failed to load secrets: source client not initialized",
            )
            return
        if self._page_in_flight is not None:
            LOGGER.debug("Refresh supersedes page request %d", self._page_in_flight)
        self._cache.clear()
        self._reload_items()
        page_size = self._page_size
        self._issue_page_request(
            _PageRequestKind.REFRESH,
            lambda: source.list_page(None, page_size),
        )

    def _on_next_remote_page(self, _intent: intents.NextRemotePage) -> None:
        if self._page_in_flight is not None:
            LOGGER.debug("Ignoring next page while request %d is in flight", self._page_in_flight)
            return
        if self._cache.step_forward() is not None:
            self._show_current_page(from_cache=True)
            return
        token = self._cache.pending_token()
        if token is None:
            return
        source = self._source
        if source is None:
            self._errors.handle(
                SourceUnavailableError("Source client not initialized"),
                message="Failed to load secrets: source client not initialized",
            )
            return
        page_size = self._page_size
        self._issue_page_request(
            _PageRequestKind.ADVANCE,
            lambda: source.list_page(token, page_size),
        )

    def _on_prev_remote_page(self, _intent: intents.PrevRemotePage) -> None:
        # Appending a fetched page requires standing on the last cached page.
        if self._page_in_flight is not None:
            LOGGER.debug("Ignoring previous page while request %d is in flight", self._page_in_flight)
            return
        if not self._cache.has_previous():
            return
        self._cache.retreat()
        self._show_current_page(from_cache=True)

    def _on_fetch_completed(self, intent: intents.FetchCompleted) -> None:
        if intent.request_id != self._page_in_flight:
            LOGGER.debug(
                "Discarding stale page response %d (latest is %s)",
                intent.request_id,
                self._page_in_flight,
            )
            return
        kind = self._page_request_kind
        self._page_in_flight = None
        self._page_request_kind = None
        self._sync_loading()

        page = intent.page
        if intent.error is not None or page is None:
            error = intent.error or FetchError("source returned no page")
            if not isinstance(error, FetchError):
                error = FetchError(str(error))
            self._errors.handle(
                error,
                ErrorSeverity.ERROR,
                context={"request_id": intent.request_id, "kind": kind.value if kind else None},
                message=f"Failed to load secrets: {error}",
            )
            return

        self._cache.append(page)
        self.error_message.value = ""
        if kind is _PageRequestKind.REFRESH:
            LOGGER.info("Loaded first page with %d secrets", len(page))
            self._event_bus.publish(
                CacheRefreshedEvent(item_count=len(page), has_more=self._cache.has_next())
            )
            self.notify(f"Loaded {len(page)} secrets")
        else:
            self.notify(f"Loaded remote page {self._cache.current_index + 1}")
        self._show_current_page(from_cache=False)

    def _show_current_page(self, from_cache: bool) -> None:
        self._reload_items()
        self._event_bus.publish(
            RemotePageLoadedEvent(
                page_index=self._cache.current_index,
                item_count=len(self._cache.current_page()),
                has_more=self._cache.has_next(),
                from_cache=from_cache,
            )
        )

    def _issue_page_request(self, kind: _PageRequestKind, call: Callable[[], RemotePage]) -> None:
        request_id = self._next_request_id()
        self._page_in_flight = request_id
        self._page_request_kind = kind
        self._sync_loading()
        LOGGER.debug("Dispatching %s request %d", kind.value, request_id)
        self._dispatcher.submit(FetchRequest(request_id, FetchKind.PAGE, call, self._deliver))

    # ------------------------------------------------------------------
    # Detail screen
    # ------------------------------------------------------------------

    def _on_open_detail(self, _intent: intents.OpenDetail) -> None:
        if self.screen.value is not Screen.LIST:
            return
        item = self._navigation.selected_item()
        if item is None:
            return
        self._detail_item = item
        self.detail_value.value = None
        self.screen.value = Screen.DETAIL

    def _on_close_detail(self, _intent: intents.CloseDetail) -> None:
        if self.screen.value is not Screen.DETAIL:
            return
        self._detail_item = None
        self._detail_in_flight = None
        self.detail_value.value = None
        self._sync_loading()
        self.screen.value = Screen.LIST

    def _on_load_detail(self, _intent: intents.LoadDetail) -> None:
        item = self._detail_item
        if self.screen.value is not Screen.DETAIL or item is None:
            return
        if self.detail_value.value is not None or self._detail_in_flight is not None:
            return
        source = self._source
        if source is None:
            self._errors.handle(
                SourceUnavailableError("Source client not initialized"),
                message="Failed to load secret value: source client not initialized",
            )
            return
        request_id = self._next_request_id()
        self._detail_in_flight = request_id
        self._sync_loading()
        self._dispatcher.submit(
            FetchRequest(request_id, FetchKind.DETAIL, lambda: source.get_item_detail(item.id), self._deliver)
        )

    def _on_detail_completed(self, intent: intents.DetailCompleted) -> None:
        if intent.request_id != self._detail_in_flight:
            LOGGER.debug("Discarding stale detail response %d", intent.request_id)
            return
        self._detail_in_flight = None
        self._sync_loading()
        if intent.error is not None:
            error = intent.error if isinstance(intent.error, FetchError) else FetchError(str(intent.error))
            self._errors.handle(
                error,
                context={"request_id": intent.request_id},
                message=f"Failed to load secret value: {error}",
            )
            return
        self.detail_value.value = intent.value
        self.error_message.value = ""
        self.notify("Secret value loaded")

    # ------------------------------------------------------------------
    # Context and status
    # ------------------------------------------------------------------

    def _on_switch_context(self, intent: intents.SwitchContext) -> None:
        try:
            source = self._source_factory(intent.context)
        except Exception as exc:
            error = exc if isinstance(exc, SecretGridError) else SourceUnavailableError(str(exc))
            self._errors.handle(
                error,
                context={"profile": intent.context.profile, "region": intent.context.region},
                message=f"Failed to initialize source client: {exc}",
            )
            return
        self._source = source
        self._context = intent.context
        self.context_changed.emit(intent.context)
        self._on_refresh(intents.Refresh())

    def _on_context_selected(self, event: ContextSelectedEvent) -> None:
        self.handle(intents.SwitchContext(CredentialContext(profile=event.profile, region=event.region)))

    def _on_clear_status(self, _intent: intents.ClearStatus) -> None:
        self.status_message.value = ""

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _next_request_id(self) -> int:
        self._request_seq += 1
        return self._request_seq

    def _deliver(self, outcome: FetchOutcome) -> None:
        if self.disposed:
            return
        if outcome.kind is FetchKind.PAGE:
            self.handle(intents.FetchCompleted(outcome.request_id, page=outcome.value, error=outcome.error))
        else:
            self.handle(intents.DetailCompleted(outcome.request_id, value=outcome.value, error=outcome.error))

    def _sync_loading(self) -> None:
        self.loading.value = self._page_in_flight is not None or self._detail_in_flight is not None

    def _show_error(self, message: str, _severity: ErrorSeverity) -> None:
        self.error_message.value = message


__all__ = ["GridBrowserViewModel", "Screen", "SourceFactory"]
