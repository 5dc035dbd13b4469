"""Tests for GridBrowserViewModel, driven purely through intents."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from secretgrid.application.interfaces import CredentialContext
from secretgrid.application.services.dispatch import ImmediateDispatcher, QueuedDispatcher
from secretgrid.domain.models import GridShape, LayoutConstraints, RemotePage
from secretgrid.errors import FetchError, SourceUnavailableError, UnknownIntentError
from secretgrid.errors.handler import ErrorOccurredEvent
from secretgrid.events.grid_events import (
    CacheRefreshedEvent,
    ContextSelectedEvent,
    RemotePageLoadedEvent,
)
from secretgrid.gui.viewmodels import intents
from secretgrid.gui.viewmodels.grid_browser_viewmodel import GridBrowserViewModel, Screen
from secretgrid.infrastructure.sources.memory_source import InMemorySource


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# With zero chrome, Resize(119, 10) yields a 3 x 2 grid (capacity 6).
NO_CHROME = (0, 0)


def _make_viewmodel(source, event_bus, dispatcher=None, page_size=4, factory=None):
    vm = GridBrowserViewModel(
        factory or (lambda _context: source),
        dispatcher or ImmediateDispatcher(),
        event_bus,
        page_size=page_size,
        chrome=NO_CHROME,
    )
    vm.handle(intents.Resize(119, 10))
    return vm


@pytest.fixture
def source(make_items):
    items = make_items(10)
    details = {item.id: f'{{"user": "{item.name}"}}' for item in items}
    return InMemorySource(items, details)


@pytest.fixture
def queued():
    return QueuedDispatcher()


# ---------------------------------------------------------------------------
# Construction and dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_every_intent_has_a_handler(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        for intent_type in intents.ALL_INTENTS:
            assert intent_type in vm._handlers

    def test_unknown_intent_raises(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        with pytest.raises(UnknownIntentError):
            vm.handle(object())

    def test_state_changed_emitted_per_intent(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        listener = Mock()
        vm.state_changed.connect(listener)
        vm.handle(intents.MoveRight())
        listener.assert_called_once_with()

    def test_resize_subtracts_chrome(self, source, event_bus):
        vm = GridBrowserViewModel(lambda _c: source, ImmediateDispatcher(), event_bus, chrome=(6, 10))
        vm.handle(intents.Resize(86, 30))
        assert vm.shape == GridShape(columns=2, rows=4, cell_width=39)

    def test_custom_constraints(self, source, event_bus):
        constraints = LayoutConstraints(min_cell_width=20, max_cell_width=30, cell_height=2, spacing=1)
        vm = GridBrowserViewModel(
            lambda _c: source, ImmediateDispatcher(), event_bus, constraints=constraints, chrome=NO_CHROME
        )
        vm.handle(intents.Resize(62, 9))
        assert vm.shape == GridShape(columns=2, rows=3, cell_width=30)


# ---------------------------------------------------------------------------
# Refresh and first load
# ---------------------------------------------------------------------------


class TestRefresh:
    def test_start_loads_first_page(self, source, event_bus, make_items):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        assert source.list_calls == [None]
        assert vm.remote_page_indicator() == (1, 1)
        assert [item.name for item in vm.visible_items()] == [f"secret-{i}" for i in range(4)]
        assert vm.selected() == make_items(1)[0]
        assert vm.loading.value is False

    def test_refresh_without_source_reports_error(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.handle(intents.Refresh())
        assert vm.error_message.value == "Failed to load secrets: source client not initialized"
        assert source.list_calls == []

    def test_refresh_resets_everything(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus, page_size=8)
        vm.start()
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.NextScreenPage())
        vm.handle(intents.Refresh())
        assert vm.cache.current_index == 0
        assert len(vm.cache) == 1
        assert vm.navigation.position == (0, 0, 0)

    def test_refresh_publishes_cache_event(self, source, event_bus):
        events = []
        event_bus.subscribe(CacheRefreshedEvent, events.append)
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        assert len(events) == 1
        assert events[0].item_count == 4
        assert events[0].has_more is True

    def test_refresh_clears_cache_immediately(self, source, event_bus, queued):
        vm = _make_viewmodel(source, event_bus, dispatcher=queued)
        vm.start()
        queued.drain()
        vm.handle(intents.Refresh())
        assert vm.cache.is_empty
        assert vm.visible_items() == ()
        assert vm.loading.value is True
        queued.drain()
        assert len(vm.cache) == 1

    def test_refresh_supersedes_in_flight_page(self, source, event_bus, queued):
        vm = _make_viewmodel(source, event_bus, dispatcher=queued)
        vm.start()
        queued.drain()
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.Refresh())
        # The advance completes first but is no longer the latest request.
        queued.run_next()
        assert vm.cache.is_empty
        queued.run_next()
        assert vm.cache.current_index == 0
        assert len(vm.cache) == 1
        assert vm.cache.current_page().items[0].name == "secret-0"


# ---------------------------------------------------------------------------
# Remote paging
# ---------------------------------------------------------------------------


class TestRemotePaging:
    def test_next_and_prev_replay_from_cache(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.PrevRemotePage())
        vm.handle(intents.NextRemotePage())
        assert source.list_calls == [None, "4", "8"]
        assert vm.remote_page_indicator() == (3, 3)
        assert vm.has_more() is False
        assert vm.has_previous() is True

    def test_next_on_last_page_is_noop(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.NextRemotePage())
        assert len(source.list_calls) == 3
        assert vm.page_request_in_flight is None

    def test_prev_on_first_page_is_noop(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.PrevRemotePage())
        assert vm.cache.current_index == 0

    def test_remote_page_change_resets_navigation(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.MoveRight())
        vm.handle(intents.NextRemotePage())
        assert vm.navigation.position == (0, 0, 0)
        assert vm.selected().name == "secret-4"

    def test_page_events_mark_cache_hits(self, source, event_bus):
        events = []
        event_bus.subscribe(RemotePageLoadedEvent, events.append)
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.PrevRemotePage())
        assert [(e.page_index, e.from_cache) for e in events] == [(0, False), (1, False), (0, True)]

    def test_duplicate_next_ignored_while_in_flight(self, source, event_bus, queued):
        vm = _make_viewmodel(source, event_bus, dispatcher=queued)
        vm.start()
        queued.drain()
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.PrevRemotePage())
        assert queued.pending == 1
        queued.drain()
        assert vm.cache.current_index == 1
        assert len(vm.cache) == 2

    def test_screen_navigation_allowed_while_fetching(self, source, event_bus, queued):
        vm = _make_viewmodel(source, event_bus, dispatcher=queued)
        vm.start()
        queued.drain()
        vm.handle(intents.NextRemotePage())
        vm.handle(intents.MoveRight())
        assert vm.navigation.cursor_col == 1
        assert vm.loading.value is True


# ---------------------------------------------------------------------------
# Stale and failed responses
# ---------------------------------------------------------------------------


class TestResponses:
    def test_stale_response_discarded(self, source, event_bus, make_items):
        vm = _make_viewmodel(source, event_bus, dispatcher=QueuedDispatcher())
        vm.start()
        stale_id = vm.page_request_in_flight
        vm.handle(intents.Refresh())
        latest_id = vm.page_request_in_flight
        assert latest_id != stale_id

        stranger = RemotePage(items=make_items(1, prefix="stale"))
        vm.handle(intents.FetchCompleted(stale_id, page=stranger))
        assert vm.cache.is_empty
        assert vm.page_request_in_flight == latest_id

        fresh = RemotePage(items=make_items(2, prefix="fresh"))
        vm.handle(intents.FetchCompleted(latest_id, page=fresh))
        assert [item.name for item in vm.visible_items()] == ["fresh-0", "fresh-1"]
        assert vm.page_request_in_flight is None

    def test_out_of_order_completion(self, source, event_bus, queued):
        vm = _make_viewmodel(source, event_bus, dispatcher=queued)
        vm.start()
        vm.handle(intents.Refresh())
        # Newest first, then the superseded one.
        queued.run_latest()
        queued.run_latest()
        assert len(vm.cache) == 1
        assert vm.error_message.value == ""

    def test_failed_next_page_keeps_state(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.MoveRight())
        source.fail_next(FetchError("throttled"))
        vm.handle(intents.NextRemotePage())
        assert vm.error_message.value == "Failed to load secrets: throttled"
        assert vm.cache.current_index == 0
        assert len(vm.cache) == 1
        assert vm.navigation.cursor_col == 1
        assert vm.loading.value is False

    def test_failure_then_retry_clears_error(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        source.fail_next()
        vm.handle(intents.NextRemotePage())
        assert vm.error_message.value
        vm.handle(intents.NextRemotePage())
        assert vm.error_message.value == ""
        assert vm.cache.current_index == 1

    def test_failure_publishes_error_event(self, source, event_bus):
        events = []
        event_bus.subscribe(ErrorOccurredEvent, events.append)
        vm = _make_viewmodel(source, event_bus)
        source.fail_next(RuntimeError("socket closed"))
        vm.start()
        assert len(events) == 1
        assert isinstance(events[0].error, FetchError)
        assert events[0].message == "Failed to load secrets: socket closed"
        assert vm.error_message.value == "Failed to load secrets: socket closed"

    def test_completion_after_dispose_is_dropped(self, source, event_bus, queued):
        vm = _make_viewmodel(source, event_bus, dispatcher=queued)
        vm.start()
        vm.dispose()
        queued.drain()
        assert vm.cache.is_empty


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


class TestFiltering:
    @pytest.fixture
    def named_source(self):
        from secretgrid.domain.models import Item

        names = ["prod/db", "prod/api", "staging/db", "dev/cache"]
        return InMemorySource([Item(id=name, name=name) for name in names])

    def test_typing_filters_and_resets_cursor(self, named_source, event_bus):
        vm = _make_viewmodel(named_source, event_bus)
        vm.start()
        vm.handle(intents.MoveRight())
        vm.handle(intents.EnterFilterMode())
        for char in "db":
            vm.handle(intents.FilterChar(char))
        assert [item.name for item in vm.visible_items()] == ["prod/db", "staging/db"]
        assert vm.navigation.position == (0, 0, 0)

    def test_backspace_widens_from_unfiltered_page(self, named_source, event_bus):
        vm = _make_viewmodel(named_source, event_bus)
        vm.start()
        vm.handle(intents.EnterFilterMode())
        for char in "prod/a":
            vm.handle(intents.FilterChar(char))
        assert [item.name for item in vm.visible_items()] == ["prod/api"]
        vm.handle(intents.FilterBackspace())
        vm.handle(intents.FilterBackspace())
        assert vm.filter_query() == "prod"
        assert [item.name for item in vm.visible_items()] == ["prod/db", "prod/api"]

    def test_chars_ignored_outside_filter_mode(self, named_source, event_bus):
        vm = _make_viewmodel(named_source, event_bus)
        vm.start()
        vm.handle(intents.FilterChar("x"))
        assert vm.filter_query() == ""
        assert len(vm.visible_items()) == 4

    def test_exit_clears_query(self, named_source, event_bus):
        vm = _make_viewmodel(named_source, event_bus)
        vm.start()
        vm.handle(intents.EnterFilterMode())
        vm.handle(intents.FilterChar("z"))
        assert vm.visible_items() == ()
        vm.handle(intents.ExitFilterMode())
        assert vm.is_filtering() is False
        assert len(vm.visible_items()) == 4

    def test_exit_outside_filter_mode_keeps_cursor(self, named_source, event_bus):
        vm = _make_viewmodel(named_source, event_bus)
        vm.start()
        vm.handle(intents.MoveRight())
        vm.handle(intents.ExitFilterMode())
        assert vm.navigation.position == (0, 1, 0)

    def test_accept_keeps_query(self, named_source, event_bus):
        vm = _make_viewmodel(named_source, event_bus)
        vm.start()
        vm.handle(intents.EnterFilterMode())
        vm.handle(intents.FilterChar("d"))
        vm.handle(intents.FilterChar("e"))
        vm.handle(intents.AcceptFilter())
        assert vm.is_filtering() is False
        assert vm.filter_query() == "de"
        assert [item.name for item in vm.visible_items()] == ["dev/cache"]

    def test_query_survives_remote_page_change(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.EnterFilterMode())
        vm.handle(intents.FilterChar("5"))
        vm.handle(intents.AcceptFilter())
        assert vm.visible_items() == ()
        vm.handle(intents.NextRemotePage())
        assert [item.name for item in vm.visible_items()] == ["secret-5"]


# ---------------------------------------------------------------------------
# Detail screen
# ---------------------------------------------------------------------------


class TestDetail:
    def test_open_load_close(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.MoveRight())
        vm.handle(intents.OpenDetail())
        assert vm.screen.value is Screen.DETAIL
        assert vm.detail_item.name == "secret-1"
        assert vm.detail_value.value is None

        vm.handle(intents.LoadDetail())
        assert vm.detail_value.value == '{"user": "secret-1"}'

        vm.handle(intents.CloseDetail())
        assert vm.screen.value is Screen.LIST
        assert vm.detail_value.value is None
        assert vm.detail_item is None

    def test_load_detail_fetches_once(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.OpenDetail())
        vm.handle(intents.LoadDetail())
        vm.handle(intents.LoadDetail())
        assert len(source.detail_calls) == 1

    def test_open_without_selection_is_noop(self, event_bus):
        vm = _make_viewmodel(InMemorySource(), event_bus)
        vm.start()
        vm.handle(intents.OpenDetail())
        assert vm.screen.value is Screen.LIST

    def test_moves_ignored_on_detail_screen(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.OpenDetail())
        vm.handle(intents.MoveRight())
        vm.handle(intents.EnterFilterMode())
        assert vm.navigation.cursor_col == 0
        assert vm.is_filtering() is False

    def test_detail_failure(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.OpenDetail())
        source.fail_next(FetchError("access denied"))
        vm.handle(intents.LoadDetail())
        assert vm.error_message.value == "Failed to load secret value: access denied"
        assert vm.detail_value.value is None
        assert vm.screen.value is Screen.DETAIL

    def test_close_discards_in_flight_detail(self, source, event_bus, queued):
        vm = _make_viewmodel(source, event_bus, dispatcher=queued)
        vm.start()
        queued.drain()
        vm.handle(intents.OpenDetail())
        vm.handle(intents.LoadDetail())
        assert vm.loading.value is True
        vm.handle(intents.CloseDetail())
        queued.drain()
        assert vm.detail_value.value is None
        assert vm.loading.value is False


# ---------------------------------------------------------------------------
# Context switching and status
# ---------------------------------------------------------------------------


class TestContext:
    def test_switch_context_rebuilds_source(self, make_items, event_bus):
        sources = {
            "dev": InMemorySource(make_items(2, prefix="dev")),
            "prod": InMemorySource(make_items(3, prefix="prod")),
        }
        factory = Mock(side_effect=lambda context: sources[context.profile or "dev"])
        vm = _make_viewmodel(None, event_bus, factory=factory)
        changed = Mock()
        vm.context_changed.connect(changed)
        vm.start()
        assert [item.name for item in vm.visible_items()] == ["dev-0", "dev-1"]

        prod = CredentialContext(profile="prod", region="eu-west-1")
        vm.handle(intents.SwitchContext(prod))
        assert vm.context == prod
        assert [item.name for item in vm.visible_items()] == ["prod-0", "prod-1", "prod-2"]
        changed.assert_called_with(prod)

    def test_context_selected_event_switches(self, make_items, event_bus):
        built = []

        def factory(context):
            built.append(context)
            return InMemorySource(make_items(1))

        vm = _make_viewmodel(None, event_bus, factory=factory)
        event_bus.publish(ContextSelectedEvent(profile="ops", region="us-east-1"))
        assert built == [CredentialContext(profile="ops", region="us-east-1")]
        assert vm.context.profile == "ops"
        assert len(vm.visible_items()) == 1

    def test_failed_factory_keeps_previous_context(self, source, event_bus):
        calls = []

        def factory(context):
            calls.append(context)
            if context.profile == "broken":
                raise SourceUnavailableError("no credentials")
            return source

        vm = _make_viewmodel(None, event_bus, factory=factory)
        vm.start()
        vm.handle(intents.SwitchContext(CredentialContext(profile="broken")))
        assert vm.context == CredentialContext()
        assert vm.error_message.value == "Failed to initialize source client: no credentials"
        assert len(vm.visible_items()) == 4

    def test_foreign_factory_error_is_reported(self, source, event_bus):
        events = []
        event_bus.subscribe(ErrorOccurredEvent, events.append)

        def factory(context):
            if context.profile == "broken":
                raise RuntimeError("could not resolve credentials")
            return source

        vm = _make_viewmodel(None, event_bus, factory=factory)
        vm.start()
        vm.handle(intents.SwitchContext(CredentialContext(profile="broken")))
        assert vm.context == CredentialContext()
        assert vm.error_message.value == "Failed to initialize source client: could not resolve credentials"
        assert isinstance(events[-1].error, SourceUnavailableError)
        assert len(vm.visible_items()) == 4

    def test_dispose_stops_event_subscription(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.dispose()
        assert event_bus.subscriber_count(ContextSelectedEvent) == 0

    def test_page_loads_report_status(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        assert vm.status_message.value == "Loaded 4 secrets"
        vm.handle(intents.NextRemotePage())
        assert vm.status_message.value == "Loaded remote page 2"

    def test_detail_load_reports_status(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        vm.handle(intents.OpenDetail())
        vm.handle(intents.LoadDetail())
        assert vm.status_message.value == "Secret value loaded"

    def test_status_message_cleared(self, source, event_bus):
        vm = _make_viewmodel(source, event_bus)
        vm.start()
        assert vm.status_message.value
        vm.handle(intents.ClearStatus())
        assert vm.status_message.value == ""
