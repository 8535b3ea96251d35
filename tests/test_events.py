"""Tests for domain events and the event bus."""

import dataclasses
import logging

import pytest

from hexglobe.events import (
    DomainEvent,
    EventBus,
    EventType,
    cell_hovered,
    cell_selected,
    cell_unhovered,
    create_event,
    globe_rotated,
    selection_cleared,
)


class TestFactories:
    def test_cell_selected_payload(self):
        event = cell_selected("abc", {"point": (1.0, 0.0, 0.0)})
        assert event.type is EventType.CELL_SELECTED
        assert event.payload["cell_id"] == "abc"
        assert event.payload["point"] == (1.0, 0.0, 0.0)
        assert event.timestamp > 0

    def test_without_context(self):
        assert dict(cell_selected("abc").payload) == {"cell_id": "abc"}

    def test_context_cannot_override_cell_id(self):
        event = cell_selected("abc", {"cell_id": "stale", "source": "test"})
        assert event.payload["cell_id"] == "abc"
        assert event.payload["source"] == "test"

    def test_hover_pair(self):
        assert cell_hovered("x").type is EventType.CELL_HOVERED
        assert cell_unhovered("x").payload == {"cell_id": "x"}

    def test_selection_cleared(self):
        assert selection_cleared().payload["cell_id"] is None

    def test_globe_rotated(self):
        event = globe_rotated("c", 12)
        assert event.payload["ring_count"] == 12

    def test_create_event_accepts_string_type(self):
        assert create_event("CELL_HOVERED").type is EventType.CELL_HOVERED


class TestImmutability:
    def test_frozen(self):
        event = cell_hovered("x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.type = EventType.CELL_SELECTED

    def test_payload_read_only(self):
        event = cell_hovered("x")
        with pytest.raises(TypeError):
            event.payload["cell_id"] = "y"

    def test_payload_detached_from_source(self):
        source = {"cell_id": "x"}
        event = DomainEvent(EventType.CELL_HOVERED, source)
        source["cell_id"] = "y"
        assert event.payload["cell_id"] == "x"


class TestEventBus:
    def test_registration_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EventType.CELL_HOVERED, lambda e: calls.append("a"))
        bus.subscribe(EventType.CELL_HOVERED, lambda e: calls.append("b"))
        bus.publish(cell_hovered("x"))
        assert calls == ["a", "b"]

    def test_only_matching_type(self):
        bus = EventBus()
        seen = []
        bus.subscribe(EventType.CELL_SELECTED, seen.append)
        bus.publish(cell_hovered("x"))
        assert seen == []

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        unsubscribe = bus.subscribe(EventType.CELL_HOVERED, seen.append)
        unsubscribe()
        unsubscribe()  # idempotent
        bus.publish(cell_hovered("x"))
        assert seen == []
        assert bus.handler_count(EventType.CELL_HOVERED) == 0

    def test_unsubscribe_during_dispatch(self):
        bus = EventBus()
        calls = []
        holder = {}

        def first(event):
            calls.append("first")
            holder["unsub"]()

        holder["unsub"] = bus.subscribe(EventType.CELL_HOVERED, first)
        bus.subscribe(EventType.CELL_HOVERED, lambda e: calls.append("second"))
        bus.publish(cell_hovered("x"))
        bus.publish(cell_hovered("x"))
        assert calls == ["first", "second", "second"]

    def test_exception_propagates_by_default(self):
        bus = EventBus()
        calls = []

        def boom(event):
            raise RuntimeError("boom")

        bus.subscribe(EventType.CELL_HOVERED, boom)
        bus.subscribe(EventType.CELL_HOVERED, lambda e: calls.append("after"))
        with pytest.raises(RuntimeError):
            bus.publish(cell_hovered("x"))
        assert calls == []

    def test_isolated_errors_logged_and_continue(self, caplog):
        bus = EventBus(isolate_errors=True)
        calls = []

        def boom(event):
            raise RuntimeError("boom")

        bus.subscribe(EventType.CELL_HOVERED, boom)
        bus.subscribe(EventType.CELL_HOVERED, lambda e: calls.append("after"))
        with caplog.at_level(logging.ERROR, logger="hexglobe.events"):
            bus.publish(cell_hovered("x"))
        assert calls == ["after"]
        assert "failed" in caplog.text

    def test_reset(self):
        bus = EventBus()
        bus.subscribe(EventType.CELL_HOVERED, lambda e: None)
        bus.reset()
        assert bus.handler_count(EventType.CELL_HOVERED) == 0
