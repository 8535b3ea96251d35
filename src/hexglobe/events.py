"""Domain events — semantic game actions, decoupled from input devices.

The same events are published whether the action came from a mouse,
a touch tap, a keyboard shortcut or a test.  Events are immutable
once created.

Error policy
------------
:meth:`EventBus.publish` calls handlers synchronously in registration
order.  By default a raising handler propagates and the remaining
handlers for that event are not called.  With ``isolate_errors=True``
the exception is logged and the next handler runs.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

log = logging.getLogger(__name__)


class EventType(str, Enum):
    CELL_SELECTED = "CELL_SELECTED"
    CELL_HOVERED = "CELL_HOVERED"
    CELL_UNHOVERED = "CELL_UNHOVERED"
    SELECTION_CLEARED = "SELECTION_CLEARED"
    GLOBE_ROTATED = "GLOBE_ROTATED"
    GLOBE_ZOOMED = "GLOBE_ZOOMED"


@dataclass(frozen=True)
class DomainEvent:
    type: EventType
    payload: Mapping[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))


Handler = Callable[[DomainEvent], None]
Unsubscribe = Callable[[], None]


# ═══════════════════════════════════════════════════════════════════
# Factories
# ═══════════════════════════════════════════════════════════════════

def create_event(event_type: EventType, payload: Optional[Mapping[str, Any]] = None) -> DomainEvent:
    return DomainEvent(type=EventType(event_type), payload=payload or {})


def cell_selected(cell_id: str, context: Optional[Mapping[str, Any]] = None) -> DomainEvent:
    """Selection event; *context* keys are merged under ``cell_id``."""
    return create_event(EventType.CELL_SELECTED, {**dict(context or {}), "cell_id": cell_id})


def cell_hovered(cell_id: str) -> DomainEvent:
    return create_event(EventType.CELL_HOVERED, {"cell_id": cell_id})


def cell_unhovered(cell_id: str) -> DomainEvent:
    return create_event(EventType.CELL_UNHOVERED, {"cell_id": cell_id})


def selection_cleared(previous_cell_id: Optional[str] = None) -> DomainEvent:
    return create_event(EventType.SELECTION_CLEARED, {"cell_id": previous_cell_id})


def globe_rotated(center_cell_id: str, ring_count: int) -> DomainEvent:
    return create_event(
        EventType.GLOBE_ROTATED,
        {"center_cell_id": center_cell_id, "ring_count": ring_count},
    )


def globe_zoomed(distance: float) -> DomainEvent:
    return create_event(EventType.GLOBE_ZOOMED, {"distance": distance})


# ═══════════════════════════════════════════════════════════════════
# Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Typed publish/subscribe registry for :class:`DomainEvent`."""

    def __init__(self, *, isolate_errors: bool = False) -> None:
        self.isolate_errors = isolate_errors
        self._handlers: Dict[EventType, List[Handler]] = {}

    def subscribe(self, event_type: EventType, handler: Handler) -> Unsubscribe:
        """Register *handler* for *event_type*; returns an unsubscribe callable."""
        key = EventType(event_type)
        self._handlers.setdefault(key, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(key, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, event: DomainEvent) -> None:
        log.debug("event %s %s", event.type.value, dict(event.payload))
        # copy so handlers may (un)subscribe during dispatch
        for handler in list(self._handlers.get(event.type, ())):
            if not self.isolate_errors:
                handler(event)
                continue
            try:
                handler(event)
            except Exception:
                log.exception("handler %r failed for %s", handler, event.type.value)

    def handler_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(EventType(event_type), ()))

    def reset(self) -> None:
        self._handlers.clear()
