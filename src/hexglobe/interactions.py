"""Pointer interaction mapper — raw pointer actions → domain events.

Sits between the picking surface (which turns pointer positions into
cell ids) and the store/bus pair.  It owns the hover memo used to
de-duplicate the pointer-move stream: moving within the same cell
publishes nothing and does not touch the store.

A ``None`` cell id means "no cell under the pointer" and is handled
as a hover exit, never as an error.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Optional

from .cell_store import CellStateStore
from .events import (
    EventBus,
    cell_hovered,
    cell_selected,
    cell_unhovered,
    selection_cleared,
)

log = logging.getLogger(__name__)


class PointerAction(str, Enum):
    SELECT = "select"
    HOVER_ENTER = "hover-enter"
    HOVER_EXIT = "hover-exit"


class PointerInteractionMapper:
    """Stateful translator from pointer actions to events and store calls."""

    def __init__(self, bus: EventBus, store: CellStateStore) -> None:
        self._bus = bus
        self._store = store
        self._hovered: Optional[str] = None

    @property
    def current_hovered_cell_id(self) -> Optional[str]:
        return self._hovered

    def on_select(
        self,
        cell_id: Optional[str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """Select *cell_id*; returns *False* when there is no cell.

        *context* (e.g. the hit point) is merged into the event payload;
        a ``cell_id`` key in it never replaces the selected id.
        """
        if not cell_id:
            return False
        self._bus.publish(cell_selected(cell_id, context))
        self._store.select(cell_id)
        return True

    def on_move(self, cell_id: Optional[str]) -> bool:
        """Track the pointer; returns *True* if the hover target changed.

        The memo only moves once the events are out and the store has
        the new hover, so a raising handler leaves the change retryable.
        """
        cell_id = cell_id or None
        previous = self._hovered
        if cell_id == previous:
            return False
        if previous is not None:
            self._bus.publish(cell_unhovered(previous))
        if cell_id is not None:
            self._bus.publish(cell_hovered(cell_id))
        self._store.set_hover(cell_id)
        self._hovered = cell_id
        return True

    def on_leave(self) -> bool:
        previous = self._hovered
        if previous is None:
            return False
        self._bus.publish(cell_unhovered(previous))
        self._store.set_hover(None)
        self._hovered = None
        return True

    def clear_selection(self) -> bool:
        """Clear the selection; returns *False* when nothing was selected."""
        previous = self._store.selected_cell_id
        if previous is None:
            return False
        self._bus.publish(selection_cleared(previous))
        self._store.clear_selection()
        return True

    def handle_action(
        self,
        action: str,
        cell_id: Optional[str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Dispatch a named :class:`PointerAction`.

        ``hover-exit`` with no *cell_id* exits whatever is hovered.
        Unknown actions are logged and ignored.
        """
        try:
            kind = PointerAction(action)
        except ValueError:
            log.warning("unknown pointer action: %r", action)
            return
        if kind is PointerAction.SELECT:
            self.on_select(cell_id, context)
        elif kind is PointerAction.HOVER_ENTER:
            self.on_move(cell_id)
        elif cell_id is None or cell_id == self._hovered:
            self.on_leave()

    def reset(self) -> None:
        """Forget the hover memo (scene teardown / remount)."""
        self._hovered = None
