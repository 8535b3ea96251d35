"""Cell state store — authoritative map of cell id → :class:`CellRecord`.

Holds the current selection and hover pointers alongside the records
and notifies subscribers synchronously with a fresh
:class:`StoreSnapshot` after every mutation.  This is the boundary the
persistence backend will sit behind; the state-transition and
notification contract below is what the viewer relies on.

Transitions
-----------
- :meth:`CellStateStore.select` — previous selection demoted, new cell
  marked SELECTED, one notification.
- :meth:`CellStateStore.clear_selection` — selection demoted and
  cleared, one notification.
- :meth:`CellStateStore.set_hover` — no-op when the hover target is
  unchanged; hover never downgrades a SELECTED cell.

A demoted cell that is still under the pointer falls back to HOVERED
rather than DEFAULT.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .models import CellRecord, CellVisualState, StoreSnapshot

log = logging.getLogger(__name__)

Listener = Callable[[StoreSnapshot], None]
PathLike = Union[str, Path]


class CellStateStore:
    """In-memory cell state with subscribe/notify.

    Parameters
    ----------
    isolate_errors : bool
        If *True*, a raising listener is logged and the remaining
        listeners still run.  Otherwise the exception propagates out
        of the mutating call (after the state change is applied).
    """

    def __init__(self, *, isolate_errors: bool = False) -> None:
        self.isolate_errors = isolate_errors
        self._cells: Dict[str, CellRecord] = {}
        self._selected: Optional[str] = None
        self._hovered: Optional[str] = None
        self._listeners: List[Listener] = []

    # ── properties ──────────────────────────────────────────────────

    @property
    def selected_cell_id(self) -> Optional[str]:
        return self._selected

    @property
    def hovered_cell_id(self) -> Optional[str]:
        return self._hovered

    def get_cell(self, cell_id: str) -> Optional[CellRecord]:
        return self._cells.get(cell_id)

    def __len__(self) -> int:
        return len(self._cells)

    # ── subscription ────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.get_state()
        for listener in list(self._listeners):
            if not self.isolate_errors:
                listener(snapshot)
                continue
            try:
                listener(snapshot)
            except Exception:
                log.exception("store listener %r failed", listener)

    def get_state(self) -> StoreSnapshot:
        return StoreSnapshot(
            selected_cell_id=self._selected,
            hovered_cell_id=self._hovered,
            cells=dict(self._cells),
        )

    # ── internal helpers ────────────────────────────────────────────

    def _ensure(self, cell_id: str) -> CellRecord:
        record = self._cells.get(cell_id)
        if record is None:
            record = CellRecord(id=cell_id)
            self._cells[cell_id] = record
        return record

    def _set_state(self, cell_id: str, state: CellVisualState) -> CellRecord:
        record = self._ensure(cell_id).with_state(state)
        self._cells[cell_id] = record
        return record

    def _demote_selected(self, cell_id: str) -> None:
        record = self._cells.get(cell_id)
        if record is None or record.state is not CellVisualState.SELECTED:
            return
        fallback = (
            CellVisualState.HOVERED if cell_id == self._hovered else CellVisualState.DEFAULT
        )
        self._cells[cell_id] = record.with_state(fallback)

    # ── mutations ───────────────────────────────────────────────────

    def select(self, cell_id: str) -> CellRecord:
        """Make *cell_id* the single selected cell."""
        self._ensure(cell_id)
        if self._selected is not None and self._selected != cell_id:
            self._demote_selected(self._selected)
        self._selected = cell_id
        record = self._set_state(cell_id, CellVisualState.SELECTED)
        log.info("cell selected: %s", cell_id)
        self._notify()
        return record

    def clear_selection(self) -> None:
        if self._selected is not None:
            self._demote_selected(self._selected)
        previous, self._selected = self._selected, None
        log.info("selection cleared (was %s)", previous)
        self._notify()

    def set_hover(self, cell_id: Optional[str]) -> bool:
        """Point the hover at *cell_id* (or clear it with *None*).

        Returns *False* without notifying when the hover target is
        unchanged, *True* otherwise.
        """
        if cell_id == self._hovered:
            return False

        previous = self._hovered
        if previous is not None:
            prev_record = self._cells.get(previous)
            if prev_record is not None and prev_record.state is CellVisualState.HOVERED:
                self._cells[previous] = prev_record.with_state(CellVisualState.DEFAULT)

        self._hovered = cell_id
        if cell_id is not None:
            record = self._ensure(cell_id)
            if record.state is not CellVisualState.SELECTED and cell_id != self._selected:
                self._set_state(cell_id, CellVisualState.HOVERED)

        log.debug("hover %s -> %s", previous, cell_id)
        self._notify()
        return True

    def reset(self) -> None:
        """Drop all records, pointers and listeners."""
        self._cells.clear()
        self._selected = None
        self._hovered = None
        self._listeners.clear()

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selected_cell_id": self._selected,
            "hovered_cell_id": self._hovered,
            "cells": {cid: rec.to_dict() for cid, rec in sorted(self._cells.items())},
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], **kwargs: Any) -> CellStateStore:
        store = cls(**kwargs)
        for cid, record in payload.get("cells", {}).items():
            store._cells[cid] = CellRecord.from_dict(record)
        store._selected = payload.get("selected_cell_id")
        store._hovered = payload.get("hovered_cell_id")
        if store._selected is not None:
            store._set_state(store._selected, CellVisualState.SELECTED)
        if store._hovered is not None:
            store._ensure(store._hovered)
        return store

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    @classmethod
    def from_json(cls, json_str: str, **kwargs: Any) -> CellStateStore:
        return cls.from_dict(json.loads(json_str), **kwargs)

    def __repr__(self) -> str:
        return (
            f"CellStateStore(cells={len(self._cells)}, "
            f"selected={self._selected!r}, hovered={self._hovered!r})"
        )


def save_store(store: CellStateStore, path: PathLike) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(store.to_json(), encoding="utf-8")
    return out


def load_store(path: PathLike, **kwargs: Any) -> CellStateStore:
    return CellStateStore.from_json(Path(path).read_text(encoding="utf-8"), **kwargs)
