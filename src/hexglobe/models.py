"""Core data models — cell records, visual states and store snapshots.

Records are immutable; the store replaces a record on every state
change, so a snapshot handed to a listener never changes underneath it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

LatLng = Tuple[float, float]


class CellVisualState(str, Enum):
    """Rendering/interaction state stored on a cell record.

    OWNED and FOREIGN are reserved for ownership rules.
    """

    DEFAULT = "default"
    HOVERED = "hovered"
    SELECTED = "selected"
    OWNED = "owned"
    FOREIGN = "foreign"


@dataclass(frozen=True)
class CellRecord:
    id: str
    state: CellVisualState = CellVisualState.DEFAULT
    owner_id: Optional[str] = None
    structures: Tuple[str, ...] = field(default_factory=tuple)
    created_at: float = field(default_factory=time.time)

    def with_state(self, state: CellVisualState) -> CellRecord:
        return replace(self, state=state)

    def is_owned(self) -> bool:
        return self.owner_id is not None

    def is_selectable(self) -> bool:
        # Every cell is selectable until ownership rules exist.
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state.value,
            "owner_id": self.owner_id,
            "structures": list(self.structures),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> CellRecord:
        return cls(
            id=payload["id"],
            state=CellVisualState(payload.get("state", CellVisualState.DEFAULT.value)),
            owner_id=payload.get("owner_id"),
            structures=tuple(payload.get("structures", ())),
            created_at=float(payload.get("created_at", time.time())),
        )


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of the cell state store.

    *cells* is a fresh dict per snapshot; records are immutable, so a
    caller holding a snapshot cannot reach the store's internals.
    """

    selected_cell_id: Optional[str] = None
    hovered_cell_id: Optional[str] = None
    cells: Dict[str, CellRecord] = field(default_factory=dict)

    def get(self, cell_id: str) -> Optional[CellRecord]:
        return self.cells.get(cell_id)


@dataclass(frozen=True)
class VisibleCell:
    cell_id: str
    boundary: Tuple[LatLng, ...]
