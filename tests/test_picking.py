"""Tests for the sphere picking surface."""

import h3
import numpy as np
import pytest

from hexglobe.cell_store import CellStateStore
from hexglobe.config import INTERACTION_MULTIPLIER, RenderOffsets
from hexglobe.events import EventBus, EventType
from hexglobe.geometry import to_cartesian
from hexglobe.interactions import PointerInteractionMapper
from hexglobe.picking import PickingSurface


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store():
    return CellStateStore()


@pytest.fixture
def surface(bus, store):
    return PickingSurface(PointerInteractionMapper(bus, store), 12)


# ═══════════════════════════════════════════════════════════════════
# Ray / sphere intersection
# ═══════════════════════════════════════════════════════════════════

class TestIntersect:
    def test_radius_includes_multiplier(self, surface):
        assert surface.radius == pytest.approx(1.003)

    def test_default_sits_on_interaction_layer(self, surface):
        offsets = RenderOffsets()
        assert surface.radius == pytest.approx(INTERACTION_MULTIPLIER)
        assert surface.radius > offsets.fill > offsets.outline

    def test_hit_from_outside(self, surface):
        hit = surface.intersect((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert np.allclose(hit, [0.0, 0.0, 1.003])

    def test_unnormalised_direction(self, surface):
        hit = surface.intersect((5.0, 0.0, 0.0), (-10.0, 0.0, 0.0))
        assert np.allclose(hit, [1.003, 0.0, 0.0])

    def test_miss(self, surface):
        assert surface.intersect((0.0, 2.0, 5.0), (0.0, 0.0, -1.0)) is None

    def test_pointing_away(self, surface):
        assert surface.intersect((0.0, 0.0, 5.0), (0.0, 0.0, 1.0)) is None

    def test_origin_inside_returns_exit(self, surface):
        hit = surface.intersect((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert np.allclose(hit, [0.0, 1.003, 0.0])

    def test_zero_direction(self, surface):
        assert surface.intersect((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)) is None


# ═══════════════════════════════════════════════════════════════════
# Pointer → cell → store
# ═══════════════════════════════════════════════════════════════════

class TestPointerDown:
    def test_select_end_to_end(self, surface, bus, store):
        selected = []
        bus.subscribe(EventType.CELL_SELECTED, selected.append)

        point = to_cartesian(10.0, 20.0, 1.003)
        cell = surface.pointer_down(point)

        expected = h3.latlng_to_cell(10.0, 20.0, 12)
        assert cell == expected
        assert store.get_state().selected_cell_id == expected
        assert len(selected) == 1
        assert selected[0].payload["cell_id"] == expected
        assert selected[0].payload["point"] == pytest.approx(point)

    def test_none_point_selects_nothing(self, surface, store):
        assert surface.pointer_down(None) is None
        assert store.selected_cell_id is None

    def test_ray_down(self, surface, store):
        target = np.array(to_cartesian(-30.0, 45.0, 1.003))
        origin = target * 3.0
        cell = surface.ray_down(origin, -origin)
        assert cell == h3.latlng_to_cell(-30.0, 45.0, 12)
        assert store.selected_cell_id == cell


class TestPointerMove:
    def test_same_cell_fires_once(self, surface, bus):
        hovered = []
        bus.subscribe(EventType.CELL_HOVERED, hovered.append)
        point = to_cartesian(10.0, 20.0, 1.003)
        surface.pointer_move(point)
        surface.pointer_move(point)
        assert len(hovered) == 1

    def test_miss_after_hover_exits(self, surface, bus, store):
        unhovered = []
        bus.subscribe(EventType.CELL_UNHOVERED, unhovered.append)
        cell = surface.pointer_move(to_cartesian(10.0, 20.0, 1.003))
        assert surface.ray_move((0.0, 5.0, 5.0), (0.0, 0.0, 1.0)) is None
        assert [e.payload["cell_id"] for e in unhovered] == [cell]
        assert store.hovered_cell_id is None

    def test_leave(self, surface, store):
        surface.pointer_move(to_cartesian(0.0, 0.0, 1.003))
        surface.pointer_leave()
        assert store.hovered_cell_id is None

    def test_custom_resolution(self, bus, store):
        coarse = PickingSurface(PointerInteractionMapper(bus, store), 3, radius=2.0)
        assert coarse.radius == pytest.approx(2.006)
        cell = coarse.pointer_move(to_cartesian(10.0, 20.0, 2.006))
        assert cell == h3.latlng_to_cell(10.0, 20.0, 3)
