"""Tests for cell colour resolution and the geometry builder."""

import numpy as np
import pytest

from hexglobe import h3_index
from hexglobe.config import CellPalette, RenderOffsets
from hexglobe.globe_mesh import (
    CellGeometryBuilder,
    build_fill,
    build_outline,
    hex_to_rgb,
    resolve_cell_color,
)
from hexglobe.models import CellRecord, CellVisualState, StoreSnapshot, VisibleCell


PALETTE = CellPalette()


@pytest.fixture
def cells():
    center = h3_index.cell_index(10.0, 20.0, 2)
    return [
        VisibleCell(cid, h3_index.cell_boundary(cid))
        for cid in h3_index.disk(center, 1)
    ]


@pytest.fixture
def builder():
    return CellGeometryBuilder(2.0, RenderOffsets(), PALETTE)


def _snapshot(selected=None, hovered=None, **states):
    return StoreSnapshot(
        selected_cell_id=selected,
        hovered_cell_id=hovered,
        cells={cid: CellRecord(id=cid, state=state) for cid, state in states.items()},
    )


# ═══════════════════════════════════════════════════════════════════
# Colour precedence
# ═══════════════════════════════════════════════════════════════════

class TestResolveCellColor:
    def test_unknown_cell_is_default(self):
        assert resolve_cell_color("A", _snapshot(), PALETTE) == PALETTE.default

    def test_selected_wins_over_everything(self):
        snap = _snapshot(selected="A", hovered="A", A=CellVisualState.OWNED)
        assert resolve_cell_color("A", snap, PALETTE) == PALETTE.selected

    def test_selected_id_wins_over_stale_record(self):
        snap = _snapshot(selected="A", A=CellVisualState.DEFAULT)
        assert resolve_cell_color("A", snap, PALETTE) == PALETTE.selected

    def test_hover_over_record_state(self):
        snap = _snapshot(hovered="A", A=CellVisualState.FOREIGN)
        assert resolve_cell_color("A", snap, PALETTE) == PALETTE.hovered

    @pytest.mark.parametrize("state,attr", [
        (CellVisualState.OWNED, "owned"),
        (CellVisualState.FOREIGN, "foreign"),
        (CellVisualState.DEFAULT, "default"),
    ])
    def test_record_state(self, state, attr):
        snap = _snapshot(A=state)
        assert resolve_cell_color("A", snap, PALETTE) == getattr(PALETTE, attr)

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#ff8000") == pytest.approx((1.0, 128 / 255, 0.0))


# ═══════════════════════════════════════════════════════════════════
# Buffers
# ═══════════════════════════════════════════════════════════════════

class TestBuffers:
    def test_outline_closed_on_radius(self, cells):
        outline = build_outline(cells[0].boundary, 1.5)
        n = len(cells[0].boundary)
        assert outline.shape == (n + 1, 3)
        assert np.allclose(outline[0], outline[-1])
        assert np.allclose(np.linalg.norm(outline, axis=1), 1.5)

    def test_fill_shape(self, cells):
        fill = build_fill(cells[0].boundary, 1.0)
        assert fill.shape == (3 * len(cells[0].boundary), 3)


class TestBuilder:
    def test_layer_radii(self, builder, cells):
        mesh = builder.build_cell(cells[0], _snapshot(selected=cells[0].cell_id))
        assert np.allclose(np.linalg.norm(mesh.outline, axis=1), 2.0 * 1.001)
        # fan centre sits slightly inside the sphere; vertices sit on it
        assert np.allclose(np.linalg.norm(mesh.fill[1::3], axis=1), 2.0 * 1.002)

    def test_fills_only_for_highlighted(self, builder, cells):
        selected = cells[0].cell_id
        hovered = cells[1].cell_id
        meshes = builder.build(cells, _snapshot(selected=selected, hovered=hovered))
        by_id = {m.cell_id: m for m in meshes}
        assert len(meshes) == len(cells)
        assert by_id[selected].fill is not None
        assert by_id[selected].color == PALETTE.selected
        assert by_id[hovered].fill is not None
        assert by_id[hovered].outline_opacity == PALETTE.highlight_opacity
        plain = [m for m in meshes if m.cell_id not in (selected, hovered)]
        assert all(m.fill is None and not m.highlighted for m in plain)
        assert all(m.outline_opacity == PALETTE.outline_opacity for m in plain)
        assert builder.cached_fill_ids == sorted([selected, hovered])

    def test_buffers_cached(self, builder, cells):
        snap = _snapshot(selected=cells[0].cell_id)
        first = builder.build_cell(cells[0], snap)
        second = builder.build_cell(cells[0], snap)
        assert first.outline is second.outline
        assert first.fill is second.fill

    def test_retain_evicts(self, builder, cells):
        builder.build(cells, _snapshot(selected=cells[0].cell_id))
        assert builder.cached_outline_count == len(cells)
        builder.retain([cells[1].cell_id])
        assert builder.cached_outline_count == 1
        assert builder.cached_fill_ids == []

    def test_clear(self, builder, cells):
        builder.build(cells, _snapshot())
        builder.clear()
        assert builder.cached_outline_count == 0
