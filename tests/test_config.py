"""Tests for viewer configuration."""

import json

import pytest

from hexglobe.config import (
    DEFAULT_RESOLUTION,
    MAX_GRID_RINGS,
    MIN_GRID_RINGS,
    VISIBLE_GRID_RESOLUTION,
    CellPalette,
    IndexConfig,
    RenderOffsets,
    ViewerConfig,
    load_config,
    save_config,
)


class TestDefaults:
    def test_constants(self):
        assert DEFAULT_RESOLUTION == 12
        assert VISIBLE_GRID_RESOLUTION == 2
        assert (MIN_GRID_RINGS, MAX_GRID_RINGS) == (3, 40)

    def test_viewer_defaults(self):
        config = ViewerConfig()
        assert config.radius == 1.0
        assert config.index.cell_resolution == 12
        assert config.offsets.interaction > config.offsets.fill > config.offsets.outline
        assert config.camera_position == (0.0, 0.0, 2.5)


class TestValidation:
    @pytest.mark.parametrize("res", [-1, 16])
    def test_resolution_range(self, res):
        with pytest.raises(ValueError):
            IndexConfig(grid_resolution=res)

    def test_resolution_type(self):
        with pytest.raises(TypeError):
            IndexConfig(cell_resolution=2.5)

    def test_ring_clamp_order(self):
        with pytest.raises(ValueError):
            IndexConfig(min_rings=10, max_rings=5)

    def test_step_floor_positive(self):
        with pytest.raises(ValueError):
            IndexConfig(min_step_deg=0.0)

    @pytest.mark.parametrize("outline,fill,interaction", [
        (1.002, 1.001, 1.003),
        (1.001, 1.003, 1.003),
        (0.99, 1.002, 1.003),
    ])
    def test_offsets_strictly_increasing(self, outline, fill, interaction):
        with pytest.raises(ValueError):
            RenderOffsets(outline, fill, interaction)

    @pytest.mark.parametrize("colour", ["ffffff", "#fff", "#gggggg"])
    def test_bad_colour(self, colour):
        with pytest.raises(ValueError):
            CellPalette(hovered=colour)

    def test_bad_opacity(self):
        with pytest.raises(ValueError):
            CellPalette(fill_opacity=1.5)

    def test_zoom_bounds(self):
        with pytest.raises(ValueError):
            ViewerConfig(min_distance=5.0, max_distance=2.0)


class TestSerialisation:
    def test_round_trip(self):
        config = ViewerConfig(
            radius=2.0,
            index=IndexConfig(grid_resolution=3, max_rings=20),
            camera_position=(1, 2, 3),
        )
        restored = ViewerConfig.from_dict(json.loads(config.to_json()))
        assert restored == config

    def test_partial_dict(self):
        config = ViewerConfig.from_dict({"index": {"max_rings": 12}})
        assert config.index.max_rings == 12
        assert config.index.min_rings == MIN_GRID_RINGS
        assert config.palette == CellPalette()

    def test_unknown_key(self):
        with pytest.raises(TypeError):
            ViewerConfig.from_dict({"nope": 1})

    def test_save_load(self, tmp_path):
        config = ViewerConfig(isolate_listener_errors=True)
        path = save_config(config, tmp_path / "cfg" / "viewer.json")
        assert load_config(path) == config
