"""
Tests for Option J: Jewel Field

Tests cover:
- Circle packing (non-overlap, bounds, determinism, under-delivery)
- Cube stamping (outward winding, no welding)
- Diamond lattice synthesis (vertical extent, degenerate inputs)
- Height levels, appearance draws and the full build
"""

import itertools

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rojt.common.config import Config, MIN_DIMENSION
from rojt.common.mesh_ops import indices_in_range
from rojt.option_J_jewel_field.packer import Circle, CirclePacker
from rojt.option_J_jewel_field.diamond import (
    ParametricDiamond,
    synthesize,
    stamp_cubes,
    CUBE_FILL,
)
from rojt.option_J_jewel_field.build import (
    JewelParams,
    build_jewel_field,
    height_levels,
    draw_appearance,
    draw_spin,
    LIGHT,
    DARK,
)


# ============== Fixtures ==============

@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def default_packer(rng):
    """50x50 bounds, radii 0.5-3 (the default jewel field)."""
    return CirclePacker(50, 50, 0.5, 3.0, rng=rng)


def assert_valid_packing(circles, width, height, eps=1e-9):
    for c in circles:
        assert abs(c.x) + c.radius < width / 2
        assert abs(c.y) + c.radius < height / 2
    for a, b in itertools.combinations(circles, 2):
        assert a.distance_to(b) >= a.radius + b.radius - eps


# ============== Packer Tests ==============

class TestCirclePacker:
    """Test random-placement circle packing."""

    def test_default_scenario(self, default_packer):
        """20 circles, radii 0.5-3 in 50x50 within 5000 attempts."""
        circles = default_packer.pack(20)

        assert 1 <= len(circles) <= 20
        assert_valid_packing(circles, 50, 50)

    def test_many_circles_never_overlap(self, rng):
        packer = CirclePacker(30, 20, 0.3, 2.0, rng=rng)
        circles = packer.pack(200)

        assert len(circles) > 0
        assert_valid_packing(circles, 30, 20)

    def test_same_seed_same_sequence(self):
        a = CirclePacker(50, 50, 0.5, 3.0, rng=np.random.default_rng(7)).pack(25)
        b = CirclePacker(50, 50, 0.5, 3.0, rng=np.random.default_rng(7)).pack(25)

        assert a == b

    def test_different_seed_differs(self):
        a = CirclePacker(50, 50, 0.5, 3.0, rng=np.random.default_rng(1)).pack(10)
        b = CirclePacker(50, 50, 0.5, 3.0, rng=np.random.default_rng(2)).pack(10)

        assert a != b

    def test_under_delivery_is_not_an_error(self, rng):
        """Radii that cannot fit give an empty result, not an exception."""
        packer = CirclePacker(10, 10, 6.0, 8.0, rng=rng)
        assert packer.pack(5) == []

    def test_attempt_budget_limits_trials(self, rng):
        packer = CirclePacker(50, 50, 0.5, 3.0, attempts=0, rng=rng)
        assert packer.pack(10) == []

    def test_non_positive_count(self, default_packer):
        assert default_packer.pack(0) == []
        assert default_packer.pack(-3) == []

    def test_stops_at_target(self, rng):
        packer = CirclePacker(100, 100, 0.5, 1.0, rng=rng)
        assert len(packer.pack(5)) == 5

    def test_repack_resets_state(self, default_packer):
        first = default_packer.pack(10)
        second = default_packer.pack(3)

        assert len(second) <= 3
        assert default_packer.circles == second
        assert first != second

    def test_radii_within_range(self, default_packer):
        circles = default_packer.pack(30)
        for c in circles:
            assert 0.5 <= c.radius <= 3.0

    def test_bounds_and_overlap_helpers(self, rng):
        packer = CirclePacker(10, 10, 1.0, 1.0, rng=rng)

        assert packer.is_within_bounds(0, 0, 1)
        assert not packer.is_within_bounds(4.5, 0, 1)
        # Touching the edge is outside (strict inset)
        assert not packer.is_within_bounds(4.0, 0, 1)
        assert not packer.is_overlapping(0, 0, 1)

    def test_inverted_radius_range_is_clamped(self, rng):
        packer = CirclePacker(50, 50, 2.0, 1.0, rng=rng)
        assert packer.max_radius == packer.min_radius == 2.0

    def test_circle_is_immutable(self):
        c = Circle(1.0, 2.0, 0.5)
        with pytest.raises(AttributeError):
            c.x = 3.0


# ============== Cube Stamping Tests ==============

class TestStampCubes:
    """Test per-cube triangulation."""

    def test_single_cube_is_outward_closed_box(self):
        mesh = stamp_cubes(np.array([[1.0, 2.0, 3.0]]), 2.0)

        assert len(mesh.vertices) == 8
        assert len(mesh.faces) == 12
        assert mesh.is_watertight
        assert mesh.is_winding_consistent
        # Outward winding gives a positive signed volume
        assert mesh.volume == pytest.approx(8.0)
        np.testing.assert_allclose(mesh.bounds, [[0, 1, 2], [2, 3, 4]])

    def test_no_welding_between_cubes(self):
        """Adjacent cubes share positions but not vertex indices."""
        centers = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        mesh = stamp_cubes(centers, 1.0)

        assert len(mesh.vertices) == 16
        assert len(mesh.faces) == 24
        assert set(mesh.faces[:12].ravel()) == set(range(8))
        assert set(mesh.faces[12:].ravel()) == set(range(8, 16))

    def test_empty_centers(self):
        mesh = stamp_cubes(np.zeros((0, 3)), 1.0)
        assert len(mesh.vertices) == 0
        assert len(mesh.faces) == 0


# ============== Diamond Synthesis Tests ==============

class TestParametricDiamond:
    """Test lattice diamond synthesis."""

    def test_vertical_extent(self):
        """synthesize(3, 2, 3) stays within [-height, 0.4 * height]."""
        mesh = synthesize(radius=3, height=2, layer_count=3)

        y = mesh.vertices[:, 1]
        assert len(y) > 0
        assert y.min() >= -2 - 1e-9
        assert y.max() <= 0.8 + 1e-9

    def test_degenerate_input_gives_minimal_mesh(self):
        mesh = synthesize(radius=0, height=0, layer_count=3)

        assert len(mesh.vertices) > 0
        assert len(mesh.faces) > 0
        assert indices_in_range(mesh)

    def test_negative_inputs_are_clamped(self):
        diamond = ParametricDiamond(-1.0, -5.0, 0)
        assert diamond.radius == MIN_DIMENSION
        assert diamond.height == MIN_DIMENSION
        assert diamond.layers == 1

    @pytest.mark.parametrize("radius,height,layers", [
        (3.0, 2.0, 3),
        (0.5, 2.8, 4),
        (2.0, 0.3, 3),
        (1.0, 1.0, 1),
    ])
    def test_indices_in_range(self, radius, height, layers):
        mesh = synthesize(radius, height, layers)

        assert mesh.faces.shape[1] == 3
        assert indices_in_range(mesh)
        assert len(mesh.vertices) % 8 == 0
        assert len(mesh.faces) == len(mesh.vertices) // 8 * 12

    def test_cube_size(self):
        diamond = ParametricDiamond(3, 2, 3)
        assert diamond.cube_size == pytest.approx(2 / 6)

    def test_envelope_cones(self):
        diamond = ParametricDiamond(3, 2, 3)

        assert diamond.envelope(0.0) == pytest.approx(3.0)
        assert diamond.envelope(-2.0) == pytest.approx(0.0)
        assert diamond.envelope(0.8) == pytest.approx(0.0)
        # Crown is steeper than the pavilion
        assert diamond.envelope(0.4) < diamond.envelope(-0.4)

    def test_cubes_inside_envelope(self):
        diamond = ParametricDiamond(3, 2, 3)
        centers = diamond.cube_centers()

        radial = np.hypot(centers[:, 0], centers[:, 2])
        for r, y in zip(radial, centers[:, 1]):
            assert r <= diamond.envelope(y) + 1e-9

    def test_more_layers_more_triangles(self):
        coarse = synthesize(3, 2, 2)
        fine = synthesize(3, 2, 4)
        assert len(fine.faces) > len(coarse.faces)

    def test_cubes_leave_gaps(self):
        diamond = ParametricDiamond(3, 2, 3)
        mesh = diamond.create_geometry()

        first_cube = mesh.vertices[:8]
        edge = first_cube.max(axis=0) - first_cube.min(axis=0)
        np.testing.assert_allclose(edge, [diamond.cube_size * CUBE_FILL] * 3)

    def test_centered_on_vertical_axis(self):
        mesh = synthesize(3, 2, 3)
        center_xz = mesh.vertices[:, [0, 2]].mean(axis=0)
        np.testing.assert_allclose(center_xz, [0, 0], atol=0.05)


# ============== Build Tests ==============

class TestHeightLevels:

    def test_default_levels(self):
        levels = height_levels(2.0)

        assert len(levels) == 10
        assert levels[0] == pytest.approx(1.6)
        assert levels[-1] == pytest.approx(2.8)
        assert levels == sorted(levels)

    def test_rounded_to_one_decimal(self):
        for level in height_levels(1.37, 10):
            assert level == pytest.approx(round(level, 1))

    def test_single_level(self):
        assert height_levels(2.0, 1) == [pytest.approx(1.6)]


class TestAppearance:

    def test_light_and_dark_ranges(self, rng):
        for _ in range(200):
            a = draw_appearance(rng)
            if a.shade == LIGHT:
                assert 0.7 <= a.grey <= 1.0
                assert 0.7 <= a.opacity <= 0.9
            else:
                assert a.shade == DARK
                assert 0.0 <= a.grey <= 0.3
                assert 0.8 <= a.opacity <= 0.95

    def test_light_fraction(self, rng):
        shades = [draw_appearance(rng, 0.65).shade for _ in range(2000)]
        fraction = shades.count(LIGHT) / len(shades)
        assert 0.58 < fraction < 0.72

    def test_spin_bias(self, rng):
        spins = np.array([draw_spin(rng) for _ in range(200)])
        assert np.all(np.abs(spins[:, [0, 2]]) <= 0.01)
        assert np.all((spins[:, 1] >= 0.0) & (spins[:, 1] <= 0.02))


class TestBuildJewelField:

    def test_build_default(self):
        config = Config(seed=11)
        jewel_field, metadata = build_jewel_field(JewelParams(), config)

        assert 1 <= len(jewel_field) <= 20
        assert metadata.pipeline == "jewel"
        assert metadata.n_triangles == len(jewel_field.combined_mesh().faces)
        assert metadata.generation_params["computed"]["n_circles"] == len(jewel_field)

    def test_diamonds_placed_on_circles(self):
        jewel_field, _ = build_jewel_field(JewelParams(count=8), Config(seed=5))
        levels = height_levels(2.0)

        for d in jewel_field.diamonds:
            placed = d.placed_mesh()
            center = placed.vertices[:, [0, 2]].mean(axis=0)
            np.testing.assert_allclose(center, [d.circle.x, d.circle.y], atol=0.1)
            assert d.height in levels
            assert d.layers in (3, 4)

    def test_deterministic_with_seed(self):
        a, _ = build_jewel_field(JewelParams(count=6), Config(seed=99))
        b, _ = build_jewel_field(JewelParams(count=6), Config(seed=99))

        assert [d.circle for d in a.diamonds] == [d.circle for d in b.diamonds]
        np.testing.assert_array_equal(a.combined_mesh().vertices, b.combined_mesh().vertices)

    def test_scene_parts_carry_spin_and_shade(self):
        params = JewelParams(count=4, rotation=2.0)
        jewel_field, _ = build_jewel_field(params, Config(seed=3))
        parts = jewel_field.scene_parts()

        assert len(parts) == len(jewel_field)
        for part, d in zip(parts, jewel_field.diamonds):
            assert part.extras["shade"] == d.appearance.shade
            np.testing.assert_allclose(part.extras["spin"], d.spin * 2.0)
            np.testing.assert_allclose(part.translation, [d.circle.x, 0.0, d.circle.y])

    def test_empty_field(self):
        params = JewelParams(count=5, min_radius=40, max_radius=50)
        jewel_field, metadata = build_jewel_field(params, Config(seed=1))

        assert len(jewel_field) == 0
        assert metadata.n_vertices == 0
        assert len(jewel_field.combined_mesh().faces) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
