"""Tests for noise generation functions."""

import numpy as np
import pytest

from islandgen.config import NoiseConfig
from islandgen.noise import (
    OFFSET_RANGE,
    NoiseField,
    octave_offsets,
    perlin_noise,
    smoothstep,
)


class TestPerlinNoise:
    """Tests for the coherent noise primitive."""

    def test_lattice_points_are_half(self) -> None:
        """Integer coordinates evaluate to exactly 0.5."""
        xs = np.arange(-5, 6, dtype=np.float64)
        result = perlin_noise(xs, 3.0)
        np.testing.assert_array_equal(result, 0.5)

    def test_output_range(self) -> None:
        """Values stay within [0, 1]."""
        rng = np.random.default_rng(0)
        x = rng.uniform(-1000, 1000, size=5000)
        y = rng.uniform(-1000, 1000, size=5000)
        result = perlin_noise(x, y)
        assert result.min() >= 0.0
        assert result.max() <= 1.0

    def test_pure_function(self) -> None:
        """Same coordinates always give the same value."""
        x = np.linspace(0.1, 20.3, 57)
        y = np.linspace(-4.2, 9.9, 57)
        np.testing.assert_array_equal(perlin_noise(x, y), perlin_noise(x, y))

    def test_scalar_input(self) -> None:
        """Scalar inputs give a scalar-shaped result."""
        result = perlin_noise(1.3, 2.7)
        assert result.shape == ()

    def test_continuous(self) -> None:
        """Small steps produce small changes."""
        x = np.linspace(0.05, 10.05, 300)
        a = perlin_noise(x, 0.37)
        b = perlin_noise(x + 1e-5, 0.37)
        assert np.max(np.abs(a - b)) < 1e-3

    def test_not_constant(self) -> None:
        """Off-lattice samples vary."""
        x = np.linspace(0.05, 10.05, 300)
        result = perlin_noise(x, 0.37)
        assert result.std() > 0.02

    def test_reference_values(self) -> None:
        """Cell centres match values worked out from the permutation table."""
        assert perlin_noise(0.5, 0.5) == 0.5625
        assert perlin_noise(1.5, 0.5) == 0.3125

    def test_period_256(self) -> None:
        """The lattice repeats every 256 units."""
        assert perlin_noise(256.5, 0.5) == perlin_noise(0.5, 0.5)
        assert perlin_noise(1.5, 256.5) == perlin_noise(1.5, 0.5)

    def test_negative_coordinates(self) -> None:
        """Negative coordinates are handled by the lattice wrap."""
        result = perlin_noise(np.array([-0.5, -100.25, -255.75]), -3.5)
        assert np.all((result >= 0.0) & (result <= 1.0))


class TestOctaveOffsets:
    """Tests for seeded octave offsets."""

    def test_shape(self) -> None:
        """One 2D offset per octave."""
        offsets = octave_offsets(np.random.default_rng(1), 5)
        assert offsets.shape == (5, 2)

    def test_range(self) -> None:
        """Offsets are bounded."""
        offsets = octave_offsets(np.random.default_rng(1), 50)
        assert np.all(offsets >= -OFFSET_RANGE)
        assert np.all(offsets < OFFSET_RANGE)

    def test_deterministic(self) -> None:
        """Same seed gives the same offsets."""
        a = octave_offsets(np.random.default_rng(99), 4)
        b = octave_offsets(np.random.default_rng(99), 4)
        np.testing.assert_array_equal(a, b)

    def test_user_offset_added(self) -> None:
        """The user offset shifts every drawn offset."""
        base = octave_offsets(np.random.default_rng(7), 3)
        shifted = octave_offsets(np.random.default_rng(7), 3, offset=(10.0, -2.5))
        np.testing.assert_array_equal(shifted - base, np.tile([10.0, -2.5], (3, 1)))


class TestNoiseField:
    """Tests for the fractal noise evaluator."""

    def test_same_seed_agrees_everywhere(self) -> None:
        """Two fields from the same seed agree exactly."""
        config = NoiseConfig(scale=13.0, octaves=5)
        a = NoiseField.from_seed(42, config)
        b = NoiseField.from_seed(42, config)
        x = np.linspace(-50, 50, 101)
        np.testing.assert_array_equal(a.evaluate(x, x * 0.5), b.evaluate(x, x * 0.5))

    def test_different_seed_different_output(self) -> None:
        """Different seeds produce different output."""
        config = NoiseConfig(scale=13.0)
        a = NoiseField.from_seed(1, config).evaluate_grid(32, 32)
        b = NoiseField.from_seed(2, config).evaluate_grid(32, 32)
        assert not np.allclose(a, b)

    def test_bounded_by_amplitude_sum(self) -> None:
        """Absolute values never exceed the amplitude series sum."""
        field = NoiseField.from_seed(5, NoiseConfig(scale=7.0, octaves=6, persistence=0.6))
        values = field.evaluate_grid(64, 64)
        assert np.abs(values).max() <= field.amplitude_sum

    def test_amplitude_sum(self) -> None:
        """Amplitude sum is the geometric series of persistence."""
        field = NoiseField.from_seed(5, NoiseConfig(octaves=3, persistence=0.5))
        assert field.amplitude_sum == pytest.approx(1.75)

    def test_single_octave_matches_primitive(self) -> None:
        """One octave is the primitive mapped to [-1, 1] at scaled coordinates."""
        offsets = np.array([[3.0, -8.0]])
        field = NoiseField(scale=10.0, persistence=0.5, lacunarity=2.0, offsets=offsets)
        x = np.array([0.0, 4.0, 17.0])
        y = np.array([2.0, 9.0, 33.0])
        expected = perlin_noise(x / 10.0 + 3.0, y / 10.0 - 8.0) * 2.0 - 1.0
        np.testing.assert_allclose(field.evaluate(x, y), expected)

    def test_octaves_accumulate(self) -> None:
        """Second octave uses lacunarity frequency and persistence amplitude."""
        offsets = np.array([[1.5, 2.5], [-7.0, 4.0]])
        field = NoiseField(scale=5.0, persistence=0.4, lacunarity=3.0, offsets=offsets)
        x, y = 12.0, 6.0
        first = perlin_noise(x / 5.0 + 1.5, y / 5.0 + 2.5) * 2.0 - 1.0
        second = perlin_noise(x / 5.0 * 3.0 - 7.0, y / 5.0 * 3.0 + 4.0) * 2.0 - 1.0
        assert float(field.evaluate(x, y)) == pytest.approx(float(first + 0.4 * second))

    def test_unsigned_field_in_unit_range(self) -> None:
        """An unsigned single-octave field stays in [0, 1]."""
        field = NoiseField(
            scale=30.0,
            persistence=1.0,
            lacunarity=1.0,
            offsets=np.array([[123.0, -456.0]]),
            signed=False,
        )
        values = field.evaluate_grid(64, 64)
        assert values.min() >= 0.0
        assert values.max() <= 1.0

    def test_grid_shape(self) -> None:
        """Grid output is (height, width)."""
        field = NoiseField.from_seed(3, NoiseConfig())
        assert field.evaluate_grid(40, 25).shape == (25, 40)

    def test_rows_match_grid(self) -> None:
        """A row block equals the same rows of the full grid."""
        field = NoiseField.from_seed(3, NoiseConfig(scale=9.0))
        grid = field.evaluate_grid(30, 20)
        rows = field.evaluate_rows(5, 12, 30)
        np.testing.assert_array_equal(rows, grid[5:12])

    def test_more_octaves_more_detail(self) -> None:
        """More octaves adds higher frequency detail."""
        low = NoiseField.from_seed(42, NoiseConfig(scale=30.0, octaves=1)).evaluate_grid(64, 64)
        high = NoiseField.from_seed(42, NoiseConfig(scale=30.0, octaves=6)).evaluate_grid(64, 64)

        grad_low = np.abs(np.diff(low, axis=0)).mean()
        grad_high = np.abs(np.diff(high, axis=0)).mean()

        assert grad_high > grad_low


class TestSmoothstep:
    """Tests for smoothstep function."""

    def test_below_edge0_returns_zero(self) -> None:
        """Values below edge0 return 0."""
        x = np.array([-1.0, 0.0, 0.1])
        result = smoothstep(0.2, 0.8, x)
        np.testing.assert_array_equal(result, [0.0, 0.0, 0.0])

    def test_above_edge1_returns_one(self) -> None:
        """Values above edge1 return 1."""
        x = np.array([0.9, 1.0, 1.5])
        result = smoothstep(0.2, 0.8, x)
        np.testing.assert_array_equal(result, [1.0, 1.0, 1.0])

    def test_midpoint_returns_half(self) -> None:
        """Midpoint between edges returns 0.5."""
        result = smoothstep(0.0, 1.0, np.array([0.5]))
        assert result[0] == 0.5
