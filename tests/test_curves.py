"""Tests for keyframe curves and colour gradients."""

import numpy as np
import pytest

from islandgen.config import CurveConfig
from islandgen.curves import ColorGradient, Curve


class TestCurve:
    """Tests for the keyframe curve evaluator."""

    def test_linear_identity(self) -> None:
        """The default ramp returns its input inside [0, 1]."""
        curve = Curve.linear()
        x = np.array([0.0, 0.25, 0.5, 1.0])
        np.testing.assert_allclose(curve.evaluate(x), x)

    def test_pinned_to_domain(self) -> None:
        """Inputs outside the keys return the end values."""
        curve = Curve.from_keys([(0.2, 0.1), (0.8, 0.9)])
        np.testing.assert_array_equal(curve.evaluate([-5.0, 0.0, 1.0, 7.0]), [0.1, 0.1, 0.9, 0.9])

    def test_piecewise_segments(self) -> None:
        """Each segment interpolates its own pair of keys."""
        curve = Curve.from_keys([(0.0, 0.0), (0.5, 0.4), (1.0, 1.0)])
        assert float(curve.evaluate(0.25)) == pytest.approx(0.2)
        assert float(curve.evaluate(0.75)) == pytest.approx(0.7)

    def test_unsorted_keys(self) -> None:
        """Keys are ordered by time regardless of input order."""
        a = Curve.from_keys([(1.0, 1.0), (0.0, 0.0), (0.5, 0.4)])
        b = Curve.from_keys([(0.0, 0.0), (0.5, 0.4), (1.0, 1.0)])
        x = np.linspace(0, 1, 11)
        np.testing.assert_array_equal(a.evaluate(x), b.evaluate(x))

    def test_empty_is_identity(self) -> None:
        """A curve without keys returns its input."""
        curve = Curve.from_keys([])
        assert curve.is_empty
        x = np.array([-1.0, 0.3, 2.0])
        np.testing.assert_array_equal(curve.evaluate(x), x)

    def test_single_key_constant(self) -> None:
        """A single key gives a constant curve."""
        curve = Curve.from_keys([(0.4, 0.7)])
        np.testing.assert_array_equal(curve.evaluate([0.0, 0.4, 1.0]), [0.7, 0.7, 0.7])

    def test_ease_in_out_endpoints(self) -> None:
        """Ease-in-out hits its keys exactly."""
        curve = Curve.ease_in_out()
        np.testing.assert_array_equal(curve.evaluate([0.0, 0.5, 1.0]), [0.0, 0.5, 1.0])

    def test_ease_in_out_shape(self) -> None:
        """Ease-in-out follows smoothstep between its keys."""
        curve = Curve.ease_in_out()
        assert float(curve.evaluate(0.25)) == pytest.approx(0.15625)
        assert float(curve.evaluate(0.75)) == pytest.approx(0.84375)

    def test_smooth_is_monotonic(self) -> None:
        """Smooth segments between ascending keys never decrease."""
        curve = Curve.from_keys([(0.0, 0.0), (0.3, 0.6), (1.0, 1.0)], interpolation="smooth")
        values = curve.evaluate(np.linspace(-0.5, 1.5, 401))
        assert np.all(np.diff(values) >= 0)

    def test_from_config(self) -> None:
        """A CurveConfig builds the equivalent curve."""
        config = CurveConfig(keys=[(0.0, 1.0), (1.0, 0.0)])
        curve = Curve.from_config(config)
        assert float(curve.evaluate(0.25)) == pytest.approx(0.75)

    def test_keys_read_only(self) -> None:
        """Key arrays cannot be mutated."""
        curve = Curve.linear()
        with pytest.raises(ValueError):
            curve.values[0] = 5.0


class TestColorGradient:
    """Tests for the keyframe colour gradient."""

    @pytest.fixture
    def gradient(self) -> ColorGradient:
        return ColorGradient.from_keys([(0.0, (0.0, 0.0, 0.0)), (1.0, (1.0, 0.5, 0.0))])

    def test_midpoint(self, gradient: ColorGradient) -> None:
        """Halfway between keys mixes each channel halfway."""
        np.testing.assert_allclose(gradient.evaluate(0.5), [0.5, 0.25, 0.0])

    def test_clamped(self, gradient: ColorGradient) -> None:
        """Positions outside the keys take the end colours."""
        np.testing.assert_array_equal(gradient.evaluate(-1.0), [0.0, 0.0, 0.0])
        np.testing.assert_array_equal(gradient.evaluate(3.0), [1.0, 0.5, 0.0])

    def test_output_shape(self, gradient: ColorGradient) -> None:
        """An array of positions gains a trailing RGB axis."""
        assert gradient.evaluate(np.zeros((4, 5))).shape == (4, 5, 3)

    def test_empty_rejected(self) -> None:
        """A gradient needs at least one key."""
        with pytest.raises(ValueError):
            ColorGradient.from_keys([])

    def test_non_rgb_rejected(self) -> None:
        """Colours must have three channels."""
        with pytest.raises(ValueError):
            ColorGradient.from_keys([(0.0, (1.0, 0.0))])
