"""Keyframe curve and colour gradient evaluators.

Both evaluators are pure: they hold immutable key arrays and clamp inputs
to the keyed domain, so evaluating outside the first or last key returns
the end value.
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import CurveConfig
from .noise import smoothstep


@dataclass(frozen=True, eq=False)
class Curve:
    """Piecewise keyframe curve over a scalar domain.

    With ``interpolation="linear"`` segments are straight lines. With
    ``"smooth"`` each segment eases in and out (flat tangents at every key).
    """

    times: NDArray[np.float64]
    values: NDArray[np.float64]
    interpolation: str = "linear"

    @classmethod
    def from_keys(
        cls,
        keys: list[tuple[float, float]],
        interpolation: str = "linear",
    ) -> "Curve":
        """Build a curve from (time, value) pairs in any order."""
        ordered = sorted(keys, key=lambda k: k[0])
        times = np.array([k[0] for k in ordered], dtype=np.float64)
        values = np.array([k[1] for k in ordered], dtype=np.float64)
        times.setflags(write=False)
        values.setflags(write=False)
        return cls(times=times, values=values, interpolation=interpolation)

    @classmethod
    def from_config(cls, config: CurveConfig) -> "Curve":
        return cls.from_keys(list(config.keys), config.interpolation)

    @classmethod
    def linear(cls) -> "Curve":
        """Identity ramp from (0, 0) to (1, 1)."""
        return cls.from_keys([(0.0, 0.0), (1.0, 1.0)])

    @classmethod
    def ease_in_out(cls) -> "Curve":
        """Ramp from (0, 0) to (1, 1) with flat ends."""
        return cls.from_keys([(0.0, 0.0), (1.0, 1.0)], interpolation="smooth")

    @property
    def is_empty(self) -> bool:
        return self.times.size == 0

    def evaluate(self, x: ArrayLike) -> NDArray[np.float64]:
        """Evaluate the curve at x.

        An empty curve is the identity. A single key is a constant.

        Args:
            x: Scalar or array of sample positions.

        Returns:
            Array of curve values with the same shape as x.
        """
        x = np.asarray(x, dtype=np.float64)
        if self.is_empty:
            return x.copy()
        if self.times.size == 1:
            return np.full_like(x, self.values[0])

        if self.interpolation == "linear":
            return np.interp(x, self.times, self.values)

        clamped = np.clip(x, self.times[0], self.times[-1])
        # Segment i spans keys i and i + 1
        idx = np.clip(
            np.searchsorted(self.times, clamped, side="right") - 1,
            0,
            self.times.size - 2,
        )
        t0 = self.times[idx]
        t1 = self.times[idx + 1]
        v0 = self.values[idx]
        v1 = self.values[idx + 1]
        span = t1 - t0
        t = np.divide(clamped - t0, span, out=np.ones_like(clamped), where=span > 0)
        eased = smoothstep(0.0, 1.0, t)
        return v0 + (v1 - v0) * eased


@dataclass(frozen=True, eq=False)
class ColorGradient:
    """Keyframe colour gradient with linear RGB interpolation."""

    times: NDArray[np.float64]
    colors: NDArray[np.float64] = field(repr=False)

    @classmethod
    def from_keys(cls, keys: list[tuple[float, tuple[float, float, float]]]) -> "ColorGradient":
        """Build a gradient from (time, (r, g, b)) pairs with channels in [0, 1]."""
        if not keys:
            raise ValueError("A colour gradient needs at least one key")
        ordered = sorted(keys, key=lambda k: k[0])
        times = np.array([k[0] for k in ordered], dtype=np.float64)
        colors = np.array([k[1] for k in ordered], dtype=np.float64)
        if colors.ndim != 2 or colors.shape[1] != 3:
            raise ValueError("Gradient colours must be RGB triples")
        times.setflags(write=False)
        colors.setflags(write=False)
        return cls(times=times, colors=colors)

    def evaluate(self, t: ArrayLike) -> NDArray[np.float64]:
        """Evaluate the gradient.

        Args:
            t: Scalar or array of positions.

        Returns:
            Array of shape ``t.shape + (3,)`` with channels in [0, 1].
        """
        t = np.asarray(t, dtype=np.float64)
        channels = [
            np.interp(t, self.times, self.colors[:, c]) for c in range(3)
        ]
        return np.stack(channels, axis=-1)
