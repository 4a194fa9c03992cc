"""Custom exceptions and warnings for terrain synthesis."""


class TerrainError(Exception):
    """Base exception for terrain errors."""

    pass


class ConfigurationError(TerrainError, ValueError):
    """Raised when generation parameters are invalid.

    Generation aborts before any grid is allocated.
    """

    pass


class SamplingOutOfRange(TerrainError):
    """Raised by strict samplers when a coordinate falls outside the grid.

    The public accessors clamp instead of raising.
    """

    pass


class DegenerateInputWarning(UserWarning):
    """Emitted when an input is degenerate but can be recovered locally."""

    pass
