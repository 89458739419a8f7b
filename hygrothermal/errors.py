"""Errors raised by the hygrothermal engine.

All of them derive from ``ValueError``.
"""


class HygrothermalError(ValueError):
    """Base class for every error the engine raises on bad input."""


class InvalidConstructionError(HygrothermalError):
    """Empty layer list, non-positive thickness or conductivity, bad resistances."""


class InvalidClimateSeriesError(HygrothermalError):
    """Climate series of the wrong length or with out-of-range values."""


class InvalidGroundParamsError(HygrothermalError):
    """Non-positive perimeter/area or otherwise unusable ground-floor input."""


class NumericDegeneracyError(HygrothermalError):
    """A total resistance is zero or negative, so no finite profile exists."""
