"""API route modules."""

from . import adherence, calibration

__all__ = ["adherence", "calibration"]
