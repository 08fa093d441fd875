"""Core algorithms for energyshift."""

from .changepoint import (
    ChangepointResult,
    InsufficientDataError,
    amoc,
    detect,
    penalty_value,
    rss_profile,
    total_rss,
)
from .decompose import DecompositionResult, InvalidInputError, decompose, moving_average_trend

__all__ = [
    "ChangepointResult",
    "InsufficientDataError",
    "amoc",
    "detect",
    "penalty_value",
    "rss_profile",
    "total_rss",
    "DecompositionResult",
    "InvalidInputError",
    "decompose",
    "moving_average_trend",
]
