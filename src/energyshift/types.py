"""Common type helpers for energyshift.

This module defines the lightweight containers exchanged between the
ingestion stage, the numeric core and the reporting helpers.  The core
itself only ever sees plain value arrays; the timestamp mapping lives here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class Segment:
    """Half-open index range ``[start, end)`` with the mean over it."""

    start: int
    end: int
    mean: float

    @property
    def length(self) -> int:
        """Return the number of samples covered by the segment."""

        return self.end - self.start


@dataclass
class TimeSeries:
    """Evenly spaced timestamped series.

    ``timestamps`` are stored as ``datetime64[ns]`` and must be strictly
    increasing with a constant step.  Gaps have to be filled or trimmed
    before a series is built; ``ValueError`` is raised otherwise.
    """

    timestamps: np.ndarray
    values: np.ndarray

    def __post_init__(self) -> None:
        self.timestamps = np.asarray(self.timestamps, dtype="datetime64[ns]")
        self.values = np.asarray(self.values, dtype=float)
        if self.timestamps.ndim != 1 or self.values.ndim != 1:
            raise ValueError("timestamps and values must be one-dimensional")
        if len(self.timestamps) != len(self.values):
            raise ValueError("timestamps and values must have the same length")
        if len(self.timestamps) > 1:
            steps = np.diff(self.timestamps)
            if np.any(steps <= np.timedelta64(0, "ns")):
                raise ValueError("timestamps must be strictly increasing")
            if np.any(steps != steps[0]):
                raise ValueError("timestamps must be uniformly spaced")

    def __len__(self) -> int:
        return len(self.values)

    @property
    def step(self) -> np.timedelta64 | None:
        """Return the spacing between samples, or ``None`` for short series."""

        if len(self.timestamps) < 2:
            return None
        return self.timestamps[1] - self.timestamps[0]

    def timestamp_at(self, index: int) -> np.datetime64:
        """Map a positional index back to its timestamp."""

        if not 0 <= index < len(self.timestamps):
            raise IndexError(f"index {index} out of range for series of length {len(self)}")
        return self.timestamps[index]

    @classmethod
    def from_values(
        cls,
        values: Sequence[float],
        start: str | np.datetime64 = "2000-01-02",
        step: str | np.timedelta64 = "7D",
    ) -> "TimeSeries":
        """Build a series with synthetic timestamps starting at ``start``."""

        vals = np.asarray(values, dtype=float)
        if isinstance(step, str):
            step = np.timedelta64(int(step[:-1]), step[-1])
        start64 = np.datetime64(start, "ns")
        stamps = start64 + np.arange(len(vals)) * np.timedelta64(step, "ns")
        return cls(stamps, vals)
