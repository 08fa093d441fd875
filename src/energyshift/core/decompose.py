"""Classical additive seasonal decomposition.

The series is split as

.. math::

   y_i = S_i + T_i + R_i

where :math:`T` is a centred moving average of width ``period``, :math:`S`
repeats one figure per phase ``i mod period`` and :math:`R` is what is left.
The moving average cannot be evaluated within ``period // 2`` samples of
either boundary; ``trend`` and ``residual`` hold ``NaN`` there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..utils.signals import centered_weights


class InvalidInputError(ValueError):
    """Raised when a series cannot be decomposed with the requested period."""


@dataclass
class DecompositionResult:
    """Components of an additive decomposition.

    Attributes
    ----------
    seasonal:
        Periodic component with the same length as the input.
    trend:
        Centred moving average; ``NaN`` in the two boundary windows.
    residual:
        ``values - trend - seasonal``; ``NaN`` wherever ``trend`` is.
    figure:
        The ``period`` seasonal figures, summing to zero.
    period:
        Number of samples per seasonal cycle.
    """

    seasonal: np.ndarray
    trend: np.ndarray
    residual: np.ndarray
    figure: np.ndarray
    period: int

    def __len__(self) -> int:
        return len(self.seasonal)

    @property
    def defined(self) -> np.ndarray:
        """Boolean mask of positions where trend and residual are defined."""

        return ~np.isnan(self.trend)

    def deseasonalized(self, values: Sequence[float]) -> np.ndarray:
        """Return ``values`` with the seasonal component removed."""

        arr = np.asarray(values, dtype=float)
        if arr.shape != self.seasonal.shape:
            raise ValueError("values must match the decomposed series length")
        return arr - self.seasonal


def moving_average_trend(values: Sequence[float], period: int) -> np.ndarray:
    """Return the centred moving average of ``values`` for ``period``.

    The filter is applied as an explicit convolution; only fully covered
    positions get a value and the first and last ``period // 2`` entries are
    ``NaN``.
    """

    arr = np.asarray(values, dtype=float)
    weights = centered_weights(period)
    half = period // 2
    trend = np.full(arr.shape, np.nan)
    if arr.size < weights.size:
        return trend
    trend[half : arr.size - half] = np.convolve(arr, weights[::-1], mode="valid")
    return trend


def decompose(values: Sequence[float], period: int) -> DecompositionResult:
    """Decompose ``values`` into seasonal, trend and residual components.

    Parameters
    ----------
    values:
        Evenly spaced samples with no gaps.
    period:
        Samples per seasonal cycle, e.g. ``52`` for weekly data with a
        yearly cycle.

    Returns
    -------
    DecompositionResult
        Components with the same length as ``values``.

    Raises
    ------
    InvalidInputError
        If ``period < 2``, the series covers fewer than two full periods or
        contains non-finite values.
    """

    if int(period) != period or period < 2:
        raise InvalidInputError(f"period must be an integer >= 2, got {period!r}")
    period = int(period)
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise InvalidInputError("values must be one-dimensional")
    n = arr.size
    if n < 2 * period:
        raise InvalidInputError(
            f"series of length {n} is shorter than two periods ({2 * period} samples)"
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError("values must be finite")

    trend = moving_average_trend(arr, period)
    detrended = arr - trend

    phase = np.arange(n) % period
    defined = ~np.isnan(detrended)
    sums = np.bincount(phase[defined], weights=detrended[defined], minlength=period)
    counts = np.bincount(phase[defined], minlength=period)
    figure = sums / counts
    figure -= figure.mean()

    seasonal = figure[phase]
    residual = arr - trend - seasonal
    return DecompositionResult(
        seasonal=seasonal,
        trend=trend,
        residual=residual,
        figure=figure,
        period=period,
    )
