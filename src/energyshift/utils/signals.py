"""Small numeric helpers shared by the decomposition and detection code."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def mean(data: Sequence[float]) -> float:
    """Return the arithmetic mean of *data*.

    ``ValueError`` is raised for empty sequences.
    """

    arr = np.asarray(data, dtype=float)
    if arr.size == 0:
        raise ValueError("data must not be empty")
    return float(arr.sum() / arr.size)


def rss(data: Sequence[float]) -> float:
    """Return the residual sum of squares of *data* around its mean."""

    arr = np.asarray(data, dtype=float)
    if arr.size == 0:
        raise ValueError("data must not be empty")
    dev = arr - arr.mean()
    return float(np.dot(dev, dev))


def centered_weights(period: int) -> np.ndarray:
    """Return the kernel of a centred moving average spanning ``period``.

    Odd periods use ``period`` equal weights.  Even periods combine an
    order-``period`` average with an order-2 average, which gives
    ``period + 1`` weights with halved end points.  Either way the kernel has
    ``2 * (period // 2) + 1`` taps and sums to one.
    """

    if period < 1:
        raise ValueError("period must be positive")
    if period % 2:
        return np.full(period, 1.0 / period)
    weights = np.ones(period + 1)
    weights[0] = weights[-1] = 0.5
    return weights / period
