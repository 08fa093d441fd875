"""At-most-one changepoint (AMOC) detection for a shift in mean.

Every admissible split ``k`` divides the series into ``values[:k]`` and
``values[k:]``.  The split that removes the most residual sum of squares
relative to the unsplit series is the candidate changepoint; it is accepted
only when that reduction exceeds a penalty.  Segment sums are taken from
prefix sums so the whole scan is linear in the series length.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..utils.signals import mean, rss

MIN_LENGTH = 4
TIE_RTOL = 1e-12

PENALTIES = ("MBIC", "BIC", "SIC", "AIC", "Hannan-Quinn", "Manual", "None")


class InsufficientDataError(ValueError):
    """Raised when a series is too short to hold two segments."""


@dataclass(frozen=True)
class ChangepointResult:
    """Outcome of a single-changepoint search.

    Attributes
    ----------
    index:
        0-based index ``k`` of the first sample after the shift, or ``None``
        when no split beats the penalty.
    candidate:
        Best split regardless of the penalty.
    statistic:
        ``RSS_total - RSS(candidate)``.
    penalty:
        Threshold the statistic had to exceed.
    total_rss:
        Residual sum of squares of the unsplit series.
    mean_before, mean_after:
        Segment means on either side of ``candidate``.
    n:
        Length of the searched series.
    """

    index: int | None
    candidate: int
    statistic: float
    penalty: float
    total_rss: float
    mean_before: float
    mean_after: float
    n: int

    @property
    def found(self) -> bool:
        return self.index is not None

    @property
    def shift(self) -> float:
        """Difference between the after and before segment means."""

        return self.mean_after - self.mean_before


def penalty_value(penalty: str, n: int, pen_value: float | None = None) -> float:
    """Return the acceptance threshold for a series of length ``n``.

    ``penalty`` selects one of :data:`PENALTIES` (case-insensitive).
    ``"Manual"`` uses ``pen_value`` verbatim.
    """

    name = penalty.strip().lower()
    if name == "mbic":
        return 3.0 * math.log(n)
    if name in {"bic", "sic"}:
        return math.log(n)
    if name == "aic":
        return 2.0
    if name in {"hannan-quinn", "hq"}:
        return 2.0 * math.log(math.log(n))
    if name == "manual":
        if pen_value is None:
            raise ValueError("pen_value is required for a manual penalty")
        if pen_value < 0 or not math.isfinite(pen_value):
            raise ValueError("pen_value must be a finite non-negative number")
        return float(pen_value)
    if name == "none":
        return 0.0
    raise ValueError(f"unknown penalty {penalty!r}; expected one of {', '.join(PENALTIES)}")


def _validate(values: Sequence[float], min_seg_len: int) -> np.ndarray:
    if min_seg_len < 1:
        raise ValueError("min_seg_len must be at least 1")
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1:
        raise ValueError("values must be one-dimensional")
    required = max(MIN_LENGTH, 2 * min_seg_len)
    if arr.size < required:
        raise InsufficientDataError(
            f"need at least {required} values to search for a changepoint, got {arr.size}"
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError("values must be finite")
    return arr


def total_rss(values: Sequence[float]) -> float:
    """Residual sum of squares of ``values`` around their global mean."""

    return rss(values)


def _profile(arr: np.ndarray, min_seg_len: int) -> tuple[np.ndarray, np.ndarray]:
    n = arr.size
    # Centring first keeps the S2 - S1**2/n differences well conditioned.
    centred = arr - arr.mean()
    s1 = np.concatenate(([0.0], np.cumsum(centred)))
    s2 = np.concatenate(([0.0], np.cumsum(centred * centred)))

    ks = np.arange(min_seg_len, n - min_seg_len + 1)
    n_a = ks.astype(float)
    n_b = n - n_a
    sum_a = s1[ks]
    sum_b = s1[n] - sum_a
    sq_a = s2[ks]
    sq_b = s2[n] - sq_a
    cost = (sq_a - sum_a * sum_a / n_a) + (sq_b - sum_b * sum_b / n_b)
    # Rounding can push an exact fit marginally below zero.
    return ks, np.maximum(cost, 0.0)


def rss_profile(values: Sequence[float], min_seg_len: int = 2) -> tuple[np.ndarray, np.ndarray]:
    """Return candidate splits and the two-segment RSS for each.

    The first array holds every admissible ``k`` in
    ``[min_seg_len, n - min_seg_len]``; the second holds ``RSS(k)``.
    """

    arr = _validate(values, min_seg_len)
    return _profile(arr, min_seg_len)


def amoc(
    values: Sequence[float],
    *,
    penalty: str = "MBIC",
    pen_value: float | None = None,
    min_seg_len: int = 2,
) -> ChangepointResult:
    """Search ``values`` for a single shift in mean.

    Splits whose statistic lies within relative rounding of the maximum,
    ``TIE_RTOL * max(RSS_total, 1)``, are treated as tied and the lowest
    ``k`` among them is chosen.  Ties are therefore not required to be
    bit-for-bit exact.

    Parameters
    ----------
    values:
        De-seasonalised samples.
    penalty:
        Name of the penalty used as the significance threshold, see
        :func:`penalty_value`.
    pen_value:
        Threshold used when ``penalty="Manual"``.
    min_seg_len:
        Minimum number of samples on each side of the split.

    Returns
    -------
    ChangepointResult
        ``index`` is ``None`` when the best split does not beat the penalty.

    Raises
    ------
    InsufficientDataError
        If there are fewer than ``max(4, 2 * min_seg_len)`` values.
    """

    arr = _validate(values, min_seg_len)
    n = arr.size
    threshold = penalty_value(penalty, n, pen_value)

    ks, cost = _profile(arr, min_seg_len)
    unsplit = total_rss(arr)
    gain = unsplit - cost
    # Statistics within relative rounding of the maximum count as tied; the
    # lowest k wins.
    tol = TIE_RTOL * max(unsplit, 1.0)
    best = int(np.flatnonzero(gain >= gain.max() - tol)[0])
    k = int(ks[best])
    statistic = float(gain[best])

    return ChangepointResult(
        index=k if statistic > threshold else None,
        candidate=k,
        statistic=statistic,
        penalty=threshold,
        total_rss=unsplit,
        mean_before=mean(arr[:k]),
        mean_after=mean(arr[k:]),
        n=n,
    )


def detect(
    values: Sequence[float],
    *,
    penalty: str = "MBIC",
    pen_value: float | None = None,
    min_seg_len: int = 2,
) -> int | None:
    """Return the changepoint index in ``values`` or ``None``.

    Thin wrapper around :func:`amoc` for callers that only need the index.
    """

    return amoc(values, penalty=penalty, pen_value=pen_value, min_seg_len=min_seg_len).index
