"""Binning of irregular readings into an evenly spaced series."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from ..types import TimeSeries
from .readings import EnergyReadings

logger = logging.getLogger(__name__)


def check_freq(freq: str) -> str:
    """Return ``freq`` if it names a fixed-width bin, else raise ``ValueError``.

    Tick offsets (``"D"``, ``"h"``, ...) and weekly offsets (``"W"``,
    ``"W-MON"``, ...) give evenly spaced bins.  Calendar offsets such as
    ``"MS"`` or ``"QE"`` do not.
    """

    offset = pd.tseries.frequencies.to_offset(freq)
    if not isinstance(offset, (pd.offsets.Tick, pd.offsets.Week)):
        raise ValueError(f"frequency {freq!r} does not give evenly spaced bins")
    return freq


def resample(
    readings: EnergyReadings,
    *,
    freq: str = "W",
    how: str = "sum",
    drop_partial: bool = True,
    fill: str = "interpolate",
    timezone: str = "UTC",
) -> TimeSeries:
    """Aggregate ``readings`` into one value per ``freq`` bin.

    Parameters
    ----------
    readings:
        Raw readings with UTC timestamps, in any order.
    freq:
        Pandas offset alias for the bin width, ``"W"`` for weeks ending on
        Sunday.
    how:
        ``"sum"`` (total consumption per bin) or ``"mean"``.
    drop_partial:
        Drop the first and last bins when they hold fewer readings than the
        median bin, since a partially covered week under-reports its total.
    fill:
        Treatment of empty interior bins: ``"interpolate"`` linearly,
        ``"zero"`` or ``"error"`` to raise ``ValueError``.
    timezone:
        Zone in which bin boundaries are placed.  The returned timestamps
        are naive local times.

    Returns
    -------
    TimeSeries
        Uniformly spaced series labelled by bin.
    """

    if how not in {"sum", "mean"}:
        raise ValueError(f"unsupported aggregation {how!r}")
    if fill not in {"interpolate", "zero", "error"}:
        raise ValueError(f"unsupported fill mode {fill!r}")
    check_freq(freq)
    if len(readings) == 0:
        raise ValueError("no readings to resample")

    index = pd.DatetimeIndex(readings.timestamps).tz_localize("UTC").tz_convert(timezone)
    series = pd.Series(readings.values, index=index.tz_localize(None)).sort_index()

    bins = series.resample(freq)
    counts = bins.count()
    agg = bins.sum(min_count=1) if how == "sum" else bins.mean()

    if drop_partial and len(counts) > 2:
        typical = counts[counts > 0].median()
        start, stop = 0, len(counts)
        if counts.iloc[0] < typical:
            start += 1
        if counts.iloc[-1] < typical:
            stop -= 1
        if start or stop != len(counts):
            logger.debug("dropping %d partial edge bin(s)", start + len(counts) - stop)
        agg = agg.iloc[start:stop]
        counts = counts.iloc[start:stop]

    missing = int(agg.isna().sum())
    if missing:
        if fill == "error":
            first = agg.index[agg.isna()][0]
            raise ValueError(f"{missing} empty bin(s) in resampled series, first at {first}")
        logger.info("filling %d empty bin(s) using %s", missing, fill)
        agg = agg.interpolate(method="linear", limit_direction="both") if fill == "interpolate" else agg.fillna(0.0)

    return TimeSeries(agg.index.to_numpy(dtype="datetime64[ns]"), agg.to_numpy(dtype=float))
