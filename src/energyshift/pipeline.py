from __future__ import annotations

"""End-to-end changepoint analysis of an energy consumption series."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import logging

import numpy as np

from .config import Settings
from .core.changepoint import ChangepointResult, amoc
from .core.decompose import DecompositionResult, decompose
from .ingest import read_energy_csv, resample
from .types import Segment, TimeSeries
from .utils.signals import mean

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything produced by :func:`analyze`.

    Attributes
    ----------
    series:
        The evenly spaced input series.
    decomposition:
        Seasonal decomposition, or ``None`` when it was disabled.
    adjusted:
        Values with the seasonal component removed; equal to the raw values
        when no decomposition was run.
    changepoint:
        Detector output on ``adjusted``.
    changepoint_date:
        Timestamp at ``changepoint.index`` or ``None``.
    segments:
        One segment per side of the changepoint, or a single segment when
        none was found.  Means are taken over ``adjusted``.
    """

    series: TimeSeries
    decomposition: DecompositionResult | None
    adjusted: np.ndarray
    changepoint: ChangepointResult
    changepoint_date: np.datetime64 | None
    segments: List[Segment] = field(default_factory=list)

    @property
    def relative_change(self) -> float | None:
        """Fractional change of the segment means, ``None`` without a changepoint."""

        if len(self.segments) != 2 or self.segments[0].mean == 0:
            return None
        before, after = self.segments
        return (after.mean - before.mean) / abs(before.mean)

    def to_dict(self) -> Dict[str, Any]:
        cp = self.changepoint
        return {
            "n": cp.n,
            "period": self.decomposition.period if self.decomposition is not None else None,
            "changepoint_index": cp.index,
            "changepoint_date": _iso(self.changepoint_date),
            "candidate_index": cp.candidate,
            "candidate_date": _iso(self.series.timestamp_at(cp.candidate)),
            "statistic": cp.statistic,
            "penalty": cp.penalty,
            "total_rss": cp.total_rss,
            "relative_change": self.relative_change,
            "segments": [
                {
                    "start": _iso(self.series.timestamp_at(s.start)),
                    "end": _iso(self.series.timestamp_at(s.end - 1)),
                    "length": s.length,
                    "mean": s.mean,
                }
                for s in self.segments
            ],
        }


def _iso(stamp: np.datetime64 | None) -> str | None:
    if stamp is None:
        return None
    return str(np.datetime_as_string(stamp, unit="s"))


def _segments(values: np.ndarray, index: int | None) -> List[Segment]:
    bounds = [0, len(values)] if index is None else [0, index, len(values)]
    return [
        Segment(start, end, mean(values[start:end]))
        for start, end in zip(bounds[:-1], bounds[1:])
    ]


def analyze(
    series: TimeSeries,
    *,
    period: int | None = None,
    penalty: str | None = None,
    pen_value: float | None = None,
    min_seg_len: int | None = None,
    deseasonalize: bool | None = None,
    settings: Settings | None = None,
) -> AnalysisResult:
    """Remove seasonality from ``series`` and look for a shift in mean.

    Explicit keyword arguments override the matching values of
    ``settings.decomposition`` and ``settings.detection``.  Errors from the
    core (:class:`~energyshift.core.decompose.InvalidInputError`,
    :class:`~energyshift.core.changepoint.InsufficientDataError`) propagate
    unchanged.
    """

    if settings is None:
        settings = Settings()

    if period is None:
        period = settings.decomposition.period
    if deseasonalize is None:
        deseasonalize = settings.decomposition.enabled
    if penalty is None:
        penalty = settings.detection.penalty
    if pen_value is None:
        pen_value = settings.detection.pen_value
    if min_seg_len is None:
        min_seg_len = settings.detection.min_seg_len

    values = series.values
    logger.info("analysing %d samples (period=%s, deseasonalize=%s)", len(values), period, deseasonalize)

    decomposition: DecompositionResult | None = None
    adjusted = values.copy()
    if deseasonalize:
        decomposition = decompose(values, period)
        adjusted = decomposition.deseasonalized(values)

    result = amoc(adjusted, penalty=penalty, pen_value=pen_value, min_seg_len=min_seg_len)
    logger.debug(
        "best split k=%d statistic=%.6g penalty=%.6g (%s)",
        result.candidate,
        result.statistic,
        result.penalty,
        penalty,
    )

    date = series.timestamp_at(result.index) if result.index is not None else None
    if date is None:
        logger.info("no changepoint detected")
    else:
        logger.info("changepoint at index %d (%s), shift %.6g", result.index, _iso(date), result.shift)

    return AnalysisResult(
        series=series,
        decomposition=decomposition,
        adjusted=adjusted,
        changepoint=result,
        changepoint_date=date,
        segments=_segments(adjusted, result.index),
    )


def load_series(path: str | Path, settings: Settings | None = None) -> TimeSeries:
    """Read a readings CSV and resample it according to ``settings``."""

    if settings is None:
        settings = Settings()
    ds = settings.dataset
    rs = settings.resample
    readings = read_energy_csv(path, timestamp_column=ds.timestamp_column, value_column=ds.value_column)
    logger.info("read %d readings from %s", len(readings), path)
    return resample(
        readings,
        freq=rs.freq,
        how=rs.how,
        drop_partial=rs.drop_partial,
        fill=rs.fill,
        timezone=ds.timezone,
    )


def analyze_csv(path: str | Path, settings: Settings | None = None, **overrides: Any) -> AnalysisResult:
    """Run :func:`load_series` followed by :func:`analyze`."""

    if settings is None:
        settings = Settings()
    series = load_series(path, settings)
    return analyze(series, settings=settings, **overrides)
