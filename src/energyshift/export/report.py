from __future__ import annotations

"""Writers for analysis reports."""

import csv
import json
from pathlib import Path

import numpy as np

from ..pipeline import AnalysisResult


def write_json(result: AnalysisResult, path: str | Path) -> Path:
    """Write the summary from :meth:`AnalysisResult.to_dict` as JSON."""

    p = Path(path)
    with open(p, "w", encoding="utf8") as fh:
        json.dump(result.to_dict(), fh, indent=2)
    return p


def write_csv(result: AnalysisResult, path: str | Path) -> Path:
    """Write one row per sample.

    Columns are ``timestamp``, ``value``, ``seasonal``, ``trend``,
    ``adjusted`` and ``segment`` (0 before the changepoint, 1 after).
    Undefined trend values are left empty.
    """

    p = Path(path)
    series = result.series
    n = len(series)
    dec = result.decomposition
    seasonal = dec.seasonal if dec is not None else np.zeros(n)
    trend = dec.trend if dec is not None else np.full(n, np.nan)
    index = result.changepoint.index

    with open(p, "w", encoding="utf8", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(["timestamp", "value", "seasonal", "trend", "adjusted", "segment"])
        for i in range(n):
            writer.writerow(
                [
                    np.datetime_as_string(series.timestamps[i], unit="s"),
                    repr(float(series.values[i])),
                    repr(float(seasonal[i])),
                    "" if np.isnan(trend[i]) else repr(float(trend[i])),
                    repr(float(result.adjusted[i])),
                    int(index is not None and i >= index),
                ]
            )
    return p


def write_report(result: AnalysisResult, path: str | Path, fmt: str | None = None) -> Path:
    """Dispatch to :func:`write_json` or :func:`write_csv`.

    When ``fmt`` is omitted the file suffix decides.
    """

    p = Path(path)
    if fmt is None:
        fmt = "csv" if p.suffix.lower() == ".csv" else "json"
    if fmt == "csv":
        return write_csv(result, p)
    if fmt == "json":
        return write_json(result, p)
    raise ValueError(f"unsupported report format {fmt!r}")
