# src/energyshift/ingest/readings.py
"""Parser for meter reading exports.

Expected layout is a headered CSV with at least a timestamp column and an
energy column, e.g.::

    datestamp,energy
    2019-01-07 00:00,12.4
    2019-01-07 01:00,11.9

Column names are configurable and matched case-insensitively.  Blank lines
and lines starting with ``#`` are skipped.  Rows with an empty energy cell
are dropped; anything else that fails to parse raises
:class:`EnergyParseError` pointing at the offending line.
"""

from __future__ import annotations

import csv
import math
import pathlib
from dataclasses import dataclass
from typing import Iterator, List, TextIO, Tuple, Union

import numpy as np

from ..utils.timeparse import parse_datestamp


@dataclass
class EnergyReadings:
    timestamps: np.ndarray  # (N,) datetime64[ns], UTC
    values: np.ndarray      # (N,)

    def __len__(self) -> int:
        return len(self.values)


class EnergyParseError(ValueError):
    """Raised when a readings file cannot be parsed."""

    def __init__(self, message: str, *, path: Union[str, pathlib.Path], line: int):
        self.path = str(path)
        self.line = line
        super().__init__(f"{self.path}:{self.line}: {message}")


def _content_lines(fh: TextIO) -> Iterator[Tuple[int, str]]:
    for lineno, raw in enumerate(fh, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield lineno, raw


def _column_index(header: List[str], name: str) -> int:
    lower = [col.strip().lstrip("\ufeff").lower() for col in header]
    try:
        return lower.index(name.lower())
    except ValueError:
        raise ValueError(f"column {name!r} not found in header {header}") from None


def parse_readings(
    fh: TextIO,
    *,
    timestamp_column: str = "datestamp",
    value_column: str = "energy",
    path: Union[str, pathlib.Path] = "<stream>",
) -> EnergyReadings:
    """Parse readings from an open text stream."""

    lines = _content_lines(fh)
    try:
        header_line, header_raw = next(lines)
    except StopIteration:
        raise EnergyParseError("file contains no header", path=path, line=0) from None

    header = next(csv.reader([header_raw]))
    try:
        ts_idx = _column_index(header, timestamp_column)
        val_idx = _column_index(header, value_column)
    except ValueError as e:
        raise EnergyParseError(str(e), path=path, line=header_line) from e

    stamps: List[np.datetime64] = []
    values: List[float] = []
    for lineno, raw in lines:
        row = next(csv.reader([raw]))
        try:
            if max(ts_idx, val_idx) >= len(row):
                raise ValueError(f"row has {len(row)} columns; expected at least {max(ts_idx, val_idx) + 1}")
            cell = row[val_idx].strip()
            if not cell or cell.upper() in {"NA", "NAN"}:
                continue
            value = float(cell)
            if not math.isfinite(value):
                raise ValueError(f"non-finite energy value {cell!r}")
            ts = parse_datestamp(row[ts_idx])
        except ValueError as e:
            raise EnergyParseError(str(e), path=path, line=lineno) from e
        stamps.append(np.datetime64(ts.replace(tzinfo=None) - ts.utcoffset(), "ns"))
        values.append(value)

    return EnergyReadings(
        timestamps=np.array(stamps, dtype="datetime64[ns]"),
        values=np.array(values, dtype=float),
    )


def read_energy_csv(
    path: Union[str, pathlib.Path],
    *,
    timestamp_column: str = "datestamp",
    value_column: str = "energy",
) -> EnergyReadings:
    """Read ``(timestamp, energy)`` readings from the CSV file at ``path``."""

    p = pathlib.Path(path)
    with open(p, "r", encoding="utf8", newline="") as fh:
        return parse_readings(
            fh,
            timestamp_column=timestamp_column,
            value_column=value_column,
            path=p,
        )
