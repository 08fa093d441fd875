"""Parsing of the date stamps found in meter exports."""

from __future__ import annotations

import re
from datetime import datetime, timezone

_EPOCH_RE = re.compile(r"^\d+(?:\.\d+)?$")

_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
)


def parse_datestamp(text: str) -> datetime:
    """Parse ``text`` into a timezone-aware :class:`datetime`.

    Accepted forms are:

    * ISO-8601 dates and datetimes, with or without an offset
    * ``YYYY-MM-DD HH:MM[:SS]`` and the ``/``-separated equivalent
    * ``DD/MM/YYYY[ HH:MM[:SS]]``
    * seconds since the Unix epoch

    Naive values are taken to be UTC.  ``ValueError`` is raised on
    malformed input.
    """

    token = text.strip()
    if not token:
        raise ValueError("empty datestamp")
    if _EPOCH_RE.match(token) and len(token.split(".")[0]) > 8:
        return datetime.fromtimestamp(float(token), tz=timezone.utc)

    try:
        parsed = datetime.fromisoformat(token.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _FORMATS:
            try:
                parsed = datetime.strptime(token, fmt)
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"Unrecognised datestamp: {text!r}") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
