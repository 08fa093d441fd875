import logging
from datetime import datetime, timezone

import numpy as np
import pytest

from energyshift.types import Segment, TimeSeries
from energyshift.utils.logging import get_logger
from energyshift.utils.signals import centered_weights, mean, rss
from energyshift.utils.timeparse import parse_datestamp


def test_types():
    seg = Segment(2, 5, 1.5)
    assert seg.length == 3
    ts = TimeSeries.from_values([1.0, 2.0, 3.0], start="2024-01-07")
    assert len(ts) == 3
    assert ts.step == np.timedelta64(7, "D")
    assert ts.timestamp_at(2) == np.datetime64("2024-01-21")
    with pytest.raises(IndexError):
        ts.timestamp_at(3)


def test_time_series_validation():
    with pytest.raises(ValueError):
        TimeSeries(np.array(["2024-01-01", "2024-01-02"], dtype="datetime64[ns]"), [1.0])
    with pytest.raises(ValueError):
        TimeSeries(np.array(["2024-01-02", "2024-01-01"], dtype="datetime64[ns]"), [1.0, 2.0])
    with pytest.raises(ValueError):
        TimeSeries(
            np.array(["2024-01-01", "2024-01-02", "2024-01-04"], dtype="datetime64[ns]"),
            [1.0, 2.0, 3.0],
        )


def test_mean_and_rss():
    assert mean([1.0, 2.0, 3.0, 4.0]) == pytest.approx(2.5)
    assert rss([1.0, 2.0, 3.0, 4.0]) == pytest.approx(5.0)
    assert rss([3.0, 3.0]) == 0.0
    with pytest.raises(ValueError):
        mean([])
    with pytest.raises(ValueError):
        rss([])


def test_centered_weights():
    np.testing.assert_allclose(centered_weights(3), [1 / 3, 1 / 3, 1 / 3])
    np.testing.assert_allclose(centered_weights(4), [0.125, 0.25, 0.25, 0.25, 0.125])
    assert centered_weights(52).size == 53
    assert centered_weights(52).sum() == pytest.approx(1.0)
    with pytest.raises(ValueError):
        centered_weights(0)


def test_parse_datestamp():
    utc = timezone.utc
    assert parse_datestamp("2019-03-04") == datetime(2019, 3, 4, tzinfo=utc)
    assert parse_datestamp("2019-03-04T05:06:07Z") == datetime(2019, 3, 4, 5, 6, 7, tzinfo=utc)
    assert parse_datestamp("2019-03-04 05:06") == datetime(2019, 3, 4, 5, 6, tzinfo=utc)
    assert parse_datestamp("04/03/2019 05:06") == datetime(2019, 3, 4, 5, 6, tzinfo=utc)
    assert parse_datestamp("1551675967") == datetime(2019, 3, 4, 5, 6, 7, tzinfo=utc)
    offset = parse_datestamp("2019-03-04T06:00:00+01:00")
    assert offset.astimezone(utc) == datetime(2019, 3, 4, 5, 0, tzinfo=utc)
    with pytest.raises(ValueError):
        parse_datestamp("yesterday")
    with pytest.raises(ValueError):
        parse_datestamp("  ")


def test_logging():
    logger = get_logger("energyshift.test")
    logger2 = get_logger("energyshift.test", level=logging.DEBUG)
    assert logger is logger2
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    logger.debug("debug message")
