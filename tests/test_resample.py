import numpy as np
import pytest

from energyshift.ingest import EnergyReadings, resample


def daily(start, days, value=1.0):
    stamps = np.datetime64(start, "ns") + np.arange(days) * np.timedelta64(1, "D")
    return stamps, np.full(days, value)


def make_readings(*parts):
    stamps = np.concatenate([p[0] for p in parts])
    values = np.concatenate([p[1] for p in parts])
    return EnergyReadings(stamps, values)


def test_weekly_sums():
    # 2024-01-01 is a Monday; three full Monday-to-Sunday weeks
    readings = make_readings(daily("2024-01-01", 21, 2.0))
    series = resample(readings)
    assert len(series) == 3
    np.testing.assert_allclose(series.values, [14.0, 14.0, 14.0])
    assert series.timestamps[0] == np.datetime64("2024-01-07")
    assert series.step == np.timedelta64(7, "D")


def test_weekly_mean():
    readings = make_readings(daily("2024-01-01", 14, 3.0))
    series = resample(readings, how="mean")
    np.testing.assert_allclose(series.values, [3.0, 3.0])


def test_partial_edge_weeks_dropped():
    readings = make_readings(daily("2023-12-30", 2), daily("2024-01-01", 21), daily("2024-01-22", 3))
    series = resample(readings)
    assert len(series) == 3
    assert series.timestamps[0] == np.datetime64("2024-01-07")
    kept = resample(readings, drop_partial=False)
    assert len(kept) == 5
    np.testing.assert_allclose(kept.values, [2.0, 7.0, 7.0, 7.0, 3.0])


def test_unsorted_input():
    stamps, values = daily("2024-01-01", 14)
    values = values * np.arange(14)
    order = np.arange(14)[::-1]
    series = resample(EnergyReadings(stamps[order], values[order]))
    np.testing.assert_allclose(series.values, [21.0, 70.0])


def test_gap_filling():
    readings = make_readings(daily("2024-01-01", 7), daily("2024-01-15", 14))
    series = resample(readings)
    np.testing.assert_allclose(series.values, [7.0, 7.0, 7.0, 7.0])
    zero = resample(readings, fill="zero")
    np.testing.assert_allclose(zero.values, [7.0, 0.0, 7.0, 7.0])
    with pytest.raises(ValueError):
        resample(readings, fill="error")


def test_invalid_arguments():
    readings = make_readings(daily("2024-01-01", 7))
    with pytest.raises(ValueError):
        resample(readings, how="median")
    with pytest.raises(ValueError):
        resample(readings, fill="ffill")
    with pytest.raises(ValueError):
        resample(EnergyReadings(np.array([], dtype="datetime64[ns]"), np.array([])))


def test_calendar_frequency_rejected():
    readings = make_readings(daily("2024-01-01", 60))
    with pytest.raises(ValueError, match="evenly spaced"):
        resample(readings, freq="MS")
    assert len(resample(readings, freq="7D", drop_partial=False)) > 0


def test_local_timezone_across_dst_change():
    # hourly UTC readings; Europe/London moves to BST on Sunday 2024-03-31
    stamps = np.datetime64("2024-03-18T00:00", "ns") + np.arange(503) * np.timedelta64(1, "h")
    readings = EnergyReadings(stamps, np.ones(503))
    local = resample(readings, drop_partial=False, timezone="Europe/London")
    assert local.timestamps[1] == np.datetime64("2024-03-31")
    assert local.step == np.timedelta64(7, "D")
    np.testing.assert_allclose(local.values, [168.0, 167.0, 168.0])
    utc = resample(readings, drop_partial=False)
    np.testing.assert_allclose(utc.values, [168.0, 168.0, 167.0])
