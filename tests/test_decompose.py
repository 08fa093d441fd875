import numpy as np
import pytest

from energyshift.core import InvalidInputError, decompose, moving_average_trend


def make_series(n, period, seed=0):
    rng = np.random.default_rng(seed)
    t = np.arange(n)
    return 50.0 + 0.3 * t + 8.0 * np.sin(2 * np.pi * t / period) + rng.normal(0.0, 1.0, n)


def test_square_wave():
    result = decompose([1, 5, 1, 5, 1, 5, 1, 5], 4)
    np.testing.assert_allclose(result.seasonal, [-2, 2, -2, 2, -2, 2, -2, 2])
    np.testing.assert_allclose(result.figure, [-2, 2, -2, 2])
    defined = result.defined
    np.testing.assert_array_equal(defined, [False, False, True, True, True, True, False, False])
    np.testing.assert_allclose(result.trend[defined], 3.0)
    np.testing.assert_allclose(result.residual[defined], 0.0, atol=1e-12)


@pytest.mark.parametrize("period", [4, 5, 12, 13])
def test_additive_identity(period):
    values = make_series(6 * period, period)
    result = decompose(values, period)
    mask = result.defined
    recon = result.seasonal[mask] + result.trend[mask] + result.residual[mask]
    np.testing.assert_allclose(recon, values[mask], atol=1e-9)


@pytest.mark.parametrize("period", [4, 7, 52])
def test_seasonal_periodic_and_centred(period):
    values = make_series(3 * period + 1, period, seed=period)
    result = decompose(values, period)
    np.testing.assert_allclose(result.seasonal[:-period], result.seasonal[period:])
    assert result.figure.shape == (period,)
    assert result.figure.sum() == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("period", [4, 5, 52])
def test_undefined_edges(period):
    n = 2 * period
    result = decompose(make_series(n, period), period)
    half = period // 2
    assert np.isnan(result.trend[:half]).all()
    assert np.isnan(result.trend[n - half :]).all()
    assert not np.isnan(result.trend[half : n - half]).any()
    np.testing.assert_array_equal(np.isnan(result.residual), np.isnan(result.trend))
    assert not np.isnan(result.seasonal).any()


@pytest.mark.parametrize("period", [4, 5])
def test_trend_follows_a_line(period):
    values = 2.0 * np.arange(4 * period) + 1.0
    trend = moving_average_trend(values, period)
    mask = ~np.isnan(trend)
    np.testing.assert_allclose(trend[mask], values[mask])


def test_deseasonalized():
    values = np.array([1, 5, 1, 5, 1, 5, 1, 5], dtype=float)
    result = decompose(values, 4)
    np.testing.assert_allclose(result.deseasonalized(values), 3.0)
    with pytest.raises(ValueError):
        result.deseasonalized(values[:-1])


def test_invalid_period():
    with pytest.raises(InvalidInputError):
        decompose([1.0] * 10, 1)
    with pytest.raises(InvalidInputError):
        decompose([1.0] * 10, 2.5)


def test_series_shorter_than_two_periods():
    with pytest.raises(InvalidInputError) as excinfo:
        decompose([1.0] * 7, 4)
    assert "two periods" in str(excinfo.value)


def test_non_finite_values():
    values = [1.0, 2.0, np.nan, 4.0, 1.0, 2.0, 3.0, 4.0]
    with pytest.raises(InvalidInputError):
        decompose(values, 4)


def test_invalid_input_is_value_error():
    assert issubclass(InvalidInputError, ValueError)
