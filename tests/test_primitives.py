import numpy as np
import pytest
from scipy.integrate import trapezoid

from cbv_toolbox.core.primitives import (
    array_stats,
    trapezoid_integral,
    is_background,
    to_concentration,
    signal_to_concentration,
)
from cbv_toolbox.core.timing import TimeAxis
from cbv_toolbox.errors import ConfigurationError


def test_array_stats_matches_numpy():
    rng = np.random.default_rng(0)
    x = rng.normal(50.0, 3.0, size=25)
    mean, std = array_stats(x)
    assert mean == pytest.approx(np.mean(x))
    assert std == pytest.approx(np.std(x, ddof=1))


def test_array_stats_single_sample():
    mean, std = array_stats(np.array([7.0]))
    assert mean == 7.0
    assert std == 0.0


def test_trapezoid_matches_scipy_on_uneven_grid():
    rng = np.random.default_rng(1)
    t = np.cumsum(rng.uniform(0.5, 2.0, size=40))
    y = rng.uniform(0.0, 3.0, size=40)
    assert trapezoid_integral(y, t) == pytest.approx(trapezoid(y, t))


def test_trapezoid_degenerate_lengths():
    assert trapezoid_integral(np.array([5.0]), np.array([1.0])) == 0.0
    assert trapezoid_integral(np.zeros(0), np.zeros(0)) == 0.0


def test_is_background_by_minimum():
    curve = np.array([100.0, 80.0, 30.0, 90.0])
    assert is_background(curve, 40.0)
    assert not is_background(curve, 30.0)
    assert not is_background(curve, 20.0)


def test_concentration_clamp_is_exclusive():
    eps = 1e-9
    ratios = np.array([1.0 - eps, 1.0, 1.0 + eps, 0.5, 0.01, 0.01 + eps, -0.3])
    conc = to_concentration(ratios * 200.0, 200.0)

    assert conc[0] > 0.0
    assert conc[0] == pytest.approx(eps, rel=1e-3)
    assert conc[1] == 0.0
    assert conc[2] == 0.0
    assert conc[3] == pytest.approx(np.log(2.0))
    assert conc[4] == 0.0
    assert conc[5] == pytest.approx(-np.log(0.01 + eps))
    assert conc[6] == 0.0
    assert np.all(np.isfinite(conc))


def test_signal_to_concentration_uses_leading_baseline():
    conc = signal_to_concentration(np.array([100.0, 100.0, 50.0, 100.0]), 2)
    np.testing.assert_allclose(conc, [0.0, 0.0, np.log(2.0), 0.0])


def test_signal_to_concentration_non_positive_baseline():
    conc = signal_to_concentration(np.array([0.0, 0.0, 5.0]), 2)
    np.testing.assert_array_equal(conc, np.zeros(3))


def test_time_axis_relative_and_read_only(frame_times):
    axis = TimeAxis(frame_times)
    assert len(axis) == frame_times.size
    assert axis.relative[0] == 0.0
    np.testing.assert_allclose(axis.relative, frame_times - frame_times[0])
    with pytest.raises(ValueError):
        axis.relative[0] = 1.0
    with pytest.raises(ValueError):
        axis.absolute[0] = 1.0


def test_time_axis_rejects_decreasing_times():
    with pytest.raises(ConfigurationError):
        TimeAxis([0.0, 2.0, 1.0, 3.0])


def test_time_axis_rejects_short_series():
    with pytest.raises(ConfigurationError):
        TimeAxis([0.0, 1.0])


def test_time_axis_working_bounds(frame_times):
    axis = TimeAxis(frame_times)
    assert axis.working(5).size == frame_times.size - 5
    with pytest.raises(ConfigurationError):
        axis.working(-1)
    with pytest.raises(ConfigurationError):
        axis.working(frame_times.size - 2)
