import numpy as np
import pytest

from cbv_toolbox.calibration import (
    calibrate_baseline_windows,
    compute_normalization_factor,
)
from cbv_toolbox.core.bolus import process_tac
from cbv_toolbox.errors import CalibrationError, ConfigurationError


def test_pre_window_stops_at_first_drop(single_dip):
    pre_n, post_n = calibrate_baseline_windows(single_dip)
    assert pre_n == 10
    # Frames 39..59 sit within 5% of the post plateau range
    assert 19 <= post_n <= 21
    assert pre_n + post_n < single_dip.size


def test_calibration_is_idempotent_and_pure(single_dip):
    before = single_dip.copy()
    first = calibrate_baseline_windows(single_dip)
    second = calibrate_baseline_windows(single_dip)
    assert first == second
    np.testing.assert_array_equal(single_dip, before)


def test_calibration_invariant_to_affine_scaling(single_dip):
    assert (calibrate_baseline_windows(single_dip)
            == calibrate_baseline_windows(2.0 * single_dip + 7.0))


def test_flat_global_curve_is_fatal(flat_curve):
    with pytest.raises(CalibrationError):
        calibrate_baseline_windows(flat_curve)


def test_short_working_curve():
    with pytest.raises(ConfigurationError):
        calibrate_baseline_windows([100.0, 50.0])
    with pytest.raises(ConfigurationError):
        calibrate_baseline_windows([100.0, 50.0, 90.0, 95.0], skip_frames=2)


def test_normalization_identity_without_reference(frame_times):
    times = frame_times - frame_times[0]
    assert compute_normalization_factor(None, times, 0, 10, 20, 20.0) == 1.0
    assert compute_normalization_factor([], times, 0, 10, 20, 20.0) == 1.0


def test_more_than_one_reference_is_fatal(single_dip, frame_times):
    times = frame_times - frame_times[0]
    with pytest.raises(ConfigurationError):
        compute_normalization_factor([single_dip, single_dip], times, 0, 10, 20, 20.0)


def test_normalization_is_reciprocal_reference_integral(single_dip, frame_times):
    times = frame_times - frame_times[0]
    pre_n, post_n = calibrate_baseline_windows(single_dip)

    factor = compute_normalization_factor([single_dip], times, 0, pre_n, post_n, 20.0)
    integral, _, _, _ = process_tac(single_dip, times, 0, pre_n, post_n, 20.0, 1.0)

    assert factor > 0.0
    assert factor == pytest.approx(1.0 / integral)


def test_normalization_uses_absolute_reference(single_dip, frame_times):
    times = frame_times - frame_times[0]
    pre_n, post_n = calibrate_baseline_windows(single_dip)
    a = compute_normalization_factor([single_dip], times, 0, pre_n, post_n, 20.0)
    b = compute_normalization_factor([-single_dip], times, 0, pre_n, post_n, 20.0)
    assert a == pytest.approx(b)


def test_background_reference_is_fatal(single_dip, frame_times):
    times = frame_times - frame_times[0]
    with pytest.raises(CalibrationError):
        compute_normalization_factor([0.1 * single_dip], times, 0, 10, 20, 20.0)


def test_reference_length_mismatch(single_dip, frame_times):
    times = frame_times - frame_times[0]
    with pytest.raises(ConfigurationError):
        compute_normalization_factor([single_dip[:-1]], times, 0, 10, 20, 20.0)
