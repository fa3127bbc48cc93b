"""
Series calibration: baseline window lengths from the global TAC.

The pre-baseline window covers the leading samples that stay within 5% of
the pre-bolus plateau, measured against the curve's dynamic range
(plateau minus minimum). The post-baseline window is found the same way
from the end of the curve. Every voxel of the series reuses both lengths.
"""

from typing import NamedTuple

import numpy as np
from numba import njit

from ..core.timing import TimeAxis, MIN_FRAMES
from ..errors import CalibrationError, ConfigurationError


BASELINE_THRESHOLD_FRACTION = 0.95
DEFAULT_BACKGROUND_THRESHOLD = 20.0


class SeriesConfig(NamedTuple):
    """Read-only per-series state shared by every voxel."""
    time_axis: TimeAxis
    pre_n: int
    post_n: int
    skip_frames: int
    air_threshold: float
    normalization: float = 1.0

    @property
    def working_length(self):
        return self.time_axis.n_frames - self.skip_frames


@njit(cache=True)
def find_baseline_windows(working, threshold_fraction):
    """
    Scan the working global TAC from both ends.

    Returns
    -------
    pre_n, post_n : int
        Each equals len(working) when the curve never leaves its plateau.
    """
    n = working.shape[0]
    sa = working[0]
    sb = working[n - 1]

    min_si = sa
    for t in range(1, n):
        if working[t] < min_si:
            min_si = working[t]

    thr = (sa - min_si) * threshold_fraction
    pre_n = 1
    while pre_n < n:
        if working[pre_n] - min_si < thr:
            break
        pre_n += 1

    thr = (sb - min_si) * threshold_fraction
    post_n = 1
    while post_n < n:
        if working[n - 1 - post_n] - min_si < thr:
            break
        post_n += 1

    return pre_n, post_n


def calibrate_baseline_windows(global_curve, skip_frames=0,
                               threshold_fraction=BASELINE_THRESHOLD_FRACTION):
    """
    Derive the pre/post baseline window lengths from a representative curve.

    Parameters
    ----------
    global_curve : array-like (N,)
        Volume-averaged TAC (or any representative curve)
    skip_frames : int
        Leading frames excluded from the working curve
    threshold_fraction : float
        Fraction of the plateau-to-minimum range a baseline sample must keep

    Returns
    -------
    pre_n, post_n : int
        Window lengths in frames of the working curve

    Raises
    ------
    ConfigurationError
        If the working curve is shorter than three samples.
    CalibrationError
        If the two windows cover the whole working curve (flat or
        signal-free global curve).
    """
    curve = np.asarray(global_curve, dtype=np.float64).ravel()
    if skip_frames < 0:
        raise ConfigurationError(f"skip_frames must be >= 0, got {skip_frames}")

    working = curve[skip_frames:]
    if working.size < MIN_FRAMES:
        raise ConfigurationError(
            f"Global curve needs at least {MIN_FRAMES} working frames, "
            f"got {working.size}"
        )
    if not np.all(np.isfinite(working)):
        raise CalibrationError("Global curve contains non-finite samples")

    pre_n, post_n = find_baseline_windows(working, float(threshold_fraction))
    pre_n, post_n = int(pre_n), int(post_n)

    if pre_n + post_n >= working.size:
        raise CalibrationError(
            f"Baseline windows consume the whole curve (pre_N={pre_n}, "
            f"post_N={post_n}, frames={working.size}); no bolus in global TAC"
        )

    return pre_n, post_n
