"""
Per-voxel CBV pipeline

Steps for a single TAC:
1. Air check on the raw curve
2. Pre/post baseline levels and pre-baseline noise
3. Bolus start/end search around the signal minimum
4. Linear baseline correction between the two plateaus
5. dR(t) = -ln(S(t)/S0), clamped
6. Trapezoidal integral over the bolus window

DSC curves dip while the bolus passes, so the bolus peak is the signal
minimum. Every kernel is compiled without fastmath: the detection
thresholds rely on exact IEEE comparisons.

Voxel failures are returned as status codes, never raised.
"""

import numpy as np
from numba import njit

from .primitives import array_stats, trapezoid_integral, is_background, to_concentration


STATUS_NOT_PROCESSED = -1
STATUS_OK = 0
STATUS_BACKGROUND = 1
STATUS_DEGENERATE_BASELINE = 2
STATUS_INVALID_BOLUS = 3

STATUS_NAMES = {
    STATUS_NOT_PROCESSED: "not_processed",
    STATUS_OK: "ok",
    STATUS_BACKGROUND: "background",
    STATUS_DEGENERATE_BASELINE: "degenerate_baseline",
    STATUS_INVALID_BOLUS: "invalid_bolus",
}


@njit(cache=True)
def baseline_is_valid(n_working, pre_n, post_n):
    """Both windows non-empty and inside the working curve."""
    return pre_n > 0 and post_n > 0 and pre_n <= n_working and post_n <= n_working


@njit(cache=True)
def estimate_baseline(working, pre_n, post_n):
    """
    Pre-baseline mean and noise, post-baseline mean.

    Parameters
    ----------
    working : array (N,)
        TAC after skipped frames
    pre_n, post_n : int
        Window lengths at the start and end of the curve

    Returns
    -------
    pre_mean, pre_noise, post_mean : float
        NaN triple when a window is empty or longer than the curve.
    """
    n = working.shape[0]
    if not baseline_is_valid(n, pre_n, post_n):
        return np.nan, np.nan, np.nan

    pre_mean, pre_noise = array_stats(working[:pre_n])
    post_mean, _ = array_stats(working[n - post_n:])
    return pre_mean, pre_noise, post_mean


@njit(cache=True)
def find_bolus_position(working, pre_n, post_n, noise, pre_mean, post_mean):
    """
    Locate the bolus around the signal minimum.

    The start is searched backward from the minimum while the signal stays
    at least `noise` below the pre-baseline, never going below `pre_n`.
    The end is searched forward from two frames after the minimum and stops
    once the signal is back within `noise` of the post-baseline, or once it
    falls `noise` below its running maximum (a second excursion). The
    forward search never enters the post-baseline window.

    Returns
    -------
    start, end : int
        Inclusive indices into `working`. The caller must reject the window
        when start >= end or start < pre_n.
    """
    n = working.shape[0]

    # Bolus peak: first global minimum
    peak = 0
    v_min = working[0]
    for t in range(1, n):
        if working[t] < v_min:
            v_min = working[t]
            peak = t

    # Start of bolus
    cutoff = pre_mean - noise
    start = peak
    while start > pre_n:
        if working[start - 1] > cutoff:
            break
        start -= 1

    # End of bolus
    cutoff = post_mean - noise
    last = n - post_n
    mx = v_min
    t = peak + 2
    while t < last:
        if working[t] > mx:
            mx = working[t]
        if working[t] > cutoff or working[t] < mx - noise:
            break
        t += 1
    end = min(t - 1, last - 1)

    return start, end


@njit(cache=True)
def correct_baseline(working, times, start, end, pre_mean, post_mean):
    """
    Remove the linear drift between pre- and post-baseline over [start, end].

    Returns the corrected segment (length end - start + 1).
    """
    t0 = times[start]
    slope = (post_mean - pre_mean) / (times[end] - t0)

    corrected = np.empty(end - start + 1, dtype=np.float64)
    for t in range(start, end + 1):
        corrected[t - start] = working[t] - slope * (times[t] - t0)
    return corrected


@njit(cache=True)
def process_tac(tac, times, skip_frames, pre_n, post_n, air_threshold, normalization):
    """
    Full pipeline for one voxel.

    Parameters
    ----------
    tac : array (N,)
        Raw TAC in time order
    times : array (N,)
        Relative frame times
    skip_frames : int
        Leading frames ignored after the air check
    pre_n, post_n : int
        Calibrated baseline window lengths
    air_threshold : float
        Background threshold on the raw TAC minimum
    normalization : float
        Scale applied to the integral

    Returns
    -------
    cbv : float
        Normalized integral of dR(t), NaN unless status is STATUS_OK
    status : int
    start, end : int
        Bolus window in working indices, -1 when not found
    """
    if is_background(tac, air_threshold):
        return np.nan, STATUS_BACKGROUND, -1, -1

    working = tac[skip_frames:].astype(np.float64)
    w_times = times[skip_frames:]
    n = working.shape[0]

    if not baseline_is_valid(n, pre_n, post_n) or pre_n + post_n >= n:
        return np.nan, STATUS_DEGENERATE_BASELINE, -1, -1

    pre_mean, noise, post_mean = estimate_baseline(working, pre_n, post_n)
    if not pre_mean > 0.0:
        return np.nan, STATUS_DEGENERATE_BASELINE, -1, -1

    start, end = find_bolus_position(working, pre_n, post_n, noise, pre_mean, post_mean)
    if start >= end or start < pre_n:
        return np.nan, STATUS_INVALID_BOLUS, start, end
    if not w_times[end] > w_times[start]:
        return np.nan, STATUS_INVALID_BOLUS, start, end

    corrected = correct_baseline(working, w_times, start, end, pre_mean, post_mean)
    conc = to_concentration(corrected, pre_mean)
    integral = trapezoid_integral(conc, w_times[start:end + 1])

    return integral * normalization, STATUS_OK, start, end
