"""
Numerical primitives shared by the CBV pipeline.

- Array statistics (mean, sample standard deviation)
- Trapezoidal integration of a sampled curve
- Background ("air") classification of a raw TAC
- Signal to concentration-like conversion, dR(t) = -ln(S(t)/S0)

All functions are Numba kernels so they can be called from the
parallel voxel loop.
"""

import numpy as np
from numba import njit


# Valid range of S(t)/S0 for the log-ratio conversion (both exclusive)
RATIO_MIN = 0.01
RATIO_MAX = 1.0


@njit(cache=True)
def array_stats(values):
    """
    Mean and sample standard deviation (ddof=1) of a 1-D array.

    Returns (nan, 0.0) for an empty array and a zero deviation for a
    single sample.
    """
    n = values.shape[0]
    if n == 0:
        return np.nan, 0.0

    total = 0.0
    for i in range(n):
        total += values[i]
    mean = total / n

    if n < 2:
        return mean, 0.0

    ss = 0.0
    for i in range(n):
        d = values[i] - mean
        ss += d * d

    return mean, np.sqrt(ss / (n - 1))


@njit(cache=True)
def trapezoid_integral(values, times):
    """
    Definite integral of a sampled curve by the trapezoidal rule.

    Parameters
    ----------
    values : array (K,)
        Curve samples
    times : array (K,)
        Sample times, same length as `values`

    Returns
    -------
    integral : float
        0.0 when fewer than two samples are given.
    """
    n = min(values.shape[0], times.shape[0])
    integral = 0.0
    for i in range(1, n):
        integral += 0.5 * (values[i] + values[i - 1]) * (times[i] - times[i - 1])
    return integral


@njit(cache=True)
def is_background(values, threshold):
    """True if the curve minimum falls below `threshold` (air/background)."""
    if values.shape[0] == 0:
        return True

    v_min = values[0]
    for i in range(1, values.shape[0]):
        if values[i] < v_min:
            v_min = values[i]

    return v_min < threshold


@njit(cache=True)
def to_concentration(values, s0):
    """
    Log-ratio concentration proxy with clamping.

    conc = -ln(values / s0) where RATIO_MIN < values / s0 < RATIO_MAX,
    exactly 0 elsewhere.
    """
    n = values.shape[0]
    conc = np.zeros(n, dtype=np.float64)
    for i in range(n):
        ratio = values[i] / s0
        if ratio > RATIO_MIN and ratio < RATIO_MAX:
            conc[i] = -np.log(ratio)
    return conc


@njit(cache=True)
def signal_to_concentration(signal, n_baseline):
    """
    Convert a raw signal curve to dR(t) using the mean of its first
    `n_baseline` samples as S0.
    """
    n_base = max(1, min(n_baseline, signal.shape[0]))
    s0, _ = array_stats(signal[:n_base])
    if not s0 > 0.0:
        return np.zeros(signal.shape[0], dtype=np.float64)
    return to_concentration(signal, s0)
