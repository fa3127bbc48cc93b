"""
CBV Core Module - Timing, Primitives and the Per-Voxel Pipeline

Contains the numerical core of the CBV implementation:
- TimeAxis (absolute and relative frame times)
- Array statistics, trapezoidal integration, air classification
- Baseline estimation and bolus detection
- Linear baseline correction and dR(t) conversion
"""

from .timing import TimeAxis

from .primitives import (
    array_stats,
    trapezoid_integral,
    is_background,
    to_concentration,
    signal_to_concentration,
    RATIO_MIN,
    RATIO_MAX,
)

from .bolus import (
    estimate_baseline,
    find_bolus_position,
    correct_baseline,
    process_tac,
    STATUS_NOT_PROCESSED,
    STATUS_OK,
    STATUS_BACKGROUND,
    STATUS_DEGENERATE_BASELINE,
    STATUS_INVALID_BOLUS,
    STATUS_NAMES,
)

__all__ = [
    "TimeAxis",
    "array_stats",
    "trapezoid_integral",
    "is_background",
    "to_concentration",
    "signal_to_concentration",
    "RATIO_MIN",
    "RATIO_MAX",
    "estimate_baseline",
    "find_bolus_position",
    "correct_baseline",
    "process_tac",
    "STATUS_NOT_PROCESSED",
    "STATUS_OK",
    "STATUS_BACKGROUND",
    "STATUS_DEGENERATE_BASELINE",
    "STATUS_INVALID_BOLUS",
    "STATUS_NAMES",
]
