"""
CBV Calibration Module - Series-Level Setup

Runs once per image series, before any voxel is processed:
- pre_N / post_N: baseline window lengths from the global TAC
- Normalization: reciprocal of a white-matter reference integral

The result is an immutable SeriesConfig shared by all voxels.
"""

from .baseline import (
    SeriesConfig,
    calibrate_baseline_windows,
    find_baseline_windows,
    BASELINE_THRESHOLD_FRACTION,
    DEFAULT_BACKGROUND_THRESHOLD,
)
from .normalization import compute_normalization_factor

__all__ = [
    "SeriesConfig",
    "calibrate_baseline_windows",
    "find_baseline_windows",
    "compute_normalization_factor",
    "BASELINE_THRESHOLD_FRACTION",
    "DEFAULT_BACKGROUND_THRESHOLD",
]
