"""
CBV Utilities Module - Data Loading and Preprocessing

Contains utilities for:
- NIfTI data loading and map saving
- Frame time handling
- Series noise estimation (background and temporal methods)
- Global and reference-ROI curves
"""

from .tools import (
    load_data,
    print_series_summary,
    estimate_noise_level,
    compute_global_curve,
    roi_mean_curve,
    save_maps,
)

__all__ = [
    "load_data",
    "print_series_summary",
    "estimate_noise_level",
    "compute_global_curve",
    "roi_mean_curve",
    "save_maps",
]
