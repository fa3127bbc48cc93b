"""
CBV Toolbox - Cerebral Blood Volume from DSC-MRI

Baseline-integral CBV estimation from dynamic susceptibility contrast
time-activity curves, with Numba-parallel voxel processing.

Main Components:
- DSC_CBV: Model class (series calibration + voxel fitting)
- calibrate_baseline_windows: pre/post baseline lengths from the global TAC
- compute_normalization_factor: white-matter reference normalization
- load_data / save_maps: NIfTI I/O

Pipeline per voxel:
    air check -> baseline estimation -> bolus detection ->
    linear drift correction -> dR(t) = -ln(S/S0) -> integral

Output:
    CBV baseline integral, in frame-time units, or relative CBV
    (dimensionless) when normalized by a white-matter ROI.
"""

__version__ = "1.0.0"
__author__ = "CBV Toolbox Contributors"

from .model import DSC_CBV, VoxelResult, BolusWindow
from .core.timing import TimeAxis
from .calibration import SeriesConfig, calibrate_baseline_windows, compute_normalization_factor
from .utils.tools import load_data, save_maps, estimate_noise_level, roi_mean_curve
from .errors import CBVError, ConfigurationError, CalibrationError

__all__ = [
    "DSC_CBV",
    "VoxelResult",
    "BolusWindow",
    "TimeAxis",
    "SeriesConfig",
    "calibrate_baseline_windows",
    "compute_normalization_factor",
    "load_data",
    "save_maps",
    "estimate_noise_level",
    "roi_mean_curve",
    "CBVError",
    "ConfigurationError",
    "CalibrationError",
]
