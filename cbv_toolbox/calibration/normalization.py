"""
Reference-tissue normalization.

With one white-matter reference TAC the voxel integrals are divided by the
reference integral, giving a dimensionless relative CBV. Without a
reference the factor is 1 and outputs keep the time units of the frame
times.
"""

import numpy as np

from ..core.bolus import process_tac, STATUS_OK, STATUS_NAMES
from ..errors import CalibrationError, ConfigurationError


def compute_normalization_factor(reference_curves, times, skip_frames,
                                 pre_n, post_n, air_threshold):
    """
    Reciprocal of the reference-tissue integral.

    Parameters
    ----------
    reference_curves : sequence of array-like or None
        At most one reference TAC (full length, raw signal)
    times : ndarray (N,)
        Relative frame times
    skip_frames, pre_n, post_n : int
        Calibrated series parameters
    air_threshold : float
        Background threshold for the reference TAC

    Returns
    -------
    factor : float
        1.0 without reference, else 1 / integral(reference)

    Raises
    ------
    ConfigurationError
        More than one reference TAC, or a length mismatch.
    CalibrationError
        The reference TAC is rejected by the pipeline or has a
        non-positive integral.
    """
    if reference_curves is None:
        return 1.0

    curves = list(reference_curves)
    if len(curves) == 0:
        return 1.0
    if len(curves) > 1:
        raise ConfigurationError(
            f"No more than one white matter reference ROI is allowed, got {len(curves)}"
        )

    # Reference ROI TACs may come in sign-flipped
    ref = np.abs(np.asarray(curves[0], dtype=np.float64).ravel())
    if ref.size != times.size:
        raise ConfigurationError(
            f"Reference TAC has {ref.size} frames, series has {times.size}"
        )

    integral, status, _, _ = process_tac(
        ref, times, skip_frames, pre_n, post_n, air_threshold, 1.0
    )

    if status != STATUS_OK:
        raise CalibrationError(
            f"White matter reference TAC is incorrect ({STATUS_NAMES[int(status)]})"
        )
    if not np.isfinite(integral) or integral <= 0.0:
        raise CalibrationError(
            f"White matter reference integral must be positive, got {integral}"
        )

    return 1.0 / float(integral)
