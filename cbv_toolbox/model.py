"""
DSC CBV Model - Main Pipeline

Orchestrates the two phases of the CBV baseline-integral method:
- Series calibration (once): noise level, global TAC, baseline windows,
  optional white-matter normalization
- Voxel fitting (many): air check, baseline estimation, bolus detection,
  drift correction, dR(t) conversion, integration

Voxels are independent; the batch kernel runs them with Numba prange
against the read-only SeriesConfig.
"""

import time
from typing import NamedTuple, Optional

import numpy as np
from numba import njit, prange
from tqdm import tqdm

from .core.timing import TimeAxis
from .core.bolus import process_tac, STATUS_OK, STATUS_NOT_PROCESSED, STATUS_NAMES
from .calibration.baseline import (
    SeriesConfig,
    calibrate_baseline_windows,
    BASELINE_THRESHOLD_FRACTION,
    DEFAULT_BACKGROUND_THRESHOLD,
)
from .calibration.normalization import compute_normalization_factor
from .utils.tools import estimate_noise_level, compute_global_curve
from .errors import ConfigurationError


class BolusWindow(NamedTuple):
    start: int
    end: int


class VoxelResult(NamedTuple):
    """Outcome of one voxel: cbv is NaN unless status is STATUS_OK."""
    cbv: float
    status: int
    window: Optional[BolusWindow]

    @property
    def ok(self):
        return self.status == STATUS_OK

    @property
    def reason(self):
        return STATUS_NAMES[self.status]


class DSC_CBV:
    """
    CBV baseline integral from dynamic susceptibility contrast MRI.

    Output per voxel: the time integral of dR(t) = -ln(S(t)/S0) over the
    detected bolus, scaled by the white-matter normalization factor when a
    reference ROI is given (relative CBV, dimensionless) and in units of the
    frame times otherwise.

    Parameters
    ----------
    background_threshold : float
        Multiplier of the series noise level; voxels whose raw TAC minimum
        falls below it are treated as air.
    skip_frames : int
        Number of leading frames ignored (e.g. steady-state build-up).
    threshold_fraction : float
        Plateau fraction used to size the baseline windows (default 0.95).
    batch_size : int
        Voxels per kernel call (progress bar granularity).
    """

    def __init__(self, background_threshold=DEFAULT_BACKGROUND_THRESHOLD,
                 skip_frames=0, threshold_fraction=BASELINE_THRESHOLD_FRACTION,
                 batch_size=10000):
        if background_threshold < 0:
            raise ConfigurationError(
                f"background_threshold must be >= 0, got {background_threshold}"
            )
        if batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")

        self.background_threshold = float(background_threshold)
        self.skip_frames = int(skip_frames)
        self.threshold_fraction = float(threshold_fraction)
        self.batch_size = int(batch_size)
        self.series_config = None

    def calibrate(self, frame_times, global_curve, noise_level,
                  reference_curves=None, verbose=True):
        """
        Series-level setup, run before any voxel is processed.

        Parameters
        ----------
        frame_times : array-like (N,)
            Absolute acquisition times
        global_curve : array-like (N,)
            Representative TAC (e.g. mean over the brain mask)
        noise_level : float
            Series noise estimate; air threshold = background_threshold * noise_level
        reference_curves : sequence of array-like, optional
            At most one white-matter TAC for normalization

        Returns
        -------
        config : SeriesConfig
        """
        time_axis = TimeAxis(frame_times)
        time_axis.working(self.skip_frames)

        global_curve = np.asarray(global_curve, dtype=np.float64).ravel()
        if global_curve.size != time_axis.n_frames:
            raise ConfigurationError(
                f"Global TAC has {global_curve.size} frames, "
                f"time axis has {time_axis.n_frames}"
            )

        pre_n, post_n = calibrate_baseline_windows(
            global_curve, self.skip_frames, self.threshold_fraction
        )
        air_threshold = self.background_threshold * float(noise_level)

        normalization = compute_normalization_factor(
            reference_curves, time_axis.relative, self.skip_frames,
            pre_n, post_n, air_threshold
        )

        config = SeriesConfig(
            time_axis=time_axis,
            pre_n=pre_n,
            post_n=post_n,
            skip_frames=self.skip_frames,
            air_threshold=air_threshold,
            normalization=normalization,
        )

        if verbose:
            _print_calibration_report(config, noise_level)

        self.series_config = config
        return config

    def fit_curve(self, curve, config):
        """
        Run the voxel pipeline on a single TAC.

        Returns
        -------
        VoxelResult
        """
        curve = np.asarray(curve, dtype=np.float64).ravel()
        if curve.size != config.time_axis.n_frames:
            raise ConfigurationError(
                f"TAC has {curve.size} frames, time axis has {config.time_axis.n_frames}"
            )

        cbv, status, start, end = process_tac(
            curve, config.time_axis.relative, config.skip_frames,
            config.pre_n, config.post_n, config.air_threshold, config.normalization
        )
        status = int(status)
        window = BolusWindow(int(start), int(end)) if start >= 0 else None
        return VoxelResult(float(cbv), status, window)

    def fit(self, data, frame_times, mask, noise_level=None,
            reference_curves=None, verbose=True):
        """
        Computes the CBV map for a 4D DSC series.

        Parameters
        ----------
        data : ndarray (X, Y, Z, N)
            Raw DSC signal
        frame_times : ndarray (N,)
            Absolute frame times
        mask : ndarray (X, Y, Z)
            Boolean brain mask; also defines the global TAC
        noise_level : float, optional
            Series noise level; estimated from the background when None
        reference_curves : sequence of array-like, optional
            At most one white-matter TAC for normalization

        Returns
        -------
        cbv_map : ndarray (X, Y, Z) float32
            NaN where the voxel was void
        status_map : ndarray (X, Y, Z) int8
            Per-voxel status code (see STATUS_NAMES)
        """
        data = np.asarray(data)
        mask = np.asarray(mask, dtype=bool)
        if data.ndim != 4:
            raise ConfigurationError(f"Expected 4D data, got shape {data.shape}")
        if mask.shape != data.shape[:3]:
            raise ConfigurationError(
                f"Mask shape {mask.shape} does not match volume {data.shape[:3]}"
            )
        if not np.any(mask):
            raise ConfigurationError("Mask is empty")

        if verbose:
            print(">>> Starting DSC CBV Pipeline")

        # 1. Noise level
        if noise_level is None:
            noise_level = estimate_noise_level(data, mask, verbose=verbose)

        # 2. Global TAC and calibration
        if verbose:
            print("2. Calibrating baseline windows on global TAC...")
        global_curve = compute_global_curve(data, mask)
        config = self.calibrate(
            frame_times, global_curve, noise_level,
            reference_curves=reference_curves, verbose=verbose
        )

        # 3. Parallel voxel processing
        mask_coords = np.argwhere(mask)
        n_total = len(mask_coords)
        if verbose:
            print(f"3. Processing {n_total:,} voxels...")

        cbv_map = np.full(data.shape[:3], np.nan, dtype=np.float32)
        status_map = np.full(data.shape[:3], STATUS_NOT_PROCESSED, dtype=np.int8)
        times = np.ascontiguousarray(config.time_axis.relative)

        n_batches = int(np.ceil(n_total / self.batch_size))
        t0 = time.time()

        with tqdm(total=n_total, desc="  CBV Progress", unit="vox",
                  disable=not verbose) as pbar:
            for i in range(n_batches):
                start_idx = i * self.batch_size
                end_idx = min((i + 1) * self.batch_size, n_total)
                batch_coords = mask_coords[start_idx:end_idx]

                self._fit_batch_kernel(
                    data, batch_coords, times, config.skip_frames,
                    config.pre_n, config.post_n, config.air_threshold,
                    config.normalization, cbv_map, status_map
                )
                pbar.update(len(batch_coords))

        if verbose:
            n_ok = int(np.sum(status_map == STATUS_OK))
            print(f"   Done in {time.time()-t0:.1f}s ({n_ok:,}/{n_total:,} voxels valid)")

        return cbv_map, status_map

    @staticmethod
    @njit(parallel=True)
    def _fit_batch_kernel(data, coords, times, skip, pre_n, post_n,
                          air_thresh, norm, cbv_out, status_out):
        """Numba-accelerated kernel for a batch of voxels."""
        n_voxels = coords.shape[0]

        for i in prange(n_voxels):
            x, y, z = coords[i]
            tac = data[x, y, z].astype(np.float64)

            cbv, status, _, _ = process_tac(
                tac, times, skip, pre_n, post_n, air_thresh, norm
            )

            cbv_out[x, y, z] = cbv
            status_out[x, y, z] = status


def _print_calibration_report(config, noise_level):
    """Print the series calibration summary."""
    n_work = config.working_length
    print("\n[CALIBRATION REPORT]")
    print("-" * 40)
    print(f"  Frames:            {config.time_axis.n_frames} "
          f"(skipped {config.skip_frames}, working {n_work})")
    print(f"  Noise level:       {noise_level:.4g}")
    print(f"  Air threshold:     {config.air_threshold:.4g}")
    print(f"  pre_N / post_N:    {config.pre_n} / {config.post_n}")
    print(f"  Search region:     frames {config.pre_n}..{n_work - config.post_n - 1}")
    if config.normalization != 1.0:
        print(f"  WM normalization:  {config.normalization:.4g}")
    else:
        print("  WM normalization:  none")
    print("-" * 40 + "\n")
