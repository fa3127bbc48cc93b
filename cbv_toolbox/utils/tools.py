import os
import numpy as np
import nibabel as nib
import warnings


def print_series_summary(frame_times):
    """
    Prints a summary of the dynamic acquisition timing.

    Args:
        frame_times (np.ndarray): Absolute frame times.
    """
    frame_times = np.asarray(frame_times, dtype=np.float64)
    dt = np.diff(frame_times)

    print("\n" + "="*40)
    print("       DYNAMIC SERIES SUMMARY")
    print("="*40)
    print(f" Total Frames:  {len(frame_times)}")
    print(f" Duration:      {frame_times[-1] - frame_times[0]:.2f}")
    if len(dt) > 0:
        print(f" Frame spacing: {np.min(dt):.3f} - {np.max(dt):.3f}")
    print("="*40 + "\n")


def load_data(dsc_path, times_path=None, mask_path=None, verbose=True):
    """
    Unified function to load a DSC series, its frame times, and mask.

    Args:
        dsc_path (str): Path to 4D DSC NIfTI file.
        times_path (str, optional): Text file with one acquisition time per frame.
            If omitted, frame times are built from the NIfTI TR.
        mask_path (str, optional): Path to binary brain mask.
        verbose (bool): If True, prints series summary.

    Returns:
        tuple: (data, affine, frame_times, mask)
    """
    # 1. Load NIfTI
    if not os.path.exists(dsc_path):
        raise FileNotFoundError(f"DSC file not found: {dsc_path}")

    img = nib.load(dsc_path)
    data = img.get_fdata().astype(np.float32)
    affine = img.affine

    if data.ndim != 4:
        raise ValueError(f"DSC series must be 4D, got shape {data.shape}")
    n_frames = data.shape[-1]

    # 2. Frame times
    if times_path:
        try:
            frame_times = np.loadtxt(times_path, dtype=np.float64).ravel()
        except Exception as e:
            raise ValueError(f"Error loading frame times: {e}")
    else:
        zooms = img.header.get_zooms()
        tr = float(zooms[3]) if len(zooms) > 3 else 0.0
        if tr <= 0:
            raise ValueError("No frame times given and NIfTI header has no TR")
        warnings.warn(f"No frame times provided. Using TR={tr:g} from header.")
        frame_times = np.arange(n_frames, dtype=np.float64) * tr

    if frame_times.size != n_frames:
        raise ValueError(
            f"Frame times ({frame_times.size}) do not match series ({n_frames} frames)"
        )

    # 3. Handle Mask
    if mask_path and os.path.exists(mask_path):
        mask_img = nib.load(mask_path)
        mask = mask_img.get_fdata().astype(bool)
    else:
        warnings.warn("No mask provided. Generating simple threshold mask.")
        mean_vol = np.mean(data, axis=-1)
        thresh = np.percentile(mean_vol[mean_vol > 0], 10)
        mask = mean_vol > thresh

    # 4. Series Summary
    if verbose:
        print_series_summary(frame_times)

    return data, affine, frame_times, mask


def estimate_noise_level(data, mask, verbose=True):
    """
    Series-wide noise level (sigma) for the air threshold.
    Method 1 (Preferred): Background noise outside the mask (Rayleigh distribution).
    Method 2 (Fallback): MAD of frame-to-frame differences inside the mask.
    """
    bg_mask = (~mask) & (data[..., 0] > 0)

    if np.sum(bg_mask) > 0:
        bg_signal = data[..., 0][bg_mask]
        # Sigma from Rayleigh background mean
        sigma = float(np.mean(bg_signal) / 1.253)
        method = "background"
    else:
        diffs = np.diff(data[mask].astype(np.float64), axis=-1)
        if diffs.size == 0:
            return 1.0  # Safe fallback
        # Differences of two noisy samples carry sqrt(2) * sigma
        sigma = float(np.median(np.abs(diffs)) * 1.4826 / np.sqrt(2.0))
        method = "temporal"

    if verbose:
        print(f"1. Noise level ({method}): {sigma:.4g}")

    return sigma


def compute_global_curve(data, mask):
    """Mean TAC over the mask (N,)."""
    return data[mask].astype(np.float64).mean(axis=0)


def roi_mean_curve(data, roi_mask):
    """Mean TAC of a reference ROI, e.g. white matter."""
    roi_mask = np.asarray(roi_mask, dtype=bool)
    if not np.any(roi_mask):
        raise ValueError("Reference ROI mask is empty")
    return compute_global_curve(data, roi_mask)


def save_maps(cbv_map, status_map, affine, out_dir, prefix="cbv"):
    """
    Writes the CBV and status maps as NIfTI files.

    Returns:
        list: Paths of the written files.
    """
    os.makedirs(out_dir, exist_ok=True)

    paths = []
    for name, vol, dtype in (("baseline_integral", cbv_map, np.float32),
                             ("status", status_map, np.int16)):
        fname = os.path.join(out_dir, f"{prefix}_{name}.nii.gz")
        nib.save(nib.Nifti1Image(np.asarray(vol).astype(dtype), affine), fname)
        paths.append(fname)

    return paths
