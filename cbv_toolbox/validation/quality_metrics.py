"""
CBV Quality Metrics and Validation Module

Summaries of a fitted CBV map: how many voxels were rejected and why,
and whether the valid values are plausible (finite, positive).
"""

import numpy as np
import pandas as pd
from typing import Dict

from ..core.bolus import STATUS_NAMES, STATUS_OK


# =============================================================================
# STATUS BREAKDOWN
# =============================================================================

def status_table(status_map: np.ndarray, mask: np.ndarray) -> pd.DataFrame:
    """
    Count voxels per status code inside the mask.

    Returns
    -------
    table : DataFrame
        Columns: status, reason, n_voxels, pct. One row per known status,
        including those with zero voxels.
    """
    codes = status_map[mask]
    n_total = max(int(codes.size), 1)

    rows = []
    for code, reason in sorted(STATUS_NAMES.items()):
        n = int(np.sum(codes == code))
        rows.append({
            'status': code,
            'reason': reason,
            'n_voxels': n,
            'pct': n / n_total * 100,
        })

    return pd.DataFrame(rows, columns=['status', 'reason', 'n_voxels', 'pct'])


# =============================================================================
# PLAUSIBILITY
# =============================================================================

def check_physiological_plausibility(cbv_map: np.ndarray, status_map: np.ndarray,
                                     mask: np.ndarray) -> Dict:
    """
    Plausibility of the valid CBV values.

    A valid voxel must be finite; a bolus passage lowers the signal, so
    its dR integral is expected to be positive.
    """
    valid = mask & (status_map == STATUS_OK)
    n_mask = int(np.sum(mask))
    n_valid = int(np.sum(valid))

    if n_valid == 0:
        return {
            'n_valid': 0,
            'success_pct': 0.0,
            'finite_pct': 0.0,
            'positive_pct': 0.0,
        }

    vals = cbv_map[valid]
    return {
        'n_valid': n_valid,
        'success_pct': float(n_valid / max(n_mask, 1) * 100),
        'finite_pct': float(np.sum(np.isfinite(vals)) / n_valid * 100),
        'positive_pct': float(np.sum(vals > 0) / n_valid * 100),
    }


# =============================================================================
# GLOBAL SUMMARY REPORT
# =============================================================================

def generate_validation_report(cbv_map: np.ndarray, status_map: np.ndarray,
                               mask: np.ndarray, verbose: bool = True) -> Dict:
    """
    Generate a validation report for a CBV map.

    Parameters
    ----------
    cbv_map : ndarray (X, Y, Z)
        CBV baseline integral (NaN for void voxels)
    status_map : ndarray (X, Y, Z)
        Per-voxel status codes
    mask : ndarray (X, Y, Z)
        Brain mask
    verbose : bool
        Print report to console

    Returns
    -------
    report : dict
        Keys: 'status' (DataFrame), 'plausibility', 'cbv'
    """
    report = {}
    report['status'] = status_table(status_map, mask)
    report['plausibility'] = check_physiological_plausibility(cbv_map, status_map, mask)

    valid = mask & (status_map == STATUS_OK) & np.isfinite(cbv_map)
    if np.any(valid):
        vals = cbv_map[valid].astype(np.float64)
        report['cbv'] = {
            'mean': float(np.mean(vals)),
            'median': float(np.median(vals)),
            'std': float(np.std(vals)),
            'min': float(np.min(vals)),
            'max': float(np.max(vals)),
        }
    else:
        report['cbv'] = {}

    if verbose:
        _print_validation_report(report)

    return report


def _print_validation_report(report: Dict):
    """Print formatted validation report to console."""
    print("\n" + "=" * 60)
    print("           CBV VALIDATION REPORT")
    print("=" * 60)

    print("\n[1] VOXEL STATUS")
    print("-" * 40)
    for _, row in report['status'].iterrows():
        print(f"  {row['reason']:<22} {row['n_voxels']:>8}  ({row['pct']:.1f}%)")

    print("\n[2] PLAUSIBILITY")
    print("-" * 40)
    plaus = report['plausibility']
    print(f"  Valid voxels:    {plaus['n_valid']}")
    print(f"  Success rate:    {plaus['success_pct']:.1f}%")
    print(f"  Finite values:   {plaus['finite_pct']:.1f}%")
    print(f"  Positive values: {plaus['positive_pct']:.1f}%")

    if report['cbv']:
        print("\n[3] CBV DISTRIBUTION")
        print("-" * 40)
        cbv = report['cbv']
        print(f"  Mean:   {cbv['mean']:.4f}")
        print(f"  Median: {cbv['median']:.4f}")
        print(f"  Range:  {cbv['min']:.4f} - {cbv['max']:.4f}")

    print("=" * 60 + "\n")
