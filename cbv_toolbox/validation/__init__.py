"""
CBV Validation Module

Quality summaries for a fitted CBV map:
- Voxel status breakdown (background, degenerate baseline, invalid bolus)
- Plausibility of valid values
- Distribution report
"""

from .quality_metrics import (
    status_table,
    check_physiological_plausibility,
    generate_validation_report,
)

__all__ = [
    'status_table',
    'check_physiological_plausibility',
    'generate_validation_report',
]
