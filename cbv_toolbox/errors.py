"""
Exceptions raised at series level.

Voxel-level failures never raise; they are reported as status codes
(see cbv_toolbox.core.bolus).
"""


class CBVError(ValueError):
    """Base class for errors that invalidate a whole series."""


class ConfigurationError(CBVError):
    """Inconsistent inputs or parameters (e.g. several reference ROIs)."""


class CalibrationError(CBVError):
    """Baseline windows or normalization could not be derived."""
