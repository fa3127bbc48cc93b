"""
Frame timing for a dynamic series.
"""

import numpy as np

from ..errors import ConfigurationError


MIN_FRAMES = 3


class TimeAxis:
    """
    Absolute acquisition times and the derived zero-based time axis.

    Both arrays are read-only once built, so a single instance can be
    shared by every voxel of a series.

    Parameters
    ----------
    frame_times : array-like (N,)
        Acquisition time of each frame (typically seconds), in time order.
    """

    def __init__(self, frame_times):
        absolute = np.array(frame_times, dtype=np.float64).ravel()

        if absolute.size < MIN_FRAMES:
            raise ConfigurationError(
                f"At least {MIN_FRAMES} frames are required, got {absolute.size}"
            )
        if not np.all(np.isfinite(absolute)):
            raise ConfigurationError("Frame times must be finite")
        if np.any(np.diff(absolute) < 0):
            raise ConfigurationError("Frame times must be non-decreasing")

        relative = absolute - absolute[0]
        absolute.setflags(write=False)
        relative.setflags(write=False)

        self.absolute = absolute
        self.relative = relative

    def __len__(self):
        return self.absolute.size

    @property
    def n_frames(self):
        return self.absolute.size

    def working(self, skip_frames):
        """Relative times after dropping the first `skip_frames` frames."""
        if skip_frames < 0 or skip_frames > self.n_frames - MIN_FRAMES:
            raise ConfigurationError(
                f"skip_frames={skip_frames} leaves fewer than {MIN_FRAMES} "
                f"of {self.n_frames} frames"
            )
        return self.relative[skip_frames:]

    def __repr__(self):
        return (f"TimeAxis(n_frames={self.n_frames}, "
                f"duration={self.relative[-1]:.3g})")
