import numpy as np
import pytest


N_FRAMES = 60
FRAME_DT = 1.5

# Flat at 100 until frame 9, drop to 40 at frame 20, back to 95 at frame 40
SINGLE_DIP_KNOTS = ([0, 9, 20, 40, 59], [100.0, 100.0, 40.0, 95.0, 95.0])


def make_curve(knots, n_frames=N_FRAMES):
    xp, fp = knots
    return np.interp(np.arange(n_frames), xp, fp)


@pytest.fixture
def frame_times():
    # Absolute times with a scanner offset; the pipeline works on relative times
    return 12.0 + np.arange(N_FRAMES) * FRAME_DT


@pytest.fixture
def single_dip():
    return make_curve(SINGLE_DIP_KNOTS)


@pytest.fixture
def flat_curve():
    return np.full(N_FRAMES, 100.0)
