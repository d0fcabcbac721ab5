import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from coverage_core.config import EstimatorSettings
from coverage_core.heatmaps.grid import Grid


@pytest.fixture
def fast_settings():
    """Small, single-process, seeded run."""
    return EstimatorSettings(simulations=300, executor='serial', batch_size=100, seed=1234)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


def make_mask(rows, cols, blocked=()):
    """Free mask with the given (x, y) cells occupied."""
    mask = Grid.create(rows, cols, False)
    for x, y in blocked:
        mask.data[y, x] = True
    return mask


# Occupied cells used by the larger integration cases, as (x, y)
BLOCKED_5x9 = [(4, 2), (1, 0), (8, 4), (6, 1), (2, 3), (2, 4), (3, 4), (4, 4), (5, 4), (3, 2)]
