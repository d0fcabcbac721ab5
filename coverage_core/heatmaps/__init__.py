"""
Coverage heatmaps for rectangle placement on a masked grid.

Monte-Carlo placement trials give per-cell coverage probabilities; the
entropy map shows where the outcome is least certain.
"""

from .grid import Grid, Position, Rectangle
from .masking import find_free_positions, filter_positions, candidate_anchors
from .solver import RectanglePlacer, place_rectangles
from .estimator import (
    MonteCarloEstimator,
    CoverageTally,
    estimate_probabilities,
    binary_entropy,
    to_entropy,
)
from .visualize import ColorMap, to_rgb

__all__ = [
    'Grid',
    'Position',
    'Rectangle',
    'find_free_positions',
    'filter_positions',
    'candidate_anchors',
    'RectanglePlacer',
    'place_rectangles',
    'MonteCarloEstimator',
    'CoverageTally',
    'estimate_probabilities',
    'binary_entropy',
    'to_entropy',
    'ColorMap',
    'to_rgb',
]
