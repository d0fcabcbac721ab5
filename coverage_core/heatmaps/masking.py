"""
Anchor enumeration over an occupancy mask.

Mask convention: True = occupied/forbidden, False = free.
Anchors are returned as an (n, 2) integer array of (x, y) pairs so the
feasibility filter stays vectorized.
"""

from typing import List, Tuple
import numpy as np

from .grid import Grid, Position, Rectangle


def find_free_positions(mask: Grid) -> np.ndarray:
    """
    Find every free cell of the mask.

    Returns:
        (n, 2) array of (x, y) anchors in row-major order
    """
    # argwhere walks the array in C order, i.e. row by row
    ys_xs = np.argwhere(~mask.data.astype(bool))
    return ys_xs[:, ::-1].copy()


def filter_positions(positions: np.ndarray, rect: Rectangle, grid_size: Tuple[int, int]) -> np.ndarray:
    """
    Drop anchors where the rectangle cannot fit inside the grid.

    The rectangle may rotate, so an anchor is kept when either
    orientation stays within bounds. Occupancy is not checked here.

    Args:
        positions: (n, 2) array of (x, y) anchors
        rect: Rectangle to place
        grid_size: (cols, rows)

    Returns:
        Filtered (m, 2) array, original order preserved
    """
    cols, rows = grid_size
    if len(positions) == 0:
        return positions
    xs = positions[:, 0]
    ys = positions[:, 1]
    upright = (xs + rect.width <= cols) & (ys + rect.height <= rows)
    rotated = (xs + rect.height <= cols) & (ys + rect.width <= rows)
    return positions[upright | rotated]


def candidate_anchors(mask: Grid, rect: Rectangle) -> np.ndarray:
    """Free anchors of the mask where the rectangle fits in some orientation."""
    return filter_positions(find_free_positions(mask), rect, (mask.cols, mask.rows))


def to_positions(anchors: np.ndarray) -> List[Position]:
    return [Position(int(x), int(y)) for x, y in anchors]


def count_free_cells(mask: Grid) -> int:
    """Number of placeable cells."""
    return int(mask.data.size - np.count_nonzero(mask.data))
