"""
RectanglePlacer - Randomized non-overlapping placement (one trial).

Each rectangle in turn is tried at the feasible free anchors in a random
order, upright first and then rotated. The first anchor that accepts it
wins. If some rectangle has no accepting anchor the trial fails.
"""

from typing import List, Optional, Sequence
import numpy as np

from .grid import Grid, Rectangle
from .masking import candidate_anchors, to_positions


class RectanglePlacer:
    """
    Places a batch of rectangles on the free cells of a mask.

    The starting mask and rectangles are never modified; each call to
    solve() works on its own copies.
    """

    def __init__(self, mask: Grid, rectangles: Sequence[Rectangle]):
        self.mask = mask
        self.rectangles = list(rectangles)

    def solve(self, rng: Optional[np.random.Generator] = None) -> Optional[Grid]:
        """
        Run one placement trial.

        Args:
            rng: Generator used to shuffle anchors

        Returns:
            Label grid (0 = empty, k = k-th rectangle), or None if some
            rectangle could not be placed
        """
        if rng is None:
            rng = np.random.default_rng()

        occupied = Grid(data=self.mask.data.astype(bool))
        labels = Grid.zeros(occupied.rows, occupied.cols, dtype=np.int32)
        rectangles = [rect.copy() for rect in self.rectangles]

        for label, rect in enumerate(rectangles, start=1):
            if not self._place_one(occupied, labels, rect, label, rng):
                return None

        return labels

    @staticmethod
    def _place_one(
        occupied: Grid,
        labels: Grid,
        rect: Rectangle,
        label: int,
        rng: np.random.Generator
    ) -> bool:
        """Try the shuffled anchors until one accepts the rectangle."""
        anchors = to_positions(candidate_anchors(occupied, rect))
        if len(anchors) == 0:
            return False

        for idx in rng.permutation(len(anchors)):
            pos = anchors[idx]
            # Two orientations: as given, then transposed. Two failed
            # attempts leave the rectangle in its original orientation.
            for _ in range(2):
                if occupied.all(pos, rect, False):
                    occupied.fill(pos, rect, True)
                    labels.fill(pos, rect, label)
                    return True
                rect.transpose()

        return False


def place_rectangles(
    mask: Grid,
    rectangles: List[Rectangle],
    rng: Optional[np.random.Generator] = None
) -> Optional[Grid]:
    """Single placement trial. See RectanglePlacer.solve."""
    return RectanglePlacer(mask, rectangles).solve(rng)
