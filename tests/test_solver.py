"""
Tests for single placement trials.
"""

import numpy as np

from coverage_core.heatmaps.grid import Grid, Rectangle
from coverage_core.heatmaps.solver import RectanglePlacer, place_rectangles
from conftest import make_mask, BLOCKED_5x9


class TestPlaceRectangles:

    def test_all_placed(self, rng):
        mask = make_mask(5, 9)
        rectangles = [Rectangle(1, 1) for _ in range(7)]

        labels = place_rectangles(mask, rectangles, rng)

        assert labels is not None
        assert np.count_nonzero(labels.data) == len(rectangles)
        assert sorted(labels.data[labels.data > 0].tolist()) == list(range(1, 8))

    def test_none_placed_on_full_mask(self, rng):
        mask = Grid.create(5, 9, True)
        rectangles = [Rectangle(1, 1) for _ in range(46)]
        assert place_rectangles(mask, rectangles, rng) is None

    def test_too_many_rectangles_fails(self, rng):
        mask = make_mask(2, 2)
        rectangles = [Rectangle(1, 1) for _ in range(5)]
        assert place_rectangles(mask, rectangles, rng) is None

    def test_empty_list_gives_blank_labels(self, rng):
        labels = place_rectangles(make_mask(3, 3), [], rng)
        assert labels is not None
        assert labels.shape == (3, 3)
        assert np.all(labels.data == 0)

    def test_rotation_used_when_needed(self, rng):
        # 3 rows x 1 col: a 3x1 rectangle only fits after transposing
        labels = place_rectangles(make_mask(3, 1), [Rectangle(3, 1)], rng)
        assert labels is not None
        assert labels.data.tolist() == [[1], [1], [1]]

    def test_labels_cover_exact_areas(self, rng):
        mask = make_mask(5, 9, blocked=BLOCKED_5x9)
        rectangles = [Rectangle(2, 1), Rectangle(3, 1), Rectangle(2, 2)]

        for _ in range(50):
            labels = place_rectangles(mask, rectangles, rng)
            if labels is None:
                continue
            for label, rect in enumerate(rectangles, start=1):
                assert np.count_nonzero(labels.data == label) == rect.area

    def test_never_covers_masked_cells(self, rng):
        mask = make_mask(5, 9, blocked=BLOCKED_5x9)
        rectangles = [Rectangle(2, 1)] * 6 + [Rectangle(3, 1)] * 4 + [Rectangle(4, 1)] * 2

        for _ in range(50):
            labels = place_rectangles(mask, rectangles, rng)
            if labels is not None:
                assert not np.any(labels.data[mask.data] > 0)

    def test_inputs_not_modified(self, rng):
        mask = make_mask(1, 3)
        rectangles = [Rectangle(1, 3)]

        place_rectangles(mask, rectangles, rng)

        assert not np.any(mask.data)
        assert rectangles[0] == Rectangle(1, 3)

    def test_placer_reusable(self, rng):
        placer = RectanglePlacer(make_mask(2, 2), [Rectangle(2, 1), Rectangle(2, 1)])
        for _ in range(10):
            labels = placer.solve(rng)
            assert labels is not None
            assert np.all(labels.data > 0)

    def test_seeded_trials_repeat(self):
        mask = make_mask(4, 4)
        rectangles = [Rectangle(2, 1), Rectangle(1, 1)]
        first = place_rectangles(mask, rectangles, np.random.default_rng(3))
        second = place_rectangles(mask, rectangles, np.random.default_rng(3))
        assert np.array_equal(first.data, second.data)
