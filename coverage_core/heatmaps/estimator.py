"""
Monte-Carlo coverage estimator and entropy transform.

Runs many independent RectanglePlacer trials, counts how often each cell
is covered in the successful ones, and normalizes by the number of
successes. Trials are grouped into batches; every batch owns a local count
grid and its own random sub-stream, and the batches are summed at the end.
"""

import logging
import os
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union
import numpy as np

from ..config import EstimatorSettings
from .grid import Grid, Rectangle
from .masking import count_free_cells
from .solver import RectanglePlacer

log = logging.getLogger(__name__)

EPSILON = float(np.finfo(np.float64).eps)


@dataclass
class CoverageTally:
    """Per-cell hit counts from successful trials, plus the success count."""
    counts: np.ndarray
    successes: int = 0
    trials: int = 0

    @classmethod
    def empty(cls, rows: int, cols: int) -> 'CoverageTally':
        return cls(counts=np.zeros((rows, cols), dtype=np.float64))

    def record(self, labels: Optional[Grid]) -> None:
        """Add one trial. Failed trials (None) only bump the trial count."""
        self.trials += 1
        if labels is None:
            return
        self.successes += 1
        self.counts += labels.data > 0

    def merge(self, other: 'CoverageTally') -> 'CoverageTally':
        """Add another tally into this one. Returns self for chaining."""
        self.counts += other.counts
        self.successes += other.successes
        self.trials += other.trials
        return self

    def probabilities(self) -> Grid:
        # eps keeps the division finite when nothing succeeded
        return Grid(data=self.counts) / (self.successes + EPSILON)


def run_batch(
    mask: Grid,
    rectangles: Sequence[Rectangle],
    trials: int,
    seed: np.random.SeedSequence
) -> CoverageTally:
    """
    Run a batch of placement trials on one random sub-stream.

    Module-level so it can be shipped to a process pool.
    """
    rng = np.random.default_rng(seed)
    placer = RectanglePlacer(mask, rectangles)
    tally = CoverageTally.empty(mask.rows, mask.cols)
    for _ in range(trials):
        tally.record(placer.solve(rng))
    return tally


def sort_by_area(rectangles: Sequence[Rectangle]) -> List[Rectangle]:
    """Copy and sort largest area first. sorted() is stable, so equal areas keep input order."""
    return sorted((rect.copy() for rect in rectangles), key=lambda r: r.area, reverse=True)


def split_trials(total: int, batch_size: int) -> List[int]:
    """Split `total` trials into batch sizes of at most `batch_size`."""
    full, rest = divmod(total, batch_size)
    return [batch_size] * full + ([rest] if rest else [])


def _effective_workers(workers: int) -> int:
    if workers <= 0:
        return max(1, os.cpu_count() or 1)
    return max(1, int(workers))


class MonteCarloEstimator:
    """
    Estimates per-cell coverage probabilities by repeated random placement.

    Algorithm:
    1. Sort rectangles by area, largest first
    2. Split the simulation count into batches
    3. Run batches on a worker pool, each with its own count grid
    4. Sum the batches and divide by the success count (+ eps)
    """

    def __init__(self, settings: Optional[EstimatorSettings] = None):
        self.settings = settings or EstimatorSettings()

    def estimate(self, mask: Grid, rectangles: Sequence[Rectangle]) -> Grid:
        """
        Estimate coverage probabilities.

        Args:
            mask: Starting occupancy (True = occupied), not modified
            rectangles: Rectangles to place, not modified

        Returns:
            Float Grid of the mask's shape with values in [0, 1]
        """
        tally = self.run(mask, rectangles)
        if tally.successes == 0:
            log.warning(
                "No successful placement in %d trials (%d rectangles, %d free cells)",
                tally.trials, len(rectangles), count_free_cells(mask)
            )
        return tally.probabilities()

    def run(self, mask: Grid, rectangles: Sequence[Rectangle]) -> CoverageTally:
        """Run all trials and return the merged tally."""
        settings = self.settings
        ordered = sort_by_area(rectangles)
        batches = split_trials(settings.simulations, settings.batch_size)
        seeds = np.random.SeedSequence(settings.seed).spawn(len(batches))
        workers = min(_effective_workers(settings.workers), len(batches))

        log.info(
            "Estimating %dx%d mask, %d rectangles: %d trials in %d batches (%s, %d workers)",
            mask.rows, mask.cols, len(ordered), settings.simulations,
            len(batches), settings.executor, workers
        )
        started = time.perf_counter()

        total = CoverageTally.empty(mask.rows, mask.cols)
        if settings.executor == 'serial' or workers <= 1:
            for trials, seed in zip(batches, seeds):
                total.merge(run_batch(mask, ordered, trials, seed))
        else:
            with self._make_executor(workers) as pool:
                results = pool.map(
                    run_batch,
                    [mask] * len(batches),
                    [ordered] * len(batches),
                    batches,
                    seeds,
                )
                for tally in results:
                    total.merge(tally)

        log.info(
            "Finished %d trials in %.2fs: %d successful",
            total.trials, time.perf_counter() - started, total.successes
        )
        return total

    def _make_executor(self, workers: int) -> Executor:
        if self.settings.executor == 'thread':
            return ThreadPoolExecutor(max_workers=workers)
        return ProcessPoolExecutor(max_workers=workers)


def estimate_probabilities(
    mask: Grid,
    rectangles: Sequence[Rectangle],
    settings: Optional[EstimatorSettings] = None,
    **overrides
) -> Grid:
    """
    Function form of MonteCarloEstimator.estimate.

    Keyword overrides (simulations, seed, workers, ...) replace the
    matching settings fields for this call.
    """
    settings = settings or EstimatorSettings()
    if overrides:
        settings = settings.with_overrides(**overrides)
    return MonteCarloEstimator(settings).estimate(mask, rectangles)


def binary_entropy(p: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Binary entropy in bits, clamped to [0, 1].

    eps keeps log2 finite at p = 0 and p = 1; the clamp absorbs the tiny
    negative values this produces there and the overshoot near p = 0.5.
    """
    p = np.asarray(p, dtype=np.float64)
    h = -p * np.log2(p + EPSILON) - (1.0 - p) * np.log2(1.0 - p + EPSILON)
    h = np.clip(h, 0.0, 1.0)
    if h.ndim == 0:
        return float(h)
    return h


def to_entropy(probabilities: Grid) -> Grid:
    """Per-cell binary entropy of a probability Grid."""
    return Grid(data=binary_entropy(probabilities.data.astype(np.float64)))
