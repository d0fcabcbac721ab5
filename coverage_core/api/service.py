"""
Request handling shared by the HTTP endpoint and the CLI.

Checks the mask against the size cap, runs the estimator and pairs both
maps with their display colors.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from ..config import EstimatorSettings
from ..errors import InvalidShapeError, MalformedInputError
from ..heatmaps.estimator import MonteCarloEstimator, to_entropy
from ..heatmaps.visualize import ColorMap
from .schemas import EstimateRequest, EstimateResponse, ValueColorGrid

log = logging.getLogger(__name__)


def validate_grid_size(rows: int, cols: int, settings: EstimatorSettings) -> bool:
    return rows <= settings.max_rows and cols <= settings.max_cols


def parse_request(payload: Dict[str, Any]) -> EstimateRequest:
    """Decode a request body. Raises MalformedInputError."""
    try:
        return EstimateRequest.model_validate(payload)
    except ValidationError as e:
        raise MalformedInputError(f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}") from e


def run_estimate(request: EstimateRequest, settings: EstimatorSettings) -> EstimateResponse:
    """
    Estimate coverage for a decoded request.

    Raises:
        InvalidShapeError: mask larger than the cap or not rows x cols
    """
    mask_model = request.mask
    if not validate_grid_size(mask_model.rows, mask_model.cols, settings):
        log.info("Rejecting %dx%d mask", mask_model.rows, mask_model.cols)
        raise InvalidShapeError(
            mask_model.rows, mask_model.cols,
            f"exceeds {settings.max_rows}x{settings.max_cols}"
        )
    mask = mask_model.to_grid()

    estimator = MonteCarloEstimator(settings)
    probabilities = estimator.estimate(mask, request.to_rectangles())
    entropy = to_entropy(probabilities)
    log.debug("Coloring probabilities with %s, entropy with %s",
              ColorMap.VIRIDIS.label, ColorMap.MAGMA.label)

    return EstimateResponse(
        probabilities=ValueColorGrid.from_grid(probabilities.to_value_color_pairs(ColorMap.VIRIDIS)),
        entropy=ValueColorGrid.from_grid(entropy.to_value_color_pairs(ColorMap.MAGMA)),
    )
