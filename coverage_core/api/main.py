"""
FastAPI app - single estimation endpoint plus optional static frontend.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles

from ..config import EstimatorSettings, load_settings
from ..errors import CoverageError
from .schemas import EstimateRequest, EstimateResponse
from .service import run_estimate

log = logging.getLogger(__name__)


def create_app(settings: Optional[EstimatorSettings] = None) -> FastAPI:
    """
    Build the app.

    Args:
        settings: Estimator settings; loaded from the environment if omitted
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(title="Coverage Estimator")
    app.state.settings = settings

    @app.exception_handler(RequestValidationError)
    async def _malformed_input(request: Request, exc: RequestValidationError):
        # Undecodable bodies are a plain client error, no body
        log.info("Malformed request to %s: %d error(s)", request.url.path, len(exc.errors()))
        return Response(status_code=400)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/estimate", response_model=EstimateResponse)
    def estimate(body: EstimateRequest, request: Request):
        """
        Estimate coverage probabilities and entropy for a mask.

        1. Reject masks over the size cap or with ragged rows (400, no body)
        2. Run the Monte-Carlo estimator
        3. Return both maps as (value, [r, g, b]) grids
        """
        try:
            return run_estimate(body, request.app.state.settings)
        except CoverageError as e:
            log.info("Rejected estimate request: %s", e)
            return Response(status_code=400)

    # Static files go last so they don't shadow the API routes
    if settings.static_dir:
        if os.path.isdir(settings.static_dir):
            app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        else:
            log.warning("Static directory %s not found, frontend disabled", settings.static_dir)

    return app


app = create_app()
