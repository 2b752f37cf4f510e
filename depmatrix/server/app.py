"""FastAPI application factory."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from depmatrix import __version__
from depmatrix.config import DepMatrixSettings, load_settings
from depmatrix.server.routes.analytics import router as analytics_router
from depmatrix.server.routes.health import router as health_router
from depmatrix.server.routes.normalization import router as normalization_router

logger = logging.getLogger(__name__)


def create_app(
    settings: DepMatrixSettings | None = None,
    verbose: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Loaded settings.  Defaults to ``load_settings()``.
        verbose: When True, terminal handler shows DEBUG-level messages.

    In ``--reload`` mode uvicorn calls this factory with no arguments.  The
    CLI stashes the verbose flag in ``_DEPMATRIX_VERBOSE`` so the factory can
    recover it.
    """
    if not verbose and os.environ.get("_DEPMATRIX_VERBOSE") == "1":
        verbose = True
    if settings is None:
        settings = load_settings()

    # Persistent log file only when an output dir is configured; terminal
    # verbosity is separate (-v on the CLI).
    if settings.output_dir is not None:
        from depmatrix.logging import setup_logging

        setup_logging(output_dir=settings.output_dir, verbose=verbose)

    app = FastAPI(title="depmatrix", version=__version__, docs_url="/api/docs", redoc_url=None)
    app.state.settings = settings

    app.include_router(health_router)
    app.include_router(normalization_router)
    app.include_router(analytics_router)

    logger.info(
        "depmatrix %s ready (category range %s–%s, sub-attribute range %s–%s)",
        __version__,
        settings.category_new_min,
        settings.category_new_max,
        settings.sub_attribute_new_min,
        settings.sub_attribute_new_max,
    )
    return app
