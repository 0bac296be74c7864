"""Readit: ranked, cursor-paginated listings for a link aggregator."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from readit.config import Settings, get_settings
from readit.services.errors import ListingError

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    """Map listing errors to HTTP responses.

    This is the single place where service exceptions become status codes:
    BadRequest/InvalidCursor -> 400, ScopeNotFound -> 404, request
    validation failures -> 400, anything else -> 500.
    """

    @app.exception_handler(ListingError)
    async def listing_error_handler(request: Request, exc: ListingError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} failed validation")
        return JSONResponse(status_code=400, content={"error": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error serving {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the Readit application.

    Args:
        settings: Application settings. Defaults to the cached settings.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="Readit",
        description="Ranked listings for posts and comments.",
        version=settings.READIT_VERSION,
    )

    # Database init
    from readit.models.database import create_db_engine, init_db, make_session_factory
    engine = create_db_engine(settings)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    # Routes
    from readit.routes.api import router as api_router
    from readit.routes.listing import router as listing_router
    app.include_router(api_router)
    app.include_router(listing_router)

    _register_error_handlers(app)

    logger.info("Readit is ready.")
    return app
