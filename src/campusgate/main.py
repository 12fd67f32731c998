"""FastAPI application entrypoint for the campus gate service."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .api.v1.router import api_router
from .core.config import get_settings

logger = logging.getLogger(__name__)


async def store_unavailable_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("database failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Verification failed. Please try again."},
    )


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Campus Gate API", version="0.1.0")
    app.include_router(api_router, prefix="/api/v1")
    app.add_exception_handler(SQLAlchemyError, store_unavailable_handler)
    return app


app = create_app()
