"""FastAPI application for the Tokensa local server."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tokensa import __version__
from tokensa.api.cors import OriginPolicy, PrivateNetworkAccessMiddleware
from tokensa.api.middleware import RequestLoggingMiddleware
from tokensa.api.routes import generate, health, tags
from tokensa.config import Settings, get_settings
from tokensa.models.output import ErrorResponse

logger = logging.getLogger(__name__)


def validation_details(exc: RequestValidationError) -> list[dict]:
    """JSON-safe summary of pydantic validation errors."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = app.state.settings

    from tokensa.llm import create_llm_from_settings
    from tokensa.report import ReportGenerator

    llm = create_llm_from_settings()
    app.state.llm = llm
    app.state.generator = ReportGenerator(llm, settings)

    logger.info(
        f"Tokensa local server → http://{settings.display_host}:{settings.port} "
        f"(configurable via HOST/PORT), model={llm.model_name} provider={llm.provider}"
    )

    yield

    logger.info("Shutting down Tokensa local server")
    await llm.aclose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Tokensa Local API",
        description="Speech-therapy report generation on a locally hosted model",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    policy = OriginPolicy.from_settings(settings)

    app.add_middleware(RequestLoggingMiddleware)
    # Added last so it wraps everything, preflights never reach the routes
    app.add_middleware(PrivateNetworkAccessMiddleware, policy=policy)

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(generate.router, prefix="/api")
    app.include_router(tags.router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Invalid request body on {request.url.path}: {len(exc.errors())} error(s)")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": validation_details(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
            headers=exc.headers,
        )

    # Runs outside every middleware, so the CORS/PNA headers are added here
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        origin = request.headers.get("origin")
        headers = policy.response_headers(origin)
        if origin:
            headers["Vary"] = "Origin"
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.debug_mode else None,
            },
            headers=headers,
        )

    return app
