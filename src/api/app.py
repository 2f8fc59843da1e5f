"""
FastAPI application factory.

* Registers routes for estimates, reference data and admin.
* Seeds the Casablanca pilot data on startup via lifespan events.
* Maps domain errors to ``{"message": ..., "field": ...}`` bodies.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, estimate, reference
from src.config import settings
from src.domain.errors import ConfigurationNotFound, InvalidPricingConfig
from src.infrastructure import seed_data as _seed
from src.infrastructure.database import engine

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed reference data on startup; release DB connections on shutdown."""
    if settings.seed_on_startup:
        await _seed.seed_on_startup()
    yield
    await engine.dispose()


# ── Error handlers ────────────────────────────────────────────────────


async def _validation_error(request: Request, exc: RequestValidationError):
    first = exc.errors()[0]
    loc = list(first.get("loc", ()))
    if loc and loc[0] in ("body", "query", "path"):
        loc = loc[1:]
    return JSONResponse(
        status_code=400,
        content={
            "message": first.get("msg", "Invalid request"),
            "field": ".".join(str(p) for p in loc),
        },
    )


async def _not_found(request: Request, exc: ConfigurationNotFound):
    return JSONResponse(status_code=404, content={"message": str(exc)})


async def _invalid_config(request: Request, exc: InvalidPricingConfig):
    logger.error("Stored pricing profile is malformed: %s", exc)
    return JSONResponse(
        status_code=500, content={"message": "Internal server error"}
    )


async def _unhandled(request: Request, exc: Exception):
    logger.exception("Estimation error on %s", request.url.path)
    return JSONResponse(
        status_code=500, content={"message": "Internal server error"}
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Taxi Fare Estimator API",
        description=(
            "Estimates taxi fares from origin, destination, transport mode "
            "and time of day, using per-city pricing profiles (base fare, "
            "stepped distance cost, minimum fare, night surcharge)."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(ConfigurationNotFound, _not_found)
    app.add_exception_handler(InvalidPricingConfig, _invalid_config)
    app.add_exception_handler(Exception, _unhandled)

    # Routers
    app.include_router(estimate.router, prefix="/api/v1")
    app.include_router(reference.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
