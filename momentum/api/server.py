"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from momentum import config
from momentum.api.routes import router
from momentum.api.middleware import setup_cors, setup_rate_limiting
from momentum.db.connection import db
from momentum.exceptions import (
    ContractViolationError,
    MomentumError,
    RecordNotFoundError,
    ValidationError,
)
from momentum.monitoring import track_request
from momentum.services.container import build_store, init_container

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, config.LOG_LEVEL)
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    config.validate_config()

    if config.STORE_BACKEND == "postgres":
        await db.init_pool()
        logger.info("Database pool initialized")

    init_container(build_store())

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    if config.STORE_BACKEND == "postgres":
        await db.close_pool()
        logger.info("Database pool closed")


def _status_for(exc: MomentumError) -> int:
    if isinstance(exc, RecordNotFoundError):
        return 404
    if isinstance(exc, ContractViolationError):
        return 409
    if isinstance(exc, ValidationError):
        return 422
    return 500


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Momentum Progress API",
        description="XP, streaks, badges, wins and challenges",
        version="0.1.0",
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)

    @app.middleware("http")
    async def request_metrics(request: Request, call_next):
        with track_request(request.method, request.url.path):
            return await call_next(request)

    # Include routes
    app.include_router(router)

    @app.exception_handler(MomentumError)
    async def momentum_exception_handler(request, exc: MomentumError):
        return JSONResponse(status_code=_status_for(exc), content=exc.to_dict())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    logger.info("FastAPI application created")

    return app


app = create_api_application()
