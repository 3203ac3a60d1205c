"""FastAPI application for the symptom relay."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from symptomrelay import __version__
from symptomrelay.api.routers import analysis
from symptomrelay.api.schemas.response import AnalyzeSymptomsResponse, HealthResponse
from symptomrelay.config import Settings, get_settings
from symptomrelay.errors import RelayError
from symptomrelay.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting symptom relay API server")
    logger.info("API documentation available at /docs")
    yield
    logger.info("Shutting down symptom relay API server")


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Malformed request on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Symptom Relay API",
        description="Symptom triage relay between the patient app and a hosted language model",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Any origin may call the relay unless the deployment narrows the list
    allow_any = settings.cors_allow_origins == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=not allow_any,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(analysis.router, prefix="/api", tags=["analysis"])
    # Path the patient app invokes the hosted function under
    app.add_api_route(
        "/functions/v1/analyze-symptoms",
        analysis.analyze_symptoms,
        methods=["POST"],
        response_model=AnalyzeSymptomsResponse,
        dependencies=[Depends(analysis.verify_caller)],
        tags=["analysis"],
    )

    @app.get("/", response_model=HealthResponse)
    async def root():
        """Root endpoint with basic API information."""
        return HealthResponse(status="running", version=__version__)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    return app


app = create_app()
