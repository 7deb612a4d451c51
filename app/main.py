from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from routers import videos
from sportsreels.config.settings import SportsReelsConfig
from sportsreels.exceptions import (
    ConfigurationException,
    PipelineStageException,
    ResourceNotFoundException,
    SportsReelsException,
    ValidationException,
)
from sportsreels.utils.logging_config import log_manager

config = SportsReelsConfig()
log_manager.configure(config.logging)
log_manager.enable_console()

app = FastAPI(
    title="SportsReels API",
    description="Sports video upload, AI analysis and browsing",
    version=config.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True
)

app.include_router(videos.router)


def _error_body(exc: SportsReelsException, **extra) -> dict:
    return {"error_code": exc.error_code, "message": str(exc), **extra}


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException):
    return JSONResponse(status_code=422, content=_error_body(exc, field=exc.field))


@app.exception_handler(ResourceNotFoundException)
async def not_found_exception_handler(request: Request, exc: ResourceNotFoundException):
    return JSONResponse(status_code=404, content=_error_body(exc))


@app.exception_handler(PipelineStageException)
async def stage_exception_handler(request: Request, exc: PipelineStageException):
    logger.error(f"Pipeline failed at stage {exc.stage}: {exc}")
    return JSONResponse(
        status_code=502,
        content=_error_body(exc, stage=exc.stage, retryable_from=exc.retryable_from),
    )


@app.exception_handler(ConfigurationException)
async def configuration_exception_handler(request: Request, exc: ConfigurationException):
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(status_code=500, content=_error_body(exc))


@app.get("/", tags=["root"])
async def root():
    """Root endpoint providing API information."""
    return {
        "message": config.app_name,
        "version": config.app_version,
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "openapi_url": "/openapi.json"
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "sportsreels"}
