"""Storyboard Studio API server

Builds the FastAPI application (routers, middleware, exception handlers)
and doubles as the uvicorn entry point when run as a module.
"""
import argparse
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.router import api_router
from backend.config import settings
from backend.core.models import HealthResponse
from backend.core.storage import get_store
from backend.middleware.error_handler import setup_exception_handlers
from backend.middleware.logging import LoggingMiddleware
from backend.utils.logger import setup_logging, get_logger
from services.image_generation import (
    clear_provider_cache,
    get_available_providers,
    get_default_provider_id,
    should_use_mock,
)

setup_logging(log_to_files=settings.log_to_files)
logger = get_logger(__name__)


def image_generation_mode() -> str:
    """'mock' when no provider key is set, otherwise the default provider id"""
    return "mock" if should_use_mock() else get_default_provider_id()


def configured_provider_ids() -> List[str]:
    return [p.id for p in get_available_providers()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    providers = configured_provider_ids()
    logger.info(
        f"{settings.api_title} v{settings.api_version} starting | "
        f"listen={settings.host}:{settings.port} | log_level={settings.log_level}"
    )
    logger.info(f"Image generation mode: {image_generation_mode()} | providers={providers or 'none'}")

    if settings.seed_sample_data and get_store().seed_sample_data():
        logger.info("Sample projects loaded into the in-memory store")

    yield

    logger.info("Shutting down, closing provider clients")
    await clear_provider_cache()


def create_app() -> FastAPI:
    """Assemble the application"""
    application = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=settings.api_description,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Outermost middleware
    application.add_middleware(LoggingMiddleware)

    setup_exception_handlers(application)
    application.include_router(api_router)

    @application.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "status": "operational",
            "docs": "/docs",
            "redoc": "/redoc",
        }

    @application.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Liveness plus the active image generation mode"""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc),
            version=settings.api_version,
            image_generation=image_generation_mode(),
            providers=configured_provider_ids(),
        )

    return application


app = create_app()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Storyboard Studio API server")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default: {settings.port})")
    parser.add_argument("--debug", action="store_true", help="Shortcut for --log-level DEBUG")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level; takes precedence over --debug"
    )
    parser.add_argument("--reload", action="store_true", help="Restart the server when code changes")
    return parser


def run(argv: Optional[List[str]] = None):
    import uvicorn

    args = build_arg_parser().parse_args(argv)
    log_level = args.log_level or ("DEBUG" if args.debug else settings.log_level)

    # Reloaded worker processes pick the level up from the environment
    settings.log_level = log_level
    os.environ["LOG_LEVEL"] = log_level
    setup_logging(log_level=log_level, log_to_files=settings.log_to_files)

    uvicorn.run(
        "backend.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=log_level.lower()
    )


if __name__ == "__main__":
    run()
