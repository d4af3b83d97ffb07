"""Global error handling middleware

This module provides centralized exception handling for the FastAPI application.
Every error is logged and returned in the envelope
``{"error": {"code": ..., "message": ..., "details": {...}}}``.
"""
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core.exceptions import APIException, ServiceException
from backend.utils.logger import get_logger
from services.image_generation import (
    ImageGenerationError,
    ProviderNotConfiguredError,
    UnknownProviderError,
)

logger = get_logger(__name__)


def error_response(status_code: int, code: str, message: str, details: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": jsonable_encoder(details if details is not None else {})
            }
        }
    )


def _provider_details(exc: ImageGenerationError) -> Dict[str, Any]:
    return {"provider": exc.provider} if exc.provider else {}


def setup_exception_handlers(app: FastAPI):
    """Setup global exception handlers for the FastAPI app

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        """Handle custom API exceptions"""
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            f"API Exception | path={request.url.path} | "
            f"code={exc.error_code} | message={exc.message}"
        )
        return error_response(exc.status_code, exc.error_code, exc.message, exc.details)

    @app.exception_handler(ServiceException)
    async def service_exception_handler(request: Request, exc: ServiceException):
        """Handle service-level exceptions"""
        logger.error(
            f"Service Exception | path={request.url.path} | "
            f"service={exc.service_name} | error={exc.message}"
        )
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "SERVICE_ERROR",
            f"Service error: {exc.message}",
            {"service": exc.service_name, "retryable": exc.retryable}
        )

    @app.exception_handler(ImageGenerationError)
    async def image_generation_error_handler(request: Request, exc: ImageGenerationError):
        """Handle provider-layer errors that escaped the generation service"""
        logger.error(
            f"Image generation error | path={request.url.path} | "
            f"type={type(exc).__name__} | message={exc.message}"
        )

        if isinstance(exc, ProviderNotConfiguredError):
            return error_response(
                status.HTTP_400_BAD_REQUEST,
                "PROVIDER_NOT_CONFIGURED",
                exc.message,
                {"provider": exc.provider_id, "env_key": exc.env_key}
            )
        if isinstance(exc, UnknownProviderError):
            return error_response(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", exc.message, {"field": "model"})

        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "SERVICE_ERROR",
            f"Service error: {exc.message}",
            _provider_details(exc)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors"""
        logger.warning(f"Request validation error | path={request.url.path} | errors={exc.errors()}")
        return error_response(
            422,
            "VALIDATION_ERROR",
            "Request validation failed",
            exc.errors()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions (unknown routes, wrong methods)"""
        logger.warning(
            f"HTTP Exception | path={request.url.path} | "
            f"status={exc.status_code} | detail={exc.detail}"
        )
        return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other unexpected exceptions"""
        logger.exception(
            f"Unexpected error | path={request.url.path} | "
            f"error={type(exc).__name__} | message={str(exc)}"
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            {"type": type(exc).__name__, "message": str(exc)}
        )
