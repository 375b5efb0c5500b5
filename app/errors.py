"""Ledger exceptions and the FastAPI handlers that render them."""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
import traceback
from typing import Union

from .logging_config import get_logger

logger = get_logger("errors")


class AppException(Exception):
    """Base exception for application-specific errors."""

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when an intent is malformed or out of range. Nothing is written."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(
            message=message,
            status_code=422,
            details={"validation_errors": errors or []}
        )


class NotFoundError(AppException):
    """Raised when a referenced resource does not exist."""

    def __init__(self, resource: str, identifier: Union[int, str]):
        super().__init__(
            message=f"{resource} with identifier '{identifier}' not found",
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)}
        )


class DuplicateResourceError(AppException):
    """Raised when attempting to create a duplicate resource."""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            message=f"{resource} with {field} '{value}' already exists",
            status_code=409,
            details={"resource": resource, "field": field, "value": value}
        )


class InsufficientStockError(AppException):
    """Raised when a transaction would drive a product's quantity below zero."""

    def __init__(self, product_id, available: int, requested_delta: int):
        super().__init__(
            message=f"Insufficient stock. Available: {available}, requested change: {requested_delta}",
            status_code=409,
            details={
                "product_id": str(product_id),
                "available": available,
                "requested_delta": requested_delta
            }
        )


class ConflictError(AppException):
    """Raised when concurrent updates kept winning for every retry. Safe to retry."""

    def __init__(self, product_id, attempts: int):
        super().__init__(
            message=f"Product '{product_id}' was modified concurrently; gave up after {attempts} attempts",
            status_code=409,
            details={"product_id": str(product_id), "attempts": attempts, "retryable": True}
        )


class PersistenceError(AppException):
    """Raised when the storage layer fails. The unit of work was rolled back."""

    def __init__(self, message: str, original_error: str = None):
        super().__init__(
            message=f"Storage failure: {message}",
            status_code=503,
            details={"original_error": original_error}
        )


class ImmutableRecordError(AppException):
    """Raised when code tries to change or remove a ledger row or audit entry."""

    def __init__(self, resource: str, identifier, operation: str):
        super().__init__(
            message=f"{resource} '{identifier}' is append-only and cannot be {operation}",
            status_code=409,
            details={"resource": resource, "identifier": str(identifier), "operation": operation}
        )


async def app_exception_handler(request: Request, exc: AppException):
    """Handler for custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application error: {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": exc.details,
            "path": request.url.path
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"validation_errors": errors}
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation failed",
            "details": {"validation_errors": errors},
            "path": request.url.path
        }
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Handler for SQLAlchemy errors that escaped the services.

    Integrity violations are conflicts; anything else, typically a failed
    read of a lazy listing, is rendered as a PersistenceError.
    """
    if isinstance(exc, IntegrityError):
        error_msg = "Data integrity constraint violated"
        status_code = status.HTTP_409_CONFLICT
        details = {"exception_type": type(exc).__name__}
    else:
        persistence_error = PersistenceError("database unavailable", original_error=str(exc))
        error_msg = persistence_error.message
        status_code = persistence_error.status_code
        details = {**persistence_error.details, "exception_type": type(exc).__name__}

    logger.error(
        f"Database error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": error_msg,
            "details": details,
            "path": request.url.path
        }
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handler for unexpected exceptions."""
    logger.critical(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "traceback": traceback.format_exc()
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please contact support if the issue persists.",
            "path": request.url.path
        }
    )
