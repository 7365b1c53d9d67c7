"""
Global exception handlers and custom exception classes.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
import logging

# Set up logging
logger = logging.getLogger(__name__)

class AppException(Exception):
    """
    Base exception class for application-specific exceptions.

    Attributes:
        status_code: HTTP status class of the failure
        detail: Short human-readable message
        reason: Machine-stable reason code clients can branch on
    """
    def __init__(self, status_code: int, detail: str, reason: str = "error"):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.reason = reason


def _describe_validation_errors(errors) -> str:
    """
    Collapse pydantic error entries into a single client-facing message.

    Missing fields are reported as "<field> is required"; every other error
    keeps the validator's own message.
    """
    messages = []
    for error in errors:
        field = error.get("loc", ["input"])[-1]
        if error.get("type") == "missing":
            messages.append(f"{field} is required")
        else:
            messages.append(error.get("msg", "Invalid value"))
    return "; ".join(messages) or "Invalid request"


async def app_exception_handler(request: Request, exc: AppException):
    """
    Handler for application-specific exceptions.

    Args:
        request: The request that caused the exception
        exc: The exception instance

    Returns:
        JSONResponse: Standardized error response
    """
    if exc.status_code >= 500:
        logger.error(f"Application error on {request.url.path}: {exc.reason} - {exc.detail}")
    else:
        logger.warning(f"Request rejected on {request.url.path}: {exc.reason} - {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "reason": exc.reason}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for request validation exceptions.

    Args:
        request: The request that caused the exception
        exc: The validation exception instance

    Returns:
        JSONResponse: Standardized bad-input error response
    """
    message = _describe_validation_errors(exc.errors())
    logger.warning(f"Validation error on {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "reason": "validation_error"}
    )


async def model_validation_exception_handler(request: Request, exc: ValidationError):
    """
    Handler for pydantic models validated inside route bodies.

    Args:
        request: The request that caused the exception
        exc: The pydantic validation exception instance

    Returns:
        JSONResponse: Standardized bad-input error response
    """
    message = _describe_validation_errors(exc.errors())
    logger.warning(f"Validation error on {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "reason": "validation_error"}
    )


# Register exception handlers with FastAPI app
def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, model_validation_exception_handler)
