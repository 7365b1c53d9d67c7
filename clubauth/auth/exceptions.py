"""
Authentication-specific exceptions.

Each class is one branch of the workflow's error taxonomy; the registered
AppException handler turns them into {"error": ..., "reason": ...} responses.
"""
from fastapi import status

from ..exceptions import AppException


class AuthException(AppException):
    """Base class for authentication exceptions."""
    def __init__(self, status_code: int, detail: str, reason: str):
        super().__init__(status_code=status_code, detail=detail, reason=reason)

class NotFoundException(AuthException):
    """Exception raised when no student matches the enrollment number or email."""
    def __init__(self, detail: str = "Student not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail, reason="student_not_found")

class ConflictException(AuthException):
    """Exception raised when the account is not in the state an operation requires."""
    def __init__(self, detail: str, reason: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail, reason=reason)

class AlreadyRegisteredException(ConflictException):
    """Exception raised when a password has already been set."""
    def __init__(self, detail: str = "Student already registered"):
        super().__init__(detail=detail, reason="already_registered")

class AlreadyVerifiedException(ConflictException):
    """Exception raised when the email has already been verified."""
    def __init__(self, detail: str = "Student email already verified"):
        super().__init__(detail=detail, reason="already_verified")

class EmailNotVerifiedException(ConflictException):
    """Exception raised when signup is attempted before email verification."""
    def __init__(self, detail: str = "Student email not verified"):
        super().__init__(detail=detail, reason="email_not_verified")

class EmailMismatchException(ConflictException):
    """Exception raised when the presented email differs from the verified one."""
    def __init__(self, detail: str = "Email incorrect"):
        super().__init__(detail=detail, reason="email_mismatch")

class UnauthorizedException(AuthException):
    """Exception raised when credentials or tokens are rejected."""
    def __init__(self, detail: str = "Unauthorized", reason: str = "unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, reason=reason)

class InvalidCredentialsException(UnauthorizedException):
    """Exception raised when credentials are invalid."""
    def __init__(self, detail: str = "Invalid password or id"):
        super().__init__(detail=detail, reason="invalid_credentials")

class InvalidTokenException(UnauthorizedException):
    """Exception raised when a token is invalid, expired or bound to someone else."""
    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail=detail, reason="invalid_token")

class DeliveryException(AuthException):
    """Exception raised when the verification email could not be sent."""
    def __init__(self, detail: str = "Error in sending email"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail, reason="email_delivery_failed")

class InternalException(AuthException):
    """Exception raised when a collaborator fails unexpectedly."""
    def __init__(self, detail: str = "Internal error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail, reason="internal_error")
