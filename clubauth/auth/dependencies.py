"""
FastAPI dependencies wiring the student authentication service together.
"""
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..core.security import TokenService
from ..database import get_db
from ..students.directory import StudentDirectory
from .exceptions import InvalidTokenException
from .schemas import StudentProfile
from .service import StudentAuthService
from .utils import MailDispatcher

# Bearer scheme for session tokens
bearer_scheme = HTTPBearer(auto_error=False, description="Session token issued by signup or login")


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def get_mail_dispatcher(settings: Settings = Depends(get_settings)) -> MailDispatcher:
    return MailDispatcher(settings)


def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    mailer: MailDispatcher = Depends(get_mail_dispatcher),
    settings: Settings = Depends(get_settings),
) -> StudentAuthService:
    """
    Build a request-scoped StudentAuthService.

    Args:
        db: Database session
        tokens: Token service
        mailer: Mail dispatcher
        settings: Application settings

    Returns:
        StudentAuthService bound to this request's session
    """
    return StudentAuthService(StudentDirectory(db), tokens, mailer, settings)


def get_current_student(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
    service: StudentAuthService = Depends(get_auth_service),
) -> StudentProfile:
    """
    Resolve the student asserted by a session token.

    Args:
        credentials: Bearer token from the Authorization header
        tokens: Token service
        service: Student auth service

    Returns:
        StudentProfile of the token's subject

    Raises:
        InvalidTokenException: If the token is missing, invalid or expired
        NotFoundException: If the student no longer exists
    """
    if not credentials:
        raise InvalidTokenException("Not authenticated")

    enrollment_number = tokens.verify(credentials.credentials)
    if not enrollment_number:
        raise InvalidTokenException()

    return service.get_profile(enrollment_number)
