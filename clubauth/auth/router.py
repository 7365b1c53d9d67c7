"""
Authentication routes for the student club portal.
"""
from fastapi import APIRouter, Depends, Query
import logging

from .dependencies import get_auth_service, get_current_student
from .schemas import (
    AuthResponse,
    EmailVerificationQuery,
    EnrollmentProbe,
    MessageResponse,
    ProbeResponse,
    ProfileResponse,
    StudentLogin,
    StudentProfile,
    StudentSignup,
    VerificationLinkRequest,
)
from .service import StudentAuthService

# Set up logging
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/enrollmentNumber",
    response_model=ProbeResponse,
    response_model_exclude_none=True,
    summary="Probe Enrollment Number",
)
async def probe_enrollment_route(
    data: EnrollmentProbe,
    service: StudentAuthService = Depends(get_auth_service),
):
    """
    Look up an enrollment number and report whether the student should log
    in (email already verified) or sign up.

    Raises:
        400: Enrollment number missing or not 9 characters
        404: Student not found
    """
    body = await service.probe_enrollment(data)
    return ProbeResponse(body=body)


@router.post(
    "/studentEmailVerificationLink",
    response_model=MessageResponse,
    summary="Send Email Verification Link",
)
async def send_verification_link_route(
    data: VerificationLinkRequest,
    service: StudentAuthService = Depends(get_auth_service),
):
    """
    Email a verification link to an unverified student.

    Raises:
        400: Missing or malformed fields
        404: Student not found
        409: Already registered, already verified, or email in use
        500: Email could not be sent
    """
    body = await service.send_verification_link(data)
    return MessageResponse(body=body)


@router.get("/studentEmailVerify/", response_model=MessageResponse, summary="Confirm Email Verification Link")
async def confirm_verification_link_route(
    eno: str = Query(..., description="Enrollment number"),
    email: str = Query(..., description="Email address being verified"),
    token: str = Query(..., description="Verification token"),
    service: StudentAuthService = Depends(get_auth_service),
):
    """
    Target of the emailed verification link.

    Raises:
        400: Malformed query parameters
        401: Token invalid, expired or issued for another student/email
        409: A different email is already verified
        500: Directory write failed
    """
    # Pydantic errors here are mapped to 400 by the registered handler
    data = EmailVerificationQuery(eno=eno, email=email, token=token)
    body = await service.confirm_verification_link(data)
    return MessageResponse(body=body)


@router.post("/studentSignup", response_model=AuthResponse, summary="Complete Student Signup")
async def complete_signup_route(
    data: StudentSignup,
    service: StudentAuthService = Depends(get_auth_service),
):
    """
    Set the password for a student with a verified email and return a
    session token.

    Raises:
        400: Missing or malformed fields
        404: Student not found
        409: Email not verified, email mismatch, or already registered
        500: Registration could not be stored
    """
    body = await service.complete_signup(data)
    return AuthResponse(body=body)


@router.post("/studentLogin", response_model=AuthResponse, summary="Student Login")
async def login_route(
    data: StudentLogin,
    service: StudentAuthService = Depends(get_auth_service),
):
    """
    Authenticate a registered student by email and password.

    Raises:
        400: Missing or malformed fields
        401: Invalid password or never registered
        404: Student not found
    """
    body = await service.authenticate(data)
    return AuthResponse(body=body)


@router.get("/me", response_model=ProfileResponse, summary="Current Student")
async def current_student_route(student: StudentProfile = Depends(get_current_student)):
    """
    Return the profile of the student asserted by the bearer session token.

    Raises:
        401: Missing, invalid or expired token
        404: Student not found
    """
    return ProfileResponse(body=student)
