"""
Student authentication schemas - Pydantic models for request validation and
response serialization.

Request fields use the camelCase names the club portal sends
(enrollmentNumber, email, password); every operation gets its own validated
model so that bad input is rejected before any lookup happens.
"""
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, EmailStr, Field
from pydantic_core import PydanticCustomError

ENROLLMENT_NUMBER_LENGTH = 9
PASSWORD_MAX_BYTES = 72

def check_enrollment_number(value: str) -> str:
    """
    Enrollment numbers are required and exactly nine characters long.
    """
    if not value:
        raise PydanticCustomError("enrollment_number_required", "Enrollment number is required")
    if len(value) != ENROLLMENT_NUMBER_LENGTH:
        raise PydanticCustomError(
            "enrollment_number_length",
            "Enrollment number should be of 9 characters",
        )
    return value

def check_password(value: str) -> str:
    """
    Passwords are required, free of NUL bytes and at most 72 UTF-8 bytes,
    the most bcrypt will hash.
    """
    if not value:
        raise PydanticCustomError("password_required", "Password is required")
    if "\x00" in value:
        raise PydanticCustomError("password_null_byte", "Password must not contain NUL characters")
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise PydanticCustomError(
            "password_too_long",
            "Password should be at most 72 bytes",
        )
    return value


EnrollmentNumber = Annotated[str, AfterValidator(check_enrollment_number)]
Password = Annotated[str, AfterValidator(check_password)]

class EnrollmentProbe(BaseModel):
    """
    Enrollment Probe Schema - first step of the portal's login screen

    Fields:
    - enrollmentNumber: 9 character institutional id
    """
    model_config = ConfigDict(populate_by_name=True)

    enrollment_number: EnrollmentNumber = Field(..., alias="enrollmentNumber")

class VerificationLinkRequest(BaseModel):
    """
    Verification Link Request Schema - asks for a verification email

    Fields:
    - enrollmentNumber: 9 character institutional id
    - email: Address the link is sent to
    """
    model_config = ConfigDict(populate_by_name=True)

    enrollment_number: EnrollmentNumber = Field(..., alias="enrollmentNumber")
    email: EmailStr

class EmailVerificationQuery(BaseModel):
    """
    Email Verification Query Schema - the query string of a clicked link

    Fields:
    - eno: Enrollment number
    - email: Email address being verified
    - token: Verification token
    """
    model_config = ConfigDict(populate_by_name=True)

    enrollment_number: EnrollmentNumber = Field(..., alias="eno")
    email: EmailStr
    token: str = Field(..., min_length=1)

class StudentSignup(BaseModel):
    """
    Student Signup Schema - sets the password after email verification

    Fields:
    - enrollmentNumber: 9 character institutional id
    - email: The verified email address
    - password: Plain text password (hashed before storage)
    """
    model_config = ConfigDict(populate_by_name=True)

    enrollment_number: EnrollmentNumber = Field(..., alias="enrollmentNumber")
    email: EmailStr
    password: Password

class StudentLogin(BaseModel):
    """
    Student Login Schema - Used for authentication

    Fields:
    - email: Verified email address
    - password: Plain text password
    """
    email: EmailStr
    password: Password

class ProbeState(str, Enum):
    """What the portal should show after probing an enrollment number."""
    LOGIN = "LOGIN"
    SIGNUP = "SIGNUP"

class StudentProfile(BaseModel):
    """
    Student Profile Schema - public view of a student record
    """
    model_config = ConfigDict(from_attributes=True)

    enrollment_number: str = Field(
        ...,
        validation_alias=AliasChoices("enrollment_number", "enrollmentNumber"),
        serialization_alias="enrollmentNumber",
    )
    email: Optional[str] = None
    first_name: str
    last_name: str
    credits: str
    in_club_as_team: List[str] = Field(default_factory=list)
    in_club_as_member: List[str] = Field(default_factory=list)

class ProbeBody(BaseModel):
    message: str
    state: ProbeState
    email: Optional[str] = None

class MessageBody(BaseModel):
    message: str

class AuthBody(BaseModel):
    """Returned by signup and login: the session token and the profile."""
    message: str
    token: str
    token_type: str = "bearer"
    student: StudentProfile

class ProbeResponse(BaseModel):
    success: bool = True
    body: ProbeBody

class MessageResponse(BaseModel):
    success: bool = True
    body: MessageBody

class AuthResponse(BaseModel):
    success: bool = True
    body: AuthBody

class ProfileResponse(BaseModel):
    success: bool = True
    body: StudentProfile
