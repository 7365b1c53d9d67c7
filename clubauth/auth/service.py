"""
Student authentication service layer for business logic.

Signup is a per-enrollment-number state machine:

    UNVERIFIED -> EMAIL_LINK_SENT -> EMAIL_VERIFIED -> REGISTERED

1. probe_enrollment tells the portal whether to show signup or login.
2. send_verification_link mails a signed link; nothing is written.
3. confirm_verification_link records the verified email.
4. complete_signup stores the password hash and returns a session token.

authenticate then logs registered students in by email and password.
"""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..config import Settings
from ..core.security import TokenService, hash_password, verify_password
from ..students.directory import StudentDirectory
from ..students.models import Student
from .exceptions import (
    AlreadyRegisteredException,
    AlreadyVerifiedException,
    ConflictException,
    DeliveryException,
    EmailMismatchException,
    EmailNotVerifiedException,
    InternalException,
    InvalidCredentialsException,
    InvalidTokenException,
    NotFoundException,
)
from .schemas import (
    AuthBody,
    EmailVerificationQuery,
    EnrollmentProbe,
    MessageBody,
    ProbeBody,
    ProbeState,
    StudentLogin,
    StudentProfile,
    StudentSignup,
    VerificationLinkRequest,
)
from .utils import MailDispatcher, build_verification_url

# Set up logging
logger = logging.getLogger(__name__)


class StudentAuthService:
    """
    Orchestrates the student directory, token service, password hasher and
    mail dispatcher for the signup and login workflows.

    All collaborators and settings are passed in; nothing is read from
    process-wide state.
    """

    def __init__(
        self,
        directory: StudentDirectory,
        tokens: TokenService,
        mailer: MailDispatcher,
        settings: Settings,
    ):
        self.directory = directory
        self.tokens = tokens
        self.mailer = mailer
        self.settings = settings

    def _get_student(self, enrollment_number: str) -> Student:
        try:
            student = self.directory.find_by_enrollment_number(enrollment_number)
        except SQLAlchemyError as e:
            logger.error(f"Directory lookup failed for {enrollment_number}: {str(e)}")
            raise InternalException("Error in looking up student") from e

        if not student:
            logger.warning(f"Unknown enrollment number: {enrollment_number}")
            raise NotFoundException()
        return student

    async def probe_enrollment(self, data: EnrollmentProbe) -> ProbeBody:
        """
        Tell the portal whether an enrollment number should log in or sign up.

        Args:
            data: Validated enrollment probe

        Returns:
            ProbeBody with state LOGIN (and the verified email) or SIGNUP

        Raises:
            NotFoundException: If the enrollment number is unknown
        """
        student = self._get_student(data.enrollment_number)

        if student.email:
            return ProbeBody(message="Login", state=ProbeState.LOGIN, email=student.email)
        return ProbeBody(message="Signup", state=ProbeState.SIGNUP)

    async def send_verification_link(self, data: VerificationLinkRequest) -> MessageBody:
        """
        Email a verification link for an unverified enrollment number.

        The record is not touched; only clicking the link verifies anything.
        Calling this twice before confirmation sends two emails.

        Args:
            data: Validated enrollment number and email

        Returns:
            MessageBody confirming the email was sent

        Raises:
            NotFoundException: If the enrollment number is unknown
            AlreadyRegisteredException: If a password is already set
            AlreadyVerifiedException: If an email is already verified
            ConflictException: If the email belongs to another student
            DeliveryException: If the mail dispatcher reports failure
        """
        student = self._get_student(data.enrollment_number)

        if student.password_hash:
            raise AlreadyRegisteredException()
        if student.email:
            raise AlreadyVerifiedException()

        try:
            owner = self.directory.find_by_email(data.email)
        except SQLAlchemyError as e:
            logger.error(f"Directory lookup by email failed: {str(e)}")
            raise InternalException("Error in looking up student") from e
        if owner and owner.enrollment_number != data.enrollment_number:
            logger.warning(f"Verification requested for {data.email}, already linked to another student")
            raise ConflictException("Email already linked to another student", reason="email_in_use")

        token = self.tokens.issue_verification_token(data.enrollment_number, data.email)
        url = build_verification_url(
            self.settings.email_postback_url,
            data.enrollment_number,
            data.email,
            token,
        )

        mail_sent = await self.mailer.send(data.email, url)
        if not mail_sent:
            logger.error(f"Verification email for {data.enrollment_number} could not be delivered")
            raise DeliveryException()

        logger.info(f"Verification link sent for {data.enrollment_number}")
        return MessageBody(message="Email sent")

    async def confirm_verification_link(self, data: EmailVerificationQuery) -> MessageBody:
        """
        Handle a clicked verification link.

        The token must be valid, unexpired and issued for exactly this
        enrollment number and email. Confirming the same link twice is a
        no-op.

        Args:
            data: Validated query parameters of the link

        Returns:
            MessageBody confirming the email was verified

        Raises:
            InvalidTokenException: If the token does not check out
            NotFoundException: If the enrollment number is unknown
            EmailMismatchException: If a different email is already verified
            ConflictException: If the email belongs to another student
            InternalException: If the directory write fails
        """
        if not self.tokens.verify_verification_token(data.token, data.enrollment_number, data.email):
            logger.warning(f"Rejected verification token for {data.enrollment_number}")
            raise InvalidTokenException("Unauthorized")

        try:
            student = self.directory.set_email_verified(data.enrollment_number, data.email)
        except IntegrityError as e:
            logger.warning(f"Email {data.email} is already linked to another student")
            raise ConflictException("Email already linked to another student", reason="email_in_use") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to record verified email for {data.enrollment_number}: {str(e)}")
            raise InternalException("Error in verifying email") from e

        if not student:
            # Precondition lost: either the record is gone or holds another email
            self._get_student(data.enrollment_number)
            raise EmailMismatchException()

        logger.info(f"Email verified for {data.enrollment_number}")
        return MessageBody(message="Email verified")

    async def complete_signup(self, data: StudentSignup) -> AuthBody:
        """
        Register a password for a student whose email is verified.

        Args:
            data: Validated enrollment number, email and password

        Returns:
            AuthBody with a session token and the student's profile

        Raises:
            NotFoundException: If the enrollment number is unknown
            EmailNotVerifiedException: If no email has been verified yet
            EmailMismatchException: If the email differs from the verified one
            AlreadyRegisteredException: If a password is already set
            InternalException: If hashing or the directory write fails
        """
        student = self._get_student(data.enrollment_number)

        if not student.email:
            raise EmailNotVerifiedException()
        if student.email != data.email:
            raise EmailMismatchException()
        if student.password_hash:
            raise AlreadyRegisteredException()

        try:
            password_hash = hash_password(data.password)
        except (ValueError, TypeError) as e:
            logger.error(f"Password hashing failed for {data.enrollment_number}: {str(e)}")
            raise InternalException("Error in registering student") from e

        try:
            registered = self.directory.set_credential(data.enrollment_number, data.email, password_hash)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store credentials for {data.enrollment_number}: {str(e)}")
            raise InternalException("Error in registering student") from e

        if not registered:
            # Another signup for the same enrollment number won the race
            raise AlreadyRegisteredException()

        token = self.tokens.issue(registered.enrollment_number)
        logger.info(f"Student registered: {registered.enrollment_number}")

        return AuthBody(
            message="Student signup successful",
            token=token,
            student=StudentProfile.model_validate(registered),
        )

    async def authenticate(self, data: StudentLogin) -> AuthBody:
        """
        Authenticate a registered student by email and password.

        Args:
            data: Validated email and password

        Returns:
            AuthBody with a session token and the student's profile

        Raises:
            NotFoundException: If no student has this email
            InvalidCredentialsException: If the student never registered or
                the password does not match
        """
        try:
            student = self.directory.find_by_email(data.email)
        except SQLAlchemyError as e:
            logger.error(f"Directory lookup by email failed: {str(e)}")
            raise InternalException("Error in looking up student") from e

        if not student:
            logger.warning(f"Login attempt for unknown email: {data.email}")
            raise NotFoundException()

        if not student.password_hash or not verify_password(data.password, student.password_hash):
            logger.warning(f"Login failed: invalid credentials for {student.enrollment_number}")
            raise InvalidCredentialsException()

        token = self.tokens.issue(student.enrollment_number)
        logger.info(f"Login successful: {student.enrollment_number}")

        return AuthBody(
            message="Student login successful",
            token=token,
            student=StudentProfile.model_validate(student),
        )

    def get_profile(self, enrollment_number: str) -> StudentProfile:
        """
        Return the public profile for the bearer of a session token.

        Raises:
            NotFoundException: If the student no longer exists
        """
        return StudentProfile.model_validate(self._get_student(enrollment_number))
