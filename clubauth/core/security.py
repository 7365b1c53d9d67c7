"""
Core security utilities for password hashing and token handling.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, Any, Callable
from jose import jwt, JWTError
from passlib.context import CryptContext
import logging

from ..config import Settings

# Set up logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        str: Salted bcrypt digest
    """
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to compare against

    Returns:
        bool: True if password matches hash, False otherwise (including
        digests passlib cannot identify)
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Password verification against an unrecognised hash format")
        return False


class TokenType(str, Enum):
    """
    Purpose claim stamped into every token.

    - SESSION: issued after signup or login, asserts the bearer's enrollment number
    - EMAIL_VERIFICATION: embedded in the verification link
    """
    SESSION = "session"
    EMAIL_VERIFICATION = "email_verification"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and verifies signed, time-bounded identity tokens.

    The subject of every token is a student's enrollment number. Verification
    never explains why a token was rejected: expired, tampered, malformed and
    wrong-purpose tokens all come back as None.
    """

    def __init__(self, settings: Settings, clock: Optional[Callable[[], datetime]] = None):
        self.secret_key = settings.secret_key
        self.algorithm = settings.algorithm
        self.expiry = {
            TokenType.SESSION: timedelta(minutes=settings.access_token_expire_minutes),
            TokenType.EMAIL_VERIFICATION: timedelta(minutes=settings.verification_token_expire_minutes),
        }
        self.clock = clock or _utcnow

    def issue(
        self,
        subject: str,
        token_type: TokenType = TokenType.SESSION,
        expires_delta: Optional[timedelta] = None,
        claims: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Create a signed JWT for a subject.

        Args:
            subject: Enrollment number the token asserts
            token_type: Purpose of the token
            expires_delta: Custom lifetime (defaults to the configured one for the type)
            claims: Extra claims to embed

        Returns:
            str: Encoded JWT token
        """
        now = self.clock()
        expire = now + (expires_delta or self.expiry[token_type])

        to_encode = dict(claims or {})
        to_encode.update({
            "sub": str(subject),
            "type": token_type.value,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        })

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str, token_type: TokenType = TokenType.SESSION) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a JWT token.

        Expiry is checked against the service clock rather than the wall
        clock so that lifetimes can be exercised deterministically.

        Args:
            token: JWT token string
            token_type: Purpose the token must have been issued for

        Returns:
            Dict containing token payload if valid, None if invalid
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or self.clock().timestamp() >= exp:
            return None
        if payload.get("type") != token_type.value or not payload.get("sub"):
            return None
        return payload

    def verify(self, token: str, token_type: TokenType = TokenType.SESSION) -> Optional[str]:
        """
        Return the enrollment number a token was issued for, or None.
        """
        payload = self.decode(token, token_type)
        return payload["sub"] if payload else None

    def issue_verification_token(self, enrollment_number: str, email: str) -> str:
        """
        Create the short-lived token embedded in an email verification link.

        The email is carried as a claim so the link cannot be replayed with a
        different address for the same enrollment number.
        """
        return self.issue(
            enrollment_number,
            token_type=TokenType.EMAIL_VERIFICATION,
            claims={"email": email},
        )

    def verify_verification_token(self, token: str, enrollment_number: str, email: str) -> bool:
        """
        Check a verification token against the enrollment number and email
        presented alongside it.
        """
        payload = self.decode(token, TokenType.EMAIL_VERIFICATION)
        if not payload:
            return False
        return payload["sub"] == enrollment_number and payload.get("email") == email
