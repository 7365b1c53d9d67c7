"""
Student Model - Stores institutional student records and their login credentials.

Records are imported by the institution; this service only ever fills in the
verified email and then the password hash.
"""
from sqlalchemy import Column, String, JSON, DateTime
from sqlalchemy.sql import func
import enum
from ..database import Base

class StudentState(str, enum.Enum):
    """
    Account state derived from which credential fields are set.

    States:
    - UNVERIFIED: No email has been verified for the enrollment number
    - EMAIL_VERIFIED: Email verified, password not yet chosen
    - REGISTERED: Email verified and password set; login is possible
    """
    UNVERIFIED = "UNVERIFIED"
    EMAIL_VERIFIED = "EMAIL_VERIFIED"
    REGISTERED = "REGISTERED"

class Student(Base):
    """
    Student Model

    Fields:
    - enrollment_number: Institution-assigned 9 character identifier (primary key)
    - email: Verified email address, NULL until the verification link is confirmed
    - password_hash: bcrypt digest, NULL until signup completes
    - first_name / last_name: Names as imported from the institution
    - credits: Club credit balance (ledger value, read only here)
    - in_club_as_team: Ids of clubs the student leads
    - in_club_as_member: Ids of clubs the student belongs to
    - created_at / updated_at: Row timestamps
    """
    __tablename__ = "students"

    enrollment_number = Column(String(9), primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=True)
    password_hash = Column(String, nullable=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    credits = Column(String, nullable=False, default="0")
    in_club_as_team = Column(JSON, nullable=False, default=list)
    in_club_as_member = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def state(self) -> StudentState:
        if self.password_hash:
            return StudentState.REGISTERED
        if self.email:
            return StudentState.EMAIL_VERIFIED
        return StudentState.UNVERIFIED

    def __repr__(self) -> str:
        return f"<Student(enrollment_number={self.enrollment_number}, state={self.state.value})>"
