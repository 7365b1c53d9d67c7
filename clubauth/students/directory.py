"""
Student Directory

Database operations for student identity records. The two write paths are
conditional single-statement UPDATEs so that concurrent verification or
signup requests for the same enrollment number cannot both pass their
precondition.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import Student

logger = logging.getLogger(__name__)


class StudentDirectory:
    """Repository for student database operations."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_enrollment_number(self, enrollment_number: str) -> Optional[Student]:
        """
        Get a student by enrollment number.

        Args:
            enrollment_number: 9 character institutional id

        Returns:
            Student instance or None if not found
        """
        return self.db.query(Student).filter(Student.enrollment_number == enrollment_number).first()

    def find_by_email(self, email: str) -> Optional[Student]:
        """
        Get a student by verified email address.

        Args:
            email: Email address

        Returns:
            Student instance or None if not found
        """
        return self.db.query(Student).filter(Student.email == email).first()

    def add(self, student: Student) -> Student:
        """
        Insert a new student record (institutional import).

        Args:
            student: Unsaved Student instance

        Returns:
            The persisted Student
        """
        try:
            self.db.add(student)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(student)
        logger.info(f"Imported student {student.enrollment_number}")
        return student

    def set_email_verified(self, enrollment_number: str, email: str) -> Optional[Student]:
        """
        Record the verified email for a student.

        Only applies while the email is unset or already equal to `email`,
        which makes a repeated confirmation a no-op and rules out
        reassigning a verified email.

        Returns:
            The updated Student, or None if the precondition did not hold

        Raises:
            IntegrityError: If another student already owns `email`
        """
        updated = self._conditional_update(
            enrollment_number,
            [or_(Student.email.is_(None), Student.email == email)],
            {Student.email: email},
        )
        if not updated:
            logger.info(f"Email verification precondition failed for {enrollment_number}")
            return None
        return self.find_by_enrollment_number(enrollment_number)

    def set_credential(self, enrollment_number: str, email: str, password_hash: str) -> Optional[Student]:
        """
        Store the password hash for a student.

        Only applies while no hash is stored and the verified email equals
        `email`; a second signup can never overwrite the first.

        Returns:
            The updated Student, or None if the precondition did not hold
        """
        updated = self._conditional_update(
            enrollment_number,
            [Student.email == email, Student.password_hash.is_(None)],
            {Student.password_hash: password_hash},
        )
        if not updated:
            logger.info(f"Credential precondition failed for {enrollment_number}")
            return None
        return self.find_by_enrollment_number(enrollment_number)

    def _conditional_update(self, enrollment_number: str, conditions: list, values: Dict[Any, Any]) -> int:
        try:
            updated = (
                self.db.query(Student)
                .filter(Student.enrollment_number == enrollment_number, *conditions)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return updated
