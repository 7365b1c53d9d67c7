"""
Students module - institutional student records and the directory that reads
and conditionally updates them.
"""
from .models import Student, StudentState
from .directory import StudentDirectory

__all__ = ["Student", "StudentState", "StudentDirectory"]
