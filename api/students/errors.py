"""
Student error taxonomy.

Storage adapters raise these with the driver exception chained as `__cause__`;
the router maps each class to an HTTP status and a generic message.
"""

from __future__ import annotations


class StudentError(RuntimeError):
    pass


class MalformedInputError(StudentError, ValueError):
    # ValueError so pydantic validators surface it as a validation error.
    pass


class UnauthenticatedError(StudentError):
    pass


class StudentNotFoundError(StudentError):
    def __init__(self, student_id: str) -> None:
        super().__init__(f"Student {student_id!r} not found.")
        self.student_id = student_id


class FetchFailedError(StudentError):
    pass


class StorageError(StudentError):
    def __init__(self, operation: str, message: str | None = None) -> None:
        super().__init__(message or f"Student {operation} failed.")
        self.operation = operation
