"""
Persistence port for students.

`StudentStore` is what the service layer talks to. `repository.PostgresStudentStore`
is the production implementation; `memory.InMemoryStudentStore` backs tests and
local runs without a database.

Implementations raise:
- `StudentNotFoundError` when `get` finds no row
- `FetchFailedError` when a read fails for any other reason
- `StorageError` when a write or ping fails
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .model import Student


class StudentStore(ABC):
    @abstractmethod
    async def insert(self, student: Student) -> Student:
        """Persist a fully-populated new student (id and audit fields already set)."""

    @abstractmethod
    async def get(self, student_id: str) -> Student:
        ...

    @abstractmethod
    async def list_students(self, *, limit: int) -> list[Student]:
        ...

    @abstractmethod
    async def update(self, student: Student) -> Student:
        """
        Overwrite mutable and `updated_*` fields of the row keyed by `student.id`.

        `created_by`/`created_on` are never written. A missing id is not an error.
        """

    @abstractmethod
    async def delete(self, student_id: str) -> None:
        """Delete by id; deleting a missing id succeeds."""

    @abstractmethod
    async def ping(self, *, timeout_s: float) -> None:
        ...
