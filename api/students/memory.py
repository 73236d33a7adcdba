"""
In-process student store.

Same contract as `PostgresStudentStore`, backed by a dict. Used by the test
suite and for local runs with `STUDENT_STORE=memory`. Records are lost when the
process exits.
"""

from __future__ import annotations

import asyncio

from .errors import StudentNotFoundError
from .model import Student
from .store import StudentStore


class InMemoryStudentStore(StudentStore):
    def __init__(self) -> None:
        self._rows: dict[str, Student] = {}
        self._lock = asyncio.Lock()

    async def insert(self, student: Student) -> Student:
        async with self._lock:
            self._rows[student.id] = student
        return student

    async def get(self, student_id: str) -> Student:
        row = self._rows.get(student_id)
        if row is None:
            raise StudentNotFoundError(student_id)
        return row

    async def list_students(self, *, limit: int) -> list[Student]:
        # Insertion order, like a heap scan on a fresh table.
        return list(self._rows.values())[:limit]

    async def update(self, student: Student) -> Student:
        async with self._lock:
            current = self._rows.get(student.id)
            if current is None:
                return student
            updated = student.with_changes(
                created_by=current.created_by,
                created_on=current.created_on,
            )
            self._rows[student.id] = updated
        return updated

    async def delete(self, student_id: str) -> None:
        async with self._lock:
            self._rows.pop(student_id, None)

    async def ping(self, *, timeout_s: float) -> None:
        return None
