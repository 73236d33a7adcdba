"""
Student persistence (raw SQL over the shared asyncpg pool).

Every column except `id` is nullable. Unset domain fields are written as NULL
and NULL columns are read back as `None`, so "not set" survives a round-trip
and is never confused with an empty string or a zero date.
"""

from __future__ import annotations

import asyncio
from typing import Any

import asyncpg

from core import db

from .errors import FetchFailedError, StorageError, StudentNotFoundError
from .model import Student
from .store import StudentStore

COLUMNS = (
    "id",
    "fname",
    "lname",
    "email",
    "gender",
    "dateofbirth",
    "address",
    "createdby",
    "createdon",
    "updatedby",
    "updatedon",
)

_SELECT_COLUMNS = ", ".join(COLUMNS)

# Driver-level failures we translate; anything else is a programming error.
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def row_to_student(row: dict[str, Any]) -> Student:
    return Student(
        id=str(row["id"]),
        fname=row.get("fname"),
        lname=row.get("lname"),
        email=row.get("email"),
        gender=row.get("gender"),
        date_of_birth=row.get("dateofbirth"),
        address=row.get("address"),
        created_by=row.get("createdby"),
        created_on=row.get("createdon"),
        updated_by=row.get("updatedby"),
        updated_on=row.get("updatedon"),
    )


def student_to_args(student: Student) -> tuple[Any, ...]:
    """
    Positional arguments in `COLUMNS` order.
    """
    return (
        student.id,
        student.fname,
        student.lname,
        student.email,
        student.gender,
        student.date_of_birth,
        student.address,
        student.created_by,
        student.created_on,
        student.updated_by,
        student.updated_on,
    )


class PostgresStudentStore(StudentStore):
    async def insert(self, student: Student) -> Student:
        try:
            await db.execute(
                f"""
                INSERT INTO student ({_SELECT_COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                """,
                *student_to_args(student),
            )
        except DRIVER_ERRORS as exc:
            raise StorageError("insert", f"Failed to insert student: {exc}") from exc
        return student

    async def get(self, student_id: str) -> Student:
        try:
            row = await db.fetch_one(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM student
                WHERE id = $1
                """,
                student_id,
            )
        except DRIVER_ERRORS as exc:
            raise FetchFailedError(f"Failed to fetch student {student_id!r}: {exc}") from exc

        if row is None:
            raise StudentNotFoundError(student_id)
        return row_to_student(row)

    async def list_students(self, *, limit: int) -> list[Student]:
        try:
            rows = await db.fetch_all(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM student
                LIMIT $1
                """,
                limit,
            )
        except DRIVER_ERRORS as exc:
            raise FetchFailedError(f"Failed to list students: {exc}") from exc
        return [row_to_student(row) for row in rows]

    async def update(self, student: Student) -> Student:
        try:
            row = await db.fetch_one(
                f"""
                UPDATE student
                SET fname = $2,
                    lname = $3,
                    email = $4,
                    gender = $5,
                    dateofbirth = $6,
                    address = $7,
                    updatedby = $8,
                    updatedon = $9
                WHERE id = $1
                RETURNING {_SELECT_COLUMNS}
                """,
                student.id,
                student.fname,
                student.lname,
                student.email,
                student.gender,
                student.date_of_birth,
                student.address,
                student.updated_by,
                student.updated_on,
            )
        except DRIVER_ERRORS as exc:
            raise StorageError("update", f"Failed to update student {student.id!r}: {exc}") from exc

        # No matching row: nothing was written, report what was submitted.
        if row is None:
            return student
        return row_to_student(row)

    async def delete(self, student_id: str) -> None:
        try:
            await db.execute(
                """
                DELETE FROM student
                WHERE id = $1
                """,
                student_id,
            )
        except DRIVER_ERRORS as exc:
            raise StorageError("delete", f"Failed to delete student {student_id!r}: {exc}") from exc

    async def ping(self, *, timeout_s: float) -> None:
        try:
            await db.ping(timeout_s)
        except DRIVER_ERRORS as exc:
            raise StorageError("ping", f"Database ping failed: {exc}") from exc
