"""
Student business logic.

Sits between the HTTP layer and a `StudentStore`:
- assigns ids and audit fields (never trusted from the client)
- requires a caller id for writes
- logs failures and re-raises them as stable error classes for the router
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from .errors import (
    FetchFailedError,
    StorageError,
    StudentError,
    StudentNotFoundError,
    UnauthenticatedError,
)
from .model import MUTABLE_FIELDS, Student
from .store import StudentStore

PAGE_SIZE = 10
READY_TIMEOUT_S = 5.0

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_student_id() -> str:
    return str(uuid.uuid4())


def _require_caller(caller_id: str | None, *, action: str) -> str:
    caller = (caller_id or "").strip()
    if not caller:
        logger.error("student_%s_rejected reason=missing_caller_id", action)
        raise UnauthenticatedError(f"Caller identity is required to {action} a student.")
    return caller


class StudentService:
    def __init__(
        self,
        store: StudentStore,
        *,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_student_id,
    ) -> None:
        self.store = store
        self._clock = clock
        self._id_factory = id_factory

    async def create(self, student: Student, *, caller_id: str | None) -> Student:
        caller = _require_caller(caller_id, action="create")
        new_student = student.with_changes(
            id=self._id_factory(),
            created_by=caller,
            created_on=self._clock(),
            updated_by=None,
            updated_on=None,
        )
        try:
            created = await self.store.insert(new_student)
        except StudentError as exc:
            logger.error("student_create_failed caller=%s error=%s", caller, exc)
            raise StorageError("insert") from exc

        logger.info("student_created id=%s caller=%s", created.id, caller)
        return created

    async def get(self, student_id: str) -> Student:
        try:
            return await self.store.get(student_id)
        except StudentNotFoundError:
            logger.info("student_not_found id=%s", student_id)
            raise
        except StudentError as exc:
            logger.error("student_fetch_failed id=%s error=%s", student_id, exc)
            raise FetchFailedError(f"Could not fetch student {student_id!r}.") from exc

    async def list_students(self) -> list[Student]:
        try:
            return await self.store.list_students(limit=PAGE_SIZE)
        except StudentError as exc:
            logger.error("student_list_failed error=%s", exc)
            raise FetchFailedError("Could not list students.") from exc

    async def update(self, student_id: str, student: Student, *, caller_id: str | None) -> Student:
        caller = _require_caller(caller_id, action="update")
        # Only client-writable fields are carried over; audit fields come from here.
        changes = {name: getattr(student, name) for name in MUTABLE_FIELDS}
        pending = Student(
            id=student_id,
            updated_by=caller,
            updated_on=self._clock(),
            **changes,
        )
        try:
            updated = await self.store.update(pending)
        except StudentError as exc:
            logger.error("student_update_failed id=%s caller=%s error=%s", student_id, caller, exc)
            raise StorageError("update") from exc

        logger.info("student_updated id=%s caller=%s", student_id, caller)
        return updated

    async def delete(self, student_id: str) -> None:
        try:
            await self.store.delete(student_id)
        except StudentError as exc:
            logger.error("student_delete_failed id=%s error=%s", student_id, exc)
            raise StorageError("delete") from exc
        logger.info("student_deleted id=%s", student_id)

    async def ready_check(self) -> None:
        logger.info("Checking readiness")
        try:
            await self.store.ping(timeout_s=READY_TIMEOUT_S)
        except StudentError as exc:
            logger.error("ready_check_failed error=%s", exc)
            raise StorageError("ping") from exc
