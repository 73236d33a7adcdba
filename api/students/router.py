"""
Student API endpoints.

Every route depends on `auth_dependencies.get_caller_id`, so unauthenticated
requests never reach the service. Service errors are mapped to status codes
here; clients only ever see a generic message.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from auth import dependencies as auth_dependencies

from . import errors, schemas
from .service import StudentService

router = APIRouter(prefix="/api/v1")

_ERROR_STATUS: list[tuple[type[errors.StudentError], int, str]] = [
    (errors.MalformedInputError, status.HTTP_400_BAD_REQUEST, "Invalid student payload."),
    (errors.UnauthenticatedError, status.HTTP_401_UNAUTHORIZED, "Caller identity is required."),
    (errors.StudentNotFoundError, status.HTTP_404_NOT_FOUND, "Student not found."),
    (errors.FetchFailedError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch student."),
    (errors.StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to store student."),
]


async def get_student_service(request: Request) -> StudentService:
    return request.app.state.student_service


def _http_error(exc: errors.StudentError) -> HTTPException:
    for error_type, status_code, detail in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


def _require_student_id(student_id: str) -> str:
    student_id = (student_id or "").strip()
    if not student_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Student ID is required.")
    return student_id


@router.post("/student", status_code=status.HTTP_201_CREATED)
async def create_student(
    request: schemas.CreateStudentRequest,
    caller_id: str = Depends(auth_dependencies.get_caller_id),
    service: StudentService = Depends(get_student_service),
) -> schemas.StudentResponse:
    try:
        student = await service.create(request.to_student(), caller_id=caller_id)
    except errors.StudentError as exc:
        raise _http_error(exc) from exc
    return schemas.to_student_response(student)


@router.api_route("/student/", methods=["GET", "PUT", "DELETE"], include_in_schema=False)
async def missing_student_id(
    _: str = Depends(auth_dependencies.get_caller_id),
) -> None:
    # `/student/` with an empty id segment.
    _require_student_id("")


@router.get("/student/{student_id}")
async def get_student(
    student_id: str,
    _: str = Depends(auth_dependencies.get_caller_id),
    service: StudentService = Depends(get_student_service),
) -> schemas.StudentResponse:
    student_id = _require_student_id(student_id)
    try:
        student = await service.get(student_id)
    except errors.StudentError as exc:
        raise _http_error(exc) from exc
    return schemas.to_student_response(student)


@router.put("/student/{student_id}")
async def update_student(
    student_id: str,
    request: schemas.UpdateStudentRequest,
    caller_id: str = Depends(auth_dependencies.get_caller_id),
    service: StudentService = Depends(get_student_service),
) -> schemas.StudentResponse:
    student_id = _require_student_id(student_id)
    try:
        student = await service.update(student_id, request.to_student(), caller_id=caller_id)
    except errors.StudentError as exc:
        raise _http_error(exc) from exc
    return schemas.to_student_response(student)


@router.delete("/student/{student_id}")
async def delete_student(
    student_id: str,
    _: str = Depends(auth_dependencies.get_caller_id),
    service: StudentService = Depends(get_student_service),
) -> schemas.MessageResponse:
    student_id = _require_student_id(student_id)
    try:
        await service.delete(student_id)
    except errors.StudentError as exc:
        raise _http_error(exc) from exc
    return schemas.MessageResponse(message="Successfully Deleted")


@router.get("/students")
async def list_students(
    _: str = Depends(auth_dependencies.get_caller_id),
    service: StudentService = Depends(get_student_service),
) -> list[schemas.StudentResponse]:
    try:
        students = await service.list_students()
    except errors.StudentError as exc:
        raise _http_error(exc) from exc
    return [schemas.to_student_response(s) for s in students]
