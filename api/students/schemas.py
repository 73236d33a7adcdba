"""
Student API schemas (request/response models).

Request models only declare client-writable fields; `id` and the audit fields
are dropped on input so a caller cannot inject them.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .model import Student, format_date_of_birth, parse_date_of_birth


class StudentFieldsRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fname: str | None = Field(default=None, max_length=100)
    lname: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=320)
    gender: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    dateofbirth: date | None = Field(
        default=None,
        validation_alias=AliasChoices("dateofbirth", "dateOfBirth"),
    )

    @field_validator("dateofbirth", mode="before")
    @classmethod
    def _parse_dateofbirth(cls, value: str | date | None) -> date | None:
        return parse_date_of_birth(value)

    def to_student(self) -> Student:
        return Student(
            fname=self.fname,
            lname=self.lname,
            email=self.email,
            gender=self.gender,
            address=self.address,
            date_of_birth=self.dateofbirth,
        )


class CreateStudentRequest(StudentFieldsRequest):
    pass


class UpdateStudentRequest(StudentFieldsRequest):
    pass


class StudentResponse(BaseModel):
    id: str
    fname: str | None = None
    lname: str | None = None
    email: str | None = None
    gender: str | None = None
    address: str | None = None
    # DD-MM-YYYY
    dateofbirth: str | None = None
    createdby: str | None = None
    createdon: datetime | None = None
    updatedby: str | None = None
    updatedon: datetime | None = None


class MessageResponse(BaseModel):
    message: str


def to_student_response(student: Student) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        fname=student.fname,
        lname=student.lname,
        email=student.email,
        gender=student.gender,
        address=student.address,
        dateofbirth=format_date_of_birth(student.date_of_birth),
        createdby=student.created_by,
        createdon=student.created_on,
        updatedby=student.updated_by,
        updatedon=student.updated_on,
    )
