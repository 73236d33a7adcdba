from datetime import date, datetime

import pytest

from students.errors import MalformedInputError
from students.model import Student, format_date_of_birth, parse_date_of_birth


def test_parse_date_of_birth_day_month_year():
    assert parse_date_of_birth("10-12-1815") == date(1815, 12, 10)


def test_parse_date_of_birth_none_is_unset():
    assert parse_date_of_birth(None) is None


@pytest.mark.parametrize("value", ["", "   "])
def test_parse_date_of_birth_rejects_blank_strings(value):
    with pytest.raises(MalformedInputError):
        parse_date_of_birth(value)


def test_parse_date_of_birth_passes_dates_through():
    assert parse_date_of_birth(date(2000, 1, 2)) == date(2000, 1, 2)
    assert parse_date_of_birth(datetime(2000, 1, 2, 13, 30)) == date(2000, 1, 2)


@pytest.mark.parametrize("value", ["1815-12-10", "32-01-2000", "10/12/1815", "yesterday", 19991231])
def test_parse_date_of_birth_rejects_other_layouts(value):
    with pytest.raises(MalformedInputError):
        parse_date_of_birth(value)


def test_malformed_input_is_a_value_error():
    with pytest.raises(ValueError):
        parse_date_of_birth("not-a-date")


def test_format_date_of_birth():
    assert format_date_of_birth(date(1815, 12, 10)) == "10-12-1815"
    assert format_date_of_birth(None) is None


def test_student_defaults_are_unset():
    student = Student(id="abc")
    assert student.fname is None
    assert student.date_of_birth is None
    assert student.updated_on is None


def test_with_changes_returns_copy():
    original = Student(id="abc", fname="Ada")
    changed = original.with_changes(fname="Grace")
    assert original.fname == "Ada"
    assert changed.fname == "Grace"
    assert changed.id == "abc"
