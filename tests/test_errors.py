import pytest
from sqlalchemy.exc import IntegrityError, ProgrammingError

from moviechat.errors import classify_database_error, database_error_code, is_model_configuration_error


class DriverError(Exception):
    def __init__(self, pgcode=None):
        super().__init__("driver error")
        self.pgcode = pgcode


class Psycopg3Error(Exception):
    sqlstate = "42703"


@pytest.mark.parametrize(
    "code, message, status_code, category",
    [
        ("23505", "Duplicate entry found", 400, "duplicate_entry"),
        ("23503", "Referenced record not found", 400, "missing_reference"),
        ("42P01", "Table not found", 400, "unknown_table"),
        ("42703", "Column not found", 400, "unknown_column"),
        ("40001", "Database error occurred", 500, "database_error"),
    ],
)
def test_classify_database_error_by_sqlstate(code, message, status_code, category):
    exc = IntegrityError("INSERT INTO movies ...", {}, DriverError(code))

    error = classify_database_error(exc)

    assert error.message == message
    assert error.status_code == status_code
    assert error.category == category
    assert error.code == code


def test_error_without_code_is_generic():
    error = classify_database_error(ProgrammingError("SELECT", {}, Exception("boom")))

    assert error.message == "Database error occurred"
    assert error.status_code == 500
    assert error.code is None


def test_sqlstate_attribute_is_read_from_unwrapped_driver_errors():
    assert database_error_code(Psycopg3Error()) == "42703"


def test_model_configuration_error_detection():
    assert is_model_configuration_error(RuntimeError("Incorrect API key provided: sk-***"))
    assert not is_model_configuration_error(RuntimeError("rate limited"))
