from __future__ import annotations

from dataclasses import dataclass


class MovieChatError(Exception):
    """Base class for failures reported back to the caller as an envelope."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InputError(MovieChatError):
    status_code = 400


class GenerationError(MovieChatError):
    pass


class ExecutionError(MovieChatError):
    def __init__(self, message: str, status_code: int, category: str, code: str | None = None):
        super().__init__(message, status_code)
        self.category = category
        self.code = code


@dataclass(frozen=True)
class DatabaseErrorInfo:
    category: str
    message: str
    status_code: int


# PostgreSQL SQLSTATE codes that get a dedicated user-facing message.
DATABASE_ERROR_CODES: dict[str, DatabaseErrorInfo] = {
    "23505": DatabaseErrorInfo("duplicate_entry", "Duplicate entry found", 400),
    "23503": DatabaseErrorInfo("missing_reference", "Referenced record not found", 400),
    "42P01": DatabaseErrorInfo("unknown_table", "Table not found", 400),
    "42703": DatabaseErrorInfo("unknown_column", "Column not found", 400),
}
GENERIC_DATABASE_ERROR = DatabaseErrorInfo("database_error", "Database error occurred", 500)


def database_error_code(exc: BaseException) -> str | None:
    # SQLAlchemy wraps the driver exception in ``orig``.
    orig = getattr(exc, "orig", None) or exc
    for attr in ("pgcode", "sqlstate"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def classify_database_error(exc: BaseException) -> ExecutionError:
    code = database_error_code(exc)
    info = DATABASE_ERROR_CODES.get(code or "", GENERIC_DATABASE_ERROR)
    return ExecutionError(info.message, info.status_code, info.category, code=code)


def is_model_configuration_error(exc: BaseException) -> bool:
    return "API key" in str(exc)
