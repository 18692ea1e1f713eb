from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class ValidationOutcome:
    is_valid: bool
    error: str | None = None


_DANGEROUS_PATTERNS = (
    "DROP TABLE",
    "DROP DATABASE",
    "TRUNCATE",
    "ALTER TABLE",
    "CREATE TABLE",
    "CREATE DATABASE",
    "GRANT",
    "REVOKE",
)
_ALLOWED_OPERATIONS = ("SELECT", "INSERT", "UPDATE", "DELETE")
_SUSPICIOUS_PATTERNS = (
    re.compile(r";\s*(DROP|DELETE|UPDATE|INSERT)", re.IGNORECASE),
    re.compile(r"UNION.*SELECT", re.IGNORECASE),
    re.compile(r"--.*$", re.MULTILINE),
)

# (predicate over (original, upper-cased), error); first match wins.
_Rule = tuple[Callable[[str, str], bool], str]

_RULES: list[_Rule] = [
    *(
        ((lambda _sql, upper, p=pattern: p in upper), f"Dangerous operation detected: {pattern}")
        for pattern in _DANGEROUS_PATTERNS
    ),
    (
        lambda _sql, upper: not upper.startswith(_ALLOWED_OPERATIONS),
        "Query must start with SELECT, INSERT, UPDATE, or DELETE",
    ),
    *(
        ((lambda sql, _upper, p=pattern: p.search(sql) is not None), "Potentially malicious SQL detected")
        for pattern in _SUSPICIOUS_PATTERNS
    ),
]

_SANITIZE_PATTERNS = (
    re.compile(r"[<>]"),
    re.compile(r"[\"']"),
)


def validate_sql(sql: object) -> ValidationOutcome:
    """Screen a generated statement against the deny-list rules.

    This is a best-effort filter, not a parser: a string literal that happens
    to contain ``--`` or ``UNION ... SELECT`` is rejected too.
    """
    if not sql or not isinstance(sql, str):
        return ValidationOutcome(False, "Query is empty or not a string")

    upper = sql.upper().strip()
    for predicate, error in _RULES:
        if predicate(sql, upper):
            return ValidationOutcome(False, error)
    return ValidationOutcome(True)


def sanitize_input(text: str) -> str:
    """Strip angle brackets and quote characters from raw user text.

    Apostrophes are removed as well, so "Schindler's List" reaches the model
    as "Schindlers List".
    """
    if not isinstance(text, str):
        return text
    for pattern in _SANITIZE_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()
