from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Same shape text() treats as a bind parameter.
_BIND_PARAM = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")


def _as_text_clause(sql: str, params: Mapping[str, Any]):
    """Keep `:name` literals in generated SQL from being read as bind parameters."""
    escaped = _BIND_PARAM.sub(lambda m: m.group(0) if m.group(1) in params else "\\" + m.group(0), sql)
    return text(escaped)


@dataclass(frozen=True)
class QueryResult:
    columns: list[str]
    rows: list[dict[str, Any]]
    row_count: int
    fields: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class SelectResult:
    data: list[dict[str, Any]]
    row_count: int
    fields: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class WriteResult:
    success: bool
    row_count: int
    inserted_id: Any = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success, "rowCount": self.row_count}
        if self.message is not None:
            payload["message"] = self.message
        else:
            payload["insertedId"] = self.inserted_id
        return payload


class QueryExecutor:
    """Run pre-validated statements on a pooled engine.

    Database errors are not caught here; the request boundary classifies them.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def execute_query(self, sql: str, params: Mapping[str, Any] | None = None) -> QueryResult:
        logger.info("Executing SQL: %s", sql)
        # begin() checks a connection out and always returns it, rolling back on error.
        with self.engine.begin() as conn:
            bound = dict(params or {})
            result = conn.execute(_as_text_clause(sql, bound), bound)
            if not result.returns_rows:
                return QueryResult(columns=[], rows=[], row_count=max(result.rowcount, 0))

            cursor = getattr(result, "cursor", None)
            description = getattr(cursor, "description", None) or []
            fields = [{"name": d[0], "dataType": d[1]} for d in description]
            columns = list(result.keys())
            rows = [dict(row) for row in result.mappings().all()]
            row_count = result.rowcount if result.rowcount and result.rowcount > 0 else len(rows)
            return QueryResult(columns=columns, rows=rows, row_count=row_count, fields=fields)

    def execute_select(self, sql: str, params: Mapping[str, Any] | None = None) -> SelectResult:
        result = self.execute_query(sql, params)
        return SelectResult(data=result.rows, row_count=len(result.rows), fields=result.fields)

    def execute_insert(self, sql: str, params: Mapping[str, Any] | None = None) -> WriteResult:
        result = self.execute_query(sql, params)
        inserted_id = result.rows[0].get("id") if result.rows else None
        return WriteResult(success=True, row_count=result.row_count, inserted_id=inserted_id)

    def execute_update(self, sql: str, params: Mapping[str, Any] | None = None) -> WriteResult:
        result = self.execute_query(sql, params)
        return WriteResult(
            success=True,
            row_count=result.row_count,
            message=f"Updated {result.row_count} row(s)",
        )

    def execute_delete(self, sql: str, params: Mapping[str, Any] | None = None) -> WriteResult:
        result = self.execute_query(sql, params)
        return WriteResult(
            success=True,
            row_count=result.row_count,
            message=f"Deleted {result.row_count} row(s)",
        )

    def describe_table(self, table_name: str) -> list[dict[str, Any]]:
        columns = inspect(self.engine).get_columns(table_name)
        return [
            {
                "column_name": col["name"],
                "data_type": str(col["type"]),
                "is_nullable": "YES" if col.get("nullable", True) else "NO",
                "column_default": None if col.get("default") is None else str(col["default"]),
            }
            for col in columns
        ]
