from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from moviechat.errors import GenerationError
from moviechat.llm_service import LanguageModel
from moviechat.schema_context import SchemaContext
from moviechat.sql_firewall import validate_sql

logger = logging.getLogger(__name__)


class QueryType(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class SQLGenerationResult:
    sql: str
    query_type: QueryType
    is_valid: bool = True


_CODE_FENCE = re.compile(r"```(?:sql)?", re.IGNORECASE)


def clean_completion(text: str) -> str:
    """Drop Markdown code fences around a model completion."""
    return _CODE_FENCE.sub("", text or "").strip()


def detect_query_type(sql: str) -> QueryType:
    upper_sql = sql.upper().strip()
    for query_type in (QueryType.SELECT, QueryType.INSERT, QueryType.UPDATE, QueryType.DELETE):
        if upper_sql.startswith(query_type.value):
            return query_type
    return QueryType.UNKNOWN


def build_sql_prompt(schema_context: SchemaContext, user_query: str) -> str:
    return (
        f"You are a SQL query generator for a {schema_context.table_name} database. "
        f"Convert natural language questions into {schema_context.dialect} queries.\n\n"
        f"Database Schema:\n{schema_context.to_prompt()}\n\n"
        f"Rules:\n{schema_context.rules_prompt()}\n\n"
        f"Examples:\n{schema_context.examples_prompt()}\n\n"
        "Generate only the SQL query, no explanations.\n\n"
        f"User Query: {user_query}\n\n"
        "SQL Query:"
    )


class SQLAgentService:
    def __init__(self, model: LanguageModel, schema_context: SchemaContext):
        self.model = model
        self.schema_context = schema_context

    def generate_sql(self, user_query: str) -> SQLGenerationResult:
        prompt = build_sql_prompt(self.schema_context, user_query)
        try:
            raw = self.model.complete(prompt)
        except Exception as exc:
            logger.error("SQL generation error: %s", exc)
            raise GenerationError(f"Failed to generate SQL: {exc}") from exc

        sql = clean_completion(raw)
        validation = validate_sql(sql)
        if not validation.is_valid:
            logger.warning("Rejected generated SQL (%s): %s", validation.error, sql)
            raise GenerationError(f"Failed to generate SQL: Invalid SQL generated: {validation.error}")

        logger.info("Generated SQL: %s", sql)
        return SQLGenerationResult(sql=sql, query_type=detect_query_type(sql), is_valid=True)
