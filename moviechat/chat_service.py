from __future__ import annotations

import logging
import traceback
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from moviechat.chart_planner import analyze_for_visualization
from moviechat.errors import (
    GenerationError,
    InputError,
    MovieChatError,
    classify_database_error,
    is_model_configuration_error,
)
from moviechat.llm_service import LanguageModel
from moviechat.query_executor import QueryExecutor
from moviechat.schema_context import SchemaContext
from moviechat.schemas import ChatResponse, ColumnInfo, HealthResponse, SchemaResponse
from moviechat.sql_agent import QueryType, SQLAgentService, SQLGenerationResult
from moviechat.sql_firewall import sanitize_input
from moviechat.summarizer import NO_RESULTS_SUMMARY, summarize_results

logger = logging.getLogger(__name__)

INVALID_MESSAGE_ERROR = "Message is required and must be a string"
MODEL_CONFIGURATION_ERROR = "AI service configuration error"


class ChatService:
    """Runs one chat request through generation, execution and enhancement."""

    def __init__(
        self,
        model: LanguageModel,
        executor: QueryExecutor,
        schema_context: SchemaContext,
        debug: bool = False,
    ):
        self.model = model
        self.executor = executor
        self.schema_context = schema_context
        self.agent = SQLAgentService(model, schema_context)
        self.debug = debug

    def respond(self, message: object) -> tuple[int, ChatResponse]:
        """Like ``handle_chat`` but folds every failure into an error envelope."""
        try:
            return 200, self.handle_chat(message)
        except MovieChatError as exc:
            logger.error("Chat query error: %s", exc.message)
            return exc.status_code, self._failure(exc.message, message, exc)
        except Exception as exc:
            logger.exception("Chat query error")
            return 500, self._failure(str(exc) or "Failed to process query", message, exc)

    def handle_chat(self, message: object) -> ChatResponse:
        if not message or not isinstance(message, str):
            raise InputError(INVALID_MESSAGE_ERROR)

        user_query = sanitize_input(message)
        if not user_query:
            raise InputError(INVALID_MESSAGE_ERROR)
        logger.info("Processing query: %s", user_query)

        generation = self._generate(user_query)
        response = ChatResponse(
            success=True,
            user_query=user_query,
            generated_sql=generation.sql,
            query_type=generation.query_type.value,
        )

        try:
            if generation.query_type == QueryType.SELECT:
                self._run_select(generation, response)
            elif generation.query_type == QueryType.INSERT:
                result = self.executor.execute_insert(generation.sql)
                response.result = result.to_dict()
                response.message = "Record inserted successfully"
            elif generation.query_type == QueryType.UPDATE:
                result = self.executor.execute_update(generation.sql)
                response.result = result.to_dict()
                response.message = result.message
            elif generation.query_type == QueryType.DELETE:
                result = self.executor.execute_delete(generation.sql)
                response.result = result.to_dict()
                response.message = result.message
            else:
                raise GenerationError("Unsupported query type")
        except SQLAlchemyError as exc:
            logger.error("Database query error: %s", exc)
            raise classify_database_error(exc) from exc

        return response

    def get_schema(self) -> SchemaResponse:
        table_name = self.schema_context.table_name
        try:
            columns = self.executor.describe_table(table_name)
        except SQLAlchemyError as exc:
            logger.error("Schema fetch error: %s", exc)
            raise MovieChatError("Failed to fetch database schema") from exc
        return SchemaResponse(schema=[ColumnInfo(**col) for col in columns], tableName=table_name)

    @staticmethod
    def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())

    def _generate(self, user_query: str) -> SQLGenerationResult:
        try:
            return self.agent.generate_sql(user_query)
        except GenerationError as exc:
            if is_model_configuration_error(exc):
                raise GenerationError(MODEL_CONFIGURATION_ERROR) from exc
            raise

    def _run_select(self, generation: SQLGenerationResult, response: ChatResponse) -> None:
        result = self.executor.execute_select(generation.sql)
        response.data = result.data
        response.row_count = result.row_count
        response.message = f"Found {result.row_count} result(s)"

        visualization = analyze_for_visualization(self.model, generation.sql, result.data)
        if visualization and visualization.can_visualize:
            response.visualization = visualization

        if result.data:
            response.summary = summarize_results(self.model, response.user_query, result.data)
        else:
            response.summary = NO_RESULTS_SUMMARY

    def _failure(self, error: str, message: object, exc: BaseException) -> ChatResponse:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)) if self.debug else None
        return ChatResponse(success=False, error=error, user_query=message, stack=stack)
