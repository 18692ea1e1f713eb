from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    # Validated by the chat service so a bad payload gets the uniform envelope.
    message: Any = Field(None, description="Natural language question about the movies table")


class VisualizationRecommendation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    can_visualize: bool = Field(..., alias="canVisualize")
    chart_type: Literal["bar", "pie", "line"] | None = Field(None, alias="chartType")
    x_field: str | None = Field(None, alias="xField")
    y_field: str | None = Field(None, alias="yField")
    title: str | None = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    user_query: Any = Field(None, alias="userQuery")
    generated_sql: str | None = Field(None, alias="generatedSQL")
    query_type: str | None = Field(None, alias="queryType")
    data: list[dict[str, Any]] | None = None
    row_count: int | None = Field(None, alias="rowCount")
    result: dict[str, Any] | None = None
    message: str | None = None
    summary: str | None = None
    visualization: VisualizationRecommendation | None = None
    error: str | None = None
    stack: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        # A recommendation always carries all five keys, null or not.
        if self.visualization is not None:
            payload["visualization"] = self.visualization.model_dump(mode="json", by_alias=True)
        return payload


class ColumnInfo(BaseModel):
    column_name: str
    data_type: str
    is_nullable: str
    column_default: str | None = None


class SchemaResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    schema_: list[ColumnInfo] = Field(default_factory=list, alias="schema")
    table_name: str = Field(..., alias="tableName")


class HealthResponse(BaseModel):
    success: bool = True
    message: str = "Chat API is running"
    timestamp: str
