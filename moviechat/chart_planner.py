from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from moviechat.llm_service import LanguageModel, dump_rows
from moviechat.schemas import VisualizationRecommendation

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def build_visualization_prompt(sql: str, rows: list[dict[str, Any]]) -> str:
    return (
        "Analyze this SQL query and results to determine if they can be visualized:\n\n"
        f"SQL: {sql}\n"
        f"Sample Result: {dump_rows(rows[0])}\n"
        f"Total Rows: {len(rows)}\n\n"
        "Respond with JSON only:\n"
        "{\n"
        '  "canVisualize": boolean,\n'
        '  "chartType": "bar" | "pie" | "line" | null,\n'
        '  "xField": "field_name" | null,\n'
        '  "yField": "field_name" | null,\n'
        '  "title": "Chart Title" | null\n'
        "}\n\n"
        "Rules:\n"
        "- canVisualize: true if data has numeric values suitable for charts\n"
        '- chartType: "bar" for comparisons, "pie" for parts of whole, "line" for trends\n'
        "- xField/yField: the column names to use for x and y axes"
    )


def parse_visualization(text: str) -> VisualizationRecommendation | None:
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    try:
        return VisualizationRecommendation.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError, TypeError) as exc:
        logger.warning("Unparseable visualization analysis: %s", exc)
        return None


def analyze_for_visualization(
    model: LanguageModel,
    sql: str,
    rows: list[dict[str, Any]] | None,
) -> VisualizationRecommendation | None:
    if not rows:
        return None

    try:
        raw = model.complete(build_visualization_prompt(sql, rows))
    except Exception as exc:
        logger.warning("Visualization analysis error: %s", exc)
        return None
    return parse_visualization(raw)
