from __future__ import annotations

import logging
from typing import Any

from moviechat.llm_service import LanguageModel, dump_rows

logger = logging.getLogger(__name__)

NO_RESULTS_SUMMARY = "No results found."


def build_summary_prompt(user_query: str, rows: list[dict[str, Any]], max_rows: int = 10) -> str:
    sample_rows = rows[: max(1, int(max_rows))]
    return (
        f"User request: {user_query}\n\n"
        f"Movie data: {dump_rows(sample_rows)}\n\n"
        "Write a natural language answer for the user request above, based on the movie data. "
        "Be concise and clear."
    )


def summarize_results(
    model: LanguageModel,
    user_query: str,
    rows: list[dict[str, Any]],
    max_rows: int = 10,
) -> str | None:
    try:
        return model.complete(build_summary_prompt(user_query, rows, max_rows=max_rows)).strip()
    except Exception as exc:
        logger.warning("Summary generation error: %s", exc)
        return None
