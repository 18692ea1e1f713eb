from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from moviechat.config import Settings


@dataclass(frozen=True)
class GenerationConfig:
    """Decoding settings; the defaults bias the model towards literal SQL."""

    temperature: float = 0.1
    top_k: int = 1
    top_p: float = 1.0
    max_output_tokens: int = 2048

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationConfig":
        return cls(
            temperature=settings.temperature,
            top_k=settings.top_k,
            top_p=settings.top_p,
            max_output_tokens=settings.max_tokens,
        )


class LanguageModel(Protocol):
    def complete(self, prompt: str) -> str: ...


class ChatModelClient:
    """Single-turn completions against an OpenAI-compatible chat endpoint."""

    def __init__(self, settings: Settings, config: GenerationConfig | None = None, system_prompt: str | None = None):
        self.settings = settings
        self.config = config or GenerationConfig.from_settings(settings)
        self.system_prompt = system_prompt
        self.client = ChatOpenAI(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            temperature=self.config.temperature,
            top_p=self.config.top_p,
            max_tokens=self.config.max_output_tokens,
            # top_k is not part of the OpenAI schema; compatible servers read it from the body.
            extra_body={"top_k": self.config.top_k} if settings.llm_base_url else None,
        )

    def complete(self, prompt: str) -> str:
        messages = []
        if self.system_prompt:
            messages.append(SystemMessage(content=self.system_prompt))
        messages.append(HumanMessage(content=prompt))
        resp = self.client.invoke(messages)
        return getattr(resp, "content", str(resp)).strip()


def _json_fallback(value: object) -> object:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def dump_rows(rows: object) -> str:
    """Serialize result rows for a prompt; tolerates Decimal and timestamps."""
    return json.dumps(rows, ensure_ascii=False, default=_json_fallback)
