from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


class ConfigError(ValueError):
    """Raised when required environment configuration is invalid."""


@dataclass(slots=True)
class Settings:
    db_host: str
    db_port: int
    db_user: str | None
    db_password: str | None
    db_name: str | None
    db_url: str | None
    db_pool_size: int
    llm_base_url: str | None
    llm_api_key: str | None
    llm_model: str
    temperature: float
    top_k: int
    top_p: float
    max_tokens: int
    schema_context_path: str | None
    app_env: str
    frontend_url: str
    log_level: str

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url
        missing = [
            name
            for name, value in (("db_user", self.db_user), ("db_name", self.db_name))
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing database settings: {', '.join(missing)}")
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password or ''}@"
            f"{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"

    @classmethod
    def load(cls, env_file: str | Path | None = None) -> "Settings":
        if env_file is not None:
            load_dotenv(dotenv_path=env_file)

        return cls(
            db_host=_first_env("POSTGRES_HOST", "DB_HOST", default="localhost") or "localhost",
            db_port=_int_env(("POSTGRES_PORT", "DB_PORT"), default=5432),
            db_user=_first_env("POSTGRES_USER", "DB_USER"),
            db_password=_first_env("POSTGRES_PASSWORD", "DB_PASSWORD"),
            db_name=_first_env("POSTGRES_DB", "DB_NAME", "DATABASE_NAME"),
            db_url=_first_env("DATABASE_URL"),
            db_pool_size=_int_env(("DB_POOL_SIZE",), default=5),
            llm_base_url=_first_env("LLM_BASE_URL"),
            llm_api_key=_first_env("LLM_API_KEY", "OPENAI_API_KEY"),
            llm_model=_first_env("LLM_MODEL", "OPENAI_MODEL", default="gpt-4o-mini") or "gpt-4o-mini",
            temperature=_float_env(("LLM_TEMPERATURE",), default=0.1),
            top_k=_int_env(("LLM_TOP_K",), default=1),
            top_p=_float_env(("LLM_TOP_P",), default=1.0),
            max_tokens=_int_env(("LLM_MAX_TOKENS",), default=2048),
            schema_context_path=_first_env("SCHEMA_CONTEXT_PATH"),
            app_env=_first_env("APP_ENV", "ENVIRONMENT", default="production") or "production",
            frontend_url=_first_env("FRONTEND_URL", default="http://localhost:5173") or "http://localhost:5173",
            log_level=_first_env("LOG_LEVEL", default="INFO") or "INFO",
        )


def _first_env(*keys: str, default: str | None = None) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value is not None and value != "":
            return value
    return default


def _int_env(keys: tuple[str, ...], default: int) -> int:
    raw = _first_env(*keys)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {keys[0]} must be an integer.") from exc


def _float_env(keys: tuple[str, ...], default: float) -> float:
    raw = _first_env(*keys)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {keys[0]} must be a number.") from exc
