from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from sqlalchemy import Column, DateTime, Float, Integer, MetaData, Numeric, String, Table, Text, func

from moviechat.config import ConfigError


SCHEMA_CONTEXT_PATH = Path(__file__).parent / "semantics" / "movies.yaml"

_TYPE_PATTERN = re.compile(r"^\s*(\w+)\s*(?:\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\))?\s*$")


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    server_default: str | None = None
    description: str = ""
    examples: tuple[Any, ...] = ()

    def ddl(self) -> str:
        parts = [self.name, self.type.upper()]
        if self.primary_key:
            parts.append("PRIMARY KEY")
        elif not self.nullable:
            parts.append("NOT NULL")
        if self.server_default == "now":
            parts.append("DEFAULT CURRENT_TIMESTAMP")
        return " ".join(parts)

    def to_sqlalchemy(self) -> Column:
        match = _TYPE_PATTERN.match(self.type)
        if not match:
            raise ConfigError(f"Unsupported column type for {self.name}: {self.type}")
        base, size, scale = match.group(1).lower(), match.group(2), match.group(3)

        if base == "serial":
            return Column(self.name, Integer, primary_key=True, autoincrement=True)
        if base in ("varchar", "char"):
            sa_type = String(int(size)) if size else String()
        elif base in ("integer", "int", "bigint", "smallint"):
            sa_type = Integer()
        elif base in ("numeric", "decimal"):
            sa_type = Numeric(int(size), int(scale or 0)) if size else Numeric()
        elif base in ("float", "real", "double"):
            sa_type = Float()
        elif base == "text":
            sa_type = Text()
        elif base in ("timestamp", "datetime"):
            sa_type = DateTime()
        else:
            raise ConfigError(f"Unsupported column type for {self.name}: {self.type}")

        server_default = func.now() if self.server_default == "now" else None
        return Column(
            self.name,
            sa_type,
            primary_key=self.primary_key,
            nullable=self.nullable,
            server_default=server_default,
        )


@dataclass(frozen=True)
class FewShotExample:
    input: str
    output: str


@dataclass(frozen=True)
class SchemaContext:
    """Static description of the single queryable table.

    The same column list renders the prompt block and builds the table the
    executor creates, so generation and storage always agree on the schema.
    """

    table_name: str
    dialect: str
    columns: tuple[ColumnSpec, ...]
    rules: tuple[str, ...] = ()
    examples: tuple[FewShotExample, ...] = ()
    seed_rows: tuple[dict[str, Any], ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def ddl(self) -> str:
        body = ",\n".join(f"  {c.ddl()}" for c in self.columns)
        return f"CREATE TABLE {self.table_name} (\n{body}\n);"

    def to_prompt(self) -> str:
        lines = [self.ddl(), "", "Sample data structure:"]
        for column in self.columns:
            if column.primary_key or column.server_default:
                continue
            note = f"- {column.name}: {column.description}"
            if column.examples:
                samples = ", ".join(json.dumps(v, ensure_ascii=False) for v in column.examples)
                note += f" (e.g., {samples})"
            lines.append(note)
        return "\n".join(lines)

    def rules_prompt(self) -> str:
        return "\n".join(f"{idx}. {rule}" for idx, rule in enumerate(self.rules, start=1))

    def examples_prompt(self) -> str:
        blocks = [f'Input: "{ex.input}"\nOutput: {ex.output}' for ex in self.examples]
        return "\n\n".join(blocks)

    def build_table(self, metadata: MetaData | None = None) -> Table:
        metadata = metadata if metadata is not None else MetaData()
        return Table(self.table_name, metadata, *(c.to_sqlalchemy() for c in self.columns))


def load_schema_context(path: str | Path | None = None) -> SchemaContext:
    context_path = Path(path) if path else SCHEMA_CONTEXT_PATH
    with context_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    raw = data.get("schema_context", {}) or {}
    table_name = str(raw.get("table", "") or "").strip()
    raw_columns = raw.get("columns", []) or []
    if not table_name or not raw_columns:
        raise ConfigError(f"Schema context {context_path} must define a table and its columns.")

    columns = tuple(
        ColumnSpec(
            name=str(item["name"]),
            type=str(item.get("type", "text")),
            nullable=bool(item.get("nullable", True)),
            primary_key=bool(item.get("primary_key", False)),
            server_default=item.get("server_default"),
            description=str(item.get("description", "") or ""),
            examples=tuple(item.get("examples", []) or []),
        )
        for item in raw_columns
    )
    known = {c.name for c in columns}
    seed_rows = tuple(dict(row) for row in raw.get("seed_rows", []) or [])
    for row in seed_rows:
        unknown = set(row) - known
        if unknown:
            raise ConfigError(f"Seed row references unknown columns: {', '.join(sorted(unknown))}")

    return SchemaContext(
        table_name=table_name,
        dialect=str(raw.get("dialect", "PostgreSQL")),
        columns=columns,
        rules=tuple(str(rule) for rule in raw.get("rules", []) or []),
        examples=tuple(
            FewShotExample(input=str(ex["input"]), output=str(ex["output"]))
            for ex in raw.get("examples", []) or []
        ),
        seed_rows=seed_rows,
    )
