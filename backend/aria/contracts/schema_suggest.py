"""Database schema suggestions derived from document content."""

import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import get_settings
from ..db import contracts as contracts_db
from ..errors import (
    AllProvidersFailed,
    ParseError,
    ProviderError,
    SchemaValidationError,
    StorageError,
    ValidationError,
)
from ..llm import Completion, ProviderRouter, extract_json_object
from ..logging import get_logger
from ..models import SuggestedSchema
from .prompts import SCHEMA_PROMPT, SCHEMA_SYSTEM_PROMPT

logger = get_logger(__name__)

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
COLUMN_TYPE = re.compile(
    r"^(TEXT|INTEGER|BIGINT|SMALLINT|DATE|BOOLEAN|UUID|JSONB|TIMESTAMPTZ"
    r"|TIMESTAMP( WITH(OUT)? TIME ZONE)?"
    r"|(DECIMAL|NUMERIC)(\(\d+(,\s*\d+)?\))?"
    r"|VARCHAR(\(\d+\))?)$",
    re.IGNORECASE,
)
REFERENCE = re.compile(r"^REFERENCES\s+([A-Za-z_][A-Za-z0-9_.]*)\s*\(\s*([A-Za-z_][A-Za-z0-9_]*)\s*\)", re.IGNORECASE)
DEFAULT_VALUE = re.compile(
    r"^(-?\d+(\.\d+)?|true|false|null|now\(\)|gen_random_uuid\(\)|current_timestamp|current_date"
    r"|'[^';]*'(::[A-Za-z]+)?)$",
    re.IGNORECASE,
)


def _check_identifier(name: str) -> str:
    if not IDENTIFIER.match(name or ""):
        raise SchemaValidationError(f"Invalid identifier: {name!r}")
    return name


def validate_schema(schema: SuggestedSchema) -> None:
    """
    Reject anything that would not render as a plain DDL statement.

    Raises:
        SchemaValidationError: Unsafe identifier, type, default or constraint.
    """
    if not schema.tables:
        raise SchemaValidationError("Schema has no tables")
    for table in schema.tables:
        _check_identifier(table.name)
        for column in table.columns:
            _check_identifier(column.name)
            if not COLUMN_TYPE.match(column.type.strip()):
                raise SchemaValidationError(f"Unsupported column type {column.type!r} on {table.name}.{column.name}")
            if column.default is not None and not DEFAULT_VALUE.match(column.default.strip()):
                raise SchemaValidationError(f"Unsupported default on {table.name}.{column.name}")
            for constraint in column.constraints:
                upper = constraint.strip().upper()
                if ";" in constraint or "--" in constraint:
                    raise SchemaValidationError(f"Invalid constraint on {table.name}.{column.name}")
                if upper.startswith("REFERENCES") and not REFERENCE.match(constraint.strip()):
                    raise SchemaValidationError(f"Invalid reference on {table.name}.{column.name}")


def render_migration(schema: SuggestedSchema) -> str:
    """Render CREATE TABLE statements, constraints and row level security."""
    validate_schema(schema)
    lines = ["-- Auto-generated schema migration", "-- Generated from document analysis", ""]

    for table in schema.tables:
        name = table.name
        definitions = []
        for column in table.columns:
            definition = f"  {column.name} {column.type.strip().upper()}"
            if not column.nullable:
                definition += " NOT NULL"
            if column.default is not None:
                definition += f" DEFAULT {column.default.strip()}"
            if column.primary_key:
                definition += " PRIMARY KEY"
            definitions.append(definition)

        lines.append(f"-- Create {name} table")
        if table.description:
            lines.append(f"-- {' '.join(table.description.split())}")
        lines.append(f"CREATE TABLE public.{name} (")
        lines.append(",\n".join(definitions))
        lines.append(");")
        lines.append("")

        for column in table.columns:
            for constraint in column.constraints:
                constraint = constraint.strip()
                upper = constraint.upper()
                if upper.startswith("REFERENCES"):
                    lines.append(
                        f"ALTER TABLE public.{name} ADD CONSTRAINT fk_{name}_{column.name} "
                        f"FOREIGN KEY ({column.name}) {constraint};"
                    )
                elif upper.startswith("UNIQUE"):
                    lines.append(
                        f"ALTER TABLE public.{name} ADD CONSTRAINT uc_{name}_{column.name} UNIQUE ({column.name});"
                    )
                elif upper.startswith("CHECK"):
                    lines.append(f"ALTER TABLE public.{name} ADD CONSTRAINT chk_{name}_{column.name} {constraint};")

        lines.append(f"ALTER TABLE public.{name} ENABLE ROW LEVEL SECURITY;")
        lines.append(
            f'CREATE POLICY "Users can manage their own {name}" ON public.{name} '
            f"FOR ALL USING (auth.uid() = user_id);"
        )
        lines.append("")

    return "\n".join(lines)


def _suggest(router: ProviderRouter, prompt: str) -> tuple[SuggestedSchema, Completion]:
    """GPT-4o first, then Gemini. An answer without a well-formed schema moves on to the next model."""
    attempts = [("openai", get_settings().contract_model), ("google", None)]
    errors: dict[str, Exception] = {}
    for provider, model in attempts:
        try:
            completion = router.complete(
                provider,
                prompt,
                system=SCHEMA_SYSTEM_PROMPT,
                max_tokens=3000,
                temperature=0.1,
                model=model,
            )
            return SuggestedSchema.model_validate(extract_json_object(completion.text)), completion
        except (ProviderError, ParseError, PydanticValidationError) as e:
            logger.warning(f"Schema suggestion with {provider} failed: {e}")
            errors[provider] = e
    raise AllProvidersFailed(errors)


def suggest_schema(
    document_id: str,
    user_id: str,
    extracted_text: str,
    router: Optional[ProviderRouter] = None,
) -> dict[str, Any]:
    """
    Ask a model for a normalised schema and store it as a suggestion.

    Raises:
        ValidationError: Missing document id or text.
        SchemaValidationError: The suggested schema is not safe to render.
        AllProvidersFailed: Neither GPT-4o nor Gemini gave a well-formed schema.
    """
    if not document_id or not extracted_text:
        raise ValidationError("Document ID and extracted text are required")

    router = router or ProviderRouter()
    schema, completion = _suggest(router, SCHEMA_PROMPT.format(text=extracted_text))

    migration_sql = render_migration(schema)
    table_names = [table.name for table in schema.tables]
    record = contracts_db.insert_schema_history(
        {
            "document_id": document_id,
            "user_id": user_id,
            "suggested_schema": schema.model_dump(),
            "schema_description": schema.description,
            "ai_model": completion.model,
            "confidence_score": schema.confidence,
            "migration_sql": migration_sql,
            "table_names": table_names,
            "status": "suggested",
        }
    )
    logger.info(f"Suggested {len(table_names)} tables for document {document_id} using {completion.model}")
    return {
        "schema_history": record,
        "suggested_schema": schema.model_dump(),
        "migration_sql": migration_sql,
        "model_used": completion.model,
    }


def approve_schema(schema_history_id: str, user_id: str) -> dict[str, Any]:
    if not schema_history_id:
        raise ValidationError("Schema history ID is required for approval")
    contracts_db.get_schema_history(schema_history_id, user_id)
    return contracts_db.update_schema_history(
        schema_history_id,
        {"status": "approved", "approved_at": datetime.now(timezone.utc).isoformat()},
    ) or {}


def implement_schema(schema_history_id: str, user_id: str) -> dict[str, Any]:
    """
    Run an approved migration.

    A failed migration marks the suggestion rejected before the error is
    raised.

    Raises:
        NotFoundError: No approved suggestion with that id belongs to the user.
        StorageError: The migration failed.
    """
    if not schema_history_id:
        raise ValidationError("Schema history ID is required for implementation")
    history = contracts_db.get_schema_history(schema_history_id, user_id, status="approved")

    try:
        contracts_db.exec_sql(history["migration_sql"])
    except Exception as e:
        contracts_db.update_schema_history(
            schema_history_id,
            {"status": "rejected", "rejected_reason": f"Implementation failed: {e}"},
        )
        logger.error(f"Migration for schema {schema_history_id} failed: {e}")
        raise StorageError(f"Migration failed: {e}") from e

    contracts_db.update_schema_history(
        schema_history_id,
        {"status": "implemented", "implemented_at": datetime.now(timezone.utc).isoformat()},
    )
    logger.info(f"Implemented schema {schema_history_id}: {history.get('table_names')}")
    return {"tables_created": history.get("table_names") or []}
