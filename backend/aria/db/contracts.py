"""Database operations for contract analysis records."""

from datetime import datetime, timezone
from typing import Any, Optional

from ..errors import NotFoundError, StorageError
from ..logging import get_logger
from .supabase_client import get_supabase

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _insert(table: str, payload: Any) -> list[dict[str, Any]]:
    response = get_supabase().table(table).insert(payload).execute()
    if response.data is None:
        raise StorageError(f"Failed to insert into {table}")
    return response.data


def insert_extraction(record: dict[str, Any]) -> dict[str, Any]:
    rows = _insert("contract_extractions", record)
    if not rows:
        raise StorageError("Failed to save contract extraction")
    logger.info(f"Saved contract extraction {rows[0]['id']} for document {record['document_id']}")
    return rows[0]


def get_extraction(extraction_id: str, user_id: str) -> dict[str, Any]:
    """Get a contract extraction owned by the user.

    Raises:
        NotFoundError: If no such extraction belongs to the user
    """
    response = (
        get_supabase()
        .table("contract_extractions")
        .select("*")
        .eq("id", extraction_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    if not response.data:
        raise NotFoundError("Contract extraction not found")
    return response.data[0]


# Obligations

def insert_obligations(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if not rows:
        return []
    return _insert("contract_obligations", rows)


def list_due_obligations(user_id: str, due_on_or_before: str) -> list[dict[str, Any]]:
    """Pending, un-notified obligations due on or before the given ISO date."""
    response = (
        get_supabase()
        .table("contract_obligations")
        .select("*, contract_extractions!inner(id, parties, term_details)")
        .eq("user_id", user_id)
        .eq("status", "pending")
        .lte("due_date", due_on_or_before)
        .eq("notification_sent", False)
        .execute()
    )
    return response.data or []


def mark_obligations_notified(obligation_ids: list[str]) -> None:
    if not obligation_ids:
        return
    get_supabase().table("contract_obligations").update(
        {"notification_sent": True, "notification_date": _now()}
    ).in_("id", obligation_ids).execute()


def insert_work_items(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if not items:
        return []
    return _insert("work_queue", items)


# Revenue

def insert_revenue_terms(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if not rows:
        return []
    return _insert("revenue_terms", rows)


def list_revenue_terms(extraction_id: str) -> list[dict[str, Any]]:
    response = (
        get_supabase()
        .table("revenue_terms")
        .select("*")
        .eq("contract_extraction_id", extraction_id)
        .execute()
    )
    return response.data or []


def replace_forecasts(extraction_id: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Delete stored forecast months for an extraction and insert new ones."""
    supabase = get_supabase()
    supabase.table("revenue_forecasts").delete().eq("contract_extraction_id", extraction_id).execute()
    if not rows:
        return []
    return _insert("revenue_forecasts", rows)


def set_forecast_narrative(extraction_id: str, narrative: str) -> None:
    get_supabase().table("revenue_forecasts").update({"ai_narrative": narrative}).eq(
        "contract_extraction_id", extraction_id
    ).execute()


def list_forecasts(extraction_id: str) -> list[dict[str, Any]]:
    response = (
        get_supabase()
        .table("revenue_forecasts")
        .select("*")
        .eq("contract_extraction_id", extraction_id)
        .order("forecast_month")
        .execute()
    )
    return response.data or []


# Schema suggestions

def insert_schema_history(record: dict[str, Any]) -> dict[str, Any]:
    rows = _insert("schema_history", record)
    if not rows:
        raise StorageError("Failed to save schema suggestion")
    return rows[0]


def get_schema_history(
    schema_history_id: str,
    user_id: str,
    status: Optional[str] = None,
) -> dict[str, Any]:
    query = (
        get_supabase()
        .table("schema_history")
        .select("*")
        .eq("id", schema_history_id)
        .eq("user_id", user_id)
    )
    if status:
        query = query.eq("status", status)
    response = query.limit(1).execute()
    if not response.data:
        raise NotFoundError("Schema suggestion not found")
    return response.data[0]


def update_schema_history(schema_history_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
    response = (
        get_supabase()
        .table("schema_history")
        .update(fields)
        .eq("id", schema_history_id)
        .execute()
    )
    return response.data[0] if response.data else None


def exec_sql(sql: str) -> None:
    get_supabase().rpc("exec_sql", {"sql": sql}).execute()
