"""Database operations for rooms and share tokens."""

from datetime import datetime, timezone
from typing import Any, Optional

from ..errors import StorageError
from .supabase_client import get_supabase


def get_owned_room(room_id: str, owner_id: str) -> Optional[dict[str, Any]]:
    response = (
        get_supabase()
        .table("rooms")
        .select("*")
        .eq("id", room_id)
        .eq("owner_id", owner_id)
        .limit(1)
        .execute()
    )
    return response.data[0] if response.data else None


def insert_room_token(record: dict[str, Any]) -> dict[str, Any]:
    response = get_supabase().table("room_tokens").insert(record).execute()
    if not response.data:
        raise StorageError("Failed to create share token")
    return response.data[0]


def get_room_token(token_hash: str) -> Optional[dict[str, Any]]:
    response = (
        get_supabase()
        .table("room_tokens")
        .select("room_id, permissions, expires_at")
        .eq("token_hash", token_hash)
        .limit(1)
        .execute()
    )
    return response.data[0] if response.data else None


def touch_room_token(token_hash: str) -> None:
    get_supabase().table("room_tokens").update(
        {"last_used_at": datetime.now(timezone.utc).isoformat()}
    ).eq("token_hash", token_hash).execute()


def insert_share_token(record: dict[str, Any]) -> dict[str, Any]:
    response = get_supabase().table("share_tokens").insert(record).execute()
    if not response.data:
        raise StorageError("Failed to create share token")
    return response.data[0]
