"""Database operations for search sessions."""

from typing import Any, Optional

from .supabase_client import get_supabase


def save_exchange(
    session_id: str,
    user_id: str,
    query: str,
    answer: str,
    sources: list[dict[str, Any]],
    metadata: Optional[dict[str, Any]] = None,
) -> None:
    """Persist a user question and the assistant answer for a session."""
    supabase = get_supabase()
    supabase.table("search_messages").insert(
        {
            "session_id": session_id,
            "user_id": user_id,
            "message_type": "user",
            "content": query,
        }
    ).execute()
    supabase.table("search_messages").insert(
        {
            "session_id": session_id,
            "user_id": user_id,
            "message_type": "assistant",
            "content": answer,
            "sources": sources,
            "metadata": metadata or {},
        }
    ).execute()
