"""Share tokens for rooms and Q&A-only links."""

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from .config import get_settings
from .db import sharing as sharing_db
from .errors import AccessDeniedError, NotFoundError, ValidationError
from .logging import get_logger

logger = get_logger(__name__)


def hash_token(token: str) -> str:
    """SHA-256 hex digest stored in place of the token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def create_room_token(
    room_id: str,
    user_id: str,
    expires_in_hours: int = 24,
    permissions: Optional[dict[str, Any]] = None,
    origin: Optional[str] = None,
) -> dict[str, Any]:
    """
    Create a share link for a room the user owns.

    Only the hash of the token is stored, so the returned token cannot be
    recovered later.

    Raises:
        NotFoundError: The room does not exist or belongs to someone else.
    """
    room = sharing_db.get_owned_room(room_id, user_id)
    if not room:
        raise NotFoundError("Room not found or access denied")

    permissions = permissions if permissions is not None else {"query_only": True}
    token = str(uuid.uuid4())
    expires_at = (datetime.now(timezone.utc) + timedelta(hours=expires_in_hours)).isoformat()

    sharing_db.insert_room_token(
        {
            "room_id": room_id,
            "token_hash": hash_token(token),
            "expires_at": expires_at,
            "permissions": permissions,
            "created_by": user_id,
        }
    )
    logger.info(f"Created room token for room {room_id}, expires {expires_at}")

    base_url = origin or get_settings().public_base_url
    return {
        "token": token,
        "share_url": f"{base_url}/search?token={token}&room={room_id}",
        "expires_at": expires_at,
        "permissions": permissions,
        "room_name": room.get("name"),
    }


def resolve_room_token(token: str) -> dict[str, Any]:
    """
    Look up a presented room token and record its use.

    Returns:
        Dict with room_id, permissions and answer_only.

    Raises:
        AccessDeniedError: The token is unknown or expired.
    """
    token_hash = hash_token(token)
    record = sharing_db.get_room_token(token_hash)
    if not record or _parse_timestamp(record["expires_at"]) < datetime.now(timezone.utc):
        raise AccessDeniedError("Invalid or expired token")

    sharing_db.touch_room_token(token_hash)
    permissions = record.get("permissions") or {}
    return {
        "room_id": record["room_id"],
        "permissions": permissions,
        "answer_only": bool(permissions.get("query_only", False)),
    }


def create_qa_share(
    org_id: str,
    room_id: Optional[str] = None,
    expires_in_hours: int = 24,
    origin: Optional[str] = None,
) -> dict[str, Any]:
    """Create a Q&A-only share link for an organisation."""
    if not org_id:
        raise ValidationError("Organization ID is required")

    token = secrets.token_urlsafe(32)
    expires_at = (datetime.now(timezone.utc) + timedelta(hours=expires_in_hours)).isoformat()
    sharing_db.insert_share_token(
        {
            "token": token,
            "org_id": org_id,
            "room_id": room_id,
            "scope": "qa_only",
            "expires_at": expires_at,
        }
    )

    base_url = origin or get_settings().public_base_url
    return {
        "token": token,
        "expires_at": expires_at,
        "share_url": f"{base_url}/shared/{token}",
    }
