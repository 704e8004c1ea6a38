"""Database and storage operations for documents."""

import re
import secrets
import time
from typing import Any, Optional

from ..config import get_settings
from ..errors import NotFoundError, StorageError
from ..logging import get_logger
from .supabase_client import get_supabase

logger = get_logger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def build_storage_path(user_id: str, file_name: str) -> str:
    """Build a collision-resistant storage path under the user's prefix.

    Args:
        user_id: Owner of the file
        file_name: Original file name

    Returns:
        Path like ``{user_id}/{millis}_{random}_{clean_name}``
    """
    clean_name = _UNSAFE_NAME_CHARS.sub("_", file_name)
    timestamp = int(time.time() * 1000)
    random_part = secrets.token_hex(6)
    return f"{user_id}/{timestamp}_{random_part}_{clean_name}"


def get_document(document_id: str) -> dict[str, Any]:
    """Get a document row by id.

    Raises:
        NotFoundError: If the document does not exist
    """
    supabase = get_supabase()
    response = supabase.table("documents").select("*").eq("id", document_id).limit(1).execute()
    if not response.data:
        raise NotFoundError(f"Document {document_id} not found")
    return response.data[0]


def list_documents(user_id: str, folder_id: Optional[str] = None) -> list[dict[str, Any]]:
    """List one folder level for a user, folders first then by name."""
    supabase = get_supabase()
    query = supabase.table("documents").select("*").eq("user_id", user_id)

    if folder_id:
        query = query.eq("parent_folder_id", folder_id)
    else:
        query = query.is_("parent_folder_id", "null")

    response = query.order("is_folder", desc=True).order("file_name").execute()
    return response.data or []


def list_user_files(user_id: str) -> list[dict[str, Any]]:
    """List every non-folder document owned by a user."""
    supabase = get_supabase()
    response = (
        supabase.table("documents")
        .select("*")
        .eq("user_id", user_id)
        .eq("is_folder", False)
        .execute()
    )
    return response.data or []


def insert_document(record: dict[str, Any]) -> dict[str, Any]:
    """Insert a documents row and return it."""
    supabase = get_supabase()
    try:
        response = supabase.table("documents").insert(record).execute()
    except Exception as e:
        raise StorageError(f"Failed to create document record for {record.get('file_name')}: {e}") from e
    if not response.data:
        raise StorageError(f"Failed to create document record for {record.get('file_name')}")
    return response.data[0]


def create_folder(user_id: str, name: str, parent_folder_id: Optional[str] = None) -> dict[str, Any]:
    """Create a folder entry."""
    folder = insert_document(
        {
            "user_id": user_id,
            "file_name": name,
            "file_type": "folder",
            "file_size": 0,
            "storage_path": "",
            "is_folder": True,
            "parent_folder_id": parent_folder_id,
        }
    )
    logger.info(f"Created folder {folder['id']}: {name}")
    return folder


def update_document(document_id: str, fields: dict[str, Any]) -> None:
    supabase = get_supabase()
    supabase.table("documents").update(fields).eq("id", document_id).execute()


def delete_document(document_id: str) -> None:
    supabase = get_supabase()
    supabase.table("documents").delete().eq("id", document_id).execute()
    logger.info(f"Deleted document {document_id}")


def upload_file(path: str, data: bytes, content_type: str) -> None:
    """Upload bytes to the documents bucket.

    Raises:
        StorageError: If the upload fails
    """
    bucket = get_settings().storage_bucket
    try:
        get_supabase().storage.from_(bucket).upload(path, data, {"content-type": content_type})
    except Exception as e:
        raise StorageError(f"Failed to upload {path}: {e}") from e


def download_file(path: str) -> bytes:
    """Download an object from the documents bucket.

    Raises:
        StorageError: If the download fails
    """
    bucket = get_settings().storage_bucket
    try:
        return get_supabase().storage.from_(bucket).download(path)
    except Exception as e:
        raise StorageError(f"Failed to download {path}: {e}") from e


def remove_file(path: str) -> None:
    bucket = get_settings().storage_bucket
    try:
        get_supabase().storage.from_(bucket).remove([path])
    except Exception as e:
        logger.error(f"Failed to remove orphaned object {path}: {e}")


def upload_document(
    user_id: str,
    file_name: str,
    data: bytes,
    content_type: Optional[str] = None,
    parent_folder_id: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Store a file and create its documents row.

    The stored object is removed again when the row cannot be created.

    Args:
        user_id: Owner id
        file_name: Original file name
        data: File content
        content_type: MIME type (defaults to application/octet-stream)
        parent_folder_id: Folder to place the document in
        metadata: Extracted media metadata columns (width, camera_make, ...)

    Returns:
        Created documents row
    """
    file_type = content_type or "application/octet-stream"
    path = build_storage_path(user_id, file_name)
    upload_file(path, data, file_type)

    record = {
        "user_id": user_id,
        "file_name": file_name,
        "file_type": file_type,
        "file_size": len(data),
        "storage_path": path,
        "is_folder": False,
        "parent_folder_id": parent_folder_id,
    }
    if metadata:
        record.update({k: v for k, v in metadata.items() if k != "meta"})

    try:
        document = insert_document(record)
    except Exception:
        remove_file(path)
        raise

    logger.info(f"Uploaded document {document['id']} to {path} ({len(data)} bytes)")
    return document


def next_version(document_id: str) -> int:
    """Ask the database for the next version number (1 when none exist)."""
    response = get_supabase().rpc("next_version", {"doc_id": document_id}).execute()
    return response.data or 1


def create_version(
    document_id: str,
    title: str,
    storage_path: str,
    size_bytes: int,
    mime_type: str,
    created_by: str,
) -> dict[str, Any]:
    """Record a new document version."""
    record = {
        "document_id": document_id,
        "version": next_version(document_id),
        "title": title,
        "storage_path": storage_path,
        "size_bytes": size_bytes,
        "mime_type": mime_type,
        "created_by": created_by,
    }
    response = get_supabase().table("document_versions").insert(record).execute()
    if not response.data:
        raise StorageError(f"Failed to create version for document {document_id}")
    return response.data[0]


def log_activity(
    document_id: str,
    actor_id: str,
    action: str,
    details: Optional[dict[str, Any]] = None,
) -> None:
    """Append to the document activity log. Failures are logged only."""
    try:
        get_supabase().table("document_activity").insert(
            {
                "document_id": document_id,
                "actor_id": actor_id,
                "action": action,
                "details": details or {},
            }
        ).execute()
    except Exception as e:
        logger.error(f"Failed to log activity {action} for {document_id}: {e}")


def insert_ocr_page(record: dict[str, Any]) -> dict[str, Any]:
    response = get_supabase().table("ocr_pages").insert(record).execute()
    if not response.data:
        raise StorageError(f"Failed to store OCR page for {record.get('document_id')}")
    return response.data[0]


def list_activity(document_id: str, limit: int = 50) -> list[dict[str, Any]]:
    """Most recent activity entries for a document, newest first."""
    response = (
        get_supabase()
        .table("document_activity")
        .select("*")
        .eq("document_id", document_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return response.data or []
