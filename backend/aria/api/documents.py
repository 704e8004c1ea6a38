"""Document management endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from ..db import documents as documents_db
from ..errors import NotFoundError
from ..ingestion.metadata import extract_file_metadata
from ..ingestion.summary import generate_document_summary
from ..llm import ProviderRouter
from ..logging import get_logger
from ..models.schemas import CreateFolderRequest, CreateVersionRequest, DocumentRecord, SummaryResponse
from ..retrieval import ChunkStore
from .deps import get_router, get_store

logger = get_logger(__name__)
router = APIRouter(prefix="/documents", tags=["documents"])


def _owned_document(document_id: str, user_id: str) -> dict:
    document = documents_db.get_document(document_id)
    if document.get("user_id") != user_id:
        raise NotFoundError(f"Document {document_id} not found")
    return document


@router.post("/upload", response_model=DocumentRecord)
def upload_document(
    file: UploadFile = File(...),
    user_id: str = Form(...),
    parent_folder_id: Optional[str] = Form(None),
):
    """
    Store a file and create its document record.

    Images have their dimensions, capture date, camera and GPS position
    recorded on the row.
    """
    data = file.file.read()
    content_type = file.content_type or "application/octet-stream"
    metadata = extract_file_metadata(data, content_type)

    document = documents_db.upload_document(
        user_id,
        file.filename or "upload",
        data,
        content_type=content_type,
        parent_folder_id=parent_folder_id,
        metadata=metadata,
    )
    documents_db.log_activity(
        document["id"], user_id, "upload", {"file_name": document["file_name"], "size": len(data)}
    )
    return document


@router.get("")
def list_documents(
    user_id: str = Query(..., min_length=1),
    folder_id: Optional[str] = Query(None, description="Folder to list; root when omitted"),
):
    documents = documents_db.list_documents(user_id, folder_id)
    return {"documents": documents, "total": len(documents)}


@router.post("/folders", response_model=DocumentRecord)
def create_folder(request: CreateFolderRequest):
    folder = documents_db.create_folder(request.user_id, request.name, request.parent_folder_id)
    documents_db.log_activity(folder["id"], request.user_id, "create_folder", {"name": request.name})
    return folder


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    user_id: str = Query(..., min_length=1),
    store: ChunkStore = Depends(get_store),
):
    """Delete a document, its stored object and its indexed chunks."""
    document = _owned_document(document_id, user_id)

    store.delete_document(document_id)
    if not document.get("is_folder") and document.get("storage_path"):
        documents_db.remove_file(document["storage_path"])
    documents_db.delete_document(document_id)
    return {"success": True, "document_id": document_id}


@router.post("/{document_id}/versions")
def create_version(document_id: str, request: CreateVersionRequest):
    _owned_document(document_id, request.user_id)
    version = documents_db.create_version(
        document_id,
        request.title,
        request.storage_path,
        request.size_bytes,
        request.mime_type,
        created_by=request.user_id,
    )
    documents_db.log_activity(document_id, request.user_id, "new_version", {"version": version["version"]})
    return version


@router.get("/{document_id}/activity")
def list_activity(
    document_id: str,
    user_id: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=200),
):
    _owned_document(document_id, user_id)
    return {"activity": documents_db.list_activity(document_id, limit)}


@router.post("/{document_id}/summary", response_model=SummaryResponse)
def summarize_document(document_id: str, provider_router: ProviderRouter = Depends(get_router)):
    """Generate the AI summary shown in the file list."""
    return SummaryResponse(summary=generate_document_summary(document_id, router=provider_router))
