"""Short AI summaries for stored documents."""

from typing import Any, Optional

from ..config import get_settings
from ..db import documents as documents_db
from ..errors import ProviderError, StorageError
from ..llm import ProviderRouter
from ..logging import get_logger
from .pdf_processor import PDFProcessor

logger = get_logger(__name__)

TEXT_LIKE_TYPES = (
    "text/",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/json",
    "application/xml",
)

SUMMARY_SYSTEM_PROMPT = (
    "Generate a concise, 1-2 sentence summary of the document content. "
    "Focus on the main topic and purpose. Keep it under 100 characters when possible."
)


def is_text_like(file_type: str) -> bool:
    return any(t in (file_type or "") for t in TEXT_LIKE_TYPES)


def describe_file_type(file_type: str) -> str:
    """Human description of a MIME type."""
    file_type = file_type or ""
    if file_type.startswith("image/"):
        return "Image file"
    if file_type.startswith("video/"):
        return "Video file"
    if file_type.startswith("audio/"):
        return "Audio file"
    if "zip" in file_type or "rar" in file_type:
        return "Archive"
    if "pdf" in file_type:
        return "PDF document"
    if "word" in file_type:
        return "Word document"
    if "excel" in file_type or "spreadsheet" in file_type:
        return "Spreadsheet"
    if "powerpoint" in file_type or "presentation" in file_type:
        return "Presentation"
    return "Document"


def format_file_size(size: int) -> str:
    """Format a byte count with 1024 steps, e.g. ``1.5 KB``."""
    if not size:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def fallback_summary(document: dict[str, Any]) -> str:
    return f"{describe_file_type(document.get('file_type', ''))} ({format_file_size(document.get('file_size') or 0)})"


def _read_content(document: dict[str, Any]) -> str:
    file_type = document.get("file_type", "")
    try:
        data = documents_db.download_file(document["storage_path"])
    except StorageError as e:
        logger.warning(f"Could not read {document['id']} for summary: {e}")
        return f"Document: {document['file_name']}"

    if "pdf" in file_type:
        text = PDFProcessor().extract_text(data)
        return text or f"PDF document: {document['file_name']}"
    if "text" in file_type or "json" in file_type or "xml" in file_type:
        return data.decode("utf-8", errors="replace")
    return f"{describe_file_type(file_type)}: {document['file_name']}"


def generate_document_summary(
    document_id: str,
    router: Optional[ProviderRouter] = None,
) -> Optional[str]:
    """
    Generate and store a 1-2 sentence summary for a document.

    Args:
        document_id: Document to summarise.
        router: Provider router (created when omitted).

    Returns:
        The stored summary, or None for folders and non-text files.

    Raises:
        NotFoundError: The document does not exist.
    """
    settings = get_settings()
    document = documents_db.get_document(document_id)

    if document.get("is_folder") or not is_text_like(document.get("file_type", "")):
        return None

    content = _read_content(document)
    if len(content) > settings.summary_max_chars:
        content = content[: settings.summary_max_chars] + "..."

    router = router or ProviderRouter()
    try:
        completion = router.complete(
            "openai",
            f"File: {document['file_name']}\nType: {document['file_type']}\nContent: {content}",
            system=SUMMARY_SYSTEM_PROMPT,
            max_tokens=100,
            temperature=0.3,
            model=settings.summary_model,
        )
        summary = completion.text.strip()
    except ProviderError as e:
        logger.warning(f"Summary model failed for {document_id}, using fallback: {e}")
        summary = fallback_summary(document)

    documents_db.update_document(document_id, {"ai_summary": summary})
    return summary
