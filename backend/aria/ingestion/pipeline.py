"""Document ingestion pipeline orchestration."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import Settings, get_settings
from ..db import documents as documents_db
from ..errors import ExtractionError
from ..logging import get_logger, log_with_context
from ..retrieval.store import ChunkRecord, ChunkStore
from .chunker import chunk_text
from .embedder import DocumentEmbedder
from .ocr import ExtractedPage, VisionTextExtractor
from .pdf_processor import PDFProcessor

logger = get_logger(__name__)

PLAIN_TEXT_EXTENSIONS = ("txt", "md", "markdown", "csv", "json")


def build_searchable_text(document: dict[str, Any]) -> str:
    """Describe a document's metadata as text for indexing."""
    file_type = document.get("file_type") or ""
    lines = [
        f"Document: {document.get('title') or document.get('file_name')}",
        f"Type: {file_type}",
        f"Category: {document.get('category') or 'general'}",
    ]

    details = []
    if file_type.startswith("image/"):
        details.append("This is an image file.")
        if document.get("width") and document.get("height"):
            details.append(f"Dimensions: {document['width']}x{document['height']} pixels.")
        if document.get("camera_make"):
            camera = f"{document['camera_make']} {document.get('camera_model') or ''}".strip()
            details.append(f"Captured with: {camera}.")
        if document.get("gps_lat") is not None and document.get("gps_lon") is not None:
            details.append(f"Location: {document['gps_lat']}, {document['gps_lon']}.")
    if document.get("tags"):
        details.append(f"Tags: {', '.join(document['tags'])}.")
    if details:
        lines.append(" ".join(details))

    created = document.get("created_at")
    if created:
        try:
            created = datetime.fromisoformat(str(created).replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            pass
        lines.append(f"Created: {created}")
    return "\n".join(lines)


class IngestionPipeline:
    """Turns stored documents into searchable chunks."""

    def __init__(
        self,
        store: Optional[ChunkStore] = None,
        embedder: Optional[DocumentEmbedder] = None,
        ocr: Optional[VisionTextExtractor] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store or ChunkStore(self.settings)
        self.embedder = embedder or DocumentEmbedder(self.settings)
        self.ocr = ocr or VisionTextExtractor()
        self.pdf_processor = PDFProcessor(dpi=150)
        self.store.ensure_collection()

    def _index_chunk(self, record_fields: dict[str, Any]) -> bool:
        """Embed and store one chunk. Failures are logged and reported as False."""
        try:
            vector = self.embedder.embed_texts([record_fields["text_content"]])[0]
            self.store.upsert_chunks([ChunkRecord(vector=vector, **record_fields)])
            return True
        except Exception as e:
            logger.error(f"Failed to index chunk {record_fields['chunk_id']}: {e}")
            return False

    async def _index_chunks(self, records: list[dict[str, Any]]) -> tuple[int, int]:
        results = await asyncio.gather(
            *(asyncio.to_thread(self._index_chunk, r) for r in records)
        )
        successful = sum(1 for ok in results if ok)
        return successful, len(results) - successful

    # process-documents

    async def _index_metadata(self, document: dict[str, Any]) -> None:
        text = build_searchable_text(document)
        chunks = chunk_text(
            text,
            self.settings.metadata_chunk_size,
            self.settings.metadata_chunk_overlap,
        )
        records = [
            {
                "chunk_id": f"{document['id']}_{index}",
                "document_id": document["id"],
                "owner_id": document["user_id"],
                "org_id": document.get("org_id") or "",
                "room_id": document.get("room_id"),
                "file_name": document.get("file_name", ""),
                "file_type": document.get("file_type", ""),
                "chunk_index": index,
                "source_page": 1,
                "text_content": chunk,
                "metadata": {
                    "chunk_size": len(chunk),
                    "category": document.get("category"),
                },
            }
            for index, chunk in enumerate(chunks)
        ]
        successful, failed = await self._index_chunks(records)
        log_with_context(
            logger, logging.INFO, "Indexed document metadata",
            document_id=document["id"], successful=successful, failed=failed,
        )

    async def process_user_documents(self, user_id: str) -> dict[str, int]:
        """
        Index metadata for all of a user's documents that have no chunks yet.

        Args:
            user_id: Owner whose documents are processed.

        Returns:
            Dict with total_documents, processed_documents and skipped_documents.
        """
        documents = await asyncio.to_thread(documents_db.list_user_files, user_id)
        indexed = await asyncio.to_thread(self.store.document_ids_with_chunks, user_id)
        pending = [d for d in documents if d["id"] not in indexed]
        logger.info(f"Processing {len(pending)} of {len(documents)} documents for user {user_id}")

        batch_size = self.settings.process_batch_size
        for start in range(0, len(pending), batch_size):
            batch = pending[start:start + batch_size]
            await asyncio.gather(*(self._index_metadata(d) for d in batch))
            logger.info(f"Processed batch: {start + len(batch)}/{len(pending)}")

        return {
            "total_documents": len(documents),
            "processed_documents": len(pending),
            "skipped_documents": len(documents) - len(pending),
        }

    # embed

    def extract_text(self, document: dict[str, Any], data: bytes) -> str:
        """
        Get the text of a stored file.

        Raises:
            ExtractionError: The file type has no text extraction.
        """
        file_type = document.get("file_type") or ""
        extension = document.get("file_name", "").rsplit(".", 1)[-1].lower()

        if file_type.startswith("text/") or extension in PLAIN_TEXT_EXTENSIONS:
            return data.decode("utf-8", errors="replace")
        if file_type == "application/pdf" or extension == "pdf":
            text = self.pdf_processor.extract_text(data)
            if text.strip():
                return text
            return self.ocr.extract(data, "application/pdf").text
        if file_type.startswith("image/"):
            return self.ocr.extract(data, file_type).text
        raise ExtractionError(f"No text extraction for {file_type or extension}")

    async def embed_document(
        self,
        document_id: str,
        org_id: Optional[str] = None,
        room_id: Optional[str] = None,
    ) -> dict[str, int]:
        """
        Chunk and embed the full text of a document.

        Returns:
            Dict with chunks_processed, chunks_failed and total_chunks.

        Raises:
            NotFoundError: The document does not exist.
            StorageError: The file could not be downloaded.
            ExtractionError: No text could be extracted.
        """
        document = await asyncio.to_thread(documents_db.get_document, document_id)
        data = await asyncio.to_thread(documents_db.download_file, document["storage_path"])
        text = await asyncio.to_thread(self.extract_text, document, data)

        chunks = chunk_text(text, self.settings.chunk_size, self.settings.chunk_overlap)
        logger.info(f"Generated {len(chunks)} chunks for document {document_id}")

        records = [
            {
                "chunk_id": f"{document_id}_{index}",
                "document_id": document_id,
                "owner_id": document["user_id"],
                "org_id": org_id or document.get("org_id") or "",
                "room_id": room_id or document.get("room_id"),
                "file_name": document.get("file_name", ""),
                "file_type": document.get("file_type", ""),
                "chunk_index": index,
                "source_page": 1,
                "text_content": chunk,
                "metadata": {"chunk_size": len(chunk)},
            }
            for index, chunk in enumerate(chunks)
        ]
        successful, failed = await self._index_chunks(records)

        summary = f"Processed {successful} chunks successfully"
        if failed:
            summary += f", {failed} failed"
        await asyncio.to_thread(
            documents_db.update_document,
            document_id,
            {
                "processing_status": "partial" if failed else "completed",
                "ai_summary": summary,
            },
        )
        return {
            "chunks_processed": successful,
            "chunks_failed": failed,
            "total_chunks": len(chunks),
        }

    # ocr-extract

    def extract_pages(self, document: dict[str, Any], data: bytes) -> list[ExtractedPage]:
        """
        Per-page text: the PDF text layer where present, OCR elsewhere.

        Raises:
            ExtractionError: OCR failed for a page without a text layer.
        """
        file_type = document.get("file_type") or ""
        if file_type != "application/pdf":
            return [self.ocr.extract(data, file_type or "image/jpeg")]

        pages = []
        for page in self.pdf_processor.extract_pages(data, render_textless=True):
            if page.text_content.strip():
                pages.append(
                    ExtractedPage(
                        page_number=page.page_number,
                        text=page.text_content,
                        confidence=0.95,
                        method="pymupdf",
                    )
                )
            elif page.png_bytes:
                pages.append(self.ocr.extract(page.png_bytes, "image/png", page.page_number))
        return pages

    async def ocr_extract(
        self,
        document_id: str,
        org_id: Optional[str] = None,
        room_id: Optional[str] = None,
    ) -> dict[str, int]:
        """
        Extract page text, store it per page and index it in blocks.

        Returns:
            Dict with pages_processed, chunks_processed, chunks_failed.
        """
        document = await asyncio.to_thread(documents_db.get_document, document_id)
        data = await asyncio.to_thread(documents_db.download_file, document["storage_path"])
        pages = await asyncio.to_thread(self.extract_pages, document, data)

        extracted_at = datetime.now(timezone.utc).isoformat()
        records = []
        for page in pages:
            await asyncio.to_thread(
                documents_db.insert_ocr_page,
                {
                    "document_id": document_id,
                    "page_number": page.page_number,
                    "raw_text": page.text,
                    "confidence": page.confidence,
                    "processing_method": page.method,
                    "metadata": {"extraction_timestamp": extracted_at},
                },
            )
            blocks = chunk_text(
                page.text,
                self.settings.ocr_block_size,
                self.settings.ocr_block_overlap,
            )
            for index, block in enumerate(blocks):
                records.append(
                    {
                        "chunk_id": f"{document_id}_{page.page_number}_{index}",
                        "document_id": document_id,
                        "owner_id": document["user_id"],
                        "org_id": org_id or document.get("org_id") or "",
                        "room_id": room_id or document.get("room_id"),
                        "file_name": document.get("file_name", ""),
                        "file_type": document.get("file_type", ""),
                        "chunk_index": index,
                        "source_page": page.page_number,
                        "text_content": block,
                        "confidence": page.confidence,
                        "processing_method": page.method,
                        "metadata": {"ocr_method": page.method},
                    }
                )

        successful, failed = await self._index_chunks(records)
        await asyncio.to_thread(
            documents_db.update_document,
            document_id,
            {
                "processing_status": "partial" if failed else "completed",
                "ai_summary": f"OCR completed: {successful} chunks processed, {failed} failed",
            },
        )
        logger.info(f"OCR processing for {document_id}: {successful} successful, {failed} failed")
        return {
            "pages_processed": len(pages),
            "chunks_processed": successful,
            "chunks_failed": failed,
        }
