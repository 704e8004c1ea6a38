"""Indexing endpoints: metadata processing, full-text embedding and OCR."""

from fastapi import APIRouter, Depends

from ..ingestion import IngestionPipeline
from ..models.schemas import (
    EmbedRequest,
    EmbedResponse,
    OcrResponse,
    ProcessDocumentsRequest,
    ProcessDocumentsResponse,
)
from .deps import get_pipeline

router = APIRouter(tags=["ingestion"])


@router.post("/process-documents", response_model=ProcessDocumentsResponse)
async def process_documents(
    request: ProcessDocumentsRequest,
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    """Index metadata for every document of a user that has no chunks yet."""
    result = await pipeline.process_user_documents(request.user_id)
    return ProcessDocumentsResponse(**result)


@router.post("/embed", response_model=EmbedResponse)
async def embed_document(
    request: EmbedRequest,
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    result = await pipeline.embed_document(request.document_id, request.org_id, request.room_id)
    return EmbedResponse(**result)


@router.post("/ocr-extract", response_model=OcrResponse)
async def ocr_extract(
    request: EmbedRequest,
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    """Extract text page by page and index it with page-level provenance."""
    result = await pipeline.ocr_extract(request.document_id, request.org_id, request.room_id)
    return OcrResponse(**result)
