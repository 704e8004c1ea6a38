"""Question answering, chunk search and share-link endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from ..agents import run_query
from ..config import get_settings
from ..db import search as search_db
from ..llm import ProviderRouter
from ..logging import get_logger
from ..models.schemas import (
    EnhancedQueryRequest,
    EnhancedQueryResponse,
    PIIDetection,
    PIIDetectionResponse,
    QAShareRequest,
    QAShareResponse,
    QueryRequest,
    QueryResponse,
    RoomTokenRequest,
    RoomTokenResponse,
    SearchChunksRequest,
    SearchChunksResponse,
)
from ..privacy import detect_pii, detect_pii_with_model, summarize_detections
from ..retrieval import HybridRetriever
from ..sharing import create_qa_share, create_room_token, resolve_room_token
from .deps import get_retriever, get_router

logger = get_logger(__name__)
router = APIRouter(tags=["search"])


def _save_exchange(session_id: Optional[str], user_id: str, query: str, state: dict, metadata: dict) -> None:
    if not session_id:
        return
    search_db.save_exchange(
        session_id,
        user_id,
        query,
        state["answer"],
        [source.model_dump() for source in state["sources"]],
        metadata,
    )


@router.post("/query", response_model=QueryResponse)
def query(
    request: QueryRequest,
    retriever: HybridRetriever = Depends(get_retriever),
    provider_router: ProviderRouter = Depends(get_router),
):
    """Answer a question from the user's documents with numbered citations."""
    state = run_query(
        request.query,
        retriever,
        provider_router,
        owner_id=request.user_id,
        org_id=request.org_id,
        room_ids=request.room_ids,
        top_k=request.top_k,
        match_threshold=get_settings().query_match_threshold,
        verifier=request.verifier,
    )
    _save_exchange(
        request.session_id,
        request.user_id,
        request.query,
        state,
        {"chunks_found": len(state["hits"]), "provider": state.get("provider")},
    )
    return QueryResponse(
        answer=state["answer"],
        sources=state["sources"],
        chunks_found=len(state["hits"]),
        session_id=request.session_id,
        verification=state.get("verification"),
    )


@router.post("/enhanced-query")
def enhanced_query(
    request: EnhancedQueryRequest,
    retriever: HybridRetriever = Depends(get_retriever),
    provider_router: ProviderRouter = Depends(get_router),
):
    """
    Room-scoped query with share-token access and PII detection.

    A valid room token scopes the search to its room and may force
    answer-only mode. Token access searches the whole room rather than the
    caller's own documents and does not write to the session history.
    """
    if request.action == "detect_pii":
        detections = detect_pii(request.query) + detect_pii_with_model(request.query, router=provider_router)
        return PIIDetectionResponse(
            detections=[PIIDetection(**d) for d in detections],
            summary=summarize_detections(detections),
        )

    room_id = request.room_id
    answer_only = request.answer_only_mode
    owner_id: Optional[str] = request.user_id
    if request.token:
        access = resolve_room_token(request.token)
        room_id = access["room_id"]
        answer_only = answer_only or access["answer_only"]
        owner_id = None

    state = run_query(
        request.query,
        retriever,
        provider_router,
        owner_id=owner_id,
        org_id=request.org_id,
        room_ids=[room_id] if room_id else None,
        top_k=request.top_k,
        match_threshold=get_settings().enhanced_match_threshold,
        answer_only=answer_only,
    )

    processing_methods = sorted({hit.processing_method for hit in state["hits"] if hit.processing_method})
    search_metadata = {
        "room_id": room_id,
        "has_token": bool(request.token),
        "processing_methods": processing_methods,
    }
    if not request.token:
        _save_exchange(
            request.session_id,
            request.user_id,
            request.query,
            state,
            {"answer_only_mode": answer_only, "room_id": room_id, "chunks_found": len(state["hits"])},
        )

    return EnhancedQueryResponse(
        answer=state["answer"],
        sources=state["sources"],
        chunks_found=len(state["hits"]),
        session_id=request.session_id,
        answer_only_mode=answer_only,
        search_metadata=search_metadata,
    )


@router.post("/search-chunks", response_model=SearchChunksResponse)
def search_chunks(request: SearchChunksRequest, retriever: HybridRetriever = Depends(get_retriever)):
    hits = retriever.search_chunks(
        request.query_embedding,
        match_threshold=request.match_threshold,
        match_count=request.match_count,
        org_id=request.filter_org_id,
        room_ids=request.filter_room_ids or None,
        owner_id=request.filter_owner_id,
    )
    return SearchChunksResponse(results=hits)


@router.post("/room-token", response_model=RoomTokenResponse)
def room_token(request: RoomTokenRequest):
    result = create_room_token(
        request.room_id,
        request.user_id,
        expires_in_hours=request.expires_in_hours,
        permissions=request.permissions,
    )
    return RoomTokenResponse(**result)


@router.post("/qa-share", response_model=QAShareResponse)
def qa_share(request: QAShareRequest):
    result = create_qa_share(request.org_id, request.room_id, request.expires_in_hours)
    return QAShareResponse(**result)
