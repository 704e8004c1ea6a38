"""Hybrid retrieval combining semantic and keyword search."""

from typing import Any, Optional

from qdrant_client.models import FieldCondition, Filter, MatchAny, MatchValue

from ..config import get_settings
from ..ingestion.embedder import DocumentEmbedder
from ..logging import get_logger
from ..models import ChunkHit
from .store import ChunkStore

logger = get_logger(__name__)

KEYWORD_SCORE = 0.7
ANSWER_ONLY_TEXT_LIMIT = 1000


def build_filter(
    owner_id: Optional[str] = None,
    org_id: Optional[str] = None,
    room_ids: Optional[list[str]] = None,
) -> Optional[Filter]:
    """Payload filter for the caller's visible chunks."""
    conditions = []
    if owner_id:
        conditions.append(FieldCondition(key="owner_id", match=MatchValue(value=owner_id)))
    if org_id:
        conditions.append(FieldCondition(key="org_id", match=MatchValue(value=org_id)))
    if room_ids:
        conditions.append(FieldCondition(key="room_id", match=MatchAny(any=room_ids)))
    return Filter(must=conditions) if conditions else None


def _to_hit(payload: dict[str, Any], score: float, score_type: str) -> ChunkHit:
    return ChunkHit(
        id=payload.get("chunk_id", ""),
        document_id=payload.get("document_id", ""),
        file_name=payload.get("file_name", ""),
        file_type=payload.get("file_type", ""),
        text_content=payload.get("text_content", ""),
        chunk_index=payload.get("chunk_index", 0),
        source_page=payload.get("source_page"),
        confidence=payload.get("confidence"),
        processing_method=payload.get("processing_method"),
        org_id=payload.get("org_id"),
        room_id=payload.get("room_id"),
        score=score,
        score_type=score_type,
    )


def restrict_for_answer_only(hit: ChunkHit) -> ChunkHit:
    """Shorten text and drop scoping fields for answer-only access."""
    return ChunkHit(
        id=hit.id,
        document_id=hit.document_id,
        file_name=hit.file_name,
        file_type=hit.file_type,
        text_content=hit.text_content[:ANSWER_ONLY_TEXT_LIMIT],
        chunk_index=hit.chunk_index,
        source_page=hit.source_page,
        score=hit.score,
        score_type=hit.score_type,
    )


class HybridRetriever:
    """Combines semantic vector search with keyword matching."""

    def __init__(
        self,
        store: Optional[ChunkStore] = None,
        embedder: Optional[DocumentEmbedder] = None,
    ):
        self.settings = get_settings()
        self.store = store or ChunkStore(self.settings)
        self.embedder = embedder or DocumentEmbedder(self.settings)

    def search_chunks(
        self,
        query_embedding: list[float],
        match_threshold: float = 0.5,
        match_count: int = 10,
        org_id: Optional[str] = None,
        room_ids: Optional[list[str]] = None,
        owner_id: Optional[str] = None,
    ) -> list[ChunkHit]:
        """
        Raw vector search by embedding.

        Args:
            query_embedding: Query vector.
            match_threshold: Minimum cosine similarity.
            match_count: Maximum results.
            org_id: Restrict to an organisation.
            room_ids: Restrict to any of these rooms.
            owner_id: Restrict to a document owner.

        Returns:
            Hits ordered by similarity.
        """
        points = self.store.vector_search(
            query_embedding,
            build_filter(owner_id, org_id, room_ids),
            limit=match_count,
            score_threshold=match_threshold,
        )
        return [_to_hit(p.payload or {}, p.score, "vector") for p in points]

    def search(
        self,
        query: str,
        owner_id: Optional[str] = None,
        org_id: Optional[str] = None,
        room_ids: Optional[list[str]] = None,
        top_k: int = 10,
        match_threshold: float = 0.5,
        answer_only: bool = False,
        query_embedding: Optional[list[float]] = None,
    ) -> list[ChunkHit]:
        """
        Perform hybrid search across the caller's chunks.

        Vector hits keep their similarity. Keyword hits that vector search did
        not already return score 0.7.

        Args:
            query: Natural language query.
            owner_id: Restrict to a document owner.
            org_id: Restrict to an organisation.
            room_ids: Restrict to any of these rooms.
            top_k: Maximum results to return.
            match_threshold: Minimum similarity for vector hits.
            answer_only: Truncate text and strip scoping fields.
            query_embedding: Precomputed query vector.

        Returns:
            List of hits ranked by score.
        """
        if query_embedding is None:
            query_embedding = self.embedder.embed_query(query)

        search_filter = build_filter(owner_id, org_id, room_ids)
        vector_hits = [
            _to_hit(p.payload or {}, p.score, "vector")
            for p in self.store.vector_search(
                query_embedding,
                search_filter,
                limit=top_k,
                score_threshold=match_threshold,
            )
        ]

        seen = {hit.id for hit in vector_hits}
        keyword_hits = []
        for record in self.store.keyword_search(query, search_filter, limit=top_k):
            payload = record.payload or {}
            if payload.get("chunk_id") in seen:
                continue
            seen.add(payload.get("chunk_id"))
            keyword_hits.append(_to_hit(payload, KEYWORD_SCORE, "text"))

        combined = sorted(vector_hits + keyword_hits, key=lambda h: h.score, reverse=True)[:top_k]
        logger.debug(
            f"Hybrid search: {len(vector_hits)} vector, {len(keyword_hits)} keyword, "
            f"{len(combined)} returned"
        )

        if answer_only:
            return [restrict_for_answer_only(hit) for hit in combined]
        return combined
