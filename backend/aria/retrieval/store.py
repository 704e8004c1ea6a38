"""Qdrant collection holding embedded document chunks."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    MatchText,
    MatchValue,
    PayloadSchemaType,
    PointStruct,
    ScoredPoint,
    Record,
    TextIndexParams,
    TextIndexType,
    TokenizerType,
    VectorParams,
)

from ..config import Settings, get_settings
from ..logging import get_logger

logger = get_logger(__name__)

KEYWORD_FIELDS = ("document_id", "owner_id", "org_id", "room_id")


def point_id(chunk_id: str) -> str:
    """Stable Qdrant point id for a chunk id."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"aria-chunk:{chunk_id}"))


@dataclass
class ChunkRecord:
    """A chunk ready to be stored, with its embedding."""
    chunk_id: str
    document_id: str
    owner_id: str
    text_content: str
    vector: list[float]
    chunk_index: int = 0
    source_page: int = 1
    org_id: str = ""
    room_id: Optional[str] = None
    file_name: str = ""
    file_type: str = ""
    confidence: Optional[float] = None
    processing_method: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        return {
            "chunk_id": self.chunk_id,
            "document_id": self.document_id,
            "owner_id": self.owner_id,
            "org_id": self.org_id,
            "room_id": self.room_id,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "chunk_index": self.chunk_index,
            "source_page": self.source_page,
            "text_content": self.text_content,
            "confidence": self.confidence,
            "processing_method": self.processing_method,
            "metadata": self.metadata,
        }


class ChunkStore:
    """Thin wrapper over the chunk collection."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[QdrantClient] = None,
    ):
        self.settings = settings or get_settings()
        self.collection = self.settings.qdrant_collection_name
        if client is not None:
            self.qdrant = client
        elif self.settings.qdrant_location:
            self.qdrant = QdrantClient(location=self.settings.qdrant_location)
        else:
            self.qdrant = QdrantClient(
                host=self.settings.qdrant_host,
                port=self.settings.qdrant_port,
            )

    def ensure_collection(self) -> None:
        """Create the collection and its payload indexes if missing."""
        if self.qdrant.collection_exists(self.collection):
            return

        self.qdrant.create_collection(
            collection_name=self.collection,
            vectors_config=VectorParams(
                size=self.settings.embedding_dim,
                distance=Distance.COSINE,
            ),
        )

        # Payload indexes for filtering by owner and sharing scope
        for field_name in KEYWORD_FIELDS:
            self.qdrant.create_payload_index(
                collection_name=self.collection,
                field_name=field_name,
                field_schema=PayloadSchemaType.KEYWORD,
            )
        self.qdrant.create_payload_index(
            collection_name=self.collection,
            field_name="text_content",
            field_schema=TextIndexParams(
                type=TextIndexType.TEXT,
                tokenizer=TokenizerType.WORD,
                lowercase=True,
            ),
        )
        logger.info(f"Created collection {self.collection} ({self.settings.embedding_dim} dims)")

    def upsert_chunks(self, chunks: list[ChunkRecord]) -> int:
        """Store chunks, replacing any with the same chunk id."""
        if not chunks:
            return 0
        points = [
            PointStruct(id=point_id(c.chunk_id), vector=c.vector, payload=c.payload())
            for c in chunks
        ]
        self.qdrant.upsert(collection_name=self.collection, points=points)
        return len(points)

    def document_ids_with_chunks(self, owner_id: str) -> set[str]:
        """Ids of the owner's documents that already have stored chunks."""
        document_ids: set[str] = set()
        offset = None
        while True:
            records, offset = self.qdrant.scroll(
                collection_name=self.collection,
                scroll_filter=Filter(
                    must=[FieldCondition(key="owner_id", match=MatchValue(value=owner_id))]
                ),
                limit=256,
                offset=offset,
                with_payload=["document_id"],
                with_vectors=False,
            )
            document_ids.update(r.payload["document_id"] for r in records)
            if offset is None:
                return document_ids

    def delete_document(self, document_id: str) -> None:
        self.qdrant.delete(
            collection_name=self.collection,
            points_selector=FilterSelector(filter=self._document_filter(document_id)),
        )
        logger.info(f"Deleted chunks for document {document_id}")

    def count_for_document(self, document_id: str) -> int:
        result = self.qdrant.count(
            collection_name=self.collection,
            count_filter=self._document_filter(document_id),
            exact=True,
        )
        return result.count

    def vector_search(
        self,
        vector: list[float],
        query_filter: Optional[Filter],
        limit: int,
        score_threshold: Optional[float] = None,
    ) -> list[ScoredPoint]:
        response = self.qdrant.query_points(
            collection_name=self.collection,
            query=vector,
            query_filter=query_filter,
            limit=limit,
            score_threshold=score_threshold,
            with_payload=True,
        )
        return response.points

    def keyword_search(
        self,
        text: str,
        query_filter: Optional[Filter],
        limit: int,
    ) -> list[Record]:
        """Chunks whose text matches the full-text query."""
        conditions = [FieldCondition(key="text_content", match=MatchText(text=text))]
        if query_filter is not None:
            conditions.append(query_filter)
        records, _ = self.qdrant.scroll(
            collection_name=self.collection,
            scroll_filter=Filter(must=conditions),
            limit=limit,
            with_payload=True,
            with_vectors=False,
        )
        return records

    @staticmethod
    def _document_filter(document_id: str) -> Filter:
        return Filter(must=[FieldCondition(key="document_id", match=MatchValue(value=document_id))])
