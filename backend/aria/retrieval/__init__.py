"""Retrieval over the document chunk collection."""

from .hybrid import HybridRetriever, build_filter
from .store import ChunkRecord, ChunkStore

__all__ = ["HybridRetriever", "build_filter", "ChunkRecord", "ChunkStore"]
