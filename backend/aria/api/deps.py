"""Shared service instances for route handlers.

Tests swap these out through ``app.dependency_overrides``.
"""

from functools import lru_cache

from ..ingestion import IngestionPipeline
from ..llm import ProviderRouter
from ..retrieval import ChunkStore, HybridRetriever


@lru_cache()
def get_router() -> ProviderRouter:
    return ProviderRouter()


@lru_cache()
def get_store() -> ChunkStore:
    store = ChunkStore()
    store.ensure_collection()
    return store


@lru_cache()
def get_retriever() -> HybridRetriever:
    return HybridRetriever(store=get_store())


@lru_cache()
def get_pipeline() -> IngestionPipeline:
    return IngestionPipeline(store=get_store())
