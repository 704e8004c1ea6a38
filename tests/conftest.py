"""Pytest configuration and fixtures."""

import os
import threading

os.environ.setdefault("ENVIRONMENT", "test")
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
os.environ["ANTHROPIC_API_KEY"] = "test-anthropic-key"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["GOOGLE_API_KEY"] = "test-google-key"
os.environ["PERPLEXITY_API_KEY"] = "test-perplexity-key"
os.environ["QDRANT_LOCATION"] = ":memory:"
os.environ["EMBEDDING_DIM"] = "64"

import pytest
from qdrant_client import QdrantClient

from aria.config import get_settings
from aria.retrieval import ChunkStore
from tests.fakes.fake_llm import FakeEmbedder, FakeRouter
from tests.fakes.fake_supabase import FakeSupabase

DB_MODULES = ("documents", "search", "sharing", "contracts")


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_supabase(monkeypatch):
    """Route every db module to one in-memory Supabase."""
    db = FakeSupabase()
    for module in DB_MODULES:
        monkeypatch.setattr(f"aria.db.{module}.get_supabase", lambda: db)
    return db


@pytest.fixture
def store():
    chunk_store = ChunkStore(get_settings(), client=QdrantClient(":memory:"))
    chunk_store.ensure_collection()

    # The local client is not safe for concurrent writes
    lock = threading.Lock()
    upsert = chunk_store.upsert_chunks

    def locked_upsert(chunks):
        with lock:
            return upsert(chunks)

    chunk_store.upsert_chunks = locked_upsert
    return chunk_store


@pytest.fixture
def embedder():
    return FakeEmbedder(dimension=get_settings().embedding_dim)


@pytest.fixture
def fake_router():
    return FakeRouter()
