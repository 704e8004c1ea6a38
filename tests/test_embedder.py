"""Tests for embedding generation."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from aria.config import Settings
from aria.errors import EmbeddingError, ProviderNotConfigured
from aria.ingestion.embedder import DocumentEmbedder


def _openai_embedder(vectors, dim=8):
    embedder = DocumentEmbedder(Settings(embedding_dim=dim))
    client = MagicMock()
    client.embeddings.create.return_value = SimpleNamespace(
        data=[SimpleNamespace(index=i, embedding=v) for i, v in reversed(list(enumerate(vectors)))]
    )
    embedder._openai = client
    return embedder, client


def test_embed_texts_keeps_input_order():
    embedder, client = _openai_embedder([[1.0] * 8, [2.0] * 8])

    vectors = embedder.embed_texts(["first", "second"])

    assert vectors == [[1.0] * 8, [2.0] * 8]
    assert client.embeddings.create.call_args.kwargs["dimensions"] == 8


def test_embed_texts_empty_list():
    embedder, client = _openai_embedder([])
    assert embedder.embed_texts([]) == []
    client.embeddings.create.assert_not_called()


def test_blank_text_is_rejected():
    embedder, _ = _openai_embedder([[1.0] * 8])
    with pytest.raises(EmbeddingError):
        embedder.embed_texts(["   "])


def test_dimension_mismatch_raises():
    embedder, _ = _openai_embedder([[1.0] * 4])
    with pytest.raises(EmbeddingError, match="dimension"):
        embedder.embed_query("query")


def test_provider_failure_raises_instead_of_random_vectors():
    embedder, client = _openai_embedder([])
    client.embeddings.create.side_effect = RuntimeError("rate limited")
    with pytest.raises(EmbeddingError, match="rate limited"):
        embedder.embed_texts(["text"])


def test_missing_openai_key():
    embedder = DocumentEmbedder(Settings(openai_api_key=""))
    with pytest.raises(ProviderNotConfigured):
        embedder.embed_query("query")


def test_google_provider_uses_query_task_type():
    embedder = DocumentEmbedder(Settings(embedding_provider="google", embedding_dim=8))
    with patch("aria.ingestion.embedder.genai") as genai:
        genai.embed_content.return_value = {"embedding": [0.5] * 8}
        vector = embedder.embed_query("where is the invoice")

    assert vector == [0.5] * 8
    assert genai.embed_content.call_args.kwargs["task_type"] == "retrieval_query"


def test_unknown_provider():
    with pytest.raises(EmbeddingError):
        DocumentEmbedder(Settings(embedding_provider="cohere"))
