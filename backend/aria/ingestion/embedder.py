"""Embedding generation for document chunks and queries."""

from typing import Optional

import google.generativeai as genai
from openai import OpenAI

from ..config import Settings, get_settings
from ..errors import EmbeddingError, ProviderNotConfigured
from ..logging import get_logger

logger = get_logger(__name__)

EMBEDDING_PROVIDERS = ("openai", "google")


class DocumentEmbedder:
    """Generates fixed-dimension embeddings with OpenAI or Gemini."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.provider = self.settings.embedding_provider
        self.dimension = self.settings.embedding_dim
        if self.provider not in EMBEDDING_PROVIDERS:
            raise EmbeddingError(f"Unknown embedding provider: {self.provider}")
        self._openai: Optional[OpenAI] = None

    def _openai_client(self) -> OpenAI:
        if self._openai is None:
            if not self.settings.openai_api_key:
                raise ProviderNotConfigured("openai")
            self._openai = OpenAI(api_key=self.settings.openai_api_key)
        return self._openai

    def _check(self, vectors: list[list[float]]) -> list[list[float]]:
        for vector in vectors:
            if len(vector) != self.dimension:
                raise EmbeddingError(
                    f"Embedding dimension mismatch: expected {self.dimension}, got {len(vector)}"
                )
        return vectors

    def _embed_openai(self, texts: list[str]) -> list[list[float]]:
        response = self._openai_client().embeddings.create(
            model=self.settings.embedding_model,
            input=texts,
            dimensions=self.dimension,
        )
        return [item.embedding for item in sorted(response.data, key=lambda d: d.index)]

    def _embed_google(self, texts: list[str], task_type: str) -> list[list[float]]:
        if not self.settings.google_api_key:
            raise ProviderNotConfigured("google")
        genai.configure(api_key=self.settings.google_api_key)

        vectors = []
        for text in texts:
            result = genai.embed_content(
                model=self.settings.gemini_embedding_model,
                content=text,
                task_type=task_type,
                output_dimensionality=self.dimension,
            )
            vectors.append(result["embedding"])
        return vectors

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """
        Embed document text.

        Args:
            texts: Non-empty strings to embed.

        Returns:
            One vector per input, in input order.

        Raises:
            EmbeddingError: The provider failed or returned a wrong dimension.
        """
        if not texts:
            return []
        if any(not t.strip() for t in texts):
            raise EmbeddingError("Cannot embed empty text")

        try:
            if self.provider == "openai":
                vectors = self._embed_openai(texts)
            else:
                vectors = self._embed_google(texts, "retrieval_document")
        except (EmbeddingError, ProviderNotConfigured):
            raise
        except Exception as e:
            raise EmbeddingError(f"{self.provider} embedding failed: {e}") from e

        if len(vectors) != len(texts):
            raise EmbeddingError(f"Expected {len(texts)} embeddings, got {len(vectors)}")
        logger.debug(f"Embedded {len(texts)} texts with {self.provider}")
        return self._check(vectors)

    def embed_query(self, query: str) -> list[float]:
        """Embed a search query."""
        if not query.strip():
            raise EmbeddingError("Cannot embed empty query")

        try:
            if self.provider == "openai":
                vectors = self._embed_openai([query])
            else:
                vectors = self._embed_google([query], "retrieval_query")
        except (EmbeddingError, ProviderNotConfigured):
            raise
        except Exception as e:
            raise EmbeddingError(f"{self.provider} embedding failed: {e}") from e

        return self._check(vectors)[0]
