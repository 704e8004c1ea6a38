"""Configuration management for ARIA."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "dev"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    storage_bucket: str = "docs"

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    google_api_key: str = ""
    perplexity_api_key: str = ""

    # Qdrant Configuration
    qdrant_host: str = "localhost"
    qdrant_port: int = 6333
    qdrant_location: str = ""  # ":memory:" for local runs and tests
    qdrant_collection_name: str = "aria_document_chunks"

    # Model Configuration
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    openai_model: str = "gpt-5-2025-08-07"
    openai_fallback_model: str = "gpt-4o"
    gemini_model: str = "gemini-1.5-pro"
    perplexity_model: str = "llama-3.1-sonar-large-128k-online"
    perplexity_base_url: str = "https://api.perplexity.ai"
    summary_model: str = "gpt-4o-mini"
    contract_model: str = "gpt-4o"

    # Embeddings
    embedding_provider: str = "openai"  # openai | google
    embedding_model: str = "text-embedding-3-large"
    gemini_embedding_model: str = "models/text-embedding-004"
    embedding_dim: int = 1536

    # Processing Configuration
    chunk_size: int = 1000
    chunk_overlap: int = 200
    metadata_chunk_size: int = 500
    metadata_chunk_overlap: int = 50
    ocr_block_size: int = 500
    ocr_block_overlap: int = 50
    process_batch_size: int = 5
    summary_max_chars: int = 4000

    # Retrieval
    query_match_threshold: float = 0.5
    enhanced_match_threshold: float = 0.3
    search_top_k: int = 10

    # HTTP
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    public_base_url: str = "http://localhost:5173"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
