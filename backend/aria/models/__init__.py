"""Data models for ARIA."""

from .schemas import (
    ChunkHit,
    ContractExtraction,
    Obligation,
    RevenueTerm,
    Source,
    SuggestedSchema,
    Verification,
)

__all__ = [
    "ChunkHit",
    "ContractExtraction",
    "Obligation",
    "RevenueTerm",
    "Source",
    "SuggestedSchema",
    "Verification",
]
