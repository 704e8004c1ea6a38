"""Agent nodes for the RAG workflow."""

from typing import Optional

from ..errors import AllProvidersFailed, ProviderError
from ..llm import ProviderRouter, alternative_provider
from ..logging import get_logger
from ..models import ChunkHit, Source, Verification
from ..retrieval import HybridRetriever
from .prompts import (
    ANSWER_ONLY_SYSTEM_PROMPT,
    ANSWER_PROMPT,
    APOLOGY_ANSWER,
    FULL_SYSTEM_PROMPT,
    VERIFICATION_PROMPT,
)

logger = get_logger(__name__)

ANSWER_CHAIN = ["anthropic", "openai", "google"]


def build_context(hits: list[ChunkHit]) -> str:
    """Number the retrieved chunks as ``[n] file (confidence: c): text``."""
    parts = []
    for i, hit in enumerate(hits):
        confidence = hit.confidence if hit.confidence is not None else "N/A"
        parts.append(
            f"[{i + 1}] {hit.file_name or 'Unknown'} (confidence: {confidence}): {hit.text_content}"
        )
    return "\n\n".join(parts)


def build_sources(hits: list[ChunkHit], answer_only: bool) -> list[Source]:
    """Turn retrieved chunks into numbered citations."""
    snippet_length = 200 if answer_only else 300
    return [
        Source(
            id=hit.id,
            title=hit.file_name or "Unknown Document",
            snippet=hit.text_content[:snippet_length] + "...",
            page=hit.source_page or hit.chunk_index + 1,
            document_id=hit.document_id,
            citation_number=i + 1,
            confidence=hit.confidence if hit.confidence is not None else hit.score,
            processing_method=hit.processing_method,
        )
        for i, hit in enumerate(hits)
    ]


def retrieve_documents(state: dict, retriever: HybridRetriever) -> dict:
    """
    Retrieve relevant chunks using hybrid search.

    Args:
        state: Current agent state.
        retriever: Hybrid retriever over the chunk collection.

    Returns:
        Updated state with retrieved hits.
    """
    hits = retriever.search(
        query=state["query"],
        owner_id=state.get("owner_id"),
        org_id=state.get("org_id"),
        room_ids=state.get("room_ids") or None,
        top_k=state.get("top_k", 10),
        match_threshold=state.get("match_threshold", 0.5),
        answer_only=state.get("answer_only", False),
        query_embedding=state.get("query_embedding"),
    )
    logger.info(f"Retrieved {len(hits)} chunks")

    return {
        **state,
        "hits": hits,
    }


def generate_response(state: dict, router: ProviderRouter) -> dict:
    """
    Generate a cited answer, falling back from Claude to GPT to Gemini.

    Args:
        state: Current agent state.
        router: Provider router.

    Returns:
        Updated state with answer, provider and sources.
    """
    answer_only = state.get("answer_only", False)
    hits = state.get("hits", [])
    system = ANSWER_ONLY_SYSTEM_PROMPT if answer_only else FULL_SYSTEM_PROMPT
    prompt = ANSWER_PROMPT.format(query=state["query"], context=build_context(hits))

    provider: Optional[str] = None
    try:
        completion = router.complete_with_fallback(
            ANSWER_CHAIN,
            prompt,
            system=system,
            max_tokens=800 if answer_only else 2000,
        )
        answer = completion.text
        provider = completion.provider
    except AllProvidersFailed as e:
        logger.error(f"Answer generation failed: {e}")
        answer = APOLOGY_ANSWER

    return {
        **state,
        "answer": answer,
        "provider": provider,
        "sources": build_sources(hits, answer_only),
    }


def verify_response(state: dict, router: ProviderRouter) -> dict:
    """
    Check the answer against its sources with a different model.

    Runs only when verification is requested, sources exist and an answer
    was generated.

    Args:
        state: Current agent state.
        router: Provider router.

    Returns:
        Updated state with verification results.
    """
    if not state.get("verifier") or not state.get("sources") or not state.get("provider"):
        return {**state, "verification": None}

    model = alternative_provider(state["provider"])
    prompt = VERIFICATION_PROMPT.format(
        answer=state["answer"],
        sources="\n".join(f"Doc: {s.snippet}" for s in state["sources"]),
    )
    try:
        verdict = router.complete(model, state["query"], system=prompt).text
        verification = Verification(
            model=model,
            supported="SUPPORTED" in verdict and "UNSUPPORTED" not in verdict,
            notes=verdict,
        )
    except ProviderError as e:
        logger.warning(f"Verification with {model} failed: {e}")
        verification = Verification(model=model, supported=None, notes=f"Verification failed: {e}")

    return {
        **state,
        "verification": verification,
    }
