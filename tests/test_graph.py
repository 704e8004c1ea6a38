"""Tests for the retrieve -> generate -> verify workflow."""

from unittest.mock import MagicMock

from aria.agents import run_query
from aria.agents.nodes import build_context, build_sources
from aria.agents.prompts import APOLOGY_ANSWER
from aria.models import ChunkHit
from tests.fakes.fake_llm import FakeRouter


def _hit(i, text="Payment is due within 30 days.", **fields):
    return ChunkHit(
        id=f"doc-{i}_0",
        document_id=f"doc-{i}",
        file_name=f"contract-{i}.pdf",
        file_type="application/pdf",
        text_content=text,
        chunk_index=fields.pop("chunk_index", 0),
        score=fields.pop("score", 0.8),
        **fields,
    )


def _retriever(hits):
    retriever = MagicMock()
    retriever.search.return_value = hits
    return retriever


def test_context_numbers_sources():
    context = build_context([_hit(1, confidence=0.9), _hit(2)])
    assert context.startswith("[1] contract-1.pdf (confidence: 0.9): Payment")
    assert "[2] contract-2.pdf (confidence: N/A)" in context


def test_sources_snippet_length_and_page():
    hits = [_hit(1, text="x" * 500, chunk_index=4), _hit(2, source_page=7, confidence=0.88)]

    full = build_sources(hits, answer_only=False)
    short = build_sources(hits, answer_only=True)

    assert full[0].snippet == "x" * 300 + "..."
    assert short[0].snippet == "x" * 200 + "..."
    assert full[0].page == 5
    assert full[1].page == 7
    assert full[0].confidence == 0.8
    assert full[1].confidence == 0.88
    assert [s.citation_number for s in full] == [1, 2]


def test_answer_uses_first_available_provider():
    router = FakeRouter({"anthropic": "Payment is due in 30 days [1]."})
    retriever = _retriever([_hit(1)])

    state = run_query("When is payment due?", retriever, router, owner_id="user-1", top_k=5)

    assert state["answer"] == "Payment is due in 30 days [1]."
    assert state["provider"] == "anthropic"
    assert state["verification"] is None
    assert len(state["sources"]) == 1
    assert retriever.search.call_args.kwargs["owner_id"] == "user-1"
    assert retriever.search.call_args.kwargs["top_k"] == 5
    assert router.calls[0]["max_tokens"] == 2000


def test_answer_falls_back_to_gemini():
    router = FakeRouter({"google": "Gemini answer"})

    state = run_query("question", _retriever([_hit(1)]), router)

    assert router.providers_called() == ["anthropic", "openai", "google"]
    assert state["provider"] == "google"


def test_all_providers_failing_returns_apology():
    state = run_query("question", _retriever([_hit(1)]), FakeRouter())

    assert state["answer"] == APOLOGY_ANSWER
    assert state["provider"] is None
    assert len(state["sources"]) == 1


def test_answer_only_mode_uses_short_answers():
    router = FakeRouter({"anthropic": "Short answer"})

    run_query("question", _retriever([_hit(1)]), router, answer_only=True)

    assert router.calls[0]["max_tokens"] == 800


def test_verifier_uses_alternative_model():
    router = FakeRouter({"anthropic": "Answer [1]", "openai": "SUPPORTED: every claim is cited"})

    state = run_query("question", _retriever([_hit(1)]), router, verifier=True)

    verification = state["verification"]
    assert verification.model == "openai"
    assert verification.supported is True
    assert "Doc: Payment" in router.calls[-1]["system"]


def test_unsupported_verdict():
    router = FakeRouter({"anthropic": "Answer", "openai": "UNSUPPORTED: claim 2 has no source"})

    state = run_query("question", _retriever([_hit(1)]), router, verifier=True)

    assert state["verification"].supported is False


def test_failing_verifier_is_recorded():
    router = FakeRouter({"anthropic": "Answer"})

    state = run_query("question", _retriever([_hit(1)]), router, verifier=True)

    assert state["verification"].supported is None
    assert state["verification"].notes.startswith("Verification failed")


def test_verifier_skipped_without_sources():
    router = FakeRouter({"anthropic": "I could not find anything."})

    state = run_query("question", _retriever([]), router, verifier=True)

    assert state["verification"] is None
    assert router.providers_called() == ["anthropic"]
