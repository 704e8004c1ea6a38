"""Tests for the answer, web, chat and code assistants."""

import json

import pytest

from aria.assistant import answer_question, chat, generate_code, perplexity_search, web_answer
from aria.assistant.answer import build_system_prompt
from aria.assistant.codegen import parse_code_output
from aria.errors import ProviderError, UnsupportedProvider, ValidationError
from aria.models.schemas import (
    AnswerRequest,
    ChatDocument,
    ChatRequest,
    CodeRequest,
    DocCitation,
    PerplexitySearchRequest,
    WebResult,
)
from tests.fakes.fake_llm import FakeRouter

CITATIONS = [DocCitation(title="MSA.pdf", snippet="Payment is due in 30 days.", page=4)]
WEB_RESULTS = [WebResult(title="example.com", url="https://example.com/terms", snippet="Net 30 is common.")]


# Answer fusion


def test_docs_mode_uses_citations_only():
    system, citations, web_results = build_system_prompt("docs", CITATIONS, WEB_RESULTS)
    assert "[1] Payment is due in 30 days. (Source: MSA.pdf, Page: 4)" in system
    assert citations == CITATIONS
    assert web_results == []


def test_hybrid_mode_prefixes_sources():
    system, citations, web_results = build_system_prompt("hybrid", CITATIONS, WEB_RESULTS)
    assert "Doc [1] Payment is due in 30 days." in system
    assert "Web [1] Net 30 is common. (Source: example.com - https://example.com/terms)" in system
    assert len(citations) == len(web_results) == 1


def test_unknown_mode():
    with pytest.raises(ValidationError):
        answer_question(AnswerRequest(question="q", mode="psychic"), FakeRouter())


def test_answer_with_chosen_model():
    router = FakeRouter({"openai": "Payment is due in 30 days [1]."})
    request = AnswerRequest(question="When is payment due?", model="openai", doc_citations=CITATIONS,
                            web_results=WEB_RESULTS)

    response = answer_question(request, router)

    assert response.answer == "Payment is due in 30 days [1]."
    assert response.web_results == []
    assert response.search_results_count == 1
    assert response.verification is None
    assert "MSA.pdf" in router.calls[0]["system"]


def test_unknown_model():
    with pytest.raises(UnsupportedProvider):
        answer_question(AnswerRequest(question="q", model="llama"), FakeRouter())


def test_perplexity_only_answers_web_mode():
    with pytest.raises(ValidationError):
        answer_question(AnswerRequest(question="q", model="perplexity", mode="docs"), FakeRouter())

    router = FakeRouter({"perplexity": "Net 30 is standard."})
    response = answer_question(
        AnswerRequest(question="q", model="perplexity", mode="web", web_results=WEB_RESULTS), router
    )
    assert response.answer == "Net 30 is standard."
    assert response.search_results_count == 1


def test_verifier_uses_another_model():
    router = FakeRouter({"anthropic": "Payment is due in 30 days.", "openai": "SUPPORTED: matches Doc 1"})
    request = AnswerRequest(question="q", mode="hybrid", doc_citations=CITATIONS, web_results=WEB_RESULTS,
                            verifier=True)

    response = answer_question(request, router)

    assert response.verification.model == "openai"
    assert response.verification.supported is True
    verifier_system = router.calls[1]["system"]
    assert "Doc: Payment is due in 30 days." in verifier_system
    assert "Web: Net 30 is common." in verifier_system


def test_verifier_failure_is_reported():
    router = FakeRouter({"openai": "answer", "anthropic": ProviderError("anthropic", "down")})
    request = AnswerRequest(question="q", model="openai", doc_citations=CITATIONS, verifier=True)

    verification = answer_question(request, router).verification

    assert verification.model == "anthropic"
    assert verification.supported is None
    assert verification.notes.startswith("Verification failed")


# Web


def test_web_answer_lists_cited_urls():
    router = FakeRouter(
        web={
            "content": "Net 30 is the most common term [1][2].",
            "citations": ["https://www.investopedia.com/net-30", {"url": "https://example.com/a"}],
            "related_questions": [],
            "images": [],
            "usage": None,
        }
    )

    response = web_answer("What is net 30?", router)

    assert response.answer.startswith("Net 30")
    assert [r.title for r in response.web_results] == ["www.investopedia.com", "example.com"]
    assert response.web_results[1].snippet == "Source [2] cited in the answer"
    assert response.search_results_count == 2


def test_web_answer_caps_results():
    citations = [f"https://site{i}.example" for i in range(8)]
    router = FakeRouter(web={"content": "", "citations": citations, "related_questions": [], "images": [],
                             "usage": None})

    response = web_answer("q", router)

    assert len(response.web_results) == 5
    assert response.answer == "No response from Perplexity"


def test_perplexity_search_passes_options():
    router = FakeRouter(
        web={
            "content": "Rates rose.",
            "citations": ["https://news.example/rates"],
            "related_questions": ["Why did rates rise?"],
            "images": [],
            "usage": {"total_tokens": 120},
        }
    )
    request = PerplexitySearchRequest(query="rates", recency_filter="week", search_domain="news.example")

    response = perplexity_search(request, router)

    assert response.citations == ["https://news.example/rates"]
    assert response.related_questions == ["Why did rates rise?"]
    assert response.usage == {"total_tokens": 120}
    (call,) = router.web_calls
    assert call["recency_filter"] == "week"
    assert call["domain"] == "news.example"
    assert call["related_questions"] is True


# Chat


def test_chat_uses_given_documents():
    router = FakeRouter({"google": "Hello, I'm ARIA."})
    request = ChatRequest(message="hi", documents=[ChatDocument(name="MSA.pdf", summary="Master agreement")])

    response = chat(request, router)

    assert response.response == "Hello, I'm ARIA."
    assert "- MSA.pdf: Master agreement" in router.calls[0]["system"]
    assert router.calls[0]["temperature"] == 0.7


def test_chat_loads_user_summaries(fake_supabase):
    fake_supabase.seed(
        "documents",
        {"user_id": "user-1", "file_name": "notes.txt", "ai_summary": None, "is_folder": False},
    )
    router = FakeRouter({"google": "ok"})

    chat(ChatRequest(message="what do I have?", user_id="user-1"), router)

    assert "- notes.txt: No summary available" in router.calls[0]["system"]


# Code


def test_structured_code_output():
    reply = json.dumps(
        {"files": [{"path": "app.py", "content": "print('hi')"}], "commands": ["python app.py"], "tests": None}
    )
    router = FakeRouter({"anthropic": reply})

    response = generate_code(CodeRequest(instruction="hello world", language="python"), router)

    assert response.code_output.files[0].path == "app.py"
    assert response.code_output.commands == ["python app.py"]
    assert response.model == "anthropic-test"
    assert "(python)" in router.calls[0]["system"]


def test_unstructured_code_output_becomes_a_file():
    output = parse_code_output("def add(a, b):\n    return a + b")
    assert output.files[0].path == "generated.txt"
    assert output.files[0].content.startswith("def add")
    assert parse_code_output('{"files": []}').files[0].path == "generated.txt"


def test_code_rejects_search_model():
    with pytest.raises(UnsupportedProvider):
        generate_code(CodeRequest(instruction="x", model="perplexity"), FakeRouter())
