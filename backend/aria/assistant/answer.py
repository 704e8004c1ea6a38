"""Answer fusion over document citations and web results."""

from typing import Optional

from ..agents.prompts import VERIFICATION_PROMPT
from ..errors import ProviderError, UnsupportedProvider, ValidationError
from ..llm import ProviderRouter, alternative_provider
from ..logging import get_logger
from ..models import Verification
from ..models.schemas import AnswerRequest, AnswerResponse, DocCitation, WebResult
from .prompts import DOCS_PROMPT, HYBRID_PROMPT, WEB_PROMPT, WEB_SEARCH_SYSTEM_PROMPT

logger = get_logger(__name__)

MODES = ("docs", "web", "hybrid")
ANSWER_MODELS = ("anthropic", "openai", "google", "perplexity")


def _passages(citations: list[DocCitation], prefix: str = "") -> str:
    return "\n\n".join(
        f"{prefix}[{i + 1}] {c.snippet} (Source: {c.title}, Page: {c.page or 'N/A'})"
        for i, c in enumerate(citations)
    )


def _web_sources(results: list[WebResult], prefix: str = "") -> str:
    return "\n\n".join(
        f"{prefix}[{i + 1}] {r.snippet} (Source: {r.title} - {r.url})" for i, r in enumerate(results)
    )


def build_system_prompt(
    mode: str,
    citations: list[DocCitation],
    web_results: list[WebResult],
) -> tuple[str, list[DocCitation], list[WebResult]]:
    """
    System prompt for a mode plus the citations and web results it uses.

    Raises:
        ValidationError: Unknown mode.
    """
    if mode == "docs":
        return DOCS_PROMPT.format(passages=_passages(citations)), citations, []
    if mode == "web":
        return WEB_PROMPT.format(sources=_web_sources(web_results)), [], web_results
    if mode == "hybrid":
        prompt = HYBRID_PROMPT.format(
            passages=_passages(citations, "Doc "),
            sources=_web_sources(web_results, "Web "),
        )
        return prompt, citations, web_results
    raise ValidationError(f"Unsupported mode: {mode}")


def _verify(
    router: ProviderRouter,
    model: str,
    question: str,
    answer: str,
    citations: list[DocCitation],
    web_results: list[WebResult],
) -> Verification:
    verifier = alternative_provider(model)
    sources = [f"Doc: {c.snippet}" for c in citations] + [f"Web: {r.snippet}" for r in web_results]
    prompt = VERIFICATION_PROMPT.format(answer=answer, sources="\n".join(sources))
    try:
        verdict = router.complete(verifier, question, system=prompt).text
    except ProviderError as e:
        logger.warning(f"Verification with {verifier} failed: {e}")
        return Verification(model=verifier, supported=None, notes=f"Verification failed: {e}")
    return Verification(
        model=verifier,
        supported="SUPPORTED" in verdict and "UNSUPPORTED" not in verdict,
        notes=verdict,
    )


def answer_question(request: AnswerRequest, router: Optional[ProviderRouter] = None) -> AnswerResponse:
    """
    Answer with the chosen model, grounded in the supplied citations.

    Perplexity answers directly from the web and only in ``web`` mode.

    Raises:
        ValidationError: Unknown mode, or Perplexity outside web mode.
        UnsupportedProvider: Unknown model.
        ProviderError: The chosen model failed.
    """
    router = router or ProviderRouter()
    system, citations, web_results = build_system_prompt(
        request.mode, request.doc_citations, request.web_results
    )
    if request.model not in ANSWER_MODELS:
        raise UnsupportedProvider(request.model)

    if request.model == "perplexity":
        if request.mode != "web":
            raise ValidationError("Perplexity model only supports web mode")
        answer = router.complete("perplexity", request.question, system=WEB_SEARCH_SYSTEM_PROMPT).text
    else:
        answer = router.complete(request.model, request.question, system=system).text

    verification = None
    if request.verifier and (citations or web_results):
        verification = _verify(router, request.model, request.question, answer, citations, web_results)

    logger.info(f"Answered in {request.mode} mode with {request.model}")
    return AnswerResponse(
        answer=answer,
        citations=citations,
        web_results=web_results,
        verification=verification,
        search_results_count=len(citations) + len(web_results),
    )
