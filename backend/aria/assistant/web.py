"""Web answers backed by Perplexity's online models."""

from typing import Optional
from urllib.parse import urlparse

from ..llm import ProviderRouter
from ..logging import get_logger
from ..models.schemas import PerplexitySearchRequest, PerplexitySearchResponse, WebResult, WebSearchResponse
from .prompts import PERPLEXITY_SEARCH_SYSTEM_PROMPT, WEB_SEARCH_SYSTEM_PROMPT

logger = get_logger(__name__)

MAX_WEB_RESULTS = 5


def citations_to_results(citations: list) -> list[WebResult]:
    """Turn Perplexity citation URLs into web results titled by host."""
    results = []
    for index, citation in enumerate(citations[:MAX_WEB_RESULTS]):
        url = citation.get("url") if isinstance(citation, dict) else citation
        if not url:
            continue
        host = urlparse(str(url)).netloc or str(url)
        results.append(
            WebResult(
                url=str(url),
                title=host,
                snippet=f"Source [{index + 1}] cited in the answer",
            )
        )
    return results


def web_answer(question: str, router: Optional[ProviderRouter] = None) -> WebSearchResponse:
    """Answer a question from the web; results are the URLs Perplexity cited."""
    router = router or ProviderRouter()
    result = router.search_web(question, WEB_SEARCH_SYSTEM_PROMPT)
    web_results = citations_to_results(result["citations"])
    logger.info(f"Web answer with {len(web_results)} cited sources")
    return WebSearchResponse(
        answer=result["content"] or "No response from Perplexity",
        web_results=web_results,
        search_results_count=len(web_results),
    )


def perplexity_search(
    request: PerplexitySearchRequest,
    router: Optional[ProviderRouter] = None,
) -> PerplexitySearchResponse:
    router = router or ProviderRouter()
    result = router.search_web(
        request.query,
        PERPLEXITY_SEARCH_SYSTEM_PROMPT,
        recency_filter=request.recency_filter,
        domain=request.search_domain,
        include_images=request.include_images,
        related_questions=True,
        max_tokens=1000,
    )
    return PerplexitySearchResponse(
        content=result["content"],
        citations=[c.get("url", "") if isinstance(c, dict) else str(c) for c in result["citations"]],
        related_questions=result["related_questions"],
        images=result["images"],
        usage=result["usage"],
    )
