"""Assistant endpoints: answer fusion, web search, chat, code and model health."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..assistant import answer_question, chat, generate_code, perplexity_search, web_answer
from ..llm import ProviderRouter
from ..llm.health import check_health
from ..models.schemas import (
    AnswerRequest,
    AnswerResponse,
    ChatRequest,
    ChatResponse,
    CodeRequest,
    CodeResponse,
    HealthReport,
    PerplexitySearchRequest,
    PerplexitySearchResponse,
    WebSearchRequest,
    WebSearchResponse,
)
from .deps import get_router

router = APIRouter(tags=["assistant"])


@router.post("/answer", response_model=AnswerResponse)
def answer(request: AnswerRequest, provider_router: ProviderRouter = Depends(get_router)):
    """Answer from supplied document citations, web results, or both."""
    return answer_question(request, router=provider_router)


@router.post("/web", response_model=WebSearchResponse)
def web(request: WebSearchRequest, provider_router: ProviderRouter = Depends(get_router)):
    return web_answer(request.question, router=provider_router)


@router.post("/perplexity-search", response_model=PerplexitySearchResponse)
def search(request: PerplexitySearchRequest, provider_router: ProviderRouter = Depends(get_router)):
    return perplexity_search(request, router=provider_router)


@router.post("/chat", response_model=ChatResponse)
def assistant_chat(request: ChatRequest, provider_router: ProviderRouter = Depends(get_router)):
    return chat(request, router=provider_router)


@router.post("/code", response_model=CodeResponse)
def code(request: CodeRequest, provider_router: ProviderRouter = Depends(get_router)):
    return generate_code(request, router=provider_router)


@router.get("/health/models", response_model=HealthReport)
async def model_health(provider_router: ProviderRouter = Depends(get_router)):
    """Probe every provider with a short prompt."""
    results = await check_health(provider_router)
    return HealthReport(timestamp=datetime.now(timezone.utc).isoformat(), results=results)
