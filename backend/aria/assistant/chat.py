"""Gemini-backed document assistant."""

from typing import Optional

from ..db import documents as documents_db
from ..llm import ProviderRouter
from ..models.schemas import ChatDocument, ChatRequest, ChatResponse
from .prompts import CHAT_SYSTEM_PROMPT


def build_document_context(documents: list[ChatDocument]) -> str:
    if not documents:
        return ""
    lines = [f"- {doc.name}: {doc.summary or 'No summary available'}" for doc in documents]
    return "\n\nUser's Documents Context:\n" + "\n".join(lines)


def chat(request: ChatRequest, router: Optional[ProviderRouter] = None) -> ChatResponse:
    """
    Reply as the ARIA persona.

    Documents given in the request take precedence; otherwise the user's
    stored summaries are used when a user id is supplied.
    """
    router = router or ProviderRouter()
    documents = request.documents
    if not documents and request.user_id:
        documents = [
            ChatDocument(name=row.get("file_name", ""), summary=row.get("ai_summary"))
            for row in documents_db.list_user_files(request.user_id)
        ]

    system = CHAT_SYSTEM_PROMPT.format(context=build_document_context(documents))
    completion = router.complete("google", request.message, system=system, max_tokens=2000, temperature=0.7)
    return ChatResponse(response=completion.text)
