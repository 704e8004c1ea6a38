"""LangGraph workflow for retrieval-augmented answers."""

from typing import Optional, TypedDict

from langgraph.graph import END, StateGraph

from ..llm import ProviderRouter
from ..models import ChunkHit, Source, Verification
from ..retrieval import HybridRetriever


class AgentState(TypedDict, total=False):
    """State passed between nodes in the graph."""
    # Input
    query: str
    owner_id: Optional[str]
    org_id: Optional[str]
    room_ids: list[str]
    top_k: int
    match_threshold: float
    answer_only: bool
    verifier: bool
    query_embedding: Optional[list[float]]

    # Retrieved information
    hits: list[ChunkHit]

    # Generated response
    answer: str
    provider: Optional[str]
    sources: list[Source]
    verification: Optional[Verification]


def create_rag_graph(retriever: HybridRetriever, router: ProviderRouter):
    """
    Create the LangGraph workflow.

    The workflow:
    1. Retrieve -> hybrid vector and keyword search
    2. Generate -> cited answer with provider fallback
    3. Verify -> optional cross-model check
    """
    from .nodes import generate_response, retrieve_documents, verify_response

    workflow = StateGraph(AgentState)

    workflow.add_node("retrieve", lambda state: retrieve_documents(state, retriever))
    workflow.add_node("generate", lambda state: generate_response(state, router))
    workflow.add_node("verify", lambda state: verify_response(state, router))

    workflow.set_entry_point("retrieve")
    workflow.add_edge("retrieve", "generate")
    workflow.add_edge("generate", "verify")
    workflow.add_edge("verify", END)

    return workflow.compile()


def run_query(
    query: str,
    retriever: HybridRetriever,
    router: ProviderRouter,
    owner_id: Optional[str] = None,
    org_id: Optional[str] = None,
    room_ids: Optional[list[str]] = None,
    top_k: int = 10,
    match_threshold: float = 0.5,
    answer_only: bool = False,
    verifier: bool = False,
) -> AgentState:
    """
    Run a query through the RAG graph.

    Returns:
        Final state with hits, answer, provider, sources and verification.
    """
    graph = create_rag_graph(retriever, router)

    initial_state: AgentState = {
        "query": query,
        "owner_id": owner_id,
        "org_id": org_id,
        "room_ids": room_ids or [],
        "top_k": top_k,
        "match_threshold": match_threshold,
        "answer_only": answer_only,
        "verifier": verifier,
        "query_embedding": None,
        "hits": [],
        "answer": "",
        "provider": None,
        "sources": [],
        "verification": None,
    }

    return graph.invoke(initial_state)
