"""Retrieval-augmented answering with LangGraph."""

from .graph import AgentState, create_rag_graph, run_query

__all__ = ["AgentState", "create_rag_graph", "run_query"]
