"""Prompt templates for answer generation and verification."""

ANSWER_ONLY_SYSTEM_PROMPT = (
    "You are a helpful assistant providing answers based only on provided document "
    "excerpts. Include inline citations using [1], [2], etc. Keep responses concise and "
    "only reference information explicitly found in the sources."
)

FULL_SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on provided document "
    "sources. Include inline citations using [1], [2], etc. format referencing the "
    "numbered sources. Be comprehensive but accurate."
)

ANSWER_PROMPT = """Question: {query}

Sources:
{context}

Provide a comprehensive answer with specific citations. If the sources don't contain enough information to answer the question fully, say so clearly and indicate what information is missing."""

VERIFICATION_PROMPT = """Validate the following answer strictly against the provided sources. Flag any unsupported claims and provide a verification summary.

Answer to verify: {answer}

Sources: {sources}

Respond with: SUPPORTED/UNSUPPORTED and brief notes."""

APOLOGY_ANSWER = (
    "I'm sorry, I couldn't generate an answer at this time. "
    "The AI services are temporarily unavailable."
)
