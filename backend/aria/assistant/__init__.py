from .answer import answer_question
from .chat import chat
from .codegen import generate_code
from .web import perplexity_search, web_answer

__all__ = ["answer_question", "chat", "generate_code", "perplexity_search", "web_answer"]
