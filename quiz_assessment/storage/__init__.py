"""Quiz Storage - Persistencia via AgentFS KV."""

from .quiz_store import QuizStore

__all__ = ["QuizStore"]
