"""Question pipeline and chat orchestration."""

from __future__ import annotations

from .ai_pipeline import MAX_QUESTION_LENGTH, AIQueryPipeline, validate_question
from .chat_service import DEFAULT_SUGGESTIONS, ChatService

__all__ = [
    "DEFAULT_SUGGESTIONS",
    "MAX_QUESTION_LENGTH",
    "AIQueryPipeline",
    "ChatService",
    "validate_question",
]
