"""AI collaborator boundary: completion client and reply decoding."""

from __future__ import annotations

from .client import CompletionClient, PydanticAICompletionClient, parse_ai_reply

__all__ = ["CompletionClient", "PydanticAICompletionClient", "parse_ai_reply"]
