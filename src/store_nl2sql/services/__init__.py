"""Services package for store-nl2sql.

Main Components:
- ConfigService: Environment configuration, read-only engine and Redis client
- ChatServiceManager (in `service_manager`): process-wide owner of the wired
  `ChatService`
"""

from .config_service import ConfigService, LLMConfig, RateLimitConfig

__all__ = [
    "ConfigService",
    "LLMConfig",
    "RateLimitConfig",
]
