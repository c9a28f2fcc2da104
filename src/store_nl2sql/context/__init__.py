"""Store metadata used to ground the system prompt."""

from __future__ import annotations

from .provider import SchemaContextProvider

__all__ = ["SchemaContextProvider"]
