"""Read-only query execution."""

from __future__ import annotations

from .runner import QueryExecutor, bind_positional_params, to_json_safe

__all__ = ["QueryExecutor", "bind_positional_params", "to_json_safe"]
