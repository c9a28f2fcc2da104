"""Tenant key checks shared by every stage that accepts a store id."""

from __future__ import annotations

import re
from typing import Final

from store_nl2sql.errors import ValidationError

STORE_ID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)


def ensure_store_id(store_id: str) -> str:
    """Return the canonical lower-case form of `store_id`, or raise if it is not a UUID.

    The whole string must match; surrounding whitespace or newlines are rejected.
    Callers use the returned value for rate-limit keys and query parameters so
    case variants of one key share a single counter.
    """
    if not store_id or not STORE_ID_PATTERN.fullmatch(store_id):
        msg = "Invalid storeId: must be a valid UUID"
        raise ValidationError(msg)
    return store_id.lower()
