"""Command-line entrypoint for the store-nl2sql FastMCP server."""

from __future__ import annotations

import traceback

from fastmcp.utilities.logging import get_logger

from store_nl2sql.server import mcp

_logger = get_logger(__name__)


def main() -> None:
    """Start the store-nl2sql FastMCP server."""
    try:
        mcp.run()
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)


if __name__ == "__main__":
    main()
