"""Chart.js rendering of query results."""

from __future__ import annotations

from .converter import convert_chart_type
from .mapper import (
    BORDER_PALETTE,
    COLOR_PALETTE,
    generate_border_colors,
    generate_colors,
    to_chart_config,
)

__all__ = [
    "BORDER_PALETTE",
    "COLOR_PALETTE",
    "convert_chart_type",
    "generate_border_colors",
    "generate_colors",
    "to_chart_config",
]
