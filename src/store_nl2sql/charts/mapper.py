"""Chart spec to Chart.js configuration mapping.

Pure functions with no I/O: a `ChartSpec` plus result rows go in and a
renderable `ChartConfiguration` or `TableResult` comes out.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import math
from typing import Any

from store_nl2sql.models import (
    AxisScale,
    ChartConfiguration,
    ChartData,
    ChartDataset,
    ChartLegend,
    ChartOptions,
    ChartPlugins,
    ChartScales,
    ChartSpec,
    ChartSpecResult,
    ChartTitle,
    PlotType,
    TableResult,
)

_logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

# Ordered so adjacent colours contrast.
COLOR_PALETTE: tuple[str, ...] = (
    "rgba(54, 162, 235, 0.7)",
    "rgba(255, 99, 132, 0.7)",
    "rgba(75, 192, 192, 0.7)",
    "rgba(255, 159, 64, 0.7)",
    "rgba(153, 102, 255, 0.7)",
    "rgba(255, 205, 86, 0.7)",
    "rgba(201, 203, 207, 0.7)",
    "rgba(46, 204, 113, 0.7)",
    "rgba(231, 76, 60, 0.7)",
    "rgba(52, 73, 94, 0.7)",
    "rgba(26, 188, 156, 0.7)",
    "rgba(241, 196, 15, 0.7)",
)
BORDER_PALETTE: tuple[str, ...] = tuple(c.replace("0.7)", "1)") for c in COLOR_PALETTE)


def generate_colors(count: int) -> list[str]:
    """Fill colours for `count` points, cycling the palette."""
    return [COLOR_PALETTE[i % len(COLOR_PALETTE)] for i in range(count)]


def generate_border_colors(count: int) -> list[str]:
    """Opaque border colours matching `generate_colors`."""
    return [BORDER_PALETTE[i % len(BORDER_PALETTE)] for i in range(count)]


def to_number(value: object) -> float:
    """Coerce a cell to a number; null, non-numeric and non-finite give 0."""
    if value is None or isinstance(value, bool):
        return float(value or 0)
    try:
        num = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return num if math.isfinite(num) else 0.0


def to_label(value: object) -> str:
    return "" if value is None else str(value)


def build_table(title: str, rows: Sequence[Row]) -> TableResult:
    """Table view of `rows`: headers from the first row, values in that order."""
    if not rows:
        return TableResult(title=title, headers=[], rows=[])
    headers = list(rows[0].keys())
    return TableResult(
        title=title,
        headers=headers,
        rows=[[row.get(h) for h in headers] for row in rows],
    )


def _dataset(title: str, data: list[float]) -> ChartDataset:
    count = len(data)
    return ChartDataset(
        label=title,
        data=data,
        background_color=generate_colors(count),
        border_color=generate_border_colors(count),
        border_width=1,
    )


def build_chart(
    chart_type: PlotType,
    title: str,
    labels: list[str],
    data: list[float],
    *,
    x_title: str = "",
    y_title: str = "",
) -> ChartConfiguration:
    """Assemble a Chart.js configuration.

    Pie and doughnut charts get a right-hand legend; bar and line charts get
    axis titles instead.
    """
    chart_title = ChartTitle(text=title)
    if chart_type in ("pie", "doughnut"):
        options = ChartOptions(plugins=ChartPlugins(title=chart_title, legend=ChartLegend()))
    else:
        options = ChartOptions(
            plugins=ChartPlugins(title=chart_title),
            scales=ChartScales(
                x=AxisScale(title=ChartTitle(text=x_title)),
                y=AxisScale(title=ChartTitle(text=y_title)),
            ),
        )
    return ChartConfiguration(
        type=chart_type,
        data=ChartData(labels=labels, datasets=[_dataset(title, data)]),
        options=options,
    )


def to_chart_config(spec: ChartSpec | None, rows: Sequence[Row]) -> ChartSpecResult | None:
    """Map a chart spec and result rows to a renderable result.

    Returns None when there is no chart spec, no rows, or the chart spec
    names a column the first row does not have.
    """
    if spec is None:
        return None
    if not rows:
        _logger.warning("Chart spec: no rows to chart (type=%s)", spec.type)
        return None

    row_keys = list(rows[0].keys())
    for key_name, key in (("data_key", spec.data_key), ("label_key", spec.label_key)):
        if key not in row_keys:
            _logger.warning(
                "Chart spec: %s %r not found in result rows (available=%s)",
                key_name,
                key,
                row_keys,
            )
            return None

    if spec.type == "table":
        return build_table(spec.title, rows)

    return build_chart(
        spec.type,
        spec.title,
        [to_label(row.get(spec.label_key)) for row in rows],
        [to_number(row.get(spec.data_key)) for row in rows],
        x_title=spec.x_label or spec.label_key,
        y_title=spec.y_label or spec.data_key,
    )
