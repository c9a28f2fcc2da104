"""Switch an existing chart result to a different chart type."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from store_nl2sql.charts.mapper import Row, build_chart, build_table, to_label, to_number
from store_nl2sql.models import ChartMeta, ChartSpecResult, ChartType, TableResult

_logger = logging.getLogger(__name__)


def convert_chart_type(
    current: ChartSpecResult,
    rows: Sequence[Row],
    target_type: ChartType,
    meta: ChartMeta,
    title: str,
) -> ChartSpecResult:
    """Re-render `current` as `target_type`.

    Tables are rebuilt from `rows`. Converting a table to a chart needs the
    column mapping in `meta`. Chart to chart conversion reuses the existing
    labels, data and axis titles.
    """
    if current.type == target_type:
        return current

    if target_type == "table":
        return build_table(title, rows)

    if isinstance(current, TableResult):
        _logger.debug("convert_chart_type: table -> %s from %d rows", target_type, len(rows))
        return build_chart(
            target_type,
            title,
            [to_label(row.get(meta.label_key)) for row in rows],
            [to_number(row.get(meta.data_key)) for row in rows],
            x_title=meta.x_label or meta.label_key,
            y_title=meta.y_label or meta.data_key,
        )

    dataset = current.data.datasets[0] if current.data.datasets else None
    scales = current.options.scales
    return build_chart(
        target_type,
        title,
        list(current.data.labels),
        list(dataset.data) if dataset else [],
        x_title=scales.x.title.text if scales else (meta.x_label or meta.label_key),
        y_title=scales.y.title.text if scales else (meta.y_label or meta.data_key),
    )
