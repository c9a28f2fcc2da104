from __future__ import annotations

import pytest

from store_nl2sql.charts import (
    BORDER_PALETTE,
    COLOR_PALETTE,
    convert_chart_type,
    generate_border_colors,
    generate_colors,
    to_chart_config,
)
from store_nl2sql.charts.mapper import to_number
from store_nl2sql.models import ChartConfiguration, ChartMeta, ChartSpec, TableResult

ROWS = [
    {"category": "Kitchen", "revenue": "1200.50"},
    {"category": "Decor", "revenue": 800},
    {"category": None, "revenue": None},
]


def _spec(chart_type: str, **kw: str) -> ChartSpec:
    return ChartSpec(
        type=chart_type, title="Revenue by category", data_key="revenue", label_key="category", **kw
    )


def test_palette_cycles() -> None:
    assert len(COLOR_PALETTE) == 12
    colors = generate_colors(14)
    assert colors[0] == "rgba(54, 162, 235, 0.7)"
    assert colors[12] == colors[0]
    assert colors[13] == colors[1]
    borders = generate_border_colors(2)
    assert borders == ["rgba(54, 162, 235, 1)", "rgba(255, 99, 132, 1)"]
    assert all(b.endswith(", 1)") for b in BORDER_PALETTE)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("12.5", 12.5), (3, 3.0), (None, 0.0), ("abc", 0.0), ("inf", 0.0), (float("nan"), 0.0)],
)
def test_to_number(value: object, expected: float) -> None:
    assert to_number(value) == expected


def test_no_spec_or_no_rows_gives_none() -> None:
    assert to_chart_config(None, ROWS) is None
    assert to_chart_config(_spec("bar"), []) is None


def test_missing_keys_give_none() -> None:
    spec = ChartSpec(type="bar", title="t", data_key="total", label_key="category")
    assert to_chart_config(spec, ROWS) is None
    spec = ChartSpec(type="bar", title="t", data_key="revenue", label_key="name")
    assert to_chart_config(spec, ROWS) is None


def test_bar_chart() -> None:
    cfg = to_chart_config(_spec("bar", y_label="Revenue (USD)"), ROWS)
    assert isinstance(cfg, ChartConfiguration)
    assert cfg.type == "bar"
    assert cfg.data.labels == ["Kitchen", "Decor", ""]
    dataset = cfg.data.datasets[0]
    assert dataset.data == [1200.5, 800.0, 0.0]
    assert dataset.label == "Revenue by category"
    assert dataset.background_color == generate_colors(3)
    assert dataset.border_width == 1
    assert cfg.options.scales is not None
    assert cfg.options.scales.x.title.text == "category"
    assert cfg.options.scales.y.title.text == "Revenue (USD)"
    assert cfg.options.plugins.legend is None


def test_pie_chart_has_legend_not_axes() -> None:
    cfg = to_chart_config(_spec("pie"), ROWS)
    assert isinstance(cfg, ChartConfiguration)
    assert cfg.options.scales is None
    assert cfg.options.plugins.legend is not None
    assert cfg.options.plugins.legend.position == "right"


def test_table_result() -> None:
    cfg = to_chart_config(_spec("table"), ROWS)
    assert isinstance(cfg, TableResult)
    assert cfg.headers == ["category", "revenue"]
    assert cfg.rows[0] == ["Kitchen", "1200.50"]
    assert len(cfg.rows) == 3


def test_camel_case_dump() -> None:
    cfg = to_chart_config(_spec("line"), ROWS)
    assert cfg is not None
    dumped = cfg.model_dump(mode="json", exclude_none=True)
    dataset = dumped["data"]["datasets"][0]
    assert set(dataset) == {"label", "data", "backgroundColor", "borderColor", "borderWidth"}
    assert dumped["options"]["plugins"]["title"] == {"display": True, "text": "Revenue by category"}


META = ChartMeta(data_key="revenue", label_key="category")


def test_convert_same_type_is_identity() -> None:
    cfg = to_chart_config(_spec("bar"), ROWS)
    assert cfg is not None
    assert convert_chart_type(cfg, ROWS, "bar", META, "x") is cfg


def test_convert_chart_to_table_and_back() -> None:
    bar = to_chart_config(_spec("bar"), ROWS)
    assert bar is not None
    table = convert_chart_type(bar, ROWS, "table", META, "Revenue")
    assert isinstance(table, TableResult)
    assert table.headers == ["category", "revenue"]

    doughnut = convert_chart_type(table, ROWS, "doughnut", META, "Revenue")
    assert isinstance(doughnut, ChartConfiguration)
    assert doughnut.type == "doughnut"
    assert doughnut.data.labels == ["Kitchen", "Decor", ""]
    assert doughnut.options.plugins.legend is not None


def test_convert_table_with_no_rows() -> None:
    bar = to_chart_config(_spec("bar"), ROWS)
    assert bar is not None
    table = convert_chart_type(bar, [], "table", META, "Empty")
    assert isinstance(table, TableResult)
    assert table.headers == []
    assert table.rows == []


def test_convert_between_charts_reuses_data_and_axes() -> None:
    pie = to_chart_config(_spec("pie"), ROWS)
    assert pie is not None
    line = convert_chart_type(pie, ROWS, "line", META, "Revenue")
    assert isinstance(line, ChartConfiguration)
    assert line.data.datasets[0].data == [1200.5, 800.0, 0.0]
    assert line.options.scales is not None
    assert line.options.scales.x.title.text == "category"

    bar = to_chart_config(_spec("bar", x_label="Category"), ROWS)
    assert bar is not None
    line = convert_chart_type(bar, ROWS, "line", META, "Revenue")
    assert isinstance(line, ChartConfiguration)
    assert line.options.scales is not None
    assert line.options.scales.x.title.text == "Category"
