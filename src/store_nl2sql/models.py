"""Pydantic models shared across the question pipeline.

Field names are snake_case in Python. Models that cross the AI boundary or are
returned to callers accept both spellings and serialize with the camelCase
names those collaborators use (`dataKey`, `backgroundColor`, `rowCount`, ...).
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

JsonScalar = str | int | float | bool | None
ChartType = Literal["bar", "line", "pie", "doughnut", "table"]
PlotType = Literal["bar", "line", "pie", "doughnut"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, serialize_by_alias=True
    )


# -----------------------
# Pipeline inputs
# -----------------------


class SchemaContext(BaseModel):
    """Per-store metadata injected into the system prompt."""

    store_id: str = Field(description="Tenant key the metadata was computed for")
    currency: str = Field(default="USD", description="Currency of the most recent order")
    total_orders: int = Field(default=0, ge=0)
    total_products: int = Field(default=0, ge=0)
    total_customers: int = Field(default=0, ge=0)
    total_categories: int = Field(default=0, ge=0)
    earliest_order_date: datetime | None = None
    latest_order_date: datetime | None = None


class ChartSpec(_CamelModel):
    """The model's declared intent for visualising a result set."""

    model_config = ConfigDict(frozen=True)

    type: ChartType
    title: str
    x_label: str | None = None
    y_label: str | None = None
    data_key: str = Field(description="Column holding the values")
    label_key: str = Field(description="Column holding the labels")


class AIReply(BaseModel):
    """Decoded reply from the AI collaborator. Still untrusted."""

    model_config = ConfigDict(frozen=True)

    sql: str
    explanation: str
    chart_spec: ChartSpec | None = None


class AIQueryResult(BaseModel):
    """Validated query ready for execution. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    sql: str = Field(description="Sandbox-normalized SQL")
    params: list[str] = Field(description="Positional parameters; index 0 is the tenant key")
    explanation: str = Field(default="")
    chart_spec: ChartSpec | None = None


# -----------------------
# Stage outputs
# -----------------------


class SqlValidationResult(BaseModel):
    """Outcome of the sandbox rules over one SQL string."""

    valid: bool
    sql: str = Field(description="Normalized SQL, with LIMIT appended or capped")
    errors: list[str] = Field(default_factory=list)


class ScopeCheckResult(BaseModel):
    """Outcome of the AST-level table and tenant-filter inspection."""

    tables: list[str] = Field(default_factory=list, description="Referenced table names")
    errors: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list, description="Non-fatal parse notes")

    @property
    def ok(self) -> bool:
        return not self.errors


class QueryExecutionResult(BaseModel):
    """Rows and timing returned by the read-only executor."""

    rows: list[dict[str, JsonScalar]] = Field(default_factory=list)
    row_count: int = 0
    duration_ms: float = 0.0
    truncated: bool = False


# -----------------------
# Chart.js shaped results
# -----------------------


class ChartTitle(_CamelModel):
    display: bool = True
    text: str


class ChartLegend(_CamelModel):
    display: bool = True
    position: str = "right"


class ChartPlugins(_CamelModel):
    title: ChartTitle
    legend: ChartLegend | None = None


class AxisScale(_CamelModel):
    title: ChartTitle


class ChartScales(_CamelModel):
    x: AxisScale
    y: AxisScale


class ChartOptions(_CamelModel):
    responsive: bool = True
    plugins: ChartPlugins
    scales: ChartScales | None = None


class ChartDataset(_CamelModel):
    label: str
    data: list[float]
    background_color: list[str]
    border_color: list[str] | None = None
    border_width: int | None = None


class ChartData(_CamelModel):
    labels: list[str]
    datasets: list[ChartDataset]


class ChartConfiguration(_CamelModel):
    """Renderable chart configuration (Chart.js layout)."""

    type: PlotType
    data: ChartData
    options: ChartOptions


class TableResult(_CamelModel):
    """Tabular rendering of a result set."""

    type: Literal["table"] = "table"
    title: str
    headers: list[str]
    rows: list[list[Any]]


ChartSpecResult = Annotated[ChartConfiguration | TableResult, Field(discriminator="type")]


class ChartMeta(_CamelModel):
    """Column mapping kept with a response so the chart type can be switched later."""

    data_key: str
    label_key: str
    x_label: str | None = None
    y_label: str | None = None


class ChartSpecSummary(_CamelModel):
    type: ChartType
    title: str


# -----------------------
# Inbound response
# -----------------------


class ChatResponse(_CamelModel):
    """Answer to one store owner question."""

    answer: str = Field(description="Model explanation of the query")
    sql: str = Field(description="SQL that was executed")
    rows: list[dict[str, JsonScalar]] = Field(default_factory=list)
    row_count: int = 0
    duration_ms: float = 0.0
    truncated: bool = False
    chart_spec: ChartSpecSummary | None = None
    chart_config: ChartSpecResult | None = None
    chart_meta: ChartMeta | None = None
