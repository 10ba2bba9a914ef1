from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objs as go
from dash import dash_table, html

from imlgs_browser.config.model import FilterDefinition
from imlgs_browser.core.dataset import DatasetView, Row
from imlgs_browser.core.filter_state import FilterInputRegistry
from imlgs_browser.core.inputs import InputControl, SelectInput, TextInput
from imlgs_browser.core.observable import ReactiveInputBinding
from imlgs_browser.core.record import interval_comment, jd_to_date
from imlgs_browser.core.where_clause import WhereClause

logger = logging.getLogger(__name__)

FONT_FAMILY = 'system-ui, -apple-system, BlinkMacSystemFont, "SF Pro Text", "Segoe UI", sans-serif'


# -----------------------------------------------------------------------------
# Filter widgets
# -----------------------------------------------------------------------------
async def build_widgets(view: DatasetView, filters: Sequence[FilterDefinition]) -> Dict[str, InputControl]:
    """Enumerate candidates once per filter; these controls act as prototypes."""
    widgets: Dict[str, InputControl] = {}
    for fd in filters:
        if fd.kind == "text":
            widgets[fd.column] = await view.new_text_input(fd.column, fd.label)
        else:
            widgets[fd.column] = await view.new_select_input(fd.column, fd.label)
    return widgets


def select_options(control: SelectInput) -> List[dict]:
    return [{"label": SelectInput.format(o), "value": o[0]} for o in control.options]


def fresh_control(prototype: InputControl, value: Any) -> InputControl:
    """
    A new control carrying `value`, sharing the prototype's candidates.
    A select value that is not one of the options falls back to "All".
    """
    if isinstance(prototype, SelectInput):
        if value is not None and value not in prototype.choices:
            logger.warning("Ignoring unknown select value", extra={"label": prototype.label, "value": str(value)})
            value = None
        return SelectInput(prototype.label, prototype.options, value)
    if isinstance(prototype, TextInput):
        return TextInput(prototype.label, value, prototype.datalist, prototype.placeholder)
    return InputControl(prototype.label, value)


def where_clause_for(
    view: DatasetView,
    filters: Sequence[FilterDefinition],
    widgets: Mapping[str, InputControl],
    values: Sequence[Any],
    extra: str = "",
) -> WhereClause:
    """
    Bind one control per filter into a registry and compile the current
    WHERE clause from its snapshot.
    """
    registry = FilterInputRegistry()
    try:
        for fd, value in zip(filters, values):
            control = fresh_control(widgets[fd.column], value)
            registry.register(ReactiveInputBinding(control, fd.clause_template))
        return view.where_clause(registry, extra)
    finally:
        registry.close()


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------
def _cell(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def table_records(rows: Sequence[Row], id_column: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    DataTable cells must be scalars; nested values are shown as JSON.
    With `id_column`, each row also gets the DataTable row "id".
    """
    records = []
    for row in rows:
        record = {k: _cell(v) for k, v in row.items()}
        if id_column is not None and id_column in row:
            record["id"] = _cell(row[id_column])
        records.append(record)
    return records


def results_table(table_id: str, columns: Sequence[str], page_size: int = 25) -> dash_table.DataTable:
    return dash_table.DataTable(
        id=table_id,
        data=[],
        columns=[{"name": c, "id": c} for c in columns],
        style_table={
            "overflowX": "auto",
        },
        style_as_list_view=True,
        style_cell={
            "fontFamily": FONT_FAMILY,
            "fontSize": "12px",
            "padding": "6px 8px",
            "border": "none",
            "textAlign": "left",
            "minWidth": "80px",
            "maxWidth": "260px",
            "whiteSpace": "nowrap",
            "textOverflow": "ellipsis",
        },
        style_header={
            "fontFamily": FONT_FAMILY,
            "fontSize": "12px",
            "fontWeight": "600",
            "backgroundColor": "#f3f4f6",
            "borderBottom": "1px solid #e5e7eb",
        },
        style_data={
            "borderBottom": "1px solid #e5e7eb",
        },
        page_size=page_size,
        sort_action="native",
        filter_action="none",
    )


def output_column_name(field_expr: str) -> str:
    """Name a projected field will have in result rows ("a.b AS c" -> "c")."""
    lowered = field_expr.lower()
    idx = lowered.rfind(" as ")
    if idx >= 0:
        return field_expr[idx + 4:].strip()
    return field_expr.strip().split(".")[-1]


def message_figure(title: str, details: Optional[str] = None) -> go.Figure:
    fig = go.Figure()
    text = title if details is None else f"{title}<br><br>{details}"
    fig.add_annotation(
        text=text,
        showarrow=False,
        xref="paper",
        yref="paper",
        x=0.5,
        y=0.5,
    )
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    fig.update_layout(margin=dict(l=40, r=40, t=40, b=40))
    return fig


def map_figure(rows: Sequence[Row]) -> go.Figure:
    df = pd.DataFrame(list(rows))
    if df.empty or "lon" not in df.columns or "lat" not in df.columns:
        return message_figure("No sample locations to display.")

    df = df.dropna(subset=["lon", "lat"])
    if df.empty:
        return message_figure("No sample locations to display.")

    color = "repository" if "repository" in df.columns else None
    hover = "imlgs" if "imlgs" in df.columns else None
    fig = px.scatter_geo(df, lon="lon", lat="lat", color=color, hover_name=hover)
    fig.update_traces(marker=dict(size=4))
    fig.update_layout(margin=dict(l=0, r=0, t=0, b=0), legend_title_text="Repository")
    return fig


# -----------------------------------------------------------------------------
# Record detail
# -----------------------------------------------------------------------------
def _get(record: Mapping[str, Any], *path: str) -> Any:
    value: Any = record
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def record_card(record: Mapping[str, Any]) -> html.Div:
    other_link = _get(record, "facility", "other_link")
    rows = [
        ("Repository", _get(record, "facility", "facility")),
        ("Ship/Platform", record.get("platform")),
        ("Cruise ID", _get(record, "cruise", "cruise")),
        ("Sample ID", record.get("sample")),
        ("Sampling Device", record.get("device")),
        ("Location", html.Code(record.get("geometry"))),
        ("Water Depth (m)", record.get("water_depth")),
        ("Date Sample Collected", jd_to_date(record.get("begin_jd"))),
        ("Principal Investigator", record.get("pi")),
        ("Physiographic Province", record.get("province")),
        ("Lake", record.get("lake")),
        ("Core Length (cm)", record.get("cored_length")),
        ("Core Diameter (cm)", record.get("cored_diam")),
        ("Sample Comments", record.get("sample_comments")),
        (
            "Repository Archive Overview",
            html.A(other_link, href=other_link, target="_blank") if other_link else None,
        ),
    ]
    summary = html.Table(
        html.Tbody([html.Tr([html.Td(k), html.Td(v)]) for k, v in rows]),
        className="table table-sm",
    )

    interval_rows = [
        html.Tr(
            [
                html.Td(f"{interval.get('depth_top')} - {interval.get('depth_bot')}"),
                html.Td(_cell(interval.get("ages"))),
                html.Td(_cell(interval.get("textures"))),
                html.Td(_cell(interval.get("comps"))),
                html.Td(_cell(interval.get("liths"))),
                html.Td(interval_comment(interval)),
            ]
        )
        for interval in (record.get("intervals") or [])
    ]
    intervals = html.Table(
        [
            html.Thead(
                html.Tr(
                    [
                        html.Th(h)
                        for h in ("Depth", "Geologic Age", "Texture", "Composition", "Lithology", "Comments")
                    ]
                )
            ),
            html.Tbody(interval_rows),
        ],
        className="table table-sm",
    )
    return html.Div([summary, intervals])
