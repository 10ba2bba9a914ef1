from __future__ import annotations

from typing import TYPE_CHECKING, List

import dash_bootstrap_components as dbc
from dash import dcc, html

from imlgs_browser.config.model import FilterDefinition
from imlgs_browser.core.inputs import InputControl, SelectInput, TextInput
from imlgs_browser.ui.helpers import select_options
from imlgs_browser.ui.ids import IDs, filter_datalist_id, filter_input_id

if TYPE_CHECKING:
    from imlgs_browser.ui.config import AppConfig


def _select_filter(fd: FilterDefinition, control: SelectInput) -> html.Div:
    return html.Div(
        [
            html.Label(control.label, className="form-label"),
            dcc.Dropdown(
                id=filter_input_id(fd.column),
                options=select_options(control),
                value=control.raw_value,
                multi=False,
                clearable=True,
                placeholder=SelectInput.format(control.options[0]),
                className="mb-3",
            ),
        ]
    )


def _text_filter(fd: FilterDefinition, control: TextInput, debounce: float) -> html.Div:
    datalist_id = filter_datalist_id(fd.column)
    return html.Div(
        [
            html.Label(control.label, className="form-label"),
            dcc.Input(
                id=filter_input_id(fd.column),
                type="text",
                value=control.raw_value,
                list=datalist_id,
                debounce=debounce,
                placeholder=control.placeholder or "Type to filter",
                className="form-control mb-3",
            ),
            html.Datalist(
                id=datalist_id,
                children=[html.Option(value=v) for v in control.datalist],
            ),
        ]
    )


def _filter_widget(fd: FilterDefinition, control: InputControl, debounce: float) -> html.Div:
    if isinstance(control, SelectInput):
        return _select_filter(fd, control)
    if isinstance(control, TextInput):
        return _text_filter(fd, control, debounce)
    raise TypeError(f"Unsupported control for filter {fd.column!r}: {type(control).__name__}")


def build_filter_panel(ctx: AppConfig) -> dbc.Card:
    debounce = ctx.global_config.debounce_ms / 1000.0
    widgets: List[html.Div] = [
        _filter_widget(fd, ctx.widgets[fd.column], debounce) for fd in ctx.filters
    ]

    return dbc.Card(
        [
            dbc.CardHeader("Filters", className="fw-semibold"),
            dbc.CardBody(
                [
                    html.Div(
                        [
                            html.H5(
                                ctx.dataset_name,
                                id=IDs.Control.SIDEBAR_DATASET_NAME,
                                className="card-title",
                            ),
                            html.P(
                                f"{ctx.total_rows} samples",
                                id=IDs.Control.SIDEBAR_DATASET_META,
                                className="card-subtitle text-muted mb-3",
                            ),
                            html.Hr(),
                        ]
                    ),
                    *widgets,
                    html.Hr(),
                    html.Label("Search", className="form-label"),
                    dcc.Input(
                        id=IDs.Control.SEARCH_INPUT,
                        type="search",
                        value="",
                        debounce=debounce,
                        placeholder="IMLGS id, sample, IGSN or description",
                        className="form-control mb-1",
                    ),
                    html.Small(
                        "Case-insensitive regular expression; independent of the filters above.",
                        className="text-muted",
                    ),
                ]
            ),
        ],
        className="ib-sidebar",
    )
