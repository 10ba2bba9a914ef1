from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

from imlgs_browser.ui.ids import IDs
from imlgs_browser.ui.layout.build_filter_panel import build_filter_panel
from imlgs_browser.ui.layout.build_navbar import build_navbar
from imlgs_browser.ui.layout.build_record_panel import build_record_panel
from imlgs_browser.ui.layout.build_results_panel import build_results_panel

if TYPE_CHECKING:
    from imlgs_browser.ui.config import AppConfig


def build_layout(ctx: AppConfig):
    navbar = build_navbar(ctx.global_config)

    if ctx.dataset_name is None:
        body = dbc.Card(
            dbc.CardBody("No datasets configured. Add a dataset file under config/datasets/."),
            className="mt-3",
        )
    else:
        body = dbc.Row(
            [
                dbc.Col(build_filter_panel(ctx), md=3, className="mt-3"),
                dbc.Col(
                    [
                        build_results_panel(ctx.view.field_sets["table"]),
                        build_record_panel(),
                    ],
                    md=9,
                    className="mt-3",
                ),
            ],
            className="gx-3",
        )

    return dbc.Container(
        fluid=True,
        className="ib-root",
        children=[
            navbar,
            dcc.Location(id=IDs.Control.URL, refresh=False),
            dcc.Store(id=IDs.Store.FILTER_VALUES),
            body,
            html.Div(id=IDs.Control.STATUS_BAR, className="small text-muted mt-2"),
        ],
    )
