from __future__ import annotations

from typing import Sequence

import dash_bootstrap_components as dbc
from dash import dcc, html

from imlgs_browser.ui.helpers import output_column_name, results_table
from imlgs_browser.ui.ids import IDs


def build_results_panel(display_fields: Sequence[str]) -> dbc.Card:
    columns = [output_column_name(f) for f in display_fields]

    return dbc.Card(
        [
            dbc.CardHeader(
                html.Div(
                    [
                        html.Strong("Samples"),
                        html.Span(id=IDs.Control.RESULTS_COUNT, className="ms-2 text-muted small"),
                    ],
                    className="d-flex align-items-center",
                ),
                className="p-2",
            ),
            dbc.CardBody(
                dcc.Tabs(
                    value="table",
                    children=[
                        dcc.Tab(
                            label="Table",
                            value="table",
                            children=dcc.Loading(
                                type="default",
                                children=results_table(IDs.Control.RESULTS_TABLE, columns),
                            ),
                        ),
                        dcc.Tab(
                            label="Map",
                            value="map",
                            children=dcc.Loading(
                                type="default",
                                children=dcc.Graph(
                                    id=IDs.Control.RESULTS_MAP,
                                    style={"height": "550px"},
                                    config={"responsive": True},
                                ),
                            ),
                        ),
                        dcc.Tab(
                            label="Search",
                            value="search",
                            children=[
                                html.Div(id=IDs.Control.SEARCH_COUNT, className="text-muted small my-2"),
                                dcc.Loading(
                                    type="default",
                                    children=results_table(IDs.Control.SEARCH_TABLE, columns),
                                ),
                            ],
                        ),
                    ],
                ),
                className="ib-main-body",
            ),
        ],
        className="ib-maincard",
    )
