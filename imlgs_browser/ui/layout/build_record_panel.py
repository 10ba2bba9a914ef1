from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import html

from imlgs_browser.ui.ids import IDs


def build_record_panel() -> dbc.Card:
    """
    Record detail:

    - summary and intervals of the selected sample
    - its JSON-LD rendering
    """
    return dbc.Card(
        [
            dbc.CardHeader("Sample record", className="fw-semibold"),
            dbc.CardBody(
                [
                    html.Div(
                        "Select a row or open a link ending in #<imlgs id>.",
                        id=IDs.Control.RECORD_CARD,
                        className="small",
                    ),
                    html.Details(
                        [
                            html.Summary("JSON-LD"),
                            html.Pre(id=IDs.Control.RECORD_JSONLD, className="small"),
                        ],
                        className="mt-2",
                    ),
                ]
            ),
        ],
        className="mt-3",
    )
