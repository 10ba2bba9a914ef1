from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, List, Optional
from urllib.parse import urlsplit

import dash
from dash import Input, Output, State, html

from imlgs_browser.core.exceptions import ImlgsBrowserError, NotFoundError
from imlgs_browser.core.record import record_to_jsonld
from imlgs_browser.core.url_state import UrlState, get_id_from_url
from imlgs_browser.ui.callbacks.callbacks_utils import run_sync
from imlgs_browser.ui.helpers import record_card
from imlgs_browser.ui.ids import IDs

if TYPE_CHECKING:
    from imlgs_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)


def record_id_from_cell(active_cell: Optional[dict], data: Optional[List[dict]]) -> Optional[Any]:
    """Record id of the clicked table cell, preferring the DataTable row id."""
    if not active_cell:
        return None
    row_id = active_cell.get("row_id")
    if row_id is not None:
        return row_id
    row = active_cell.get("row")
    if row is None or not data or row >= len(data):
        return None
    return data[row].get("id")


def origin_of(href: Optional[str]) -> Optional[str]:
    if not href:
        return None
    parts = urlsplit(href)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def register_record_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # URL fragment / clicked row -> record detail
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.RECORD_CARD, "children"),
        Output(IDs.Control.RECORD_JSONLD, "children"),
        Input(IDs.Control.URL, "hash"),
        Input(IDs.Control.RESULTS_TABLE, "active_cell"),
        Input(IDs.Control.SEARCH_TABLE, "active_cell"),
        State(IDs.Control.RESULTS_TABLE, "data"),
        State(IDs.Control.SEARCH_TABLE, "data"),
        State(IDs.Control.URL, "href"),
    )
    def show_record(hash_, results_cell, search_cell, results_data, search_data, href):
        triggered = dash.ctx.triggered_id
        if triggered == IDs.Control.RESULTS_TABLE:
            pid = record_id_from_cell(results_cell, results_data)
        elif triggered == IDs.Control.SEARCH_TABLE:
            pid = record_id_from_cell(search_cell, search_data)
        else:
            pid = get_id_from_url(UrlState.from_location(None, hash_))

        if pid is None:
            return dash.no_update, dash.no_update

        try:
            record = run_sync(ctx.view.get_record(pid))
        except NotFoundError:
            logger.warning("Record not found", extra={"pid": str(pid)})
            return html.Div(f"No sample with id {pid}.", className="text-danger"), ""
        except ImlgsBrowserError:
            logger.exception("Error in show_record", extra={"pid": str(pid)})
            return html.Div(f"Could not load sample {pid}.", className="text-danger"), ""

        jsonld = record_to_jsonld(record, origin_of(href))
        return record_card(record), json.dumps(jsonld, indent=2, default=str)
