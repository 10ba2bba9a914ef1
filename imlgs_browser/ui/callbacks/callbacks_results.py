from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, List, Sequence

import dash
from dash import ALL, Input, Output, no_update

from imlgs_browser.core.dataset import DatasetView
from imlgs_browser.core.exceptions import ImlgsBrowserError
from imlgs_browser.core.where_clause import WhereClause
from imlgs_browser.ui.callbacks.callbacks_utils import run_sync, values_from_store, values_to_store
from imlgs_browser.ui.helpers import map_figure, message_figure, table_records, where_clause_for
from imlgs_browser.ui.ids import IDs

if TYPE_CHECKING:
    from imlgs_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)

ROW_LIMIT = 10000


def build_where_clause(ctx: AppConfig, values: Sequence[Any]) -> WhereClause:
    return where_clause_for(ctx.view, ctx.filters, ctx.widgets, values)


async def _load_results(view: DatasetView, where: WhereClause):
    return await asyncio.gather(
        view.count(where),
        view.get_display_records(where, limit=ROW_LIMIT),
        view.get_spatial_records(where, limit=ROW_LIMIT),
    )


def _count_text(n: int, shown: int) -> str:
    if shown < n:
        return f"{n} samples (showing first {shown})"
    return f"{n} samples"


def load_results(ctx: AppConfig, store_data: object):
    """
    Count text, table rows and map figure for the stored filter values.

    Query errors are logged with their SQL; the client only sees a
    generic message.
    """
    values = values_from_store(store_data, len(ctx.filters))
    if values is None:
        return "", [], message_figure("No filters applied yet.")

    view = ctx.view
    try:
        where = build_where_clause(ctx, values)
        n, rows, points = run_sync(_load_results(view, where))
    except ImlgsBrowserError:
        logger.exception("Error in update_results", extra={"values": [str(v) for v in values]})
        return "Query failed.", [], message_figure("Query failed.")

    return (
        _count_text(n, len(rows)),
        table_records(rows, view.id_column),
        map_figure(points),
    )


def register_results_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Widget values -> filter store
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.FILTER_VALUES, "data"),
        Output(IDs.Control.STATUS_BAR, "children"),
        Input({"type": IDs.Pattern.FILTER_INPUT, "index": ALL}, "value"),
    )
    def update_filter_values(values: List[Any]):
        try:
            where = build_where_clause(ctx, values)
        except ImlgsBrowserError:
            logger.exception("Could not build where clause", extra={"values": [str(v) for v in values]})
            return no_update, "Invalid filter."

        logger.info("where_clause_updated", extra={"clause": where.clause, "n_params": len(where.params)})
        return values_to_store(values), ""

    # ---------------------------------------------------------
    # Filter values -> count, table, map
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.RESULTS_COUNT, "children"),
        Output(IDs.Control.RESULTS_TABLE, "data"),
        Output(IDs.Control.RESULTS_MAP, "figure"),
        Input(IDs.Store.FILTER_VALUES, "data"),
    )
    def update_results(store_data: dict | None):
        return load_results(ctx, store_data)

    # ---------------------------------------------------------
    # Free-text search (independent of the filters)
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.SEARCH_COUNT, "children"),
        Output(IDs.Control.SEARCH_TABLE, "data"),
        Input(IDs.Control.SEARCH_INPUT, "value"),
    )
    def update_search(term: str | None):
        if not term or not term.strip():
            return "Enter a search term.", []

        view = ctx.view
        try:
            rows = run_sync(view.search(term.strip(), limit=ROW_LIMIT))
        except ImlgsBrowserError:
            logger.exception("Error in update_search", extra={"term": term})
            return "Search failed.", []

        logger.info("search_done", extra={"term": term, "n_rows": len(rows)})
        return f"{len(rows)} matching samples", table_records(rows, view.id_column)
