from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence

import dash
from dash import ALL, Input, Output

from imlgs_browser.config.model import FilterDefinition
from imlgs_browser.core.inputs import InputControl, SelectInput
from imlgs_browser.core.url_state import UrlState, get_url_param, restore_selection
from imlgs_browser.ui.ids import IDs

if TYPE_CHECKING:
    from imlgs_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)


def restore_values(
    filters: Sequence[FilterDefinition],
    widgets: Mapping[str, InputControl],
    search: Optional[str],
) -> List[Any]:
    """
    Widget values seeded from the query string, one per filter.

    Select values must match an option case-insensitively, otherwise the
    widget stays on "All". Text values are taken verbatim.
    """
    url = UrlState.from_location(search)
    values: List[Any] = []
    for fd in filters:
        raw = get_url_param(url, fd.param_key)
        control = widgets[fd.column]
        if isinstance(control, SelectInput):
            values.append(restore_selection(control.options, raw))
        else:
            values.append(raw or "")
    return values


def register_url_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Query string -> widget values (read once on page load)
    # ---------------------------------------------------------
    @app.callback(
        Output({"type": IDs.Pattern.FILTER_INPUT, "index": ALL}, "value"),
        Input(IDs.Control.URL, "search"),
    )
    def restore_filters_from_url(search: str | None):
        values = restore_values(ctx.filters, ctx.widgets, search)
        logger.info(
            "filters_restored_from_url",
            extra={"search": search, "n_set": sum(1 for v in values if v)},
        )
        return values
