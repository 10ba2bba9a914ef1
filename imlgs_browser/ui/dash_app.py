from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import dash_bootstrap_components as dbc
from dash import Dash

from imlgs_browser.config.loader import load_dataset_registry
from imlgs_browser.logging_config import set_log_dataset
from imlgs_browser.services.dataset_service import DatasetManager
from imlgs_browser.ui.config import AppConfig
from imlgs_browser.ui.helpers import build_widgets
from imlgs_browser.ui.layout.build_layout import build_layout
from imlgs_browser.ui.callbacks.callbacks_record import register_record_callbacks
from imlgs_browser.ui.callbacks.callbacks_results import register_results_callbacks
from imlgs_browser.ui.callbacks.callbacks_url import register_url_callbacks

logger = logging.getLogger(__name__)


def _choose_dataset(names: list[str], default: Optional[str]) -> Optional[str]:
    if not names:
        return None
    if default in names:
        return default
    if default:
        logger.warning("Configured default dataset not found", extra={"default_dataset": default})
    return names[0]


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    config_root = Path(config_root)

    # 1) Load Config
    global_config, cfg_by_name = load_dataset_registry(config_root)

    # 2) Service Layer
    dataset_manager = DatasetManager(cfg_by_name)
    dataset_name = _choose_dataset(sorted(cfg_by_name), global_config.default_dataset)
    set_log_dataset(dataset_name)

    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        datasets=dataset_manager,
        dataset_name=dataset_name,
    )

    # 3) Open the active dataset and enumerate filter candidates once
    if dataset_name is not None:
        view = dataset_manager[dataset_name]
        ctx.filters = dataset_manager.config(dataset_name).filters
        ctx.widgets = asyncio.run(build_widgets(view, ctx.filters))
        ctx.total_rows = asyncio.run(view.count())
        ctx.validate()
        logger.info(
            "Active dataset ready",
            extra={"dataset": dataset_name, "n_rows": ctx.total_rows, "n_filters": len(ctx.filters)},
        )

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        suppress_callback_exceptions=dataset_name is None,
    )
    app.title = global_config.ui_title
    app.layout = build_layout(ctx)

    if dataset_name is not None:
        register_url_callbacks(app, ctx)
        register_results_callbacks(app, ctx)
        register_record_callbacks(app, ctx)

    return app
