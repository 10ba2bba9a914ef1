from __future__ import annotations

import logging
import os
from pathlib import Path

from imlgs_browser.config.model import DatasetConfig
from imlgs_browser.core.dataset import DatasetView

logger = logging.getLogger(__name__)

DATA_ROOT_ENV = "IMLGS_BROWSER_DATA_ROOT"


def resolve_source(source: str) -> str:
    """
    Resolve a configured parquet source.

    URLs (anything with a scheme) and absolute paths are used as-is; relative
    paths are joined onto IMLGS_BROWSER_DATA_ROOT when it is set.
    """
    if "://" in source:
        return source

    path = Path(source)
    if not path.is_absolute():
        data_root = os.environ.get(DATA_ROOT_ENV)
        if data_root:
            path = Path(data_root) / path
    return str(path)


def from_config(cfg: DatasetConfig) -> DatasetView:
    """
    Build an (uninitialized) DatasetView from a DatasetConfig.
    """
    source = resolve_source(cfg.source)
    filters = cfg.filters

    logger.info(
        "Building dataset view",
        extra={"dataset": cfg.name, "source": source, "view": cfg.view, "n_filters": len(filters)},
    )

    return DatasetView(
        data_source=source,
        data_view=cfg.view,
        display_fields=cfg.display_fields,
        max_distinct=cfg.max_distinct,
        record_fields=cfg.record_fields,
        spatial_fields=cfg.spatial_fields,
        id_column=cfg.id_column,
        extensions=cfg.extensions,
        allowed_columns=[f.column for f in filters] if filters else None,
    )
