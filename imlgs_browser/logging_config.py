from __future__ import annotations

import logging
import os
from typing import Optional

from pythonjsonlogger import jsonlogger

LOG_FORMAT_ENV = "IMLGS_BROWSER_LOG_FORMAT"
APP_NAME = "imlgs_browser"


class DatasetContextFilter(logging.Filter):
    """
    Stamps every record with the app name and the active dataset.

    A `dataset` passed through `extra=` wins over the default.
    """

    def __init__(self, dataset: Optional[str] = None) -> None:
        super().__init__()
        self.dataset = dataset

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "app"):
            record.app = APP_NAME
        if not hasattr(record, "dataset"):
            record.dataset = self.dataset or "-"
        return True


_context = DatasetContextFilter()


def set_log_dataset(name: Optional[str]) -> None:
    """Name the dataset the app is serving; shows up on every log line."""
    _context.dataset = name


def configure_logging(
        level: int = logging.INFO,
        force_format: Optional[str] = None,
        dataset: Optional[str] = None,
) -> None:
    """
    Configure root logger for the app

    Modes:
    - JSON (default) in prod
    - plain text (dev mode)

    Selection Order:
        1) force_format argument ("json" or "plain") if provided
        2) env var IMLGS_BROWSER_LOG_FORMAT
        3) default = "json"

    Every line carries `app` and `dataset` fields (see set_log_dataset).
    """

    if force_format is not None:
        format_mode = force_format
    else:
        format_mode = os.getenv(LOG_FORMAT_ENV, "json").lower()

    if dataset is not None:
        set_log_dataset(dataset)

    logger = logging.getLogger()
    logger.setLevel(level)

    handler = logging.StreamHandler()
    handler.addFilter(_context)

    if format_mode == "plain":
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(app)s/%(dataset)s %(name)s: %(message)s"
        )
    else:
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(app)s %(dataset)s %(name)s %(message)s"
        )

    handler.setFormatter(formatter)

    # Replace any existing handlers to avoid duplicate logs
    logger.handlers.clear()
    logger.addHandler(handler)

    # werkzeug logs every request at INFO
    logging.getLogger("werkzeug").setLevel(max(level, logging.WARNING))
