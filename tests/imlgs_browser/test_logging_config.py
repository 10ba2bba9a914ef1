from __future__ import annotations

import json
import logging

import pytest

from imlgs_browser.logging_config import DatasetContextFilter, configure_logging, set_log_dataset


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    set_log_dataset(None)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("imlgs_browser.test", logging.INFO, __file__, 1, "dataset_loaded", None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_lines_carry_app_and_dataset(root_logger):
    configure_logging(force_format="json", dataset="imlgs")
    handler = root_logger.handlers[0]

    record = _record()
    assert handler.filter(record)
    payload = json.loads(handler.format(record))

    assert payload["app"] == "imlgs_browser"
    assert payload["dataset"] == "imlgs"
    assert payload["message"] == "dataset_loaded"


def test_plain_format_follows_active_dataset(root_logger):
    configure_logging(force_format="plain")
    handler = root_logger.handlers[0]

    set_log_dataset("imlgs")
    record = _record()
    handler.filter(record)

    assert "imlgs_browser/imlgs imlgs_browser.test: dataset_loaded" in handler.format(record)


def test_explicit_extra_dataset_wins():
    record = _record(dataset="other")

    DatasetContextFilter("imlgs").filter(record)

    assert record.dataset == "other"
    assert record.app == "imlgs_browser"
