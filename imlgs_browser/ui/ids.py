from __future__ import annotations

__all__ = ["IDs", "filter_input_id", "filter_datalist_id"]


class IDs:
    class Store:
        FILTER_VALUES = "filter-values"

    class Control:
        # Router
        URL = "url"

        # Sidebar
        SIDEBAR_DATASET_NAME = "sidebar-dataset-name"
        SIDEBAR_DATASET_META = "sidebar-dataset-meta"
        SEARCH_INPUT = "search-input"
        SEARCH_COUNT = "search-count"
        SEARCH_TABLE = "search-table"

        # Results
        RESULTS_COUNT = "results-count"
        RESULTS_TABLE = "results-table"
        RESULTS_MAP = "results-map"

        # Record detail
        RECORD_CARD = "record-card"
        RECORD_JSONLD = "record-jsonld"

        # Status bar
        STATUS_BAR = "status-bar"

    class Pattern:
        # pattern-matching "type" strings
        FILTER_INPUT = "filter-input"
        FILTER_DATALIST = "filter-datalist"


def _slug(column: str) -> str:
    # "." is reserved in Dash component ids
    return column.replace(".", "__")


def filter_input_id(column: str) -> dict:
    return {"type": IDs.Pattern.FILTER_INPUT, "index": _slug(column)}


def filter_datalist_id(column: str) -> str:
    # referenced by the input's `list` attribute, so it must be a plain string
    return f"{IDs.Pattern.FILTER_DATALIST}-{_slug(column)}"
