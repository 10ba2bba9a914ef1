from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from imlgs_browser.core.exceptions import ConfigError
from imlgs_browser.core.where_clause import ClauseTemplate

FILTER_KINDS = ("select", "text")


@dataclass(frozen=True)
class FilterDefinition:
    """
    One sidebar filter.

    :param column: column enumerated for candidates (trusted, from config only)
    :param label: widget label
    :param kind: "select" (dropdown with counts) or "text" (free text + suggestions)
    :param template: clause template, defaults to "<column>=?"
    :param url_key: query parameter restoring the widget, defaults to the column
    """
    column: str
    label: str
    kind: str = "select"
    template: Optional[str] = None
    url_key: Optional[str] = None

    @property
    def clause_template(self) -> ClauseTemplate:
        if self.template:
            return ClauseTemplate(self.template)
        return ClauseTemplate.equals(self.column)

    @property
    def param_key(self) -> str:
        return self.url_key or self.column

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> FilterDefinition:
        try:
            column = raw["column"]
        except KeyError:
            raise ConfigError(f"Filter entry without 'column': {raw!r}") from None
        kind = raw.get("kind", "select")
        if kind not in FILTER_KINDS:
            raise ConfigError(f"Filter {column!r}: unknown kind {kind!r} (expected one of {FILTER_KINDS})")
        fd = cls(
            column=column,
            label=raw.get("label", column),
            kind=kind,
            template=raw.get("template"),
            url_key=raw.get("url_key"),
        )
        try:
            fd.clause_template
        except ValueError as e:
            raise ConfigError(f"Filter {column!r}: {e}") from e
        return fd


@dataclass
class DatasetConfig:
    """
    Parsed config entry for a single dataset.
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Dataset {self.index}")

    @property
    def source(self) -> str:
        try:
            return str(self.raw["source"])
        except KeyError:
            raise ConfigError(f"Dataset {self.name!r} ({self.source_path}) has no 'source'") from None

    @property
    def view(self) -> str:
        return self.raw.get("view", "imlgs")

    @property
    def max_distinct(self) -> Optional[int]:
        return self.raw.get("max_distinct")

    @property
    def id_column(self) -> str:
        return self.raw.get("id_column", "imlgs")

    @property
    def display_fields(self) -> Optional[List[str]]:
        return self.raw.get("display_fields")

    @property
    def record_fields(self) -> Optional[List[str]]:
        return self.raw.get("record_fields")

    @property
    def spatial_fields(self) -> Optional[List[str]]:
        return self.raw.get("spatial_fields")

    @property
    def extensions(self) -> List[str]:
        return list(self.raw.get("extensions", []))

    @property
    def filters(self) -> List[FilterDefinition]:
        return [FilterDefinition.from_raw(f) for f in self.raw.get("filters", [])]

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> DatasetConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    ui_title: str = "IMLGS Sample Browser"
    subtitle: str = "Index to Marine and Lacustrine Geological Samples"
    default_dataset: Optional[str] = None
    debounce_ms: int = 300
    datasets: List[DatasetConfig] = field(default_factory=list)
