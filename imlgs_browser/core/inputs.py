from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from imlgs_browser.core.where_clause import UNSET, FilterValue, Selected

ALL_LABEL = "All"
INPUT_EVENT = "input"

Listener = Callable[[], None]


@dataclass(frozen=True)
class Candidates:
    """
    Distinct (value, count) pairs for one column.

    When the column has max_distinct or more values the pairs are not
    materialised and `exceeded` is set; widgets then offer free typing
    without suggestions.
    """

    column: str
    total: int
    max_distinct: int
    pairs: Tuple[Tuple[Any, int], ...] = field(default_factory=tuple)

    @property
    def exceeded(self) -> bool:
        return self.total >= self.max_distinct

    @property
    def values(self) -> List[Any]:
        return [v for v, _ in self.pairs]


class InputControl:
    """
    UI-toolkit independent input widget.

    Holds a raw value and notifies "input" listeners whenever it changes,
    the same way a DOM input element would.
    """

    def __init__(self, label: str, value: Any = None) -> None:
        self.label = label
        self._raw = value
        self._listeners: Dict[str, List[Listener]] = {}

    @property
    def raw_value(self) -> Any:
        return self._raw

    @property
    def value(self) -> FilterValue:
        if self._raw is None:
            return UNSET
        return Selected(self._raw)

    def set_value(self, value: Any) -> None:
        self._raw = value
        self.dispatch(INPUT_EVENT)

    def add_listener(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str = INPUT_EVENT) -> int:
        return len(self._listeners.get(event, []))

    def dispatch(self, event: str) -> None:
        # copy: a listener may detach itself while being notified
        for listener in list(self._listeners.get(event, [])):
            listener()


class TextInput(InputControl):
    """Free text field with an optional datalist of suggestions."""

    def __init__(
        self,
        label: str,
        value: Optional[str] = None,
        datalist: Sequence[str] = (),
        placeholder: Optional[str] = None,
    ) -> None:
        super().__init__(label, value or "")
        self.datalist = list(datalist)
        self.placeholder = placeholder

    @property
    def value(self) -> FilterValue:
        # blank text means "no filter"
        if self._raw is None or str(self._raw) == "":
            return UNSET
        return Selected(str(self._raw))

    @property
    def has_suggestions(self) -> bool:
        return bool(self.datalist)


class SelectInput(InputControl):
    """
    Single-choice select over [display, count] pairs.

    The first option is always ("All", total); choosing it, or nothing,
    leaves the filter unset.
    """

    def __init__(
        self,
        label: str,
        options: Sequence[Tuple[Any, int]],
        value: Any = None,
    ) -> None:
        super().__init__(label, value)
        self.options = [tuple(o) for o in options]

    @staticmethod
    def format(option: Tuple[Any, int]) -> str:
        return f"{option[0]} ({option[1]})"

    @property
    def value(self) -> FilterValue:
        if self._raw is None or self._raw == ALL_LABEL:
            return UNSET
        return Selected(self._raw)

    @property
    def choices(self) -> List[Any]:
        return [o[0] for o in self.options]

    def set_value(self, value: Any) -> None:
        if value is not None and value not in self.choices:
            raise ValueError(f"{value!r} is not an option of {self.label!r}")
        super().set_value(value)
