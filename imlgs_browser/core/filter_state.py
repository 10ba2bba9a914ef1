from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional

from imlgs_browser.core.where_clause import ClauseTemplate, FilterValue, Selected, as_filter_value

if TYPE_CHECKING:
    from imlgs_browser.core.observable import ReactiveInputBinding, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterEntry:
    """
    Latest emitted state of one filter input.

    Fields:

    - v: UNSET or Selected(value)
    - c: the clause template the value is bound into
    """

    v: FilterValue
    c: ClauseTemplate

    @classmethod
    def of(cls, value: Any, template: str | ClauseTemplate) -> FilterEntry:
        return cls(as_filter_value(value), ClauseTemplate.coerce(template))

    @property
    def is_set(self) -> bool:
        return isinstance(self.v, Selected)

    def to_dict(self) -> dict[str, Any]:
        return {
            "v": self.v.value if isinstance(self.v, Selected) else None,
            "c": self.c.text,
        }


class FilterInputRegistry:
    """
    Ordered, append-only collection of live filter bindings.

    Registration subscribes to the binding; the registry keeps the most
    recent entry each binding emitted. Order only changes the SQL text
    of the combined clause, never its result.

    `on_change`, when given, is called with every entry a binding emits
    (text inputs usually register a debounced observer instead).
    """

    def __init__(self, on_change: Optional[Callable[[FilterEntry], None]] = None) -> None:
        self.on_change = on_change
        self._bindings: List[ReactiveInputBinding] = []
        self._observers: List[Callable[[FilterEntry], None]] = []
        self._subscriptions: List[Subscription] = []

    def notify(self, entry: FilterEntry) -> None:
        if self.on_change is not None:
            self.on_change(entry)

    def register(
        self,
        binding: ReactiveInputBinding,
        observer: Optional[Callable[[FilterEntry], None]] = None,
    ) -> ReactiveInputBinding:
        observer = observer or self.notify
        self._bindings.append(binding)
        self._observers.append(observer)
        self._subscriptions.append(binding.subscribe(observer))
        logger.debug(
            "Registered filter input",
            extra={"template": binding.template.text, "n_inputs": len(self._bindings)},
        )
        return binding

    def snapshot(self) -> List[FilterEntry]:
        """Point-in-time list of the latest entries, in registration order."""
        return [b.latest for b in self._bindings if b.is_active and b.latest is not None]

    def close(self) -> None:
        for sub in self._subscriptions:
            sub.dispose()
        self._subscriptions.clear()
        # debounced observers may still hold an emission
        for observer in self._observers:
            cancel = getattr(observer, "cancel", None)
            if callable(cancel):
                cancel()

    def __iter__(self) -> Iterator[ReactiveInputBinding]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
