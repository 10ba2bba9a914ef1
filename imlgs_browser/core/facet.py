from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

from imlgs_browser.core.filter_state import FilterEntry
from imlgs_browser.core.inputs import ALL_LABEL, SelectInput
from imlgs_browser.core.observable import ReactiveInputBinding
from imlgs_browser.core.where_clause import UNSET, ClauseTemplate, FilterValue, WhereClause, as_filter_value

if TYPE_CHECKING:
    from imlgs_browser.core.dataset import DatasetView


class Facet:
    """
    One categorical dimension to filter on.

    :param name: display name, used as the widget label
    :param field: column or expression enumerated for candidate values
    :param source: relation the values come from, defaults to the dataset view
    :param where: column the predicate is written against, defaults to `field`
    :param sel_value: value used until an input is attached
    """

    def __init__(
        self,
        name: str,
        field: str,
        source: Optional[str] = None,
        where: Optional[str] = None,
        sel_value: Any = UNSET,
    ) -> None:
        self.name = name
        self.field = field
        self.source = source
        self._where = where or field
        self._value: FilterValue = as_filter_value(sel_value)
        self.input: Optional[SelectInput] = None

    @property
    def value(self) -> FilterValue:
        if self.input is None:
            return self._value
        return self.input.value

    def value_clause(self, name: str = "v") -> str:
        return f"{self.field} AS {name}"

    def from_clause(self, default_source: str) -> str:
        return self.source or default_source

    def where_clause(self) -> ClauseTemplate:
        return ClauseTemplate.equals(self._where)

    def entry(self) -> FilterEntry:
        return FilterEntry(self.value, self.where_clause())

    async def values(self, view: DatasetView, where: Optional[WhereClause] = None) -> List[Any]:
        """
        Candidate values, always led by UNSET.

        `where` may carry the other active facets so candidates cascade.
        """
        pairs = await view.values_for(self, where)
        return [UNSET] + [v for v, _ in pairs]

    async def initialize(self, view: DatasetView, where: Optional[WhereClause] = None) -> SelectInput:
        pairs = await view.values_for(self, where)
        total = len(pairs)
        current = self.value
        initial = current.value if current is not UNSET else None
        choices = [v for v, _ in pairs]
        self.input = SelectInput(
            label=self.name,
            options=[(ALL_LABEL, total)] + list(pairs),
            value=initial if initial in choices else None,
        )
        return self.input

    def bind(self) -> ReactiveInputBinding:
        if self.input is None:
            raise RuntimeError(f"Facet {self.name!r} has no input; call initialize() first")
        return ReactiveInputBinding(self.input, self.where_clause())

    def __repr__(self) -> str:
        return f"Facet(name={self.name!r}, field={self.field!r})"
