from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple, Union

from imlgs_browser.core.exceptions import QueryError

PLACEHOLDER = "?"


# -----------------------------------------------------------------------------
# Filter values
# -----------------------------------------------------------------------------
class Unset:
    """
    Marker for an input with nothing selected.

    Distinct from every column value, including "", 0 and False.
    """

    _instance: "Unset | None" = None

    def __new__(cls) -> "Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = Unset()


@dataclass(frozen=True)
class Selected:
    value: Any


FilterValue = Union[Unset, Selected]


def as_filter_value(raw: Any) -> FilterValue:
    """None -> UNSET, already tagged values unchanged, anything else -> Selected."""
    if isinstance(raw, (Unset, Selected)):
        return raw
    if raw is None:
        return UNSET
    return Selected(raw)


def count_placeholders(text: str) -> int:
    """
    Count positional placeholders outside quoted literals and identifiers.
    """
    n = 0
    quote = None
    for ch in text:
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == PLACEHOLDER:
            n += 1
    return n


# -----------------------------------------------------------------------------
# Predicate nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Comparison:
    column: str
    operator: str = "="

    def render(self) -> str:
        return f"{self.column}{self.operator}{PLACEHOLDER}"


@dataclass(frozen=True)
class PatternMatch:
    """Regular expression match, case-insensitive by default."""

    column: str
    flags: str = "i"

    def render(self) -> str:
        return f"regexp_matches({self.column},{PLACEHOLDER},'{self.flags}')"


PredicateNode = Union[Comparison, PatternMatch]


@dataclass(frozen=True)
class ClauseTemplate:
    """
    One single-column predicate with exactly one placeholder, e.g. "platform=?".
    """

    text: str

    def __post_init__(self) -> None:
        n = count_placeholders(self.text)
        if n != 1:
            raise ValueError(
                f"Clause template must contain exactly one placeholder, got {n}: {self.text!r}"
            )

    @classmethod
    def from_node(cls, node: PredicateNode) -> ClauseTemplate:
        return cls(node.render())

    @classmethod
    def equals(cls, column: str) -> ClauseTemplate:
        return cls.from_node(Comparison(column))

    @classmethod
    def pattern(cls, column: str, flags: str = "i") -> ClauseTemplate:
        return cls.from_node(PatternMatch(column, flags))

    @classmethod
    def coerce(cls, template: Union[str, ClauseTemplate]) -> ClauseTemplate:
        if isinstance(template, ClauseTemplate):
            return template
        return cls(template)

    def __str__(self) -> str:
        return self.text


# -----------------------------------------------------------------------------
# WhereClause
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class WhereClause:
    """
    SQL WHERE clause text plus its positional parameters.

    The clause carries its own leading " WHERE " so it can be appended
    directly to a query; an empty clause means no restriction.
    """

    clause: str
    params: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))
        n = count_placeholders(self.clause)
        if n != len(self.params):
            raise QueryError(
                f"WHERE clause has {n} placeholder(s) but {len(self.params)} parameter(s): {self.clause!r}"
            )

    @property
    def is_empty(self) -> bool:
        return self.clause == ""

    def __bool__(self) -> bool:
        return not self.is_empty


NULL_WHERE_CLAUSE = WhereClause("", ())


class WhereClauseBuilder:
    """
    Combines (value, template) entries into one WhereClause.

    Entries whose value is UNSET are skipped and contribute no parameter.
    """

    def __init__(self, join: str = "AND") -> None:
        self.join = join

    @property
    def join_token(self) -> str:
        return f" {self.join} "

    def build(self, entries: Iterable[Any], extra_predicate: str = "") -> WhereClause:
        clauses: list[str] = []
        params: list[Any] = []

        for entry in entries:
            value = as_filter_value(entry.v)
            if isinstance(value, Unset):
                continue
            clauses.append(ClauseTemplate.coerce(entry.c).text)
            params.append(value.value)

        if extra_predicate:
            if count_placeholders(extra_predicate) != 0:
                raise QueryError(f"Extra predicate must not contain placeholders: {extra_predicate!r}")
            clauses.append(extra_predicate)

        if not clauses:
            return NULL_WHERE_CLAUSE
        return WhereClause(f" WHERE {self.join_token.join(clauses)}", params)

