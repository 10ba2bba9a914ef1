"""
Core domain layer: where-clause compiler, filter inputs and their
reactive bindings, facets, and the DuckDB-backed dataset view
"""

from .dataset import DatasetView
from .facet import Facet
from .filter_state import FilterEntry, FilterInputRegistry
from .observable import ReactiveInputBinding
from .where_clause import NULL_WHERE_CLAUSE, UNSET, ClauseTemplate, Selected, WhereClause, WhereClauseBuilder

__all__ = [
    "DatasetView",
    "Facet",
    "FilterEntry",
    "FilterInputRegistry",
    "ReactiveInputBinding",
    "NULL_WHERE_CLAUSE",
    "UNSET",
    "ClauseTemplate",
    "Selected",
    "WhereClause",
    "WhereClauseBuilder",
]
