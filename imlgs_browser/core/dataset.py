from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import duckdb

from imlgs_browser.core.exceptions import DatasetConnectionError, NotFoundError, QueryError
from imlgs_browser.core.filter_state import FilterEntry, FilterInputRegistry
from imlgs_browser.core.inputs import ALL_LABEL, Candidates, SelectInput, TextInput
from imlgs_browser.core.observable import ReactiveInputBinding, debounced_observer
from imlgs_browser.core.url_state import UrlState, get_url_param, restore_selection
from imlgs_browser.core.where_clause import (
    NULL_WHERE_CLAUSE,
    ClauseTemplate,
    Selected,
    WhereClause,
    WhereClauseBuilder,
)

if TYPE_CHECKING:
    from imlgs_browser.core.facet import Facet

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

DEFAULT_VIEW = "imlgs"
DEFAULT_ID_COLUMN = "imlgs"
DEFAULT_MAX_DISTINCT = 7000

DEFAULT_DISPLAY_FIELDS = [
    "imlgs",
    "platform",
    "device",
    "facility.facility_code AS repository",
]

DEFAULT_RECORD_FIELDS = [
    "imlgs",
    "igsn",
    "platform",
    "cruise",
    "sample",
    "device",
    "water_depth",
    "facility",
    "ship_code",
    "links",
    "intervals",
    "storage_meth",
    "cored_length",
    "cored_diam",
    "pi",
    "province",
    "lake",
    "leg",
    "sample_comments",
    "CASE WHEN lon IS NULL OR lat IS NULL THEN NULL "
    "ELSE concat('POINT (', lon, ' ', lat, ')') END AS geometry",
    "begin_jd",
]

DEFAULT_SPATIAL_FIELDS = [
    "imlgs",
    "lon",
    "lat",
    "facility.facility_code AS repository",
    "platform",
    "begin_jd",
]

SEARCH_COLUMNS = ("imlgs", "sample", "igsn", "description")

FieldSet = Union[str, Sequence[str]]


def _fetch(conn: duckdb.DuckDBPyConnection, sql: str, params: List[Any]) -> List[Row]:
    # one cursor per call: cursors are independent connections to the same database
    cur = conn.cursor()
    try:
        cur.execute(sql, params)
        columns = [d[0] for d in cur.description]
        return [dict(zip(columns, row)) for row in cur.fetchall()]
    finally:
        cur.close()


class DatasetView:
    """
    Named DuckDB view over one parquet source.

    - initialize() creates the view once
    - every query method is async and takes an optional WhereClause
    - field sets pick the projection per call site (table / record / spatial)
    - candidate enumeration is bounded by max_distinct
    """

    def __init__(
        self,
        data_source: str,
        data_view: Optional[str] = None,
        display_fields: Optional[Sequence[str]] = None,
        max_distinct: Optional[int] = None,
        *,
        record_fields: Optional[Sequence[str]] = None,
        spatial_fields: Optional[Sequence[str]] = None,
        id_column: str = DEFAULT_ID_COLUMN,
        search_columns: Sequence[str] = SEARCH_COLUMNS,
        extensions: Sequence[str] = (),
        allowed_columns: Optional[Iterable[str]] = None,
        join: str = "AND",
    ) -> None:
        self.data_source = data_source
        self.data_view = data_view or DEFAULT_VIEW
        self.field_sets: Dict[str, List[str]] = {
            "table": list(display_fields or DEFAULT_DISPLAY_FIELDS),
            "record": list(record_fields or DEFAULT_RECORD_FIELDS),
            "spatial": list(spatial_fields or DEFAULT_SPATIAL_FIELDS),
        }
        self.max_distinct = max_distinct or DEFAULT_MAX_DISTINCT
        self.id_column = id_column
        self.search_columns = tuple(search_columns)
        self.extensions = tuple(extensions)
        self.allowed_columns = frozenset(allowed_columns) if allowed_columns is not None else None
        self.builder = WhereClauseBuilder(join=join)
        self._conn: Optional[duckdb.DuckDBPyConnection] = None

    # -------------------------------------------------------------------------
    # Connection
    # -------------------------------------------------------------------------
    @property
    def db(self) -> Optional[duckdb.DuckDBPyConnection]:
        return self._conn

    @property
    def tbl(self) -> str:
        return self.data_view

    @property
    def is_initialized(self) -> bool:
        return self._conn is not None

    def _open(self) -> duckdb.DuckDBPyConnection:
        conn = duckdb.connect()
        try:
            for ext in self.extensions:
                conn.install_extension(ext)
                conn.load_extension(ext)
            source = self.data_source.replace("'", "''")
            conn.execute(
                f"CREATE OR REPLACE VIEW {self.data_view} AS SELECT * FROM read_parquet('{source}')"
            )
            conn.execute(f"SELECT * FROM {self.data_view} LIMIT 0")
        except Exception:
            conn.close()
            raise
        return conn

    async def initialize(self) -> None:
        """Create the view over the source. Calling it again is a no-op."""
        if self._conn is not None:
            return
        logger.info(
            "Initializing dataset view",
            extra={"source": self.data_source, "view": self.data_view},
        )
        try:
            conn = await asyncio.to_thread(self._open)
        except (duckdb.Error, OSError) as e:
            logger.error(
                "Failed to open dataset source",
                extra={"source": self.data_source, "view": self.data_view, "error": str(e)},
            )
            raise DatasetConnectionError(
                f"Could not open {self.data_source!r} as view {self.data_view!r}: {e}"
            ) from e
        # a concurrent initialize() may have won the race
        if self._conn is None:
            self._conn = conn
        else:
            conn.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _require_connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise DatasetConnectionError(f"Dataset view {self.data_view!r} is not initialized")
        return self._conn

    async def _query(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        conn = self._require_connection()
        logger.debug("Running query", extra={"sql": sql, "n_params": len(params)})
        try:
            return await asyncio.to_thread(_fetch, conn, sql, list(params))
        except duckdb.Error as e:
            logger.error("Query failed", extra={"sql": sql, "error": str(e)})
            raise QueryError(f"{e} [query: {sql}]") from e

    async def _query_row(self, sql: str, params: Sequence[Any] = ()) -> Row:
        rows = await self._query(sql, params)
        if not rows:
            raise NotFoundError(f"No rows for query: {sql}")
        if len(rows) > 1:
            raise QueryError(f"Expected a single row, got {len(rows)} for query: {sql}")
        return rows[0]

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    @staticmethod
    def _where(where_clause: Optional[WhereClause]) -> WhereClause:
        return NULL_WHERE_CLAUSE if where_clause is None else where_clause

    def _check_column(self, column: str) -> str:
        if self.allowed_columns is not None and column not in self.allowed_columns:
            raise QueryError(f"Column {column!r} is not an allowed filter column")
        return column

    def _fields(self, fields: FieldSet) -> List[str]:
        if isinstance(fields, str):
            try:
                return self.field_sets[fields]
            except KeyError:
                raise QueryError(f"Unknown field set {fields!r}") from None
        return list(fields)

    def where_clause(self, registry: FilterInputRegistry, where_clause_extra: str = "") -> WhereClause:
        return self.builder.build(registry.snapshot(), where_clause_extra)

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------
    async def get_columns(self) -> List[Row]:
        q = f"SELECT column_name, column_type FROM (DESCRIBE {self.data_view})"
        return await self._query(q)

    async def column_stats(self, column: str, key: Optional[str] = None) -> Row:
        column = self._check_column(column)
        q = (
            f"SELECT min({column}) AS min, max({column}) AS max, "
            f"count(DISTINCT {column}) AS n FROM {self.data_view}"
        )
        row = await self._query_row(q)
        return {"k": key or column, **row}

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------
    async def count(self, where_clause: Optional[WhereClause] = None) -> int:
        where = self._where(where_clause)
        row = await self._query_row(f"SELECT count(*) AS n FROM {self.data_view}{where.clause}", where.params)
        return int(row["n"])

    async def count_distinct(self, column: str, where_clause: Optional[WhereClause] = None) -> int:
        column = self._check_column(column)
        where = self._where(where_clause)
        row = await self._query_row(
            f"SELECT count(DISTINCT {column}) AS n FROM {self.data_view}{where.clause}",
            where.params,
        )
        return int(row["n"])

    async def distinct(self, column: str, where_clause: Optional[WhereClause] = None) -> List[Any]:
        column = self._check_column(column)
        where = self._where(where_clause)
        rows = await self._query(
            f"SELECT DISTINCT {column} AS d FROM {self.data_view}{where.clause} ORDER BY d",
            where.params,
        )
        return [r["d"] for r in rows]

    async def distinct_counts(
        self, column: str, where_clause: Optional[WhereClause] = None
    ) -> List[Tuple[Any, int]]:
        column = self._check_column(column)
        where = self._where(where_clause)
        rows = await self._query(
            f"SELECT {column} AS d, count(*) AS n FROM {self.data_view}{where.clause} GROUP BY d ORDER BY d",
            where.params,
        )
        return [(r["d"], int(r["n"])) for r in rows]

    async def candidates(self, column: str, where_clause: Optional[WhereClause] = None) -> Candidates:
        """
        Distinct (value, count) pairs for a widget, only when there are fewer
        than max_distinct of them. NULL is never a candidate.
        """
        total = await self.count_distinct(column, where_clause)
        if total >= self.max_distinct:
            logger.info(
                "Too many distinct values for suggestions",
                extra={"column": column, "n_distinct": total, "max_distinct": self.max_distinct},
            )
            return Candidates(column=column, total=total, max_distinct=self.max_distinct)

        pairs = [(v, n) for v, n in await self.distinct_counts(column, where_clause) if v is not None]
        return Candidates(column=column, total=total, max_distinct=self.max_distinct, pairs=tuple(pairs))

    async def values_for(self, facet: Facet, where_clause: Optional[WhereClause] = None) -> List[Tuple[Any, int]]:
        """Facet enumeration over the facet's own source, bounded by max_distinct."""
        source = facet.from_clause(self.data_view)
        where = self._where(where_clause)
        row = await self._query_row(
            f"SELECT count(DISTINCT {facet.field}) AS n FROM {source}{where.clause}",
            where.params,
        )
        if int(row["n"]) >= self.max_distinct:
            logger.info(
                "Facet enumeration suppressed",
                extra={"facet": facet.name, "n_distinct": int(row["n"]), "max_distinct": self.max_distinct},
            )
            return []
        rows = await self._query(
            f"SELECT {facet.value_clause('v')}, count(*) AS n FROM {source}{where.clause} GROUP BY v ORDER BY v",
            where.params,
        )
        return [(r["v"], int(r["n"])) for r in rows if r["v"] is not None]

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------
    async def select(
        self,
        fields: FieldSet,
        where_clause: Optional[WhereClause] = None,
        single_row: bool = False,
        limit: Optional[int] = None,
    ) -> Union[Row, List[Row]]:
        where = self._where(where_clause)
        query = f"SELECT {', '.join(self._fields(fields))} FROM {self.data_view}{where.clause}"
        if limit is not None:
            query += f" LIMIT {int(limit)}"
        if single_row:
            return await self._query_row(query, where.params)
        return await self._query(query, where.params)

    async def get_display_records(
        self, where_clause: Optional[WhereClause] = None, limit: Optional[int] = None
    ) -> List[Row]:
        return await self.select("table", where_clause, limit=limit)

    async def get_spatial_records(
        self, where_clause: Optional[WhereClause] = None, limit: Optional[int] = None
    ) -> List[Row]:
        return await self.select("spatial", where_clause, limit=limit)

    async def search(self, term: str, limit: Optional[int] = None) -> List[Row]:
        """
        Case-insensitive regular expression match over the search columns.

        An empty term matches every row with a non-null search column.
        """
        search_builder = WhereClauseBuilder(join="OR")
        where = search_builder.build(
            FilterEntry(Selected(term), ClauseTemplate.pattern(c)) for c in self.search_columns
        )
        return await self.select("table", where, limit=limit)

    async def get_record(self, pid: Any) -> Row:
        where = WhereClause(f" WHERE {self.id_column}=?", (pid,))
        try:
            return await self.select("record", where, single_row=True)
        except NotFoundError:
            raise NotFoundError(f"No record with {self.id_column}={pid!r}") from None

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------
    async def new_text_input(self, column: str, label: str, default_value: Optional[str] = None) -> TextInput:
        candidates = await self.candidates(column, NULL_WHERE_CLAUSE)
        return TextInput(
            label=f"{label} ({candidates.total})",
            value=default_value or "",
            datalist=[f"{v}" for v in candidates.values],
        )

    async def new_select_input(self, column: str, label: str, default_value: Optional[str] = None) -> SelectInput:
        candidates = await self.candidates(column, NULL_WHERE_CLAUSE)
        options = [(ALL_LABEL, candidates.total)] + list(candidates.pairs)
        return SelectInput(
            label=f"{label} ({candidates.total})",
            options=options,
            value=restore_selection(options, default_value),
        )

    async def new_input_observer(
        self,
        column: str,
        label: str,
        template: Union[str, ClauseTemplate],
        registry: FilterInputRegistry,
        url_key: Optional[str] = None,
        url: Optional[UrlState] = None,
    ) -> Tuple[SelectInput, ReactiveInputBinding]:
        url_val = get_url_param(url, url_key or column)
        inputer = await self.new_select_input(column, label, url_val)
        binding = registry.register(ReactiveInputBinding(inputer, template))
        return inputer, binding

    async def new_text_input_observer(
        self,
        column: str,
        label: str,
        template: Union[str, ClauseTemplate],
        registry: FilterInputRegistry,
        url_key: Optional[str] = None,
        url: Optional[UrlState] = None,
        debounce_wait: Optional[float] = None,
    ) -> Tuple[TextInput, ReactiveInputBinding]:
        """
        Like new_input_observer. With `debounce_wait` (seconds), keystrokes
        reach `registry.on_change` coalesced into one call.
        """
        url_val = get_url_param(url, url_key or column)
        inputer = await self.new_text_input(column, label, url_val)
        binding = registry.register(
            ReactiveInputBinding(inputer, template),
            debounced_observer(registry.notify, debounce_wait),
        )
        return inputer, binding

    def __repr__(self) -> str:
        return f"DatasetView(source={self.data_source!r}, view={self.data_view!r})"
