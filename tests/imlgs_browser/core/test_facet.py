from __future__ import annotations

import asyncio

import pytest

from imlgs_browser.core.facet import Facet
from imlgs_browser.core.filter_state import FilterEntry, FilterInputRegistry
from imlgs_browser.core.where_clause import UNSET, Selected, WhereClauseBuilder


def test_values_are_prefixed_with_unset(view):
    facet = Facet("Platform", "platform")

    values = asyncio.run(facet.values(view))

    assert values == [UNSET, "Atlantis", "Knorr"]


def test_values_cascade_with_other_facets(view):
    platform = Facet("Platform", "platform", sel_value="Knorr")
    device = Facet("Device", "device")
    where = WhereClauseBuilder().build([platform.entry()])

    assert asyncio.run(device.values(view, where)) == [UNSET, "Dredge", "Grab"]


def test_values_suppressed_at_cutoff(view_factory):
    view = view_factory(max_distinct=2)
    asyncio.run(view.initialize())
    try:
        assert asyncio.run(Facet("Platform", "platform").values(view)) == [UNSET]
    finally:
        view.close()


def test_struct_field_facet(view):
    facet = Facet("Repository", "facility.facility_code")

    assert asyncio.run(facet.values(view)) == [UNSET, "LDEO", "OSU", "WHOI"]
    assert facet.where_clause().text == "facility.facility_code=?"


def test_entry_before_input_uses_initial_value():
    facet = Facet("Platform", "platform", sel_value="Knorr")

    assert facet.entry() == FilterEntry(Selected("Knorr"), facet.where_clause())
    assert Facet("Device", "device").value is UNSET


def test_initialize_builds_select_and_keeps_selection(view):
    facet = Facet("Platform", "platform", sel_value="Knorr")

    control = asyncio.run(facet.initialize(view))

    # "All" counts distinct values, like the select inputs DatasetView builds
    assert control.options == [("All", 2), ("Atlantis", 2), ("Knorr", 2)]
    assert control.raw_value == "Knorr"
    assert facet.value == Selected("Knorr")


def test_initialize_drops_selection_not_among_candidates(view):
    facet = Facet("Platform", "platform", sel_value="Thompson")

    asyncio.run(facet.initialize(view))

    assert facet.value is UNSET


def test_bind_requires_initialize(view):
    facet = Facet("Device", "device")
    with pytest.raises(RuntimeError):
        facet.bind()

    asyncio.run(facet.initialize(view))
    registry = FilterInputRegistry()
    registry.register(facet.bind())
    facet.input.set_value("Grab")

    where = view.where_clause(registry)
    assert where.clause == " WHERE device=?"
    assert asyncio.run(view.count(where)) == 1


def test_custom_source_and_where_column():
    facet = Facet("Repository", "facility_code", source="facilities", where="facility.facility_code")

    assert facet.from_clause("samples") == "facilities"
    assert Facet("Device", "device").from_clause("samples") == "samples"
    assert facet.value_clause() == "facility_code AS v"
    assert facet.where_clause().text == "facility.facility_code=?"


def test_initialize_all_option_matches_select_input(view):
    facet = Facet("Device", "device")

    control = asyncio.run(facet.initialize(view))
    select = asyncio.run(view.new_select_input("device", "Device"))

    assert control.options[0] == select.options[0] == ("All", 3)
