from __future__ import annotations

from imlgs_browser.core.filter_state import FilterEntry, FilterInputRegistry
from imlgs_browser.core.inputs import SelectInput, TextInput
from imlgs_browser.core.observable import ReactiveInputBinding
from imlgs_browser.core.where_clause import UNSET, Selected, WhereClauseBuilder


def _select(value=None) -> SelectInput:
    return SelectInput("Platform", [("All", 4), ("Atlantis", 2), ("Knorr", 2)], value)


def test_registry_snapshot_follows_inputs():
    registry = FilterInputRegistry()
    platform = _select()
    cruise = TextInput("Cruise")
    registry.register(ReactiveInputBinding(platform, "platform=?"))
    registry.register(ReactiveInputBinding(cruise, "cruise.cruise=?"))

    assert [e.v for e in registry.snapshot()] == [UNSET, UNSET]

    platform.set_value("Knorr")
    cruise.set_value("KN5")
    snapshot = registry.snapshot()

    assert [e.v for e in snapshot] == [Selected("Knorr"), Selected("KN5")]
    where = WhereClauseBuilder().build(snapshot)
    assert where.clause == " WHERE platform=? AND cruise.cruise=?"
    assert where.params == ("Knorr", "KN5")


def test_registration_order_only_changes_text():
    def build(order):
        registry = FilterInputRegistry()
        controls = {"platform": _select("Atlantis"), "device": SelectInput("Device", [("All", 1), ("Core", 1)], "Core")}
        for col in order:
            registry.register(ReactiveInputBinding(controls[col], f"{col}=?"))
        return WhereClauseBuilder().build(registry.snapshot())

    a = build(["platform", "device"])
    b = build(["device", "platform"])

    assert a.clause != b.clause
    assert sorted(a.params) == sorted(b.params)


def test_close_detaches_bindings():
    registry = FilterInputRegistry()
    control = _select("Atlantis")
    binding = registry.register(ReactiveInputBinding(control, "platform=?"))
    assert len(registry) == 1
    assert control.listener_count() == 1

    registry.close()

    assert control.listener_count() == 0
    assert not binding.is_active
    assert registry.snapshot() == []


def test_blank_text_is_unset_and_all_is_unset():
    assert TextInput("Cruise", "").value is UNSET
    assert _select("All").value is UNSET


def test_entry_to_dict():
    assert FilterEntry.of("Knorr", "platform=?").to_dict() == {"v": "Knorr", "c": "platform=?"}
    assert FilterEntry.of(None, "platform=?").to_dict() == {"v": None, "c": "platform=?"}


def test_on_change_sees_every_emission():
    seen = []
    registry = FilterInputRegistry(on_change=seen.append)
    platform = _select()
    registry.register(ReactiveInputBinding(platform, "platform=?"))

    platform.set_value("Atlantis")
    platform.set_value("All")

    assert [e.v for e in seen] == [UNSET, Selected("Atlantis"), UNSET]
