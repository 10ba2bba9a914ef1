from __future__ import annotations

import asyncio

import pytest

from imlgs_browser.core.inputs import TextInput
from imlgs_browser.core.observable import (
    STALE,
    BindingState,
    LatestQueryGuard,
    ReactiveInputBinding,
    debounce,
    debounced_observer,
)
from imlgs_browser.core.where_clause import UNSET, Selected


def test_subscribe_emits_current_value_immediately():
    control = TextInput("Cruise", "AT01")
    binding = ReactiveInputBinding(control, "cruise.cruise=?")
    seen = []

    assert binding.state is BindingState.UNINITIALIZED
    binding.subscribe(seen.append)

    assert binding.state is BindingState.ACTIVE
    assert [e.v for e in seen] == [Selected("AT01")]
    assert binding.latest == seen[-1]


def test_each_input_event_re_emits():
    control = TextInput("Cruise")
    binding = ReactiveInputBinding(control, "cruise.cruise=?")
    seen = []
    binding.subscribe(seen.append)

    control.set_value("KN5")
    control.set_value("")

    assert [e.v for e in seen] == [UNSET, Selected("KN5"), UNSET]
    assert all(e.c.text == "cruise.cruise=?" for e in seen)


def test_no_emissions_after_unsubscribe():
    control = TextInput("Cruise")
    binding = ReactiveInputBinding(control, "cruise.cruise=?")
    seen = []
    sub = binding.subscribe(seen.append)

    sub.dispose()
    sub()  # second dispose is a no-op
    control.set_value("KN5")

    assert len(seen) == 1
    assert sub.closed
    assert binding.state is BindingState.DETACHED
    assert control.listener_count() == 0


def test_detached_binding_cannot_resubscribe():
    binding = ReactiveInputBinding(TextInput("Cruise"), "cruise.cruise=?")
    binding.subscribe(lambda e: None).dispose()

    with pytest.raises(RuntimeError):
        binding.subscribe(lambda e: None)


def test_stays_active_until_last_subscriber_leaves():
    binding = ReactiveInputBinding(TextInput("Cruise"), "cruise.cruise=?")
    first = binding.subscribe(lambda e: None)
    second = binding.subscribe(lambda e: None)

    first.dispose()
    assert binding.is_active

    second.dispose()
    assert binding.state is BindingState.DETACHED


def test_run_latest_discards_result_when_input_changed():
    control = TextInput("Cruise", "AT01")
    binding = ReactiveInputBinding(control, "cruise.cruise=?")
    binding.subscribe(lambda e: None)

    async def slow_query(entry):
        # the user types while the query is in flight
        control.set_value("KN5")
        return entry.v

    async def fast_query(entry):
        return entry.v

    assert asyncio.run(binding.run_latest(slow_query)) is STALE
    assert asyncio.run(binding.run_latest(fast_query)) == Selected("KN5")


def test_run_latest_overlapping_calls_keep_only_newest():
    binding = ReactiveInputBinding(TextInput("Cruise", "AT01"), "cruise.cruise=?")
    binding.subscribe(lambda e: None)

    async def scenario():
        release = asyncio.Event()

        async def older_query(entry):
            await release.wait()
            return "older"

        async def newer_query(entry):
            return "newer"

        older = asyncio.ensure_future(binding.run_latest(older_query))
        await asyncio.sleep(0)
        newer = await binding.run_latest(newer_query)
        release.set()
        return await older, newer

    older, newer = asyncio.run(scenario())

    assert older is STALE
    assert newer == "newer"


def test_latest_query_guard_keeps_only_newest():
    guard = LatestQueryGuard()

    async def scenario():
        release = asyncio.Event()

        async def first():
            await release.wait()
            return "first"

        async def second():
            return "second"

        t1 = asyncio.ensure_future(guard.run(first()))
        await asyncio.sleep(0)
        r2 = await guard.run(second())
        release.set()
        r1 = await t1
        return r1, r2

    r1, r2 = asyncio.run(scenario())

    assert r1 is STALE
    assert r2 == "second"


def test_debounce_coalesces_calls():
    calls = []
    d = debounce(calls.append, wait=60)

    d("K")
    d("KN")
    d("KN5")
    assert d.pending
    d.flush()

    assert calls == ["KN5"]
    assert not d.pending


def test_debounce_cancel_drops_pending_call():
    calls = []
    d = debounce(calls.append, wait=60)

    d("KN5")
    d.cancel()
    d.flush()

    assert calls == []


def test_debounced_observer_without_wait_is_passthrough():
    observer = print
    assert debounced_observer(observer, None) is observer
    assert debounced_observer(observer, 0.2) is not observer
