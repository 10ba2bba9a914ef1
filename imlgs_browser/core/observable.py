from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from imlgs_browser.core.filter_state import FilterEntry
from imlgs_browser.core.inputs import INPUT_EVENT, InputControl
from imlgs_browser.core.where_clause import ClauseTemplate

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Notify = Callable[[T], None]
Dispose = Callable[[], None]


class Subscription:
    """Disposer returned by Observable.subscribe(); safe to call twice."""

    def __init__(self, dispose: Dispose) -> None:
        self._dispose: Optional[Dispose] = dispose

    @property
    def closed(self) -> bool:
        return self._dispose is None

    def dispose(self) -> None:
        if self._dispose is not None:
            dispose, self._dispose = self._dispose, None
            dispose()

    __call__ = dispose


class Observable(Generic[T]):
    """
    Push-based stream.

    `producer(notify)` is run once per subscriber and returns the function
    that tears that subscription down.
    """

    def __init__(self, producer: Callable[[Notify], Dispose]) -> None:
        self._producer = producer

    def subscribe(self, observer: Notify) -> Subscription:
        return Subscription(self._producer(observer))


class BindingState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DETACHED = "detached"


# -----------------------------------------------------------------------------
# Stale query protection
# -----------------------------------------------------------------------------
class _Stale:
    def __repr__(self) -> str:
        return "STALE"


STALE = _Stale()


class LatestQueryGuard:
    """
    Generation counter for overlapping async queries.

    run() returns STALE instead of the result when another query was
    issued, or the generation bumped, while it was awaiting.
    """

    def __init__(self) -> None:
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def issue(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    async def run(self, awaitable: Awaitable[R]) -> Union[R, _Stale]:
        token = self.issue()
        result = await awaitable
        if not self.is_current(token):
            logger.debug("Discarding stale query result", extra={"token": token, "current": self._generation})
            return STALE
        return result


# -----------------------------------------------------------------------------
# Reactive input binding
# -----------------------------------------------------------------------------
class ReactiveInputBinding(Observable[FilterEntry]):
    """
    Observable of {value, template} for one input control.

    Subscribing emits the control's current value immediately and then
    once per "input" event. Disposing the last subscription removes the
    listener and the binding becomes DETACHED for good.
    """

    def __init__(self, control: InputControl, template: Union[str, ClauseTemplate]) -> None:
        super().__init__(self._produce)
        self.control = control
        self.template = ClauseTemplate.coerce(template)
        self.state = BindingState.UNINITIALIZED
        self.latest: Optional[FilterEntry] = None
        self.guard = LatestQueryGuard()
        self._n_active = 0

    @property
    def is_active(self) -> bool:
        return self.state is BindingState.ACTIVE

    @property
    def generation(self) -> int:
        return self.guard.generation

    def current(self) -> FilterEntry:
        return FilterEntry(self.control.value, self.template)

    def subscribe(self, observer: Notify) -> Subscription:
        if self.state is BindingState.DETACHED:
            raise RuntimeError("Cannot subscribe to a detached input binding")
        return super().subscribe(observer)

    def _produce(self, notify: Notify) -> Dispose:
        def inputted() -> None:
            entry = self.current()
            self.latest = entry
            # a new emission makes any in-flight query for this input stale
            self.guard.issue()
            notify(entry)

        self.state = BindingState.ACTIVE
        self._n_active += 1
        inputted()
        self.control.add_listener(INPUT_EVENT, inputted)

        def dispose() -> None:
            self.control.remove_listener(INPUT_EVENT, inputted)
            self._n_active -= 1
            if self._n_active == 0:
                self.state = BindingState.DETACHED

        return dispose

    async def run_latest(self, query: Callable[[FilterEntry], Awaitable[R]]) -> Union[R, _Stale]:
        """
        Run `query` for the current entry. The result is STALE when the
        input changed, or another query was issued on this binding, before
        it resolved.
        """
        entry = self.latest if self.latest is not None else self.current()
        return await self.guard.run(query(entry))


# -----------------------------------------------------------------------------
# Debounce
# -----------------------------------------------------------------------------
class Debounced:
    """
    Trailing-edge debounce: only the last call within `wait` seconds runs.
    """

    def __init__(self, callback: Callable[..., Any], wait: float) -> None:
        self._callback = callback
        self.wait = wait
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[tuple] = None
        self._lock = threading.Lock()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.wait, self.flush)
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    def flush(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            pending, self._pending = self._pending, None
        if pending is not None:
            args, kwargs = pending
            self._callback(*args, **kwargs)


def debounce(callback: Callable[..., Any], wait: float) -> Debounced:
    return Debounced(callback, wait)


def debounced_observer(observer: Notify, wait: Optional[float]) -> Notify:
    """Wrap a text-input observer so rapid keystrokes arrive as one emission."""
    if not wait:
        return observer
    return debounce(observer, wait)
