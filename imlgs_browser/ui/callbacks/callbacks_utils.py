from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCALARS = (str, int, float, bool)


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    # Dash callbacks are synchronous; each one drives its own event loop
    return asyncio.run(coro)


def values_to_store(values: Sequence[Any]) -> dict:
    return {"values": list(values)}


def values_from_store(data: object, n_filters: int) -> Optional[List[Any]]:
    """
    Filter values read back from the browser store.

    Only one scalar per filter is accepted; the WHERE clause is always
    rebuilt server-side from these values, never read from the store.
    """
    if not isinstance(data, dict):
        return None
    values = data.get("values")
    if not isinstance(values, list) or len(values) != n_filters:
        logger.warning("Ignoring malformed filter store", extra={"keys": sorted(str(k) for k in data)})
        return None
    if any(v is not None and not isinstance(v, _SCALARS) for v in values):
        logger.warning("Ignoring non-scalar filter values", extra={"n_values": len(values)})
        return None
    return values
