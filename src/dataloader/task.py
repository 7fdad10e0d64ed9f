"""A single fetch attempt for one source, with timestamp-based preemption."""

import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from .keys import PropKeys
from .source import Model, resolve

_last_dispatch = 0


def dispatch_timestamp() -> int:
    """
    Epoch milliseconds for a new dispatch, strictly increasing per process.

    Two dispatches within the same millisecond must still get distinct
    tokens or the later one could not preempt the earlier.
    """
    global _last_dispatch
    now = time.time_ns() // 1_000_000
    _last_dispatch = now if now > _last_dispatch else _last_dispatch + 1
    return _last_dispatch


@dataclass
class FetchState:
    """Outcome of a fetch attempt. result is meaningful only when not preempted."""

    preempted: bool
    result: Any = None


class FetchTask:
    """
    One in-flight fetch for a source.

    The dispatch time captured at construction is written to the model's
    fetched_at field when the task runs. A later dispatch for the same
    source overwrites that field, which marks this attempt as preempted
    when its fetch finally completes.
    """

    def __init__(self, model: Model, keys: PropKeys):
        self.time = dispatch_timestamp()
        self.keys = keys
        self.model = model

    def run(self, source: Any) -> Awaitable[FetchState]:
        # Marker and fetch call both happen before returning, so they stay in
        # dispatch order with the other sources of the same tick.
        self.model[self.keys.fetched_at] = self.time
        try:
            pending = source.fetch(self.model)
        except Exception as e:
            return self._raise(e)
        return self._settle(pending)

    async def _raise(self, error: Exception) -> FetchState:
        raise error

    async def _settle(self, pending: Any) -> FetchState:
        result = await resolve(pending)

        if self.model.get(self.keys.fetched_at) == self.time:
            return FetchState(preempted=False, result=result)
        return FetchState(preempted=True)

