"""
Source descriptors consumed by DataLoader.

A source is any object with a ``fetch(model)`` method. The loader discovers
the optional hooks by capability check, so plain objects, DataSource
subclasses and CallbackSource instances all work:

- guard(model) -> bool: gate eligibility on each tick (sync)
- before_fetch(model): side effect right before dispatch (sync)
- after_fetch(model, result) -> result: transform/validate; falsy means not found
- assign(model, result): write the result onto the model
- clear(model): custom reset when the loader clears the source (sync)

``fetch``, ``after_fetch`` and ``assign`` may return awaitables.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

Model = MutableMapping[str, Any]


def get_hook(source: Any, name: str) -> Optional[Callable[..., Any]]:
    """Return the named hook if the source provides a callable one."""
    hook = getattr(source, name, None)
    return hook if callable(hook) else None


async def resolve(value: Any) -> Any:
    """Await value if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


class DataSource(ABC):
    """
    Base class for data sources.

    Subclasses implement fetch(). The default hooks are neutral: every tick is
    eligible, the result passes through unchanged and nothing is assigned.
    Guards must encode their own "already satisfied" logic (e.g. check a
    ready flag or the assigned value) or the source is refetched every tick.
    """

    @abstractmethod
    def fetch(self, model: Model) -> Any:
        """
        Retrieve data for this source.

        May return the result directly or an awaitable resolving to it.

        Raises:
            Exception: Any failure; recorded on the model's error field
        """

    def guard(self, model: Model) -> bool:
        return True

    def before_fetch(self, model: Model) -> None:
        pass

    def after_fetch(self, model: Model, result: Any) -> Any:
        return result

    def assign(self, model: Model, result: Any) -> None:
        pass

    def clear(self, model: Model) -> None:
        pass


@dataclass
class CallbackSource:
    """Source assembled from plain callables; unset hooks are skipped."""

    fetch: Callable[[Model], Any]
    guard: Optional[Callable[[Model], bool]] = None
    before_fetch: Optional[Callable[[Model], None]] = None
    after_fetch: Optional[Callable[[Model, Any], Any]] = None
    assign: Optional[Callable[[Model, Any], Any]] = None
    clear: Optional[Callable[[Model], None]] = None

    def __post_init__(self) -> None:
        if not callable(self.fetch):
            raise TypeError("CallbackSource.fetch must be callable")
