"""
DataLoader: fetch data for a model from a set of configured sources.

Usage:
    model = {}
    sources = {"weather": WeatherSource(), "news": CallbackSource(fetch=get_news)}

    loader = DataLoader(model, sources)
    await loader.clear().load()

    model["weather_ready"], model["news_error"]

    loader.destroy()
"""

import itertools
from typing import Any, Callable, Optional, Union

from .config import NEVER_FETCHED, get_config
from .keys import prop_keys
from .logging_utils import LoadTimer, bind_logger
from .source import Model, get_hook
from .worker import PollingWorker

# True selects every source, a string selects one id, a callable selects by rule
SourceSelector = Union[bool, str, Callable[[str], bool]]

_next_id = itertools.count(1)


def _selector_fn(pred: SourceSelector) -> Callable[[str], bool]:
    if pred is True:
        return lambda source_id: True
    if isinstance(pred, str):
        return lambda source_id: source_id == pred
    if callable(pred):
        return lambda source_id: bool(pred(source_id))
    raise TypeError(f"clear() expects True, a source id or a callable, got {pred!r}")


class DataLoader:
    """
    Orchestrates polling of data sources onto a shared model.

    For each source id S the loader owns the model keys S_error,
    S_fetched_at, S_loading and S_ready, plus the global data_loading flag.

    Attributes:
        id: Process-wide instance number, for log correlation only
        interval: Seconds between polling ticks
        max_fetches: Approximate upper limit of dispatches per load
        destroyed: Set by destroy(); never cleared
    """

    def __init__(self, model: Model, sources: dict[str, Any]):
        config = get_config()

        self.id = next(_next_id)
        self.interval = config.interval
        self.max_fetches = config.max_fetches
        self.logger = bind_logger(config.logger, loader_id=self.id)
        self.model: Optional[Model] = model
        self.sources: Optional[dict[str, Any]] = sources
        self.destroyed = False
        self._worker: Optional[PollingWorker] = None
        self._timer = LoadTimer(self.logger, f"DataLoader({self.id}).load")

        model["data_loading"] = False

    def clear(self, pred: SourceSelector = True) -> "DataLoader":
        """
        Clear state for all sources where the selector matches.

        In-flight fetches are not cancelled. Resetting fetched_at invalidates
        their dispatch marker, so when they complete they only clear the
        loading flag.

        Args:
            pred: True for all sources, a source id, or a callable taking a source id

        Returns:
            self (for method chaining)
        """
        select = _selector_fn(pred)
        sources = self.sources
        model = self.model
        if sources is None or model is None:
            return self

        for source_id in [s for s in sources if select(s)]:
            keys = prop_keys(source_id)
            source = sources[source_id]

            self.logger.debug(f"Clearing {source_id}", source_id=source_id)

            model[keys.error] = None
            model[keys.loading] = False
            model[keys.ready] = False
            model[keys.fetched_at] = NEVER_FETCHED

            clear_hook = get_hook(source, "clear")
            if clear_hook is not None:
                clear_hook(model)

        return self

    def destroy(self) -> None:
        """Stop loading as soon as possible and drop the model and sources."""
        if self.destroyed:
            return

        self.logger.debug("Destroying loader")

        self.destroyed = True
        self.sources = None
        self.model = None

    @property
    def is_loading(self) -> bool:
        if self.model is None:
            return False
        return bool(self.model.get("data_loading"))

    @is_loading.setter
    def is_loading(self, value: bool) -> None:
        if self.model is not None:
            self.model["data_loading"] = value

        if value:
            self._timer.start()
        else:
            self._timer.stop()

    async def load(self) -> bool:
        """
        Poll all sources until they settle.

        Returns:
            False without doing anything if a load is already running or the
            loader is destroyed; True once the polling loop has stopped
        """
        self.logger.debug("Load requested")

        if self.is_loading or self.destroyed:
            return False

        self._worker = PollingWorker(self)
        return await self._worker.run()

    @property
    def source_ids(self) -> list[str]:
        return list(self.sources) if self.sources is not None else []

    def status(self, source_id: str) -> dict[str, Any]:
        """
        Get the status fields of one source.

        Returns:
            Dict with error, fetched_at, loading and ready (empty after destroy)

        Raises:
            KeyError: If the source is not configured
        """
        if self.sources is None or self.model is None:
            return {}
        if source_id not in self.sources:
            raise KeyError(source_id)

        keys = prop_keys(source_id)
        return {
            "error": self.model.get(keys.error),
            "fetched_at": self.model.get(keys.fetched_at, NEVER_FETCHED),
            "loading": bool(self.model.get(keys.loading)),
            "ready": bool(self.model.get(keys.ready)),
        }

    async def __aenter__(self) -> "DataLoader":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.destroy()

    def __repr__(self) -> str:
        return (
            f"DataLoader(id={self.id}, "
            f"sources={self.source_ids}, "
            f"loading={self.is_loading}, "
            f"destroyed={self.destroyed})"
        )

