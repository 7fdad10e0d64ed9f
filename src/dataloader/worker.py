"""
Polling worker driving one load cycle of a DataLoader.

Each tick waits for the loader's interval, dispatches a fetch for every
source that is not loading and whose guard passes, then decides whether
to keep polling. The loop ends when nothing is in flight after a tick,
when the loader is destroyed, or when the cumulative number of dispatches
exceeds max_fetches.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from .errors import SourceNotFoundError
from .keys import PropKeys, prop_keys
from .source import get_hook, resolve
from .task import FetchTask

if TYPE_CHECKING:
    from .loader import DataLoader


class PollingWorker:
    """Run-to-completion polling loop; one instance per DataLoader.load() call."""

    def __init__(self, loader: "DataLoader"):
        self.loader = loader
        self.count = 0
        self.total = 0
        self._tasks: set[asyncio.Task] = set()

    @property
    def logger(self) -> logging.LoggerAdapter:
        return self.loader.logger

    def _eligible(self, sources: dict[str, Any], model: Any) -> list[str]:
        eligible = []
        for source_id, source in sources.items():
            keys = prop_keys(source_id)
            if model.get(keys.loading):
                continue  # Already loading

            guard = get_hook(source, "guard")
            try:
                if guard is not None and not guard(model):
                    continue
            except Exception as e:
                self._record_failure(source_id, model, keys, e, "Guard")
                continue

            eligible.append(source_id)
        return eligible

    def _dispatch(self, source_id: str, source: Any, model: Any) -> None:
        keys = prop_keys(source_id)

        self.count += 1
        self.total += 1

        self.logger.debug(
            f"Dispatching fetch for {source_id}",
            source_id=source_id,
            count=self.count,
            total=self.total,
        )

        model[keys.error] = None
        model[keys.loading] = True
        model[keys.ready] = False

        before_fetch = get_hook(source, "before_fetch")
        try:
            if before_fetch is not None:
                before_fetch(model)
        except Exception as e:
            self.count -= 1
            self._record_failure(source_id, model, keys, e, "before_fetch")
            return

        pending = FetchTask(model, keys).run(source)
        task = asyncio.ensure_future(self._complete(source_id, source, model, keys, pending))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _complete(
        self, source_id: str, source: Any, model: Any, keys: PropKeys, pending: Any
    ) -> None:
        try:
            state = await pending

            self.logger.debug(
                f"Fetch settled for {source_id}",
                source_id=source_id,
                preempted=None if state is None else state.preempted,
            )

            model[keys.loading] = False

            if self.loader.destroyed or state is None or state.preempted:
                return

            result = state.result
            after_fetch = get_hook(source, "after_fetch")
            if after_fetch is not None:
                result = await resolve(after_fetch(model, result))
            if not result:
                raise SourceNotFoundError(source_id)

            assign = get_hook(source, "assign")
            if assign is not None:
                await resolve(assign(model, result))

            model[keys.ready] = True
        except Exception as e:
            self._record_failure(source_id, model, keys, e, "Fetch")
        finally:
            self.count -= 1

    def _record_failure(
        self, source_id: str, model: Any, keys: PropKeys, error: Exception, stage: str
    ) -> None:
        self.logger.error(
            f"{stage} failed for {source_id}: {error}", source_id=source_id, exc_info=True
        )

        if self.loader.destroyed:
            return

        model[keys.loading] = False
        model[keys.error] = str(error) or error.__class__.__name__

    async def run(self) -> bool:
        """
        Poll until convergence, destruction or the safety cap.

        Returns:
            True once the loop has stopped
        """
        loader = self.loader
        sources = loader.sources
        model = loader.model

        loader.is_loading = True
        self.logger.info("Load started", sources=len(sources))

        try:
            while True:
                await asyncio.sleep(loader.interval)

                if loader.destroyed:
                    break

                for source_id in self._eligible(sources, model):
                    self._dispatch(source_id, sources[source_id], model)

                # Safety net
                if self.total > loader.max_fetches:
                    self.logger.warning(
                        f"Stopping load after {self.total} fetches "
                        f"(max_fetches={loader.max_fetches})",
                        total=self.total,
                        max_fetches=loader.max_fetches,
                    )
                    break

                if self.count <= 0:
                    break
        finally:
            self.logger.info(f"Load done after {self.total} fetches", total=self.total)
            loader.is_loading = False

        return True

    @property
    def pending_tasks(self) -> set[asyncio.Task]:
        """Completion tasks still outstanding, including those outliving the loop."""
        return set(self._tasks)
