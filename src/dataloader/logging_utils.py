"""Structured logging helpers for data loaders."""

import logging
import time
from collections.abc import MutableMapping
from typing import Any, Optional, Union

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]

# =============================================================================
# Structured Logging Helpers
# =============================================================================


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that supports structured logging with extra fields.

    Usage:
        logger = get_structured_logger(__name__, loader_id=3)
        logger.debug("Dispatching fetch", source_id="weather", total=4)
        logger.warning("Safety cap reached", total=201, max_fetches=200)
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        """Process log message and extract extra fields."""
        # Extract any extra kwargs that aren't standard logging kwargs
        standard_kwargs = {"exc_info", "stack_info", "stacklevel", "extra"}
        extra = kwargs.pop("extra", None) or {}

        # Move non-standard kwargs to extra
        for key in list(kwargs.keys()):
            if key not in standard_kwargs:
                extra[key] = kwargs.pop(key)

        # Merge with adapter's extra
        if self.extra:
            extra = {**self.extra, **extra}

        kwargs["extra"] = extra
        return msg, kwargs


class SilentLoggerAdapter(StructuredLoggerAdapter):
    """Adapter used when logging has been disabled; never emits anything."""

    def isEnabledFor(self, level: int) -> bool:
        return False


def get_structured_logger(name: str, **default_extra: Any) -> StructuredLoggerAdapter:
    """
    Get a structured logger that supports extra keyword arguments.

    Args:
        name: Logger name (usually __name__)
        **default_extra: Default extra fields to include in all logs

    Returns:
        A StructuredLoggerAdapter instance
    """
    base_logger = logging.getLogger(name)
    return StructuredLoggerAdapter(base_logger, default_extra)


def bind_logger(base: Optional[LoggerLike], **default_extra: Any) -> StructuredLoggerAdapter:
    """
    Wrap a configured logger so that every record carries default_extra.

    Args:
        base: Logger or adapter to wrap; None means logging is disabled
        **default_extra: Default extra fields (e.g. loader_id)

    Returns:
        A structured adapter, silent when base is None
    """
    if base is None:
        return SilentLoggerAdapter(logging.getLogger("dataloader"), default_extra)
    if isinstance(base, logging.LoggerAdapter):
        extra = {**(base.extra or {}), **default_extra}
        return StructuredLoggerAdapter(base.logger, extra)
    return StructuredLoggerAdapter(base, default_extra)


class LoadTimer:
    """Measures the wall-clock duration of one load cycle."""

    def __init__(self, logger: logging.LoggerAdapter, label: str):
        self._logger = logger
        self._label = label
        self._started: Optional[float] = None

    def start(self) -> None:
        self._started = time.monotonic()

    def stop(self) -> Optional[float]:
        """Log and return elapsed seconds, or None if the timer never started."""
        if self._started is None:
            return None
        elapsed = time.monotonic() - self._started
        self._started = None
        self._logger.info(f"{self._label} finished in {elapsed:.3f}s", elapsed=elapsed)
        return elapsed

    @property
    def running(self) -> bool:
        return self._started is not None
