"""Exception types raised by dataloader"""

from __future__ import annotations


class DataLoaderError(Exception):
    """Base class for all dataloader errors."""


class ConfigError(DataLoaderError, ValueError):
    """Raised when loader configuration is malformed."""


class SourceNotFoundError(DataLoaderError):
    """A fetch (after post-processing) produced no result."""

    def __init__(self, source_id: str):
        super().__init__(f"Not found: {source_id}")
        self.source_id = source_id
