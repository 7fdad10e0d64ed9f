"""Model property keys owned by the loader for each source"""

from typing import NamedTuple


class PropKeys(NamedTuple):
    error: str
    fetched_at: str
    loading: str
    ready: str


def prop_keys(source_id: str) -> PropKeys:
    """Get model property keys for a given source id."""
    return PropKeys(
        error=f"{source_id}_error",
        fetched_at=f"{source_id}_fetched_at",
        loading=f"{source_id}_loading",
        ready=f"{source_id}_ready",
    )
