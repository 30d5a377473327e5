"""FastAPI dependencies."""

from functools import lru_cache

from ..pipeline import Pipeline


@lru_cache
def get_pipeline() -> Pipeline:
    """Shared pipeline; it holds no per-user state, so one instance serves all requests."""
    return Pipeline()
