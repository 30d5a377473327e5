"""Song title filters applied before resolution.

Filters operate on the raw song list of a setlist and report every dropped
title with a reason. Add new filters by implementing the Filter protocol.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..models import ExcludedItem


@dataclass
class FilterResult:
    """Result of applying a filter."""

    included: list[str] = field(default_factory=list)
    excluded: list[ExcludedItem] = field(default_factory=list)


@runtime_checkable
class Filter(Protocol):
    """Protocol for song title filters.

    Filters keep the relative order of the titles they include.
    """

    @property
    def name(self) -> str:
        """Unique identifier for this filter."""
        ...

    def apply(self, titles: list[str]) -> FilterResult:
        """Apply the filter to a list of song titles.

        Args:
            titles: Song titles in setlist order

        Returns:
            FilterResult with included and excluded items
        """
        ...


class BaseFilter(ABC):
    """Abstract base class for filters with common functionality."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this filter."""
        pass

    @abstractmethod
    def apply(self, titles: list[str]) -> FilterResult:
        """Apply the filter to song titles."""
        pass

    def _exclude(self, title: str, reason: str) -> ExcludedItem:
        return ExcludedItem(item_type="song", name=title, reason=reason, filter_name=self.name)


class FilterChain:
    """Chain of filters applied sequentially.

    Each filter receives the included items from the previous filter.
    Excluded items accumulate across all filters.
    """

    def __init__(self):
        self._filters: list[Filter] = []

    def add(self, filter: Filter) -> "FilterChain":
        """Add a filter to the chain. Returns self for chaining."""
        self._filters.append(filter)
        return self

    def apply(self, titles: list[str]) -> FilterResult:
        """Apply all filters in sequence."""
        current = list(titles)
        all_excluded: list[ExcludedItem] = []

        for filter in self._filters:
            result = filter.apply(current)
            current = result.included
            all_excluded.extend(result.excluded)

        return FilterResult(included=current, excluded=all_excluded)

    @property
    def filters(self) -> list[Filter]:
        """Get all filters in the chain."""
        return self._filters.copy()


# Re-export filter implementations
from .duplicate import DuplicateFilter
from .placeholder import PlaceholderFilter


def default_chain() -> FilterChain:
    """Placeholder removal followed by de-duplication."""
    return FilterChain().add(PlaceholderFilter()).add(DuplicateFilter())


__all__ = [
    "Filter",
    "FilterResult",
    "BaseFilter",
    "FilterChain",
    "DuplicateFilter",
    "PlaceholderFilter",
    "default_chain",
]
