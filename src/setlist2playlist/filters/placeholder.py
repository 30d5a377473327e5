"""Placeholder filter for unknown songs."""

from . import BaseFilter, FilterResult

# setlist.fm writes "..." for a song nobody could identify.
DEFAULT_PLACEHOLDERS = frozenset({"..."})


class PlaceholderFilter(BaseFilter):
    """Drop blank titles and placeholder tokens meaning "song unknown"."""

    def __init__(self, placeholders: frozenset[str] = DEFAULT_PLACEHOLDERS):
        self.placeholders = frozenset(placeholders)

    @property
    def name(self) -> str:
        return "placeholder"

    def apply(self, titles: list[str]) -> FilterResult:
        result = FilterResult()

        for title in titles:
            if not title or not title.strip():
                result.excluded.append(self._exclude(title or "", "Blank song title"))
            elif title in self.placeholders:
                result.excluded.append(self._exclude(title, "Placeholder for an unknown song"))
            else:
                result.included.append(title)

        return result
