"""Duplicate song filter."""

from . import BaseFilter, FilterResult


class DuplicateFilter(BaseFilter):
    """Keep the first occurrence of each title (case-sensitive).

    Encores and reprises often repeat a song; the playlist should hold it once.
    """

    @property
    def name(self) -> str:
        return "duplicate"

    def apply(self, titles: list[str]) -> FilterResult:
        result = FilterResult()
        seen: set[str] = set()

        for title in titles:
            if title in seen:
                result.excluded.append(self._exclude(title, "Duplicate of an earlier song"))
                continue
            seen.add(title)
            result.included.append(title)

        return result
