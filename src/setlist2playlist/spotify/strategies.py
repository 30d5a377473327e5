"""Search query strategies for resolving setlist songs.

Strategies, tried in order until one returns candidates:
- FieldQualified: track:"<title>" artist:"<artist>"
- TitleArtist: plain text "<title> <artist>"
- TitleOnly: plain text "<title>"

Spotify search is lexical, so exact field filters miss titles with minor
formatting differences; each later strategy is looser than the one before.
"""

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

from ..logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class SearchStrategy(Protocol):
    """Protocol for track search strategies."""

    @property
    def name(self) -> str:
        """Strategy identifier."""
        ...

    def build_query(self, song_title: str, artist_name: str) -> str:
        """Build the search query for one song.

        Args:
            song_title: Song title as written in the setlist
            artist_name: Performing artist

        Returns:
            Query string for the provider's track search
        """
        ...


class BaseStrategy(ABC):
    """Abstract base class for search strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def build_query(self, song_title: str, artist_name: str) -> str:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class FieldQualifiedStrategy(BaseStrategy):
    """Exact track title and exact artist name as field filters."""

    @property
    def name(self) -> str:
        return "field_qualified"

    def build_query(self, song_title: str, artist_name: str) -> str:
        return f'track:"{song_title}" artist:"{artist_name}"'


class TitleArtistStrategy(BaseStrategy):
    """Title and artist concatenated as free text."""

    @property
    def name(self) -> str:
        return "title_artist"

    def build_query(self, song_title: str, artist_name: str) -> str:
        return f"{song_title} {artist_name}"


class TitleOnlyStrategy(BaseStrategy):
    """The title alone."""

    @property
    def name(self) -> str:
        return "title_only"

    def build_query(self, song_title: str, artist_name: str) -> str:
        return song_title


DEFAULT_STRATEGIES: tuple[SearchStrategy, ...] = (
    FieldQualifiedStrategy(),
    TitleArtistStrategy(),
    TitleOnlyStrategy(),
)


def select_candidate(candidates: list[dict[str, Any]], artist_name: str) -> dict[str, Any] | None:
    """Pick the candidate credited to ``artist_name``, else the first one.

    An artist matches when one of the candidate's artist names equals
    ``artist_name`` case-insensitively. Provider ranking already favours
    relevance, so the first candidate is the fallback.
    """
    if not candidates:
        return None

    wanted = artist_name.lower()
    for candidate in candidates:
        if any((a.get("name") or "").lower() == wanted for a in candidate.get("artists") or []):
            return candidate

    logger.debug(
        "no_exact_artist_match",
        artist=artist_name,
        fallback=candidates[0].get("name"),
    )
    return candidates[0]
