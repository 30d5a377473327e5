"""Setlist source interface and base classes.

All setlist sources implement the SetlistSource protocol so the pipeline
does not depend on a particular service.
"""

import re
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from ..errors import InvalidSetlistUrlError
from ..models import Setlist

# Tried in order; the first capturing match is the setlist id.
SETLIST_ID_PATTERNS = (
    re.compile(r"setlist\.fm/setlist/[^/]+/\d+/[^/]+-([a-f0-9]+)\.html"),
    re.compile(r"setlist\.fm/.*-([a-f0-9]{8})\.html"),
    re.compile(r"([a-f0-9]{8})$"),
)


def extract_setlist_id(url: str) -> str | None:
    """Extract a setlist.fm setlist id from a URL or a bare id."""
    for pattern in SETLIST_ID_PATTERNS:
        match = pattern.search(url.strip())
        if match and match.group(1):
            return match.group(1)
    return None


def default_playlist_name(setlist: Setlist) -> str:
    """Playlist name suggested for a setlist: "<artist> - <city> <date>"."""
    name = f"{setlist.artist_name} - {setlist.city}".rstrip(" -")
    if setlist.event_date:
        name = f"{name} {setlist.event_date.isoformat()}"
    return name


@runtime_checkable
class SetlistSource(Protocol):
    """Protocol for setlist sources."""

    @property
    def name(self) -> str:
        """Unique identifier for this source."""
        ...

    def get_setlist(self, setlist_id: str) -> Setlist:
        """Fetch a setlist by id.

        Raises:
            SetlistNotFoundError: If no such setlist exists
            SetlistSourceError: If the source is unavailable
        """
        ...

    def get_setlist_from_url(self, url: str) -> Setlist:
        """Fetch the setlist a public web URL points to.

        Raises:
            InvalidSetlistUrlError: If no id can be extracted from the URL
        """
        ...


class BaseSetlistSource(ABC):
    """Abstract base class resolving URLs to ids before fetching."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this source."""
        pass

    @abstractmethod
    def get_setlist(self, setlist_id: str) -> Setlist:
        """Fetch a setlist by id."""
        pass

    def get_setlist_from_url(self, url: str) -> Setlist:
        if not url or not url.strip():
            raise InvalidSetlistUrlError("URL is required", stage="setlist")

        setlist_id = extract_setlist_id(url)
        if not setlist_id:
            raise InvalidSetlistUrlError("Invalid setlist URL", stage="setlist")

        return self.get_setlist(setlist_id)


__all__ = [
    "SetlistSource",
    "BaseSetlistSource",
    "extract_setlist_id",
    "default_playlist_name",
]
