"""Setlist.fm setlist source.

API documentation: https://api.setlist.fm/docs/1.0/index.html
"""

from datetime import date, datetime
from typing import Any

import httpx

from ..errors import ConfigurationError, SetlistNotFoundError, SetlistSourceError
from ..logging import get_logger
from ..models import Setlist
from . import BaseSetlistSource

logger = get_logger(__name__)


def songs_from_setlist(payload: dict[str, Any]) -> list[str]:
    """All song names across the sets of a setlist.fm setlist, in order.

    Placeholders and repeats are kept; filtering is the pipeline's job.
    """
    songs: list[str] = []
    for set_ in (payload.get("sets") or {}).get("set") or []:
        for song in set_.get("song") or []:
            name = song.get("name")
            if name:
                songs.append(name)
    return songs


class SetlistFmSource(BaseSetlistSource):
    """Setlist.fm API setlist source."""

    BASE_URL = "https://api.setlist.fm/rest/1.0"

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """Initialize the Setlist.fm source.

        Args:
            api_key: Setlist.fm API key
            timeout: Request timeout in seconds
            client: Optional preconfigured HTTP client
        """
        if not api_key:
            raise ConfigurationError("Missing environment variable: SETLIST_FM_API_KEY")

        self.api_key = api_key
        self._client = client or httpx.Client(
            base_url=self.BASE_URL,
            headers={
                "Accept": "application/json",
                "x-api-key": api_key,
            },
            timeout=timeout,
        )

    @property
    def name(self) -> str:
        return "setlist.fm"

    def _parse_date(self, date_str: str) -> date | None:
        """Parse setlist.fm date format (dd-MM-yyyy)."""
        try:
            return datetime.strptime(date_str, "%d-%m-%Y").date()
        except (ValueError, TypeError):
            logger.warning("failed_to_parse_date", date_str=date_str)
            return None

    def get_setlist(self, setlist_id: str) -> Setlist:
        """Fetch one setlist by id."""
        logger.info("fetching_setlist", setlist_id=setlist_id, source=self.name)

        try:
            response = self._client.get(f"/setlist/{setlist_id}")
        except httpx.HTTPError as e:
            logger.error("setlist_fetch_failed", error=str(e), setlist_id=setlist_id)
            raise SetlistSourceError("Failed to fetch setlist", stage="setlist") from e

        if response.status_code == 404:
            logger.warning("setlist_not_found", setlist_id=setlist_id)
            raise SetlistNotFoundError("Setlist not found", stage="setlist", status_code=404)
        if response.status_code == 403:
            logger.error("setlist_api_key_rejected", setlist_id=setlist_id)
            raise SetlistSourceError("Invalid API key", stage="setlist", status_code=403)
        if response.is_error:
            logger.error(
                "setlist_fetch_failed",
                status=response.status_code,
                setlist_id=setlist_id,
            )
            raise SetlistSourceError(
                "Failed to fetch setlist",
                stage="setlist",
                status_code=response.status_code,
            )

        setlist = self._to_setlist(response.json())
        logger.info(
            "setlist_fetched",
            setlist_id=setlist.id,
            artist=setlist.artist_name,
            songs=len(setlist.song_titles),
        )
        return setlist

    def _to_setlist(self, payload: dict[str, Any]) -> Setlist:
        """Convert a setlist.fm setlist to a Setlist record."""
        artist = payload.get("artist") or {}
        venue = payload.get("venue") or {}
        venue_city = venue.get("city") or {}
        venue_country = venue_city.get("country") or {}
        setlist_id = payload.get("id", "")

        return Setlist(
            id=setlist_id,
            url=payload.get("url") or f"https://www.setlist.fm/setlist/{setlist_id}",
            artist_name=artist.get("name", "Unknown Artist"),
            venue_name=venue.get("name", ""),
            city=venue_city.get("name", ""),
            country=venue_country.get("name"),
            event_date=self._parse_date(payload.get("eventDate", "")),
            tour_name=(payload.get("tour") or {}).get("name"),
            song_titles=songs_from_setlist(payload),
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "SetlistFmSource":
        return self

    def __exit__(self, *args) -> None:
        self.close()
