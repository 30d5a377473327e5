"""Pydantic data models for setlist2playlist.

Credentials, resolved tracks and playlists are immutable values: a refresh
produces a new Credential rather than changing the old one.
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Credential(BaseModel):
    """An OAuth credential set for the Spotify Web API.

    A credential without a refresh token cannot be refreshed and must be
    replaced by a fresh authorization.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(description="Short-lived bearer token")
    refresh_token: str | None = Field(default=None, description="Long-lived refresh token")
    expires_at: datetime = Field(description="Instant after which the access token is rejected")

    @classmethod
    def issue(
        cls,
        access_token: str,
        expires_in: int,
        refresh_token: str | None = None,
        issued_at: datetime | None = None,
    ) -> "Credential":
        """Build a credential from a token response.

        Args:
            access_token: Access token returned by the provider
            expires_in: Lifetime of the access token in seconds
            refresh_token: Refresh token, if the provider returned one
            issued_at: Time the token was issued (defaults to now)
        """
        issued_at = issued_at or utcnow()
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=issued_at + timedelta(seconds=expires_in),
        )

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the access token has expired at ``now``."""
        now = now or utcnow()
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at


class Visibility(str, Enum):
    """Playlist visibility on the user's profile."""

    PUBLIC = "public"
    PRIVATE = "private"

    @property
    def is_public(self) -> bool:
        return self is Visibility.PUBLIC


class MatchedTrack(BaseModel):
    """A catalog track resolved from one setlist song title."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Spotify track ID")
    title: str = Field(description="Track name on Spotify")
    artist_names: list[str] = Field(default_factory=list, description="Credited artists, in order")
    uri: str = Field(description="Playable Spotify URI (spotify:track:...)")
    album_art_url: str | None = Field(default=None, description="Largest album cover image")
    song_title: str | None = Field(default=None, description="Setlist title that produced this match")

    @classmethod
    def from_candidate(cls, candidate: dict[str, Any], song_title: str | None = None) -> "MatchedTrack":
        """Convert a raw Spotify track object into a MatchedTrack."""
        images = (candidate.get("album") or {}).get("images") or []
        return cls(
            id=candidate["id"],
            title=candidate.get("name") or "",
            artist_names=[a.get("name") or "" for a in candidate.get("artists") or []],
            uri=candidate.get("uri") or f"spotify:track:{candidate['id']}",
            album_art_url=images[0].get("url") if images else None,
            song_title=song_title,
        )


class ResolutionResult(BaseModel):
    """Partition of song titles into matched tracks and unmatched titles.

    Both lists follow the input order of the song titles.
    """

    matched: list[MatchedTrack] = Field(default_factory=list)
    unmatched: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.unmatched)


class Playlist(BaseModel):
    """A playlist created under the authenticated user."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Spotify playlist ID")
    web_url: str = Field(description="Public web URL of the playlist")
    owner_id: str = Field(description="Spotify user ID of the owner")
    name: str = Field(default="", description="Playlist name")


class Setlist(BaseModel):
    """A concert setlist as published by the setlist source."""

    id: str = Field(description="Setlist identifier in the data source")
    url: str | None = Field(default=None, description="Web URL of the setlist")
    artist_name: str = Field(description="Performing artist")
    venue_name: str = Field(default="", description="Venue name")
    city: str = Field(default="", description="City of the venue")
    country: str | None = Field(default=None, description="Country name")
    event_date: date | None = Field(default=None, description="Date of the concert")
    tour_name: str | None = Field(default=None, description="Tour name if documented")
    song_titles: list[str] = Field(
        default_factory=list,
        description="Song names across all sets in performance order, unfiltered",
    )


class ExcludedItem(BaseModel):
    """A song title dropped before resolution."""

    item_type: str = Field(default="song", description="Type of item excluded")
    name: str = Field(description="The excluded value")
    reason: str = Field(description="Reason for exclusion")
    filter_name: str | None = Field(default=None, description="Filter that caused exclusion")


class PipelineResult(BaseModel):
    """Final output of one setlist-to-playlist run."""

    playlist: Playlist
    matched: list[MatchedTrack] = Field(default_factory=list)
    unmatched: list[str] = Field(default_factory=list)
    excluded: list[ExcludedItem] = Field(default_factory=list)
    tracks_added: int = Field(default=0, description="Tracks added to the playlist")

    # The credential in effect at the end of the run; differs from the
    # input credential when the run had to refresh it.
    credential: Credential
    refreshed: bool = Field(default=False, description="Whether the credential was refreshed")
