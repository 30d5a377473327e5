"""Error taxonomy for setlist2playlist.

Every error carries the pipeline stage it came from and, where one exists,
the status code reported by the remote service. ``category`` tells the
surfaces (CLI, HTTP API) which user-facing message to render.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Credential, Playlist

NOT_FOUND = "not_found"
BAD_CREDENTIAL = "bad_credential"
UNAVAILABLE = "unavailable"
BAD_REQUEST = "bad_request"
INTERNAL = "internal"


class Setlist2PlaylistError(Exception):
    """Base class for all errors raised by setlist2playlist."""

    category = INTERNAL

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.status_code = status_code
        # Set by the pipeline when the run refreshed before failing.
        self.credential: "Credential | None" = None

    def to_dict(self) -> dict:
        data = {
            "error": self.message,
            "category": self.category,
            "stage": self.stage,
            "status_code": self.status_code,
        }
        if self.credential is not None:
            data["credential"] = self.credential.model_dump(mode="json")
        return data


class ConfigurationError(Setlist2PlaylistError):
    """A required setting is missing."""


# Authentication


class AuthExchangeError(Setlist2PlaylistError):
    """The provider rejected an authorization code. The user must log in again."""

    category = BAD_CREDENTIAL


class RefreshError(Setlist2PlaylistError):
    """A refresh token was rejected or is missing. The session is over."""

    category = BAD_CREDENTIAL


class SessionExpiredError(Setlist2PlaylistError):
    """The provider kept rejecting the credential after a refresh."""

    category = BAD_CREDENTIAL


class ProviderUnavailableError(Setlist2PlaylistError):
    """The token endpoint could not be reached or failed. The credential may still be good."""

    category = UNAVAILABLE


class UnauthorizedError(Setlist2PlaylistError):
    """A provider call answered "unauthorized".

    Raised by the resolver and the assembler; the orchestrator turns it into
    one refresh and one replay, or a SessionExpiredError.
    """

    category = BAD_CREDENTIAL


# Resolution and assembly


class ResolutionPartialFailure(Setlist2PlaylistError):
    """Searching for a single song failed. Absorbed into ``unmatched``."""

    category = UNAVAILABLE

    def __init__(self, song_title: str, message: str, status_code: int | None = None):
        super().__init__(message, stage="resolve", status_code=status_code)
        self.song_title = song_title


class NoTracksMatchedError(Setlist2PlaylistError):
    """None of the song titles could be matched; no playlist is created."""

    category = NOT_FOUND


class PlaylistCreationError(Setlist2PlaylistError):
    """The playlist could not be created. Nothing exists on the provider side."""

    category = UNAVAILABLE


class BatchAddError(Setlist2PlaylistError):
    """A batch of tracks could not be added; the playlist exists but is incomplete."""

    category = UNAVAILABLE

    def __init__(
        self,
        message: str,
        playlist: "Playlist",
        batch_index: int,
        tracks_added: int,
        status_code: int | None = None,
    ):
        super().__init__(message, stage="add_tracks", status_code=status_code)
        self.playlist = playlist
        self.batch_index = batch_index
        self.tracks_added = tracks_added

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            playlist=self.playlist.model_dump(),
            batch_index=self.batch_index,
            tracks_added=self.tracks_added,
        )
        return data


# Setlist source


class InvalidSetlistUrlError(Setlist2PlaylistError):
    """No setlist identifier could be extracted from the given URL."""

    category = BAD_REQUEST


class SetlistNotFoundError(Setlist2PlaylistError):
    """The setlist source has no setlist with the given identifier."""

    category = NOT_FOUND


class SetlistSourceError(Setlist2PlaylistError):
    """The setlist source is unavailable or rejected the API key."""

    category = UNAVAILABLE
