"""Playlist assembly: create a playlist and add tracks in batches."""

from dataclasses import dataclass
from typing import Sequence

from ..errors import BatchAddError, PlaylistCreationError, UnauthorizedError
from ..logging import get_logger
from ..models import Credential, MatchedTrack, Playlist, Visibility
from .provider import ProviderClient, ProviderResult

logger = get_logger(__name__)

# Spotify's documented limit of items per "add items to playlist" request.
MAX_TRACKS_PER_REQUEST = 100

DEFAULT_DESCRIPTION = "Created with Setlist to Spotify"


def chunked(items: Sequence[str], size: int = MAX_TRACKS_PER_REQUEST) -> list[list[str]]:
    """Split ``items`` into consecutive batches of at most ``size``."""
    if size < 1:
        raise ValueError("size must be positive")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


@dataclass
class AssemblyProgress:
    """How far an assembly got; lets a replay resume instead of starting over."""

    playlist: Playlist | None = None
    tracks_added: int = 0


class PlaylistAssembler:
    """Creates a playlist under the authenticated user and fills it."""

    def __init__(self, client: ProviderClient, batch_size: int = MAX_TRACKS_PER_REQUEST):
        if not 1 <= batch_size <= MAX_TRACKS_PER_REQUEST:
            raise ValueError(f"batch_size must be between 1 and {MAX_TRACKS_PER_REQUEST}")
        self.client = client
        self.batch_size = batch_size

    @staticmethod
    def _unauthorized(stage: str, response: ProviderResult) -> UnauthorizedError:
        return UnauthorizedError(
            response.message or "Unauthorized",
            stage=stage,
            status_code=response.status_code,
        )

    def assemble(
        self,
        name: str,
        description: str,
        tracks: Sequence[MatchedTrack],
        visibility: Visibility,
        credential: Credential,
        progress: AssemblyProgress | None = None,
    ) -> Playlist:
        """Create a playlist and add ``tracks`` in order.

        Steps run strictly in sequence: fetch the user, create the playlist,
        add the tracks in batches. When ``progress`` already holds a playlist
        the first two steps are skipped and only the remaining tracks are added.

        Raises:
            UnauthorizedError: If the provider rejects the credential
            PlaylistCreationError: If the user lookup or creation fails
            BatchAddError: If a batch of tracks could not be added
        """
        progress = progress if progress is not None else AssemblyProgress()

        if progress.playlist is None:
            progress.playlist = self.create(name, description, visibility, credential)
        else:
            logger.info(
                "resuming_playlist",
                playlist_id=progress.playlist.id,
                tracks_added=progress.tracks_added,
            )

        uris = [t.uri for t in tracks]
        self.add_tracks(progress.playlist, uris, credential, progress)
        return progress.playlist

    def create(
        self,
        name: str,
        description: str,
        visibility: Visibility,
        credential: Credential,
    ) -> Playlist:
        """Look up the current user and create an empty playlist they own."""
        user = self.client.current_user(credential)
        if user.is_unauthorized:
            raise self._unauthorized("current_user", user)
        if not user.is_ok:
            raise PlaylistCreationError(
                f"Failed to fetch user profile: {user.message}",
                stage="current_user",
                status_code=user.status_code,
            )
        user_id = user.payload["id"]

        logger.info("creating_playlist", name=name, owner=user_id, visibility=visibility.value)
        created = self.client.create_playlist(
            credential,
            user_id,
            name,
            description or DEFAULT_DESCRIPTION,
            visibility.is_public,
        )
        if created.is_unauthorized:
            raise self._unauthorized("create_playlist", created)
        if not created.is_ok:
            raise PlaylistCreationError(
                f"Failed to create playlist: {created.message}",
                stage="create_playlist",
                status_code=created.status_code,
            )

        return Playlist(
            id=created.payload["id"],
            web_url=created.payload["url"],
            owner_id=user_id,
            name=name,
        )

    def add_tracks(
        self,
        playlist: Playlist,
        uris: Sequence[str],
        credential: Credential,
        progress: AssemblyProgress | None = None,
    ) -> int:
        """Add the URIs not yet added according to ``progress``.

        Returns:
            Total number of tracks added to the playlist so far
        """
        progress = progress if progress is not None else AssemblyProgress(playlist=playlist)
        remaining = list(uris[progress.tracks_added :])
        first_batch = progress.tracks_added // self.batch_size

        for offset, batch in enumerate(chunked(remaining, self.batch_size)):
            batch_num = first_batch + offset + 1
            response = self.client.add_tracks(credential, playlist.id, batch)

            if response.is_unauthorized:
                raise self._unauthorized("add_tracks", response)
            if not response.is_ok:
                logger.error(
                    "add_tracks_failed",
                    playlist_id=playlist.id,
                    batch_num=batch_num,
                    status=response.status_code,
                    error=response.message,
                )
                raise BatchAddError(
                    f"Failed to add batch {batch_num} to playlist: {response.message}",
                    playlist=playlist,
                    batch_index=batch_num - 1,
                    tracks_added=progress.tracks_added,
                    status_code=response.status_code,
                )

            progress.tracks_added += len(batch)
            logger.debug(
                "tracks_added_batch",
                playlist_id=playlist.id,
                batch_num=batch_num,
                count=len(batch),
            )

        logger.info("tracks_added", playlist_id=playlist.id, total=progress.tracks_added)
        return progress.tracks_added
