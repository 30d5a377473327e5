"""Pipeline orchestrator for setlist2playlist.

Coordinates one run:
1. Prepare song titles (drop placeholders and duplicates)
2. Resolve titles to Spotify tracks
3. Create the playlist and add the tracks

An unauthorized answer from the provider during resolution or assembly
triggers one token refresh and one replay of the failed stage. The refresh
budget is per run, not per stage.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Sequence, TypeVar

from .config import Settings, get_settings
from .errors import (
    NoTracksMatchedError,
    SessionExpiredError,
    Setlist2PlaylistError,
    UnauthorizedError,
)
from .filters import FilterResult, default_chain
from .logging import bind_run_context, clear_run_context, get_logger
from .models import (
    Credential,
    MatchedTrack,
    Playlist,
    PipelineResult,
    ResolutionResult,
    Setlist,
    Visibility,
    utcnow,
)
from .sources import SetlistSource, default_playlist_name
from .sources.setlist_fm import SetlistFmSource
from .spotify import (
    AssemblyProgress,
    CatalogSearchResolver,
    PlaylistAssembler,
    ProviderClient,
    SpotifyClient,
    TokenManager,
)

logger = get_logger(__name__)

T = TypeVar("T")


class RunState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Run:
    """Mutable state of one pipeline run."""

    credential: Credential
    state: RunState = RunState.IDLE
    auth_retry_used: bool = False
    refreshed: bool = False
    failure: str | None = None

    def fail(self, reason: str) -> None:
        self.state = RunState.FAILED
        self.failure = reason

    def attach_credential(self, error: Setlist2PlaylistError) -> None:
        """Hand a credential refreshed during this run to the caller with ``error``."""
        if self.refreshed:
            error.credential = self.credential


class Pipeline:
    """Main pipeline orchestrator for setlist2playlist."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: ProviderClient | None = None,
        source: SetlistSource | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the pipeline.

        Args:
            settings: Optional settings override
            client: Optional provider client (defaults to SpotifyClient)
            source: Optional setlist source (defaults to SetlistFmSource)
            clock: Source of the current time for expiry checks
        """
        self.settings = settings or get_settings()
        self.clock = clock

        # Spotify client and setlist source are created lazily so commands
        # that need only one of them do not require the other's settings.
        self._client = client
        self._source = source
        self._tokens: TokenManager | None = None
        self._resolver: CatalogSearchResolver | None = None
        self._assembler: PlaylistAssembler | None = None

    @property
    def client(self) -> ProviderClient:
        """Lazy initialization of the Spotify client."""
        if self._client is None:
            self.settings.require_spotify()
            self._client = SpotifyClient(
                client_id=self.settings.spotify_client_id,
                client_secret=self.settings.spotify_client_secret,
                redirect_uri=self.settings.spotify_redirect_uri,
                requests_timeout=self.settings.request_timeout,
            )
        return self._client

    @property
    def source(self) -> SetlistSource:
        """Lazy initialization of the setlist source."""
        if self._source is None:
            self.settings.require_setlist_fm()
            self._source = SetlistFmSource(
                api_key=self.settings.setlist_fm_api_key,
                timeout=self.settings.request_timeout,
            )
        return self._source

    @property
    def tokens(self) -> TokenManager:
        if self._tokens is None:
            self._tokens = TokenManager(self.client, clock=self.clock)
        return self._tokens

    @property
    def resolver(self) -> CatalogSearchResolver:
        if self._resolver is None:
            self._resolver = CatalogSearchResolver(self.client, limit=self.settings.search_limit)
        return self._resolver

    @property
    def assembler(self) -> PlaylistAssembler:
        if self._assembler is None:
            self._assembler = PlaylistAssembler(self.client)
        return self._assembler

    # Auth retry

    def _refresh(self, run: Run, stage: str) -> None:
        """Spend the run's single refresh."""
        if run.auth_retry_used:
            raise SessionExpiredError(
                "Spotify session expired, please log in again",
                stage=stage,
                status_code=401,
            )
        run.auth_retry_used = True
        run.credential = self.tokens.refresh(run.credential)
        run.refreshed = True
        logger.info("run_credential_refreshed", stage=stage)

    def _stage(self, run: Run, stage: str, fn: Callable[[Credential], T]) -> T:
        try:
            return self._replayed(run, stage, fn)
        except Setlist2PlaylistError as e:
            run.attach_credential(e)
            raise

    def _replayed(self, run: Run, stage: str, fn: Callable[[Credential], T]) -> T:
        """Run a stage, replaying it once with a refreshed credential on 401."""
        if self.tokens.is_expired(run.credential):
            logger.info("credential_expired_before_stage", stage=stage)
            self._refresh(run, stage)

        try:
            return fn(run.credential)
        except UnauthorizedError as e:
            logger.warning("stage_unauthorized", stage=stage, call=e.stage)
            self._refresh(run, stage)

        try:
            return fn(run.credential)
        except UnauthorizedError as e:
            logger.error("stage_unauthorized_after_refresh", stage=stage, call=e.stage)
            raise SessionExpiredError(
                "Spotify session expired, please log in again",
                stage=stage,
                status_code=e.status_code,
            ) from e

    # Stages

    def prepare_song_titles(self, song_titles: Sequence[str]) -> FilterResult:
        """Drop placeholders and duplicates, keeping setlist order."""
        result = default_chain().apply(list(song_titles))
        logger.info(
            "song_titles_prepared",
            before=len(song_titles),
            after=len(result.included),
            excluded=len(result.excluded),
        )
        return result

    def resolve_tracks(
        self,
        song_titles: Sequence[str],
        artist_name: str,
        credential: Credential,
    ) -> tuple[ResolutionResult, Credential]:
        """Resolve song titles as a single-stage run.

        Returns:
            Tuple of (resolution result, credential in effect afterwards)
        """
        run = Run(credential=credential, state=RunState.RESOLVING)
        titles = self.prepare_song_titles(song_titles).included
        resolution = self._stage(
            run, "resolve", lambda cred: self.resolver.resolve(titles, artist_name, cred)
        )
        run.state = RunState.DONE
        return resolution, run.credential

    def build_playlist(
        self,
        name: str,
        description: str,
        tracks: Sequence[MatchedTrack],
        credential: Credential,
        visibility: Visibility = Visibility.PRIVATE,
    ) -> tuple[Playlist, Credential]:
        """Create and fill a playlist from already resolved tracks as a single-stage run.

        Returns:
            Tuple of (playlist, credential in effect afterwards)
        """
        run = Run(credential=credential, state=RunState.ASSEMBLING)
        progress = AssemblyProgress()
        playlist = self._stage(
            run,
            "assemble",
            lambda cred: self.assembler.assemble(
                name, description, tracks, visibility, cred, progress
            ),
        )
        run.state = RunState.DONE
        return playlist, run.credential

    # Full runs

    def run(
        self,
        song_titles: Sequence[str],
        artist_name: str,
        credential: Credential,
        playlist_name: str,
        description: str = "",
        visibility: Visibility = Visibility.PRIVATE,
    ) -> PipelineResult:
        """Run the full pipeline to create a playlist.

        Args:
            song_titles: Raw song titles in setlist order
            artist_name: Performing artist
            credential: Current Spotify credential
            playlist_name: Name for the created playlist
            description: Playlist description
            visibility: Public or private playlist

        Returns:
            PipelineResult with the playlist, unmatched titles and the
            credential in effect at the end of the run
        """
        run = Run(credential=credential)
        bind_run_context(artist=artist_name)
        logger.info("pipeline_start", playlist_name=playlist_name, songs=len(song_titles))

        try:
            prepared = self.prepare_song_titles(song_titles)

            run.state = RunState.RESOLVING
            resolution = self._stage(
                run,
                "resolve",
                lambda cred: self.resolver.resolve(prepared.included, artist_name, cred),
            )
            if not resolution.matched:
                raise NoTracksMatchedError("No tracks found on Spotify", stage="resolve")

            run.state = RunState.ASSEMBLING
            progress = AssemblyProgress()
            playlist = self._stage(
                run,
                "assemble",
                lambda cred: self.assembler.assemble(
                    playlist_name, description, resolution.matched, visibility, cred, progress
                ),
            )
            run.state = RunState.DONE
        except Setlist2PlaylistError as e:
            run.fail(e.message)
            run.attach_credential(e)
            logger.error(
                "pipeline_failed",
                stage=e.stage,
                category=e.category,
                status=e.status_code,
                error=e.message,
            )
            raise
        finally:
            clear_run_context()

        logger.info(
            "pipeline_complete",
            playlist_id=playlist.id,
            tracks_added=progress.tracks_added,
            unmatched=len(resolution.unmatched),
            refreshed=run.refreshed,
        )

        return PipelineResult(
            playlist=playlist,
            matched=resolution.matched,
            unmatched=resolution.unmatched,
            excluded=prepared.excluded,
            tracks_added=progress.tracks_added,
            credential=run.credential,
            refreshed=run.refreshed,
        )

    def run_from_setlist(
        self,
        setlist: Setlist,
        credential: Credential,
        playlist_name: str | None = None,
        description: str = "",
        visibility: Visibility = Visibility.PRIVATE,
    ) -> PipelineResult:
        """Run the pipeline for a fetched setlist, naming the playlist after it by default."""
        return self.run(
            song_titles=setlist.song_titles,
            artist_name=setlist.artist_name,
            credential=credential,
            playlist_name=playlist_name or default_playlist_name(setlist),
            description=description,
            visibility=visibility,
        )

    def run_from_url(
        self,
        url: str,
        credential: Credential,
        playlist_name: str | None = None,
        description: str = "",
        visibility: Visibility = Visibility.PRIVATE,
    ) -> PipelineResult:
        """Fetch the setlist behind ``url`` and run the pipeline for it."""
        setlist = self.source.get_setlist_from_url(url)
        return self.run_from_setlist(setlist, credential, playlist_name, description, visibility)
