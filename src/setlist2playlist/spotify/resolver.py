"""Catalog search resolver: setlist song titles to Spotify tracks."""

from typing import Sequence

from ..errors import ResolutionPartialFailure, UnauthorizedError
from ..logging import get_logger
from ..models import Credential, MatchedTrack, ResolutionResult
from .provider import ProviderClient, ResultKind
from .strategies import DEFAULT_STRATEGIES, SearchStrategy, select_candidate

logger = get_logger(__name__)


class CatalogSearchResolver:
    """Resolves each song title to at most one catalog track.

    Each title is searched independently and in input order, trying the
    strategies in order until one returns candidates. A failed search only
    affects its own title; an unauthorized answer aborts the resolution so
    that it can be replayed with a refreshed credential.
    """

    DEFAULT_LIMIT = 5

    def __init__(
        self,
        client: ProviderClient,
        strategies: Sequence[SearchStrategy] = DEFAULT_STRATEGIES,
        limit: int = DEFAULT_LIMIT,
    ):
        """Initialize the resolver.

        Args:
            client: Provider client used for track search
            strategies: Search strategies, loosest last
            limit: Maximum candidates requested per query
        """
        self.client = client
        self.strategies = tuple(strategies)
        self.limit = limit

    def resolve(
        self,
        song_titles: Sequence[str],
        artist_name: str,
        credential: Credential,
    ) -> ResolutionResult:
        """Resolve song titles for one artist.

        Args:
            song_titles: Prepared song titles (de-duplicated, no placeholders)
            artist_name: Performing artist
            credential: Credential for the search calls

        Returns:
            ResolutionResult with every title either matched or unmatched

        Raises:
            UnauthorizedError: If the provider rejects the credential
        """
        logger.info("resolving_tracks", artist=artist_name, count=len(song_titles))

        result = ResolutionResult()
        for title in song_titles:
            try:
                track = self.resolve_one(title, artist_name, credential)
            except ResolutionPartialFailure as e:
                logger.warning(
                    "track_search_failed",
                    song=title,
                    status=e.status_code,
                    error=e.message,
                )
                track = None

            if track is None:
                result.unmatched.append(title)
            else:
                result.matched.append(track)

        logger.info(
            "tracks_resolved",
            artist=artist_name,
            matched=len(result.matched),
            unmatched=len(result.unmatched),
        )
        return result

    def resolve_one(
        self,
        song_title: str,
        artist_name: str,
        credential: Credential,
    ) -> MatchedTrack | None:
        """Resolve a single song title.

        Returns:
            The matched track, or None if no strategy found candidates

        Raises:
            ResolutionPartialFailure: If a search call failed
            UnauthorizedError: If the provider rejects the credential
        """
        for strategy in self.strategies:
            query = strategy.build_query(song_title, artist_name)
            response = self.client.search_tracks(query, self.limit, credential)

            if response.kind is ResultKind.UNAUTHORIZED:
                raise UnauthorizedError(
                    response.message or "Unauthorized",
                    stage="resolve",
                    status_code=response.status_code,
                )
            if not response.is_ok:
                raise ResolutionPartialFailure(
                    song_title,
                    response.message or response.kind.value,
                    status_code=response.status_code,
                )

            candidates = list(response.payload or [])[: self.limit]
            if not candidates:
                logger.debug("strategy_no_results", song=song_title, strategy=strategy.name)
                continue

            chosen = select_candidate(candidates, artist_name)
            track = MatchedTrack.from_candidate(chosen, song_title=song_title)
            logger.debug(
                "track_matched",
                song=song_title,
                strategy=strategy.name,
                track_id=track.id,
                artists=track.artist_names,
            )
            return track

        logger.info("track_not_found", song=song_title, artist=artist_name)
        return None
