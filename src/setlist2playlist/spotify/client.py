"""Spotify API client for the setlist pipeline.

Handles:
- OAuth authorization URL, code exchange and token refresh
- Track search
- Current user lookup
- Playlist creation and track addition

The client never stores a credential: every API call takes the credential
to use, and every call returns a tagged ProviderResult instead of raising.
"""

from typing import Any, Callable

import requests
import spotipy
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from ..logging import get_logger
from ..models import Credential
from .provider import ProviderResult, TokenGrant

logger = get_logger(__name__)


class SpotifyClient:
    """Spotify Web API client implementing the ProviderClient protocol.

    Wraps spotipy with result tagging and structured logging.
    """

    SCOPE = "playlist-modify-public playlist-modify-private user-read-private user-read-email"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str = "http://127.0.0.1:8888/callback",
        requests_timeout: float = 30.0,
    ):
        """Initialize the Spotify client.

        Args:
            client_id: Spotify application client ID
            client_secret: Spotify application client secret
            redirect_uri: OAuth redirect URI registered for the application
            requests_timeout: Timeout in seconds for each HTTP request
        """
        self.requests_timeout = requests_timeout

        # Tokens are threaded by the caller, so the OAuth manager only
        # gets a throwaway in-memory cache.
        self._oauth = SpotifyOAuth(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scope=self.SCOPE,
            cache_handler=MemoryCacheHandler(),
            open_browser=False,
            requests_timeout=requests_timeout,
        )

        logger.info("spotify_client_initialized", redirect_uri=redirect_uri)

    def _api(self, credential: Credential) -> spotipy.Spotify:
        return spotipy.Spotify(auth=credential.access_token, requests_timeout=self.requests_timeout)

    def _call(self, operation: str, fn: Callable[[], Any], **context: Any) -> ProviderResult:
        """Run one API call and tag its outcome."""
        try:
            return ProviderResult.ok(fn())
        except spotipy.SpotifyException as e:
            result = ProviderResult.from_status(e.http_status, e.msg or str(e))
        except requests.exceptions.RequestException as e:
            result = ProviderResult.transient(str(e))

        logger.warning(
            "spotify_call_failed",
            operation=operation,
            kind=result.kind.value,
            status=result.status_code,
            error=result.message,
            **context,
        )
        return result

    # OAuth

    def authorization_url(self, state: str) -> str:
        return self._oauth.get_authorize_url(state=state)

    def _token_call(self, operation: str, fn: Callable[[], dict[str, Any]]) -> ProviderResult:
        try:
            token_info = fn()
        except SpotifyOauthError as e:
            # spotipy raises this for every failed token response; the
            # HTTPError it wraps tells an outage from a rejected grant.
            response = getattr(e.__context__, "response", None)
            status = getattr(response, "status_code", None)
            if status is not None and (status >= 500 or status == 429):
                logger.warning("spotify_token_endpoint_failed", operation=operation, status=status)
                return ProviderResult.transient(str(e), status)
            logger.warning("spotify_token_rejected", operation=operation, error=str(e))
            return ProviderResult.unauthorized(str(e))
        except requests.exceptions.RequestException as e:
            logger.warning("spotify_token_request_failed", operation=operation, error=str(e))
            return ProviderResult.transient(str(e))

        return ProviderResult.ok(
            TokenGrant(
                access_token=token_info["access_token"],
                expires_in=int(token_info.get("expires_in", 3600)),
                refresh_token=token_info.get("refresh_token"),
            )
        )

    def exchange_code(self, code: str) -> ProviderResult:
        """Exchange an authorization code for tokens."""
        return self._token_call(
            "exchange_code",
            lambda: self._oauth.get_access_token(code, as_dict=True, check_cache=False),
        )

    def refresh_token(self, refresh_token: str) -> ProviderResult:
        """Obtain a new access token from a refresh token."""
        return self._token_call(
            "refresh_token",
            lambda: self._oauth.refresh_access_token(refresh_token),
        )

    # Web API

    def search_tracks(self, query: str, limit: int, credential: Credential) -> ProviderResult:
        """Search for tracks.

        Returns:
            Result whose payload is the list of raw track objects
        """
        result = self._call(
            "search_tracks",
            lambda: self._api(credential).search(q=query, type="track", limit=limit),
            query=query,
        )
        if not result.is_ok:
            return result
        items = (result.payload or {}).get("tracks", {}).get("items", [])
        return ProviderResult.ok([item for item in items if item])

    def current_user(self, credential: Credential) -> ProviderResult:
        return self._call("current_user", lambda: self._api(credential).current_user())

    def create_playlist(
        self,
        credential: Credential,
        user_id: str,
        name: str,
        description: str,
        public: bool,
    ) -> ProviderResult:
        """Create an empty playlist owned by ``user_id``.

        Returns:
            Result whose payload is a dict with ``id`` and ``url``
        """
        result = self._call(
            "create_playlist",
            lambda: self._api(credential).user_playlist_create(
                user=user_id,
                name=name,
                public=public,
                description=description,
            ),
            name=name,
        )
        if not result.is_ok:
            return result

        playlist = result.payload
        logger.info(
            "playlist_created",
            name=name,
            id=playlist["id"],
            url=playlist["external_urls"]["spotify"],
        )
        return ProviderResult.ok({"id": playlist["id"], "url": playlist["external_urls"]["spotify"]})

    def add_tracks(self, credential: Credential, playlist_id: str, uris: list[str]) -> ProviderResult:
        """Append tracks to a playlist. Spotify accepts at most 100 URIs per request."""
        return self._call(
            "add_tracks",
            lambda: self._api(credential).playlist_add_items(playlist_id, uris),
            playlist_id=playlist_id,
            count=len(uris),
        )
