"""Shared fixtures: a scripted fake Spotify provider and test settings."""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from setlist2playlist.config import Settings
from setlist2playlist.errors import SetlistNotFoundError
from setlist2playlist.models import Credential, Setlist
from setlist2playlist.sources import BaseSetlistSource
from setlist2playlist.spotify.provider import ProviderResult, TokenGrant

NOW = datetime(2024, 6, 1, 20, 0, tzinfo=timezone.utc)


def make_track(track_id: str, name: str, *artists: str) -> dict:
    """Raw Spotify track object as returned by search."""
    return {
        "id": track_id,
        "name": name,
        "uri": f"spotify:track:{track_id}",
        "artists": [{"name": a} for a in artists],
        "album": {"images": [{"url": f"https://i.scdn.co/image/{track_id}"}]},
    }


class FakeProvider:
    """In-memory ProviderClient.

    ``catalog`` maps an exact query string to its candidates; unknown queries
    return no candidates. ``script(operation, *results)`` queues results that
    the next calls of that operation return instead of the normal answer.
    """

    def __init__(self):
        self.catalog: dict[str, list[dict]] = {}
        self.calls: list[tuple] = []
        self.queries: list[str] = []
        self.batches: list[list[str]] = []
        self._scripted: dict[str, list[ProviderResult]] = defaultdict(list)
        self._refresh_count = 0

    def script(self, operation: str, *results: ProviderResult) -> None:
        self._scripted[operation].extend(results)

    def _scripted_result(self, operation: str) -> ProviderResult | None:
        queue = self._scripted.get(operation)
        if queue:
            return queue.pop(0)
        return None

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.spotify.com/authorize?client_id=test&state={state}"

    def exchange_code(self, code: str) -> ProviderResult:
        self.calls.append(("exchange_code", code))
        scripted = self._scripted_result("exchange_code")
        if scripted:
            return scripted
        return ProviderResult.ok(TokenGrant("access-initial", 3600, "refresh-initial"))

    def refresh_token(self, refresh_token: str) -> ProviderResult:
        self.calls.append(("refresh_token", refresh_token))
        scripted = self._scripted_result("refresh_token")
        if scripted:
            return scripted
        self._refresh_count += 1
        return ProviderResult.ok(TokenGrant(f"access-refreshed-{self._refresh_count}", 3600))

    def search_tracks(self, query: str, limit: int, credential: Credential) -> ProviderResult:
        self.calls.append(("search_tracks", query, limit, credential.access_token))
        self.queries.append(query)
        scripted = self._scripted_result("search_tracks")
        if scripted:
            return scripted
        return ProviderResult.ok(list(self.catalog.get(query, []))[:limit])

    def current_user(self, credential: Credential) -> ProviderResult:
        self.calls.append(("current_user", credential.access_token))
        scripted = self._scripted_result("current_user")
        if scripted:
            return scripted
        return ProviderResult.ok({"id": "user-1", "display_name": "Test User"})

    def create_playlist(self, credential, user_id, name, description, public) -> ProviderResult:
        self.calls.append(("create_playlist", user_id, name, description, public, credential.access_token))
        scripted = self._scripted_result("create_playlist")
        if scripted:
            return scripted
        playlist_id = f"pl-{self.count('create_playlist')}"
        return ProviderResult.ok(
            {"id": playlist_id, "url": f"https://open.spotify.com/playlist/{playlist_id}"}
        )

    def add_tracks(self, credential, playlist_id, uris) -> ProviderResult:
        self.calls.append(("add_tracks", playlist_id, list(uris), credential.access_token))
        result = self._scripted_result("add_tracks") or ProviderResult.ok({"snapshot_id": "snap"})
        if result.is_ok:
            self.batches.append(list(uris))
        return result


class FakeSetlistSource(BaseSetlistSource):
    """Setlist source serving setlists from a dict."""

    def __init__(self, setlists: dict[str, Setlist]):
        self.setlists = setlists

    @property
    def name(self) -> str:
        return "fake"

    def get_setlist(self, setlist_id: str) -> Setlist:
        try:
            return self.setlists[setlist_id]
        except KeyError:
            raise SetlistNotFoundError("Setlist not found", stage="setlist", status_code=404)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def credential() -> Credential:
    """A credential valid for another hour at NOW."""
    return Credential(
        access_token="access-initial",
        refresh_token="refresh-initial",
        expires_at=NOW + timedelta(hours=1),
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        spotify_client_id="client-id",
        spotify_client_secret="client-secret",
        setlist_fm_api_key="setlist-key",
        token_cache_path=tmp_path / "credential.json",
    )


@pytest.fixture
def setlist() -> Setlist:
    return Setlist(
        id="63de4613",
        url="https://www.setlist.fm/setlist/band-x/2024/venue-63de4613.html",
        artist_name="Band X",
        venue_name="The Venue",
        city="Berlin",
        country="Germany",
        event_date=datetime(2024, 5, 31).date(),
        song_titles=["Song A", "...", "Song A", "Song B"],
    )
