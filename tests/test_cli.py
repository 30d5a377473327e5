"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from setlist2playlist import cli
from setlist2playlist.config import get_settings
from setlist2playlist.credentials import CredentialStore
from setlist2playlist.pipeline import Pipeline
from setlist2playlist.spotify.provider import ProviderResult

from .conftest import NOW, FakeSetlistSource, make_track

runner = CliRunner()


@pytest.fixture(autouse=True)
def token_cache(tmp_path, monkeypatch) -> CredentialStore:
    monkeypatch.setenv("TOKEN_CACHE_PATH", str(tmp_path / "credential.json"))
    get_settings.cache_clear()
    yield CredentialStore(tmp_path / "credential.json")
    get_settings.cache_clear()


@pytest.fixture
def pipeline(settings, provider, setlist, monkeypatch) -> Pipeline:
    provider.catalog['track:"Song A" artist:"Band X"'] = [make_track("a", "Song A", "Band X")]
    source = FakeSetlistSource({setlist.id: setlist})
    pipeline = Pipeline(settings, client=provider, source=source, clock=lambda: NOW)
    monkeypatch.setattr(cli, "Pipeline", lambda *args, **kwargs: pipeline)
    return pipeline


def test_status_without_credential() -> None:
    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 1
    assert "Not logged in" in result.output


def test_status_and_logout(token_cache, credential) -> None:
    token_cache.save(credential)

    result = runner.invoke(cli.app, ["status"])
    assert result.exit_code == 0
    assert "Refreshable: yes" in result.output

    result = runner.invoke(cli.app, ["logout"])
    assert result.exit_code == 0
    assert token_cache.load() is None


def test_show_setlist(pipeline, setlist) -> None:
    result = runner.invoke(cli.app, ["show-setlist", setlist.url])

    assert result.exit_code == 0
    assert "Suggested playlist name: Band X - Berlin 2024-05-31" in result.output
    assert " 2. ..." in result.output


def test_create_requires_login(pipeline, setlist, provider) -> None:
    result = runner.invoke(cli.app, ["create", setlist.url])

    assert result.exit_code == 1
    assert provider.calls == []


def test_create_writes_results(pipeline, setlist, token_cache, credential, tmp_path) -> None:
    token_cache.save(credential)
    output = tmp_path / "result.json"

    result = runner.invoke(cli.app, ["create", setlist.url, "-n", "Live", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert "https://open.spotify.com/playlist/pl-1" in result.output
    assert "Song B" in result.output
    data = json.loads(output.read_text())
    assert data["unmatched"] == ["Song B"]
    assert "credential" not in data
    # No refresh happened, so the cache is untouched.
    assert token_cache.load() == credential


def test_create_saves_refreshed_credential(pipeline, setlist, provider, token_cache, credential) -> None:
    token_cache.save(credential)
    provider.script("search_tracks", ProviderResult.unauthorized())

    result = runner.invoke(cli.app, ["create", setlist.url])

    assert result.exit_code == 0, result.output
    assert token_cache.load().access_token == "access-refreshed-1"


def test_create_expired_session_logs_out(pipeline, setlist, provider, token_cache, credential) -> None:
    token_cache.save(credential)
    provider.script("search_tracks", ProviderResult.unauthorized(), ProviderResult.unauthorized())

    result = runner.invoke(cli.app, ["create", setlist.url])

    assert result.exit_code == 1
    assert "login" in result.output
    assert token_cache.load() is None


def test_create_keeps_login_when_token_endpoint_is_down(pipeline, setlist, provider, token_cache, credential) -> None:
    token_cache.save(credential)
    provider.script("search_tracks", ProviderResult.unauthorized())
    provider.script("refresh_token", ProviderResult.transient("accounts.spotify.com timed out", 503))

    result = runner.invoke(cli.app, ["create", setlist.url])

    assert result.exit_code == 1
    assert "try again" in result.output
    assert token_cache.load() == credential


def test_create_saves_refreshed_credential_on_failure(pipeline, setlist, provider, token_cache, credential) -> None:
    token_cache.save(credential)
    provider.script("search_tracks", ProviderResult.unauthorized())
    provider.script("add_tracks", ProviderResult.transient("server error", 500))

    result = runner.invoke(cli.app, ["create", setlist.url])

    assert result.exit_code == 1
    assert "Playlist created but incomplete" in result.output
    assert token_cache.load().access_token == "access-refreshed-1"


def test_create_without_matches(pipeline, provider, token_cache, credential) -> None:
    token_cache.save(credential)
    provider.catalog.clear()

    result = runner.invoke(cli.app, ["create", "63de4613"])

    assert result.exit_code == 1
    assert "None of the songs in this setlist were found on Spotify." in result.output
    assert "setlist URL" not in result.output
