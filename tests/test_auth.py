"""Tests for the OAuth token lifecycle."""

from datetime import timedelta

import pytest

from setlist2playlist.errors import AuthExchangeError, ProviderUnavailableError, RefreshError
from setlist2playlist.models import Credential
from setlist2playlist.spotify.auth import TokenManager, parse_authorization_response
from setlist2playlist.spotify.provider import ProviderResult, TokenGrant

from .conftest import NOW


@pytest.fixture
def tokens(provider) -> TokenManager:
    return TokenManager(provider, clock=lambda: NOW)


class TestExchange:
    def test_exchange_builds_credential(self, tokens, provider) -> None:
        credential = tokens.exchange_authorization_code("good-code")

        assert credential.access_token == "access-initial"
        assert credential.refresh_token == "refresh-initial"
        assert credential.expires_at == NOW + timedelta(seconds=3600)
        assert provider.calls == [("exchange_code", "good-code")]

    def test_rejected_code(self, tokens, provider) -> None:
        provider.script("exchange_code", ProviderResult.unauthorized("invalid_grant"))

        with pytest.raises(AuthExchangeError) as exc_info:
            tokens.exchange_authorization_code("bad-code")

        assert exc_info.value.category == "bad_credential"

    def test_network_error_is_not_retried(self, tokens, provider) -> None:
        provider.script("exchange_code", ProviderResult.transient("connection reset"))

        with pytest.raises(ProviderUnavailableError) as exc_info:
            tokens.exchange_authorization_code("code")

        assert provider.count("exchange_code") == 1
        assert exc_info.value.category == "unavailable"

    def test_empty_code(self, tokens, provider) -> None:
        with pytest.raises(AuthExchangeError):
            tokens.exchange_authorization_code("")
        assert provider.calls == []


class TestRefresh:
    def test_refresh_returns_new_credential(self, tokens, provider, credential) -> None:
        refreshed = tokens.refresh(credential)

        assert refreshed is not credential
        assert refreshed.access_token == "access-refreshed-1"
        assert refreshed.expires_at == NOW + timedelta(seconds=3600)
        assert credential.access_token == "access-initial"

    def test_refresh_keeps_previous_refresh_token(self, tokens, credential) -> None:
        assert tokens.refresh(credential).refresh_token == "refresh-initial"

    def test_refresh_uses_rotated_refresh_token(self, tokens, provider, credential) -> None:
        provider.script("refresh_token", ProviderResult.ok(TokenGrant("new", 60, "rotated")))
        assert tokens.refresh(credential).refresh_token == "rotated"

    def test_refresh_without_refresh_token(self, tokens, provider) -> None:
        credential = Credential.issue("token", 3600, issued_at=NOW)

        with pytest.raises(RefreshError):
            tokens.refresh(credential)

        assert provider.calls == []

    def test_rejected_refresh_token(self, tokens, provider, credential) -> None:
        provider.script("refresh_token", ProviderResult.unauthorized("revoked"))

        with pytest.raises(RefreshError):
            tokens.refresh(credential)

    def test_unreachable_token_endpoint(self, tokens, provider, credential) -> None:
        provider.script("refresh_token", ProviderResult.transient("timed out", 503))

        with pytest.raises(ProviderUnavailableError) as exc_info:
            tokens.refresh(credential)

        assert not isinstance(exc_info.value, RefreshError)
        assert exc_info.value.status_code == 503


def test_is_expired_uses_clock(tokens, credential) -> None:
    assert not tokens.is_expired(credential)
    assert tokens.is_expired(credential, now=credential.expires_at)


def test_authorization_url_carries_state(tokens) -> None:
    url, state = tokens.authorization_url()
    assert len(state) == 32
    assert url.endswith(f"state={state}")


class TestParseAuthorizationResponse:
    def test_redirect_url(self) -> None:
        code, state = parse_authorization_response(
            "http://127.0.0.1:8888/callback?code=abc123&state=xyz"
        )
        assert (code, state) == ("abc123", "xyz")

    def test_bare_code(self) -> None:
        assert parse_authorization_response("  abc123 ") == ("abc123", None)

    def test_denied(self) -> None:
        with pytest.raises(AuthExchangeError):
            parse_authorization_response("http://127.0.0.1:8888/callback?error=access_denied&state=xyz")
