"""OAuth token lifecycle: authorization, code exchange, refresh and expiry.

The manager holds no session. Callers own the current Credential and pass
it in; refresh returns a new Credential and leaves the old one untouched.
"""

import secrets
import urllib.parse
from datetime import datetime
from typing import Callable

from ..errors import AuthExchangeError, ProviderUnavailableError, RefreshError
from ..logging import get_logger
from ..models import Credential, utcnow
from .provider import ProviderClient, ProviderResult, ResultKind

logger = get_logger(__name__)


def generate_state() -> str:
    """Random CSRF state for the authorization request."""
    return secrets.token_hex(16)


def parse_authorization_response(value: str) -> tuple[str | None, str | None]:
    """Extract (code, state) from a pasted redirect URL or a bare code.

    Raises:
        AuthExchangeError: If the redirect carries an OAuth error such as access_denied
    """
    value = value.strip()
    if "?" not in value and "=" not in value:
        return value or None, None

    query = urllib.parse.urlparse(value).query if "?" in value else value
    params = urllib.parse.parse_qs(query)
    if "error" in params:
        raise AuthExchangeError(f"Authorization failed: {params['error'][0]}", stage="authorize")
    code = (params.get("code") or [None])[0]
    state = (params.get("state") or [None])[0]
    return code, state


class TokenManager:
    """Obtains, refreshes and checks OAuth credentials."""

    def __init__(self, client: ProviderClient, clock: Callable[[], datetime] = utcnow):
        """Initialize the token manager.

        Args:
            client: Provider client performing the token requests
            clock: Source of the current time, injectable for tests
        """
        self.client = client
        self.clock = clock

    @staticmethod
    def _unavailable(stage: str, result: ProviderResult) -> ProviderUnavailableError:
        logger.warning("token_endpoint_unavailable", stage=stage, status=result.status_code, error=result.message)
        return ProviderUnavailableError(
            "Spotify accounts service is unavailable",
            stage=stage,
            status_code=result.status_code,
        )

    def authorization_url(self, state: str | None = None) -> tuple[str, str]:
        """Build the URL the user must visit to grant access.

        Returns:
            Tuple of (url, state); the state must be checked on callback
        """
        state = state or generate_state()
        return self.client.authorization_url(state), state

    def exchange_authorization_code(self, code: str) -> Credential:
        """Exchange an authorization code for a credential.

        Raises:
            AuthExchangeError: If the provider rejects the code
            ProviderUnavailableError: If the token endpoint cannot be reached
        """
        if not code:
            raise AuthExchangeError("Code is required", stage="exchange_code")

        issued_at = self.clock()
        result = self.client.exchange_code(code)
        if result.kind is ResultKind.TRANSIENT_ERROR:
            raise self._unavailable("exchange_code", result)
        if not result.is_ok:
            logger.error("auth_exchange_failed", kind=result.kind.value, error=result.message)
            raise AuthExchangeError(
                "Failed to exchange authorization code",
                stage="exchange_code",
                status_code=result.status_code,
            )

        grant = result.payload
        credential = Credential.issue(
            access_token=grant.access_token,
            expires_in=grant.expires_in,
            refresh_token=grant.refresh_token,
            issued_at=issued_at,
        )
        logger.info(
            "auth_code_exchanged",
            expires_at=credential.expires_at.isoformat(),
            refreshable=credential.can_refresh,
        )
        return credential

    def refresh(self, credential: Credential) -> Credential:
        """Refresh a credential.

        A response without a new refresh token keeps the previous one.

        Raises:
            RefreshError: If the credential has no refresh token or the provider
                rejects it. The session must then be treated as logged out.
            ProviderUnavailableError: If the token endpoint cannot be reached;
                the credential is left as it was.
        """
        if not credential.can_refresh:
            raise RefreshError("Credential has no refresh token", stage="refresh")

        issued_at = self.clock()
        result = self.client.refresh_token(credential.refresh_token)
        if result.kind is ResultKind.TRANSIENT_ERROR:
            raise self._unavailable("refresh", result)
        if not result.is_ok:
            logger.error("token_refresh_failed", kind=result.kind.value, error=result.message)
            raise RefreshError(
                "Failed to refresh access token",
                stage="refresh",
                status_code=result.status_code,
            )

        grant = result.payload
        refreshed = Credential.issue(
            access_token=grant.access_token,
            expires_in=grant.expires_in,
            refresh_token=grant.refresh_token or credential.refresh_token,
            issued_at=issued_at,
        )
        logger.info("token_refreshed", expires_at=refreshed.expires_at.isoformat())
        return refreshed

    def is_expired(self, credential: Credential, now: datetime | None = None) -> bool:
        return credential.is_expired(now or self.clock())
