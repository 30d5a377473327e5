"""Provider client interface and tagged call results.

Every Spotify call made on behalf of the pipeline returns a ProviderResult
whose ``kind`` says how the call went. Retry and error propagation dispatch
on that tag instead of inspecting exceptions or raw status fields.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ..models import Credential


class ResultKind(str, Enum):
    OK = "ok"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    TRANSIENT_ERROR = "transient_error"


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider call."""

    kind: ResultKind
    payload: Any = None
    status_code: int | None = None
    message: str = ""

    @classmethod
    def ok(cls, payload: Any = None) -> "ProviderResult":
        return cls(ResultKind.OK, payload=payload, status_code=200)

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> "ProviderResult":
        return cls(ResultKind.UNAUTHORIZED, status_code=401, message=message)

    @classmethod
    def not_found(cls, message: str = "Not found") -> "ProviderResult":
        return cls(ResultKind.NOT_FOUND, status_code=404, message=message)

    @classmethod
    def transient(cls, message: str, status_code: int | None = None) -> "ProviderResult":
        return cls(ResultKind.TRANSIENT_ERROR, status_code=status_code, message=message)

    @classmethod
    def from_status(cls, status_code: int | None, message: str) -> "ProviderResult":
        """Tag a failed call by its HTTP status."""
        if status_code == 401:
            return cls.unauthorized(message)
        if status_code == 404:
            return cls.not_found(message)
        return cls.transient(message, status_code)

    @property
    def is_ok(self) -> bool:
        return self.kind is ResultKind.OK

    @property
    def is_unauthorized(self) -> bool:
        return self.kind is ResultKind.UNAUTHORIZED


@dataclass(frozen=True)
class TokenGrant:
    """Token endpoint response: a refresh may omit the refresh token."""

    access_token: str
    expires_in: int
    refresh_token: str | None = None


@runtime_checkable
class ProviderClient(Protocol):
    """Capabilities the pipeline needs from the OAuth/catalog provider."""

    def authorization_url(self, state: str) -> str:
        """Build the URL the user visits to grant access."""
        ...

    def exchange_code(self, code: str) -> ProviderResult:
        """Exchange an authorization code; payload is a TokenGrant."""
        ...

    def refresh_token(self, refresh_token: str) -> ProviderResult:
        """Refresh an access token; payload is a TokenGrant."""
        ...

    def search_tracks(self, query: str, limit: int, credential: Credential) -> ProviderResult:
        """Search the track catalog; payload is a list of raw track objects."""
        ...

    def current_user(self, credential: Credential) -> ProviderResult:
        """Fetch the authenticated user; payload is a dict with at least ``id``."""
        ...

    def create_playlist(
        self,
        credential: Credential,
        user_id: str,
        name: str,
        description: str,
        public: bool,
    ) -> ProviderResult:
        """Create an empty playlist; payload is a dict with ``id`` and ``url``."""
        ...

    def add_tracks(self, credential: Credential, playlist_id: str, uris: list[str]) -> ProviderResult:
        """Append at most 100 track URIs to a playlist."""
        ...
