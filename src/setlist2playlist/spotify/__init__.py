"""Spotify module initialization."""

from .assembler import MAX_TRACKS_PER_REQUEST, AssemblyProgress, PlaylistAssembler
from .auth import TokenManager
from .client import SpotifyClient
from .provider import ProviderClient, ProviderResult, ResultKind, TokenGrant
from .resolver import CatalogSearchResolver
from .strategies import (
    DEFAULT_STRATEGIES,
    FieldQualifiedStrategy,
    SearchStrategy,
    TitleArtistStrategy,
    TitleOnlyStrategy,
)

__all__ = [
    "SpotifyClient",
    "ProviderClient",
    "ProviderResult",
    "ResultKind",
    "TokenGrant",
    "TokenManager",
    "CatalogSearchResolver",
    "PlaylistAssembler",
    "AssemblyProgress",
    "MAX_TRACKS_PER_REQUEST",
    "SearchStrategy",
    "FieldQualifiedStrategy",
    "TitleArtistStrategy",
    "TitleOnlyStrategy",
    "DEFAULT_STRATEGIES",
]
