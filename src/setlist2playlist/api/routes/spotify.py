"""Spotify OAuth and playlist routes.

Credentials are never kept server-side: clients send the credential with
each request and store whatever credential comes back, which differs from
the one sent when the server had to refresh it.
"""

from fastapi import APIRouter, Depends

from ...models import Credential, PipelineResult, utcnow
from ...pipeline import Pipeline
from ..dependencies import get_pipeline
from ..schemas import (
    AuthUrlResponse,
    CodeExchangeRequest,
    CreatePlaylistRequest,
    CreatePlaylistResponse,
    RefreshRequest,
    RunRequest,
    SearchTracksRequest,
    SearchTracksResponse,
)

router = APIRouter()


@router.get("/auth-url", response_model=AuthUrlResponse)
def get_auth_url(pipeline: Pipeline = Depends(get_pipeline)) -> AuthUrlResponse:
    """Return the Spotify authorization URL and the state to verify on callback."""
    url, state = pipeline.tokens.authorization_url()
    return AuthUrlResponse(url=url, state=state)


@router.post("/token", response_model=Credential)
def exchange_token(body: CodeExchangeRequest, pipeline: Pipeline = Depends(get_pipeline)) -> Credential:
    return pipeline.tokens.exchange_authorization_code(body.code)


@router.post("/refresh", response_model=Credential)
def refresh_token(body: RefreshRequest, pipeline: Pipeline = Depends(get_pipeline)) -> Credential:
    # The access token is already unusable; only the refresh token matters.
    stale = Credential(access_token="", refresh_token=body.refresh_token, expires_at=utcnow())
    return pipeline.tokens.refresh(stale)


@router.post("/search-tracks", response_model=SearchTracksResponse)
def search_tracks(body: SearchTracksRequest, pipeline: Pipeline = Depends(get_pipeline)) -> SearchTracksResponse:
    resolution, credential = pipeline.resolve_tracks(body.tracks, body.artist, body.credential)
    return SearchTracksResponse(
        matched=resolution.matched,
        unmatched=resolution.unmatched,
        credential=credential,
    )


@router.post("/create-playlist", response_model=CreatePlaylistResponse)
def create_playlist(body: CreatePlaylistRequest, pipeline: Pipeline = Depends(get_pipeline)) -> CreatePlaylistResponse:
    playlist, credential = pipeline.build_playlist(
        body.name,
        body.description,
        body.tracks,
        body.credential,
        visibility=body.visibility,
    )
    return CreatePlaylistResponse(playlist=playlist, credential=credential)


@router.post("/run", response_model=PipelineResult)
def run(body: RunRequest, pipeline: Pipeline = Depends(get_pipeline)) -> PipelineResult:
    """Fetch a setlist and turn it into a playlist in one request."""
    return pipeline.run_from_url(
        body.url,
        body.credential,
        playlist_name=body.playlist_name,
        description=body.description,
        visibility=body.visibility,
    )
