"""Request and response bodies of the HTTP API."""

from pydantic import BaseModel, Field

from ..models import Credential, MatchedTrack, Playlist, ResolutionResult, Visibility


class CodeExchangeRequest(BaseModel):
    code: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class AuthUrlResponse(BaseModel):
    url: str
    state: str


class SearchTracksRequest(BaseModel):
    tracks: list[str]
    artist: str = Field(min_length=1)
    credential: Credential


class SearchTracksResponse(ResolutionResult):
    credential: Credential


class CreatePlaylistRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    tracks: list[MatchedTrack] = Field(min_length=1)
    visibility: Visibility = Visibility.PRIVATE
    credential: Credential


class CreatePlaylistResponse(BaseModel):
    playlist: Playlist
    credential: Credential


class RunRequest(BaseModel):
    url: str = Field(min_length=1)
    playlist_name: str | None = None
    description: str = ""
    visibility: Visibility = Visibility.PRIVATE
    credential: Credential


class SetlistUrlRequest(BaseModel):
    url: str
