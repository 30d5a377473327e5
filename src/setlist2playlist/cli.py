"""setlist2playlist CLI using Typer.

Commands:
- login: Authorize with Spotify and cache the credential
- logout: Forget the cached credential
- status: Show whether a usable credential is cached
- show-setlist: Print the songs of a setlist
- create: Create a playlist from a setlist
- serve: Run the HTTP API
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from .config import get_settings
from .credentials import CredentialStore
from .errors import (
    BAD_CREDENTIAL,
    NOT_FOUND,
    UNAVAILABLE,
    AuthExchangeError,
    BatchAddError,
    NoTracksMatchedError,
    RefreshError,
    SessionExpiredError,
    Setlist2PlaylistError,
)
from .logging import configure_logging, get_logger
from .models import Visibility
from .pipeline import Pipeline
from .sources import default_playlist_name
from .spotify.auth import parse_authorization_response

app = typer.Typer(
    name="setlist2playlist",
    help="Turn a setlist.fm setlist into a Spotify playlist.",
    add_completion=False,
)


def _store() -> CredentialStore:
    return CredentialStore(get_settings().token_cache_path)


def _fail(error: Setlist2PlaylistError) -> None:
    """Print a user-facing message for ``error`` and exit with status 1."""
    if isinstance(error, NoTracksMatchedError):
        hint = "None of the songs in this setlist were found on Spotify."
    elif error.category == BAD_CREDENTIAL:
        hint = "Run 'setlist2playlist login' to sign in again."
    elif error.category == NOT_FOUND:
        hint = "Please check the setlist URL."
    elif error.category == UNAVAILABLE:
        hint = "The service may be temporarily unavailable, please try again."
    else:
        hint = ""

    typer.echo(f"Error: {error.message}", err=True)
    if hint:
        typer.echo(hint, err=True)
    raise typer.Exit(1)


@app.command()
def login(
    open_browser: Annotated[bool, typer.Option("--open-browser/--no-browser", help="Open the authorization page")] = True,
) -> None:
    """Authorize with Spotify and cache the resulting credential.

    After granting access, paste the URL your browser was redirected to
    (or just the code parameter).
    """
    settings = get_settings()
    configure_logging(level="WARNING", format=settings.log_format)

    try:
        pipeline = Pipeline(settings)
        url, state = pipeline.tokens.authorization_url()

        typer.echo("Open this URL to authorize setlist2playlist:")
        typer.echo(url)
        if open_browser:
            typer.launch(url)

        response = typer.prompt("Redirect URL or code")
        code, returned_state = parse_authorization_response(response)
        if not code:
            raise AuthExchangeError("No authorization code found", stage="authorize")
        if returned_state and returned_state != state:
            raise AuthExchangeError("State mismatch, please try again", stage="authorize")

        credential = pipeline.tokens.exchange_authorization_code(code)
    except Setlist2PlaylistError as e:
        _fail(e)

    _store().save(credential)
    typer.echo("Logged in to Spotify.")


@app.command()
def logout() -> None:
    """Forget the cached Spotify credential."""
    _store().clear()
    typer.echo("Logged out.")


@app.command()
def status() -> None:
    """Show whether a Spotify credential is cached and still valid."""
    credential = _store().load()
    if credential is None:
        typer.echo("Not logged in.")
        raise typer.Exit(1)

    state = "expired" if credential.is_expired() else "valid"
    typer.echo(f"Logged in; access token {state} (expires {credential.expires_at.isoformat()}).")
    typer.echo(f"Refreshable: {'yes' if credential.can_refresh else 'no'}")


@app.command()
def show_setlist(
    url: Annotated[str, typer.Argument(help="setlist.fm URL or setlist id")],
) -> None:
    """Print a setlist's songs in performance order."""
    configure_logging(level="WARNING")

    try:
        setlist = Pipeline().source.get_setlist_from_url(url)
    except Setlist2PlaylistError as e:
        _fail(e)

    typer.echo(f"{setlist.artist_name} @ {setlist.venue_name}, {setlist.city}")
    if setlist.event_date:
        typer.echo(f"Date: {setlist.event_date.isoformat()}")
    if setlist.tour_name:
        typer.echo(f"Tour: {setlist.tour_name}")
    typer.echo(f"Suggested playlist name: {default_playlist_name(setlist)}")
    typer.echo()

    for i, song in enumerate(setlist.song_titles, 1):
        typer.echo(f"{i:2}. {song}")


@app.command()
def create(
    url: Annotated[str, typer.Argument(help="setlist.fm URL or setlist id")],
    playlist_name: Annotated[Optional[str], typer.Option("--playlist-name", "-n", help="Name for the Spotify playlist")] = None,
    description: Annotated[str, typer.Option("--description", "-d", help="Playlist description")] = "",
    public: Annotated[bool, typer.Option("--public/--private", help="Playlist visibility")] = False,
    output_json: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output JSON file for results")] = None,
    log_level: Annotated[str, typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")] = "INFO",
    log_format: Annotated[str, typer.Option("--log-format", help="Log format (console, json)")] = "console",
) -> None:
    """Create a Spotify playlist from a setlist.

    Example:
        setlist2playlist create https://www.setlist.fm/setlist/radiohead/2017/... \\
            --playlist-name "Radiohead live" --private
    """
    configure_logging(level=log_level, format=log_format)
    logger = get_logger(__name__)

    store = _store()
    credential = store.load()
    if credential is None:
        typer.echo("Error: Not logged in. Run 'setlist2playlist login' first.", err=True)
        raise typer.Exit(1)

    visibility = Visibility.PUBLIC if public else Visibility.PRIVATE

    try:
        pipeline = Pipeline()
        setlist = pipeline.source.get_setlist_from_url(url)
        name = playlist_name or default_playlist_name(setlist)

        typer.echo(f"Creating playlist '{name}' for {setlist.artist_name}")
        typer.echo(f"Songs in setlist: {len(setlist.song_titles)}")
        typer.echo()

        result = pipeline.run_from_setlist(
            setlist,
            credential,
            playlist_name=name,
            description=description,
            visibility=visibility,
        )
    except (RefreshError, SessionExpiredError) as e:
        # The cached credential is unusable; a fresh login is required.
        store.clear()
        _fail(e)
    except BatchAddError as e:
        if e.credential is not None:
            store.save(e.credential)
        typer.echo(f"Playlist created but incomplete: {e.playlist.web_url}", err=True)
        typer.echo(f"Tracks added before the failure: {e.tracks_added}", err=True)
        _fail(e)
    except Setlist2PlaylistError as e:
        # A refresh may have happened before the failure.
        if e.credential is not None:
            store.save(e.credential)
        _fail(e)
    except Exception as e:
        logger.exception("pipeline_failed", error=str(e))
        typer.echo(f"Error: Pipeline failed - {e}", err=True)
        raise typer.Exit(1)

    if result.refreshed:
        store.save(result.credential)

    # Output summary
    typer.echo()
    typer.echo("=" * 60)
    typer.echo("PLAYLIST CREATED SUCCESSFULLY")
    typer.echo("=" * 60)
    typer.echo()
    typer.echo(f"Playlist: {result.playlist.name}")
    typer.echo(f"URL: {result.playlist.web_url}")
    typer.echo(f"Tracks: {result.tracks_added}")
    typer.echo()

    if result.unmatched:
        typer.echo(f"Not found on Spotify: {len(result.unmatched)}")
        for title in result.unmatched:
            typer.echo(f"  - {title}")
        typer.echo()

    if output_json:
        output_json.write_text(result.model_dump_json(indent=2, exclude={"credential"}))
        typer.echo(f"Results written to: {output_json}")

    typer.echo("Done!")


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", help="Port")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Run the HTTP API."""
    import uvicorn

    settings = get_settings()
    configure_logging(level=settings.log_level, format=settings.log_format)
    uvicorn.run(
        "setlist2playlist.api.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


def main() -> None:
    """CLI entry point."""
    app()
