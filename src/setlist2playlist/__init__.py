"""setlist2playlist - Turn concert setlists into Spotify playlists.

Resolves the songs of a setlist.fm setlist against Spotify's catalog and
creates a playlist from the matches.
"""

from .cli import main

__all__ = ["main"]
