"""HTTP API for setlist2playlist."""
