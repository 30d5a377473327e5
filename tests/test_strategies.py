"""Tests for search query strategies and candidate selection."""

from setlist2playlist.spotify.strategies import (
    DEFAULT_STRATEGIES,
    FieldQualifiedStrategy,
    TitleArtistStrategy,
    TitleOnlyStrategy,
    select_candidate,
)

from .conftest import make_track


def test_strategy_queries() -> None:
    assert FieldQualifiedStrategy().build_query("Song A", "Band X") == 'track:"Song A" artist:"Band X"'
    assert TitleArtistStrategy().build_query("Song A", "Band X") == "Song A Band X"
    assert TitleOnlyStrategy().build_query("Song A", "Band X") == "Song A"


def test_default_strategy_order() -> None:
    assert [s.name for s in DEFAULT_STRATEGIES] == ["field_qualified", "title_artist", "title_only"]


def test_select_prefers_case_insensitive_exact_artist() -> None:
    cover = make_track("cover", "Song A", "Tribute Band")
    original = make_track("orig", "Song A", "Someone", "BAND X")
    assert select_candidate([cover, original], "band x") is original


def test_select_falls_back_to_first_candidate() -> None:
    first = make_track("first", "Song A", "Other")
    second = make_track("second", "Song A", "Band X Tribute")
    assert select_candidate([first, second], "Band X") is first


def test_select_without_candidates() -> None:
    assert select_candidate([], "Band X") is None


def test_select_tolerates_null_artist_fields() -> None:
    broken = {"id": "broken", "name": "Song A", "artists": [{"name": None}]}
    no_artists = {"id": "none", "name": "Song A", "artists": None}
    original = make_track("orig", "Song A", "Band X")
    assert select_candidate([broken, no_artists, original], "Band X") is original
