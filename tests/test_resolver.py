"""Tests for the catalog search resolver."""

import pytest

from setlist2playlist.errors import UnauthorizedError
from setlist2playlist.spotify.provider import ProviderResult
from setlist2playlist.spotify.resolver import CatalogSearchResolver

from .conftest import make_track

FIELD = 'track:"{}" artist:"Band X"'


@pytest.fixture
def resolver(provider) -> CatalogSearchResolver:
    return CatalogSearchResolver(provider)


class TestResolveFallback:
    def test_stops_at_first_strategy_with_results(self, resolver, provider, credential) -> None:
        provider.catalog[FIELD.format("Song A")] = [make_track("a", "Song A", "Band X")]

        result = resolver.resolve(["Song A"], "Band X", credential)

        assert [t.id for t in result.matched] == ["a"]
        assert provider.queries == [FIELD.format("Song A")]

    def test_falls_back_to_looser_queries(self, resolver, provider, credential) -> None:
        provider.catalog["Song A"] = [make_track("a", "Song A", "Band X")]

        result = resolver.resolve(["Song A"], "Band X", credential)

        assert [t.id for t in result.matched] == ["a"]
        assert provider.queries == [FIELD.format("Song A"), "Song A Band X", "Song A"]

    def test_requests_five_candidates(self, resolver, provider, credential) -> None:
        resolver.resolve(["Song A"], "Band X", credential)
        assert {call[2] for call in provider.calls} == {5}

    def test_exact_artist_beats_top_result(self, resolver, provider, credential) -> None:
        provider.catalog["Song A Band X"] = [
            make_track("cover", "Song A", "Cover Band"),
            make_track("orig", "Song A", "band x"),
        ]

        result = resolver.resolve(["Song A"], "Band X", credential)

        assert result.matched[0].id == "orig"
        assert result.matched[0].artist_names == ["band x"]

    def test_first_candidate_without_exact_artist(self, resolver, provider, credential) -> None:
        provider.catalog["Song A"] = [
            make_track("first", "Song A", "Someone"),
            make_track("second", "Song A", "Someone Else"),
        ]
        assert resolver.resolve(["Song A"], "Band X", credential).matched[0].id == "first"


class TestResolvePartition:
    def test_unmatched_title_does_not_block_others(self, resolver, provider, credential) -> None:
        provider.catalog[FIELD.format("Song B")] = [make_track("b", "Song B", "Band X")]

        result = resolver.resolve(["Obscure Title", "Song B"], "Band X", credential)

        assert result.unmatched == ["Obscure Title"]
        assert [t.song_title for t in result.matched] == ["Song B"]

    def test_search_error_marks_only_that_song(self, resolver, provider, credential) -> None:
        provider.catalog[FIELD.format("Song B")] = [make_track("b", "Song B", "Band X")]
        provider.script("search_tracks", ProviderResult.transient("Service unavailable", 503))

        result = resolver.resolve(["Song A", "Song B"], "Band X", credential)

        assert result.unmatched == ["Song A"]
        assert [t.id for t in result.matched] == ["b"]
        # No looser strategy is tried after a failed search.
        assert provider.queries[1] == FIELD.format("Song B")

    def test_every_title_lands_in_exactly_one_list_in_order(self, resolver, provider, credential) -> None:
        titles = ["One", "Two", "Three", "Four"]
        provider.catalog["Two"] = [make_track("2", "Two", "Band X")]
        provider.catalog["Four Band X"] = [make_track("4", "Four", "Band X")]

        result = resolver.resolve(titles, "Band X", credential)

        assert result.total == len(titles)
        assert [t.song_title for t in result.matched] == ["Two", "Four"]
        assert result.unmatched == ["One", "Three"]

    def test_resolve_is_idempotent(self, resolver, provider, credential) -> None:
        provider.catalog["Song A"] = [make_track("a", "Song A", "Band X")]

        first = resolver.resolve(["Song A", "Missing"], "Band X", credential)
        second = resolver.resolve(["Song A", "Missing"], "Band X", credential)

        assert first == second

    def test_empty_input(self, resolver, credential) -> None:
        result = resolver.resolve([], "Band X", credential)
        assert result.matched == [] and result.unmatched == []


def test_unauthorized_propagates(resolver, provider, credential) -> None:
    provider.catalog[FIELD.format("Song B")] = [make_track("b", "Song B", "Band X")]
    provider.script("search_tracks", ProviderResult.ok([]), ProviderResult.unauthorized())

    with pytest.raises(UnauthorizedError) as exc_info:
        resolver.resolve(["Song A", "Song B"], "Band X", credential)

    assert exc_info.value.stage == "resolve"
    assert exc_info.value.status_code == 401
