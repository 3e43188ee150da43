"""Tests for cache-backed path queries and the /find route handler."""

import pytest

from fieldpath.api.grid import Grid
from fieldpath.api.models import Position
from fieldpath.api.pathfinding import PathStopReason
from fieldpath.api.queries import (
    HTTP_BAD_REQUEST,
    HTTP_NOT_FOUND,
    HTTP_OK,
    PathQueryService,
    handle_find_request,
)
from fieldpath.cache.paths import PathsCache, build_all


@pytest.fixture
def grid():
    return Grid.from_rows(["...", "##.", "..."])


@pytest.fixture
def cache(grid):
    built, _ = build_all(grid)
    return built


class TestPathQueryService:
    """Tests for PathQueryService.find."""

    def test_cache_hit(self, cache):
        """Cached pairs are answered without a map."""
        service = PathQueryService(cache)
        result = service.find(0, 0, 0, 2)

        assert result.success
        assert result.path == cache.get(Position(0, 0), Position(0, 2))
        assert result.cost == 6.0
        assert service.stats.cache_hits == 1
        assert service.stats.searches == 0

    def test_miss_without_grid(self):
        """A miss with nothing to search reports NO_PATH_EXISTS."""
        service = PathQueryService(PathsCache())
        result = service.find(0, 0, 1, 0)

        assert not result.success
        assert result.reason == PathStopReason.NO_PATH_EXISTS
        assert "No cached path" in result.message
        assert service.stats.cache_misses == 1
        assert service.stats.not_found == 1

    def test_miss_falls_back_to_search(self, grid):
        service = PathQueryService(PathsCache(), grid=grid)
        result = service.find(0, 0, 2, 0)

        assert result.success
        assert result.cost == 2.0
        assert service.stats.searches == 1

    def test_fallback_disabled(self, grid):
        service = PathQueryService(PathsCache(), grid=grid, fallback_to_search=False)
        assert not service.find(0, 0, 2, 0).success
        assert service.stats.searches == 0

    def test_search_does_not_fill_cache(self, grid):
        """Live search results are not written back."""
        cache = PathsCache()
        service = PathQueryService(cache, grid=grid)
        service.find(0, 0, 2, 0)
        assert len(cache) == 0

    def test_search_only(self, grid):
        """Without a cache every query is a live search."""
        service = PathQueryService(grid=grid)
        assert service.find(0, 0, 0, 2).cost == 6.0
        assert service.stats.cache_misses == 0

    def test_unreachable_pair(self):
        grid = Grid.from_rows(["...", "###", "..."])
        cache, _ = build_all(grid)
        service = PathQueryService(cache, grid=grid)

        result = service.find(0, 0, 0, 2)
        assert result.reason == PathStopReason.NO_PATH_EXISTS
        assert service.stats.not_found == 1

    def test_stats(self, cache):
        service = PathQueryService(cache)
        service.find(0, 0, 2, 2)
        service.find(0, 0, 0, 1)

        report = service.stats.to_dict()
        assert report["queries"] == 2
        assert report["cache_hits"] == 1
        assert report["hit_rate"] == 0.5


class TestHandleFindRequest:
    """Tests for the /find/{x1}/{y1}/{x2}/{y2} handler."""

    def test_found(self, cache):
        status, body = handle_find_request(PathQueryService(cache), "/find/0/0/2/0")

        assert status == HTTP_OK
        assert body == (
            "You requested /find/0/0/2/0\n"
            "Path length: 3\n"
            "Distance: 2\n"
            "0,0\n"
            "1,0\n"
            "2,0\n"
        )

    def test_trailing_slash(self, cache):
        status, _ = handle_find_request(PathQueryService(cache), "/find/0/0/2/0/")
        assert status == HTTP_OK

    def test_not_found(self, cache):
        status, body = handle_find_request(PathQueryService(cache), "/find/0/0/0/1")
        assert status == HTTP_NOT_FOUND
        assert body.startswith("Path not found:")

    @pytest.mark.parametrize("route", ["/find/a/0/1/1", "/find/0/0/1/1.5"])
    def test_non_integer_coordinates(self, cache, route):
        status, body = handle_find_request(PathQueryService(cache), route)
        assert status == HTTP_BAD_REQUEST
        assert "Invalid coordinates" in body

    @pytest.mark.parametrize("route", ["/find/0/0/1", "/paths/0/0/1/1", "/find/0/0/1/1/2"])
    def test_bad_route(self, cache, route):
        status, body = handle_find_request(PathQueryService(cache), route)
        assert status == HTTP_BAD_REQUEST
        assert "Invalid route" in body

    def test_negative_coordinates(self, grid):
        """Negative coordinates parse and resolve to a missing path."""
        status, _ = handle_find_request(PathQueryService(grid=grid), "/find/-1/0/1/1")
        assert status == HTTP_NOT_FOUND
