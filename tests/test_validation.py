"""Tests for cache validation."""

from fieldpath.api.grid import Grid
from fieldpath.api.models import Position
from fieldpath.cache.paths import PathsCache, build_all
from fieldpath.cache.validation import MAX_ISSUES, validate_cache

A, B, C = Position(0, 0), Position(1, 0), Position(2, 0)
D, E = Position(1, 1), Position(2, 1)


class TestValidateCache:
    """Tests for validate_cache."""

    def test_built_cache_is_valid(self):
        grid = Grid.from_rows(["....", ".#..", "...."])
        cache, _ = build_all(grid)

        result = validate_cache(cache, grid)
        assert result.valid
        assert result.entries_checked == len(cache)

    def test_empty_cache(self):
        result = validate_cache(PathsCache())
        assert result.valid
        assert result.entries_checked == 0

    def test_inconsistent_suffix(self):
        """A cached suffix that takes another route is reported."""
        cache = PathsCache()
        cache.set_if_absent(A, C, (A, B, C))
        cache.set_if_absent(B, C, (B, D, E, C))

        result = validate_cache(cache)
        assert not result.valid
        assert any("suffix" in e for e in result.errors)

    def test_inconsistent_prefix(self):
        cache = PathsCache()
        cache.set_if_absent(A, E, (A, B, D, E))
        cache.set_if_absent(A, D, (A, Position(0, 1), D))

        result = validate_cache(cache)
        assert any("prefix" in e for e in result.errors)

    def test_non_cardinal_step(self):
        cache = PathsCache()
        cache.set_if_absent(A, D, (A, D))

        result = validate_cache(cache)
        assert any("non-cardinal" in e for e in result.errors)

    def test_unwalkable_tile(self):
        grid = Grid.from_rows(["..", "#."])
        cache = PathsCache()
        cache.set_if_absent(Position(0, 1), Position(1, 1), (Position(0, 1), Position(1, 1)))

        result = validate_cache(cache, grid)
        assert any("unwalkable" in e for e in result.errors)

    def test_endpoint_mismatch(self):
        cache = PathsCache()
        cache.set_if_absent(A, C, (A, B))

        result = validate_cache(cache)
        assert any("endpoints" in e for e in result.errors)

    def test_issue_limit(self):
        cache = PathsCache()
        for x in range(MAX_ISSUES + 10):
            start = Position(x, 0)
            cache.set_if_absent(start, Position(x, 5), (start, Position(x, 5)))

        result = validate_cache(cache)
        assert len(result.errors) == MAX_ISSUES
        assert result.truncated
