from __future__ import annotations

import math

import pytest

from world_generator import (
    ChunkCache,
    NoiseField,
    TERRAIN_SYMBOLS,
    WorldView,
    classify,
    render_static_map,
)


@pytest.mark.parametrize(
    ("value", "symbol"),
    [
        (-1.0, "."),
        (-0.31, "."),
        (-0.3, ":"),
        (-0.01, ":"),
        (0.0, "*"),
        (0.29, "*"),
        (0.3, "#"),
        (0.59, "#"),
        (0.6, "@"),
        (1.0, "@"),
    ],
)
def test_classify_bands_and_boundaries(value: float, symbol: str) -> None:
    assert classify(value) == symbol


def test_classify_only_returns_known_symbols() -> None:
    values = [i / 100 for i in range(-150, 151)]
    assert {classify(v) for v in values} == set(TERRAIN_SYMBOLS)


def test_noise_sample_is_deterministic() -> None:
    first = NoiseField(seed=42, frequency=0.05)
    second = NoiseField(seed=42, frequency=0.05)
    for x, y in [(0, 0), (3.5, -7.25), (-120, 44), (1000.1, 2000.9)]:
        assert first.sample(x, y) == second.sample(x, y)


def test_noise_sample_stays_in_range() -> None:
    field = NoiseField(seed=7, frequency=0.05)
    for x in range(-50, 50, 3):
        for y in range(-50, 50, 7):
            assert -1.0 <= field.sample(x, y) <= 1.0


def test_noise_field_rejects_bad_frequency() -> None:
    with pytest.raises(ValueError):
        NoiseField(seed=1, frequency=0)
    with pytest.raises(ValueError):
        NoiseField(seed=1, frequency=-0.5)


def test_seeds_produce_different_worlds() -> None:
    a = render_static_map(NoiseField(seed=1, frequency=0.05))
    b = render_static_map(NoiseField(seed=2, frequency=0.05))
    assert a != b


def test_world_view_matches_classified_sample_at_cell_origin() -> None:
    field = NoiseField(seed=42, frequency=0.05)
    view = WorldView(field)
    for x, y in [(0, 0), (12.7, 3.2), (-0.5, -0.5), (-33.9, 81.1)]:
        assert view.symbol_at(x, y) == classify(field.sample(math.floor(x), math.floor(y)))


def test_cache_is_transparent() -> None:
    field = NoiseField(seed=42, frequency=0.05)
    plain = WorldView(field)
    cached = WorldView(field, ChunkCache(field, chunk_width=16, chunk_height=8))
    for x in range(-40, 40, 3):
        for y in range(-20, 20, 2):
            assert cached.symbol_at(x + 0.5, y + 0.25) == plain.symbol_at(x + 0.5, y + 0.25)


def test_cached_region_matches_uncached_region_across_chunk_boundaries() -> None:
    field = NoiseField(seed=9, frequency=0.08)
    plain = WorldView(field)
    cached = WorldView(field, ChunkCache(field, chunk_width=10, chunk_height=4))
    assert cached.region(-13, -6, 31, 11) == plain.region(-13, -6, 31, 11)


def test_region_has_requested_shape() -> None:
    view = WorldView(NoiseField(seed=42, frequency=0.05))
    rows = view.region(-5, -5, 17, 6)
    assert len(rows) == 6
    assert all(len(row) == 17 for row in rows)


def test_chunk_coordinate_floors_negative_positions() -> None:
    cache = ChunkCache(NoiseField(seed=0, frequency=0.05), chunk_width=80, chunk_height=25)
    assert cache.chunk_coordinate(0, 0) == (0, 0)
    assert cache.chunk_coordinate(79.9, 24.9) == (0, 0)
    assert cache.chunk_coordinate(80, 25) == (1, 1)
    assert cache.chunk_coordinate(-0.1, -0.1) == (-1, -1)
    assert cache.chunk_coordinate(-80, -25) == (-1, -1)
    assert cache.chunk_coordinate(-80.5, -25.5) == (-2, -2)


def test_chunk_generated_once_in_full() -> None:
    cache = ChunkCache(NoiseField(seed=0, frequency=0.05), chunk_width=8, chunk_height=4)
    first = cache.get_chunk(2, -1)
    assert first.shape == (4, 8)
    again = cache.get_chunk(2, -1)
    assert again is first
    assert cache.generated == 1
    assert len(cache) == 1


def test_region_generates_newly_visible_chunks() -> None:
    field = NoiseField(seed=0, frequency=0.05)
    cache = ChunkCache(field, chunk_width=10, chunk_height=5)
    view = WorldView(field, cache)
    view.region(0, 0, 10, 5)
    assert len(cache) == 1
    view.region(5, 0, 10, 5)
    assert (1, 0) in cache
    assert len(cache) == 2


def test_bounded_cache_evicts_least_recently_used() -> None:
    cache = ChunkCache(NoiseField(seed=0, frequency=0.05), chunk_width=4, chunk_height=4, max_chunks=2)
    cache.get_chunk(0, 0)
    cache.get_chunk(1, 0)
    cache.get_chunk(0, 0)
    cache.get_chunk(2, 0)
    assert len(cache) == 2
    assert (0, 0) in cache
    assert (1, 0) not in cache


def test_scenario_a_same_seed_renders_identical_terrain() -> None:
    first = render_static_map(NoiseField(seed=42, frequency=0.05), width=80, height=25)
    second = render_static_map(NoiseField(seed=42, frequency=0.05), width=80, height=25)
    assert first == second
    assert len(first) == 25
    assert all(len(row) == 80 and set(row) <= set(TERRAIN_SYMBOLS) for row in first)
