# world_generator.py
# Generates terrain for an endless world from Perlin noise, chunk by chunk.

import math
from collections import OrderedDict

import noise
import numpy as np

# Terrain banding. Each threshold is an exclusive upper bound, so a value
# sitting exactly on a boundary belongs to the higher band.
DEEP_THRESHOLD = -0.3
LOW_THRESHOLD = 0.0
MID_THRESHOLD = 0.3
HIGH_THRESHOLD = 0.6

DEEP_SYMBOL = '.'
LOW_SYMBOL = ':'
MID_SYMBOL = '*'
HIGH_SYMBOL = '#'
PEAK_SYMBOL = '@'

TERRAIN_SYMBOLS = (DEEP_SYMBOL, LOW_SYMBOL, MID_SYMBOL, HIGH_SYMBOL, PEAK_SYMBOL)

# pnoise2 indexes a 512-entry permutation table with `base` as an offset,
# so only 256 distinct bases exist.
NOISE_BASES = 256
# Lattice period handed to pnoise2; large enough that the world never visibly repeats.
NOISE_REPEAT = 1 << 20


def classify(value):
    """Maps a noise sample to its terrain symbol."""
    if value < DEEP_THRESHOLD:
        return DEEP_SYMBOL
    if value < LOW_THRESHOLD:
        return LOW_SYMBOL
    if value < MID_THRESHOLD:
        return MID_SYMBOL
    if value < HIGH_THRESHOLD:
        return HIGH_SYMBOL
    return PEAK_SYMBOL


class NoiseField:
    """
    A deterministic scalar field over continuous world coordinates.

    Identical (seed, frequency, octaves, x, y) always yield the identical
    sample, so any region of the world can be regenerated on demand.
    """
    def __init__(self, seed, frequency, octaves=1):
        if frequency <= 0:
            raise ValueError(f"Noise frequency must be positive, got {frequency}")
        if octaves < 1:
            raise ValueError(f"Noise octaves must be at least 1, got {octaves}")
        self._seed = seed
        self._frequency = frequency
        self._octaves = octaves
        self._base = seed % NOISE_BASES

    @property
    def seed(self):
        return self._seed

    @property
    def frequency(self):
        return self._frequency

    @property
    def octaves(self):
        return self._octaves

    def sample(self, x, y):
        """Returns the noise value at (x, y), roughly within [-1, 1]."""
        return noise.pnoise2(x * self._frequency, y * self._frequency,
                             octaves=self._octaves,
                             persistence=0.5,
                             lacunarity=2.0,
                             repeatx=NOISE_REPEAT,
                             repeaty=NOISE_REPEAT,
                             base=self._base)


class ChunkCache:
    """
    Memoizes terrain per fixed-size chunk of world space.

    A chunk is generated in full the first time any of its cells is asked for.
    With max_chunks set, the least recently used chunk is evicted once the
    limit is exceeded; with max_chunks=None every visited chunk is kept for
    the rest of the session.
    """
    def __init__(self, field, chunk_width=80, chunk_height=25, max_chunks=None):
        if chunk_width <= 0 or chunk_height <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_width}x{chunk_height}")
        if max_chunks is not None and max_chunks < 1:
            raise ValueError(f"max_chunks must be at least 1, got {max_chunks}")
        self.field = field
        self.chunk_width = chunk_width
        self.chunk_height = chunk_height
        self.max_chunks = max_chunks
        self._chunks = OrderedDict()
        self.generated = 0

    def __len__(self):
        return len(self._chunks)

    def __contains__(self, chunk_coord):
        return chunk_coord in self._chunks

    def chunk_coordinate(self, x, y):
        """Returns the (cx, cy) key of the chunk containing world position (x, y)."""
        return (math.floor(x) // self.chunk_width, math.floor(y) // self.chunk_height)

    def get_chunk(self, cx, cy):
        """Returns the symbol array for chunk (cx, cy), indexed [row, column]."""
        key = (cx, cy)
        tiles = self._chunks.get(key)
        if tiles is not None:
            self._chunks.move_to_end(key)
            return tiles

        tiles = self._generate_chunk(cx, cy)
        self._chunks[key] = tiles
        self.generated += 1
        if self.max_chunks is not None:
            while len(self._chunks) > self.max_chunks:
                self._chunks.popitem(last=False)
        return tiles

    def symbol_at(self, x, y):
        cell_x, cell_y = math.floor(x), math.floor(y)
        cx, cy = cell_x // self.chunk_width, cell_y // self.chunk_height
        tiles = self.get_chunk(cx, cy)
        return str(tiles[cell_y - cy * self.chunk_height, cell_x - cx * self.chunk_width])

    def _generate_chunk(self, cx, cy):
        origin_x = cx * self.chunk_width
        origin_y = cy * self.chunk_height
        tiles = np.empty((self.chunk_height, self.chunk_width), dtype='<U1')
        for row in range(self.chunk_height):
            for col in range(self.chunk_width):
                tiles[row, col] = classify(self.field.sample(origin_x + col, origin_y + row))
        return tiles


class WorldView:
    """
    Answers "what terrain is at this world position?".

    Terrain is sampled at cell origins: every continuous position inside a
    cell reports classify(sample(floor(x), floor(y))). The optional cache is a
    pure memoization layer and never changes the answer.
    """
    def __init__(self, field, cache=None):
        self.field = field
        self.cache = cache

    def symbol_at(self, x, y):
        if self.cache is not None:
            return self.cache.symbol_at(x, y)
        return classify(self.field.sample(math.floor(x), math.floor(y)))

    def region(self, origin_x, origin_y, width, height):
        """Returns `height` strings of `width` terrain symbols starting at the given cell."""
        origin_x, origin_y = math.floor(origin_x), math.floor(origin_y)
        if self.cache is None:
            return [
                ''.join(self.symbol_at(origin_x + col, origin_y + row) for col in range(width))
                for row in range(height)
            ]

        # Stitch the rows together from whole chunks; every chunk overlapping
        # the viewport is fetched (or generated) before any row is returned.
        cw, ch = self.cache.chunk_width, self.cache.chunk_height
        first_cx, first_cy = origin_x // cw, origin_y // ch
        last_cx, last_cy = (origin_x + width - 1) // cw, (origin_y + height - 1) // ch
        strips = []
        for cy in range(first_cy, last_cy + 1):
            strips.append(np.hstack([self.cache.get_chunk(cx, cy) for cx in range(first_cx, last_cx + 1)]))
        block = np.vstack(strips)
        left = origin_x - first_cx * cw
        top = origin_y - first_cy * ch
        window = block[top:top + height, left:left + width]
        return [''.join(row) for row in window]


def build_world_view(config):
    """Creates the noise field and world view described by a GameConfig."""
    field = NoiseField(config.seed, config.frequency, config.octaves)
    cache = None
    if config.chunk_cache:
        cache = ChunkCache(field, config.chunk_width, config.chunk_height, config.max_cached_chunks)
    return WorldView(field, cache)


def render_static_map(field, width=80, height=25, origin_x=0, origin_y=0):
    """Generates a single screen of terrain, one string per row."""
    return WorldView(field).region(origin_x, origin_y, width, height)
