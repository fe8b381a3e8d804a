# config.py
# Game settings: defaults, validation, and loading overrides from a JSON file.

import json
import math

KEY_POLICIES = ("timeout", "per_frame")
WORLD_MODES = ("continuous", "bounded")


class ConfigError(ValueError):
    """Raised when a configuration value is missing, malformed, or out of range."""
    pass


class GameConfig:
    """
    Every tunable of the simulation in one place.

    Values are checked as soon as the object is built; a bad value raises
    ConfigError rather than being clamped into range.
    """
    def __init__(self, seed=42, frequency=0.05, octaves=1,
                 viewport_width=80, viewport_height=25,
                 walk_speed=1.5, run_speed=3.5,
                 patrol_speed=4.2, patrol_stamina=20.0,
                 spawn_interval=(5.0, 12.0), spawn_offset=15.0,
                 steering_epsilon=0.001,
                 key_policy="timeout", key_hold_window=0.16,
                 world_mode="continuous",
                 chunk_cache=True, chunk_width=80, chunk_height=25, max_cached_chunks=256,
                 fps=60, player_glyph='P', patrol_glyph='X'):
        self.seed = seed
        self.frequency = frequency
        self.octaves = octaves
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.walk_speed = walk_speed
        self.run_speed = run_speed
        self.patrol_speed = patrol_speed
        self.patrol_stamina = patrol_stamina
        self.spawn_interval = tuple(spawn_interval)
        self.spawn_offset = spawn_offset
        self.steering_epsilon = steering_epsilon
        self.key_policy = key_policy
        self.key_hold_window = key_hold_window
        self.world_mode = world_mode
        self.chunk_cache = chunk_cache
        self.chunk_width = chunk_width
        self.chunk_height = chunk_height
        self.max_cached_chunks = max_cached_chunks
        self.fps = fps
        self.player_glyph = player_glyph
        self.patrol_glyph = patrol_glyph
        self.validate()

    @property
    def bounded(self):
        return self.world_mode == "bounded"

    @property
    def frame_interval(self):
        return 1.0 / self.fps

    def validate(self):
        if not _is_int(self.seed):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")
        _require_positive_number("frequency", self.frequency)
        if not _is_int(self.octaves) or self.octaves < 1:
            raise ConfigError(f"octaves must be a positive integer, got {self.octaves!r}")
        for name in ("viewport_width", "viewport_height", "chunk_width", "chunk_height", "fps"):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.max_cached_chunks is not None and (not _is_int(self.max_cached_chunks) or self.max_cached_chunks < 1):
            raise ConfigError(f"max_cached_chunks must be an integer of at least 1 or null, got {self.max_cached_chunks!r}")
        _require_positive_number("walk_speed", self.walk_speed)
        _require_positive_number("run_speed", self.run_speed)
        if self.walk_speed >= self.run_speed:
            raise ConfigError(
                f"run_speed ({self.run_speed}) must be greater than walk_speed ({self.walk_speed})")
        _require_positive_number("patrol_speed", self.patrol_speed)
        _require_positive_number("patrol_stamina", self.patrol_stamina)
        if len(self.spawn_interval) != 2:
            raise ConfigError(f"spawn_interval must be a [min, max] pair, got {list(self.spawn_interval)}")
        low, high = self.spawn_interval
        _require_positive_number("spawn_interval min", low)
        _require_positive_number("spawn_interval max", high)
        if high < low:
            raise ConfigError(f"spawn_interval must satisfy 0 < min <= max, got [{low}, {high}]")
        if not _is_number(self.spawn_offset) or self.spawn_offset < 0:
            raise ConfigError(f"spawn_offset must be a finite number, not negative, got {self.spawn_offset!r}")
        _require_positive_number("steering_epsilon", self.steering_epsilon)
        if self.key_policy not in KEY_POLICIES:
            raise ConfigError(f"key_policy must be one of {', '.join(KEY_POLICIES)}, got {self.key_policy!r}")
        _require_positive_number("key_hold_window", self.key_hold_window)
        if self.world_mode not in WORLD_MODES:
            raise ConfigError(f"world_mode must be one of {', '.join(WORLD_MODES)}, got {self.world_mode!r}")
        for name in ("player_glyph", "patrol_glyph"):
            glyph = getattr(self, name)
            if not isinstance(glyph, str) or len(glyph) != 1 or not glyph.isprintable() or not glyph.isascii():
                raise ConfigError(f"{name} must be a single printable ASCII character, got {glyph!r}")

    def to_dict(self):
        data = dict(vars(self))
        data["spawn_interval"] = list(self.spawn_interval)
        return data

    def replace(self, **overrides):
        """Returns a new, re-validated config with some values changed."""
        data = self.to_dict()
        data.update(overrides)
        return GameConfig(**data)

    @classmethod
    def from_dict(cls, data):
        """Builds a config from a mapping, ignoring keys it does not know."""
        known = set(cls().to_dict())
        values = {}
        for key, value in data.items():
            if key not in known:
                print(f"Warning: Unknown config key '{key}' ignored.")
                continue
            values[key] = value
        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigError(f"Invalid config value: {e}") from e


def load_config(file_path):
    """Reads a JSON object of overrides from file_path and returns a validated GameConfig."""
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        raise ConfigError(f"Error loading or parsing {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{file_path} must contain a JSON object, got {type(data).__name__}")
    return GameConfig.from_dict(data)


def _is_int(value):
    # bool is an int subclass but never a valid size or seed.
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _require_positive_number(name, value):
    if not _is_number(value) or value <= 0:
        raise ConfigError(f"{name} must be a positive finite number, got {value!r}")
