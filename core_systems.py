# core_systems.py
# Core game systems: Input, Movement, and Camera

import math
from components import *

# Lowercase letters walk; the uppercase letter moves the same way and runs.
KEY_DIRECTIONS = {'w': 'up', 's': 'down', 'a': 'left', 'd': 'right'}
QUIT_KEY = 'q'
ESCAPE = '\x1b'

class System:
    """A base class for systems. Systems contain logic that operates on entities with specific components."""
    def __init__(self, world):
        self.world = world

    def update(self, *args, **kwargs):
        pass


def compute_displacement(up, down, left, right, run, dt, walk_speed, run_speed):
    """
    Returns the (dx, dy) the player covers in dt seconds.

    Screen convention: up is -y. Each axis is handled on its own, so a diagonal
    is not normalized and covers speed * dt * sqrt(2). Opposite keys cancel out.
    """
    speed = run_speed if run else walk_speed
    dir_x = (1 if right else 0) - (1 if left else 0)
    dir_y = (1 if down else 0) - (1 if up else 0)
    return (dir_x * speed * dt, dir_y * speed * dt)


class TimeoutHeldKeys:
    """
    Held-key tracking for terminals that never report key releases.

    A direction counts as held for `hold_window` seconds after its most recent
    key event, so the keyboard's auto-repeat keeps it alive and it decays on
    its own once the key is let go.
    """
    def __init__(self, hold_window=0.16):
        self.hold_window = hold_window
        self._pressed_at = {}
        self._run_at = None

    def press(self, direction, run, now):
        self._pressed_at[direction] = now
        if run:
            self._run_at = now

    def held(self, now):
        directions = {d for d, stamp in self._pressed_at.items() if now - stamp < self.hold_window}
        run = self._run_at is not None and now - self._run_at < self.hold_window
        return directions, run

    def end_tick(self):
        pass


class PerFrameHeldKeys:
    """Held-key tracking that only trusts key events seen during the current tick."""
    def __init__(self):
        self._directions = set()
        self._run = False

    def press(self, direction, run, now):
        self._directions.add(direction)
        self._run = self._run or run

    def held(self, now):
        return set(self._directions), self._run

    def end_tick(self):
        self._directions.clear()
        self._run = False


def make_held_keys(config):
    if config.key_policy == "per_frame":
        return PerFrameHeldKeys()
    return TimeoutHeldKeys(config.key_hold_window)


class InputSystem(System):
    """Turns raw key characters into held movement state and a per-tick movement intent."""
    def __init__(self, world, held_keys, walk_speed, run_speed):
        super().__init__(world)
        self.held_keys = held_keys
        self.walk_speed = walk_speed
        self.run_speed = run_speed
        # Where we are inside a terminal escape sequence; it can straddle two polls.
        self._escape_state = None

    def _inside_escape_sequence(self, key):
        """
        Consumes the characters of an escape sequence such as an arrow key
        (ESC [ A) so that its letters are not read as movement keys.
        Returns True while the key belongs to a sequence.
        """
        if key == ESCAPE:
            self._escape_state = 'esc'
            return True
        if self._escape_state == 'esc':
            # ESC [ starts a CSI sequence and ESC O an SS3 one; anything else is Alt+key.
            self._escape_state = {'[': 'csi', 'O': 'ss3'}.get(key)
            return True
        if self._escape_state == 'ss3':
            self._escape_state = None
            return True
        if self._escape_state == 'csi':
            # Parameter and intermediate bytes continue; a byte in @..~ ends it.
            if '@' <= key <= '~':
                self._escape_state = None
            return True
        return False

    def handle_keys(self, keys, now):
        """Feeds one batch of drained key characters in. Returns True if quit was pressed."""
        quit_requested = False
        for key in keys:
            if self._inside_escape_sequence(key):
                continue
            if key == QUIT_KEY:
                quit_requested = True
                continue
            direction = KEY_DIRECTIONS.get(key.lower())
            if direction is None:
                continue
            self.held_keys.press(direction, key.isupper(), now)
        return quit_requested

    def update(self, *args, **kwargs):
        dt = kwargs.get('dt', 0.0)
        now = kwargs.get('now', 0.0)

        player_entities = self.world.get_entities_with_components(PlayerControllableComponent, PositionComponent)
        if not player_entities: return
        player_id = player_entities[0]

        directions, run = self.held_keys.held(now)
        dx, dy = compute_displacement('up' in directions, 'down' in directions,
                                      'left' in directions, 'right' in directions,
                                      run, dt, self.walk_speed, self.run_speed)
        if dx != 0 or dy != 0:
            self.world.add_component(player_id, WantsToMoveComponent(dx, dy))

        self.held_keys.end_tick()


class MovementSystem(System):
    """
    Applies movement intents to positions.

    With `bounds` set to (width, height) positions are clamped to that single
    screen map; without it the world is endless and nothing is clamped.
    """
    def __init__(self, world, bounds=None):
        super().__init__(world)
        self.bounds = bounds

    def update(self, *args, **kwargs):
        for entity_id in self.world.get_entities_with_components(PositionComponent, WantsToMoveComponent):
            pos = self.world.get_component(entity_id, PositionComponent)
            movement = self.world.get_component(entity_id, WantsToMoveComponent)
            pos.x += movement.dx
            pos.y += movement.dy
            if self.bounds:
                clamp_to_bounds(pos, self.bounds)
            self.world.remove_component(entity_id, WantsToMoveComponent)


def clamp_to_bounds(pos, bounds):
    width, height = bounds
    pos.x = min(max(pos.x, 0.0), width - 1)
    pos.y = min(max(pos.y, 0.0), height - 1)


class CameraSystem(System):
    """Re-derives the camera (the world point the viewport is centered on) every tick."""
    def __init__(self, world, viewport_width, viewport_height, bounded=False):
        super().__init__(world)
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.bounded = bounded

    def update(self, *args, **kwargs):
        game_state = kwargs.get('game_state')
        if not game_state: return

        if self.bounded:
            # The single-screen map never scrolls; its top-left cell is (0, 0).
            game_state.camera = (float(self.viewport_width // 2), float(self.viewport_height // 2))
            return

        player_entities = self.world.get_entities_with_components(PlayerControllableComponent, PositionComponent)
        if not player_entities: return
        pos = self.world.get_component(player_entities[0], PositionComponent)
        game_state.camera = (pos.x, pos.y)


def viewport_origin(camera, width, height):
    """Returns the world cell shown in the top-left corner of a viewport centered on camera."""
    return (math.floor(camera[0]) - width // 2, math.floor(camera[1]) - height // 2)
