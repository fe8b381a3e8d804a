# main.py
# A real-time ASCII chase across an endless noise-generated world, built on an
# Entity-Component-System (ECS) architecture.

from typing import Optional

import typer
from rich import print as rprint

import factory
from ai_system import PatrolSystem
from clock import SimulationClock
from config import ConfigError, GameConfig, load_config
from core_systems import CameraSystem, InputSystem, MovementSystem, make_held_keys
from components import PositionComponent
from render_system import RenderSystem
from terminal_io import TerminalError, TerminalSession
from world_generator import NoiseField, build_world_view, render_static_map

# --- Core ECS Classes ---
class Entity:
    """A container for components. It's just an ID."""
    def __init__(self):
        if not hasattr(Entity, "next_id"):
            Entity.next_id = 0
        self.id = Entity.next_id
        Entity.next_id += 1

# --- Game World ---
class World:
    """The central hub of the ECS."""
    def __init__(self):
        self.entities = {}
        self.components = {}
        self.systems = []

    def create_entity(self):
        entity = Entity()
        self.entities[entity.id] = entity
        return entity

    def destroy_entity(self, entity_id):
        """Removes an entity and every component attached to it."""
        self.entities.pop(entity_id, None)
        for store in self.components.values():
            store.pop(entity_id, None)

    def add_component(self, entity_id, component):
        component_type = type(component)
        if component_type not in self.components:
            self.components[component_type] = {}
        self.components[component_type][entity_id] = component
        return component

    def get_component(self, entity_id, component_type):
        return self.components.get(component_type, {}).get(entity_id)

    def remove_component(self, entity_id, component_type):
        if component_type in self.components and entity_id in self.components[component_type]:
            del self.components[component_type][entity_id]

    def get_entities_with_components(self, *component_types):
        if not component_types: return []
        try:
            entity_ids = set(self.components[component_types[0]].keys())
        except KeyError:
            return []
        for component_type in component_types[1:]:
            try:
                entity_ids.intersection_update(self.components[component_type].keys())
            except KeyError:
                return []
        return list(entity_ids)

    def add_system(self, system):
        self.systems.append(system)

    def update(self, *args, **kwargs):
        for system in self.systems:
            system.update(*args, **kwargs)


# --- Main Game Class ---
class Game:
    """Sets up the game world and runs the real-time loop against a terminal."""
    def __init__(self, config=None, terminal=None, clock=None, rng=None):
        self.config = config if config is not None else GameConfig()
        self.terminal = terminal if terminal is not None else TerminalSession()
        self.clock = clock if clock is not None else SimulationClock(self.config.fps)
        self.rng = rng
        self.world = World()
        self.world_view = None
        self.player_id = None
        self.camera = (0.0, 0.0)
        self.message_log = []
        self.quit_requested = False

    def add_message(self, message):
        self.message_log.append(message)
        if len(self.message_log) > 5:
            self.message_log.pop(0)

    @property
    def player_position(self):
        return self.world.get_component(self.player_id, PositionComponent)

    def setup(self):
        """Build the world view, the player, and the systems in tick order."""
        config = self.config
        self.world_view = build_world_view(config)

        start = (0.0, 0.0)
        if config.bounded:
            start = (float(config.viewport_width // 2), float(config.viewport_height // 2))
        self.player_id = factory.create_player(self.world, start, config.player_glyph)

        bounds = (config.viewport_width, config.viewport_height) if config.bounded else None
        self.input_system = InputSystem(self.world, make_held_keys(config), config.walk_speed, config.run_speed)
        self.movement_system = MovementSystem(self.world, bounds)
        self.patrol_system = PatrolSystem(self.world, config, self.rng)
        self.camera_system = CameraSystem(self.world, config.viewport_width, config.viewport_height,
                                          bounded=config.bounded)
        self.render_system = RenderSystem(self.world, self.terminal, self.world_view, self.patrol_system,
                                          config.viewport_width, config.viewport_height)

        self.world.add_system(self.input_system)
        self.world.add_system(self.movement_system)
        self.world.add_system(self.patrol_system)
        self.world.add_system(self.camera_system)
        self.world.add_system(self.render_system)

        self.camera_system.update(game_state=self)
        self.add_message("wasd to walk, WASD to run, q to quit")

    def tick(self):
        """Runs one frame. Returns False once the player has asked to quit."""
        dt = self.clock.tick()
        now = self.clock.now()

        keys = self.terminal.poll_pending_keys()
        if self.input_system.handle_keys(keys, now):
            # Stop before simulating or drawing anything more.
            self.quit_requested = True
            return False

        self.world.update(dt=dt, now=now, game_state=self)
        return True

    def run(self):
        if self.world_view is None:
            self.setup()
        with self.terminal:
            while self.tick():
                self.clock.wait_for_next_frame()


# --- Command line ---
app = typer.Typer(help="Outrun patrols across an endless noise-generated ASCII world.")


def _build_config(config_path=None, seed=None, bounded=False, no_cache=False):
    config = load_config(config_path) if config_path else GameConfig()
    overrides = {}
    if seed is not None:
        overrides["seed"] = seed
    if bounded:
        overrides["world_mode"] = "bounded"
    if no_cache:
        overrides["chunk_cache"] = False
    if overrides:
        config = config.replace(**overrides)
    return config


def _play(config_path=None, seed=None, bounded=False, window=False, no_cache=False):
    try:
        config = _build_config(config_path, seed, bounded, no_cache)
    except ConfigError as exc:
        rprint({"error": str(exc)})
        raise typer.Exit(code=1)

    if window:
        from window_viewer import PygameWindow
        terminal = PygameWindow(columns=config.viewport_width, rows=config.viewport_height + 1)
    else:
        terminal = TerminalSession()

    game = Game(config, terminal)
    game.setup()
    try:
        game.run()
    except TerminalError as exc:
        rprint({"error": str(exc)})
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        raise typer.Exit(code=130)

    pos = game.player_position
    rprint({"ticks": game.clock.ticks, "seconds": round(game.clock.elapsed, 1),
           "final_position": (round(pos.x, 1), round(pos.y, 1))})


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Start a game with default settings when no command is given."""
    if ctx.invoked_subcommand is None:
        _play()


@app.command()
def play(
    config_path: Optional[str] = typer.Option(None, "--config", help="JSON file of setting overrides"),
    seed: Optional[int] = typer.Option(None, help="World seed"),
    bounded: bool = typer.Option(False, "--bounded", help="Keep the player on a single non-scrolling screen"),
    window: bool = typer.Option(False, "--window", help="Play in a pygame window instead of the terminal"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Sample noise for every cell instead of caching chunks"),
) -> None:
    """Play the game."""
    _play(config_path=config_path, seed=seed, bounded=bounded, window=window, no_cache=no_cache)


@app.command("render-map")
def render_map(
    seed: int = typer.Option(42, help="World seed"),
    frequency: float = typer.Option(0.05, help="Noise frequency; lower means larger features"),
    width: int = typer.Option(80, help="Columns to print"),
    height: int = typer.Option(25, help="Rows to print"),
    x: int = typer.Option(0, help="World X of the top-left cell"),
    y: int = typer.Option(0, help="World Y of the top-left cell"),
) -> None:
    """Print one screen of terrain and exit."""
    try:
        config = GameConfig(seed=seed, frequency=frequency, viewport_width=width, viewport_height=height)
    except ConfigError as exc:
        rprint({"error": str(exc)})
        raise typer.Exit(code=1)

    field = NoiseField(config.seed, config.frequency, config.octaves)
    for line in render_static_map(field, config.viewport_width, config.viewport_height, x, y):
        typer.echo(line)


if __name__ == '__main__':
    app()
