# render_system.py
# Rendering system for the game

from components import *
from core_systems import System, viewport_origin

def compose_frame(world_view, camera, width, height, player_pos, patrol_positions,
                  player_glyph='P', patrol_glyph='X'):
    """
    Builds the character grid for one frame.

    Each cell shows, in order of priority, a patrol, the player, or the
    terrain underneath. Positions are mapped to cells with floor() so that
    negative coordinates land in the right cell. When several patrols share a
    cell the first one in patrol_positions wins.
    """
    origin_x, origin_y = viewport_origin(camera, width, height)
    grid = [list(row) for row in world_view.region(origin_x, origin_y, width, height)]

    def cell_of(pos):
        cell_x, cell_y = pos.cell()
        col, row = cell_x - origin_x, cell_y - origin_y
        if 0 <= col < width and 0 <= row < height:
            return col, row
        return None

    if player_pos is not None:
        cell = cell_of(player_pos)
        if cell:
            grid[cell[1]][cell[0]] = player_glyph

    # Patrols go on last so they cover the player.
    claimed = set()
    for pos in patrol_positions:
        cell = cell_of(pos)
        if cell is None or cell in claimed:
            continue
        claimed.add(cell)
        grid[cell[1]][cell[0]] = patrol_glyph

    return [''.join(row) for row in grid]


def format_status(player_pos, active_patrols, cached_chunks=None, message=None):
    status = f"Pos: ({player_pos.x:.1f}, {player_pos.y:.1f}) | Patrols: {active_patrols}"
    if cached_chunks is not None:
        status += f" | Chunks: {cached_chunks}"
    if message:
        status += f" | {message}"
    return status


class RenderSystem(System):
    """Draws the viewport and status line to a terminal-like output every tick."""
    def __init__(self, world, terminal, world_view, patrol_system, width, height):
        super().__init__(world)
        self.terminal = terminal
        self.world_view = world_view
        self.patrol_system = patrol_system
        self.width = width
        self.height = height
        self.frames_drawn = 0

    def update(self, *args, **kwargs):
        game_state = kwargs.get('game_state')
        if not game_state: return

        player_entities = self.world.get_entities_with_components(PlayerControllableComponent, PositionComponent)
        if not player_entities: return
        player_id = player_entities[0]
        player_pos = self.world.get_component(player_id, PositionComponent)
        player_renderable = self.world.get_component(player_id, RenderableComponent)

        patrols = list(self.patrol_system.active_patrols())
        lines = compose_frame(self.world_view, game_state.camera, self.width, self.height,
                              player_pos, [pos for _, pos in patrols],
                              player_glyph=player_renderable.char if player_renderable else 'P',
                              patrol_glyph=self.patrol_system.config.patrol_glyph)

        cache = self.world_view.cache
        lines.append(format_status(player_pos, len(patrols),
                                   cached_chunks=len(cache) if cache is not None else None,
                                   message=game_state.message_log[-1] if game_state.message_log else None))

        self.terminal.clear_screen()
        for line in lines:
            self.terminal.write_line(line)
        self.terminal.flush()
        self.frames_drawn += 1
