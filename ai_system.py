# ai_system.py
# Patrol behavior: spawning near the player, seek steering, and stamina burn-out.

import math
import random
from components import *
from core_systems import System, clamp_to_bounds
import factory

class PatrolSystem(System):
    """
    Owns every patrol in the world.

    A spawn timer with a randomly drawn threshold drops a new patrol somewhere
    around the player. Each active patrol heads straight for the player's
    current position until its stamina runs out, at which point it gives up
    and is removed from the world.
    """
    def __init__(self, world, config, rng=None):
        super().__init__(world)
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)
        self.bounds = (config.viewport_width, config.viewport_height) if config.bounded else None
        self.spawn_timer = 0.0
        self.next_spawn_threshold = self.draw_spawn_threshold()

    def draw_spawn_threshold(self):
        low, high = self.config.spawn_interval
        return self.rng.uniform(low, high)

    def update(self, *args, **kwargs):
        dt = kwargs.get('dt', 0.0)
        game_state = kwargs.get('game_state')

        player_entities = self.world.get_entities_with_components(PlayerControllableComponent, PositionComponent)
        if not player_entities: return
        player_pos = self.world.get_component(player_entities[0], PositionComponent)

        self.spawn_timer += dt
        if self.spawn_timer >= self.next_spawn_threshold:
            self.spawn_timer = 0.0
            self.next_spawn_threshold = self.draw_spawn_threshold()
            offset = self.config.spawn_offset
            patrol_id = self.spawn_patrol((player_pos.x + self.rng.uniform(-offset, offset),
                                           player_pos.y + self.rng.uniform(-offset, offset)))
            if game_state:
                game_state.add_message(f"A patrol (#{patrol_id}) is on your trail!")

        exhausted = []
        for entity_id in self.patrol_ids():
            patrol = self.world.get_component(entity_id, PatrolComponent)
            if not patrol.active:
                continue

            if patrol.stamina_remaining <= 0:
                patrol.active = False
                exhausted.append(entity_id)
                continue

            pos = self.world.get_component(entity_id, PositionComponent)
            self.steer(pos, player_pos, dt)
            patrol.stamina_remaining -= dt

        for entity_id in exhausted:
            self.world.destroy_entity(entity_id)
            if game_state:
                game_state.add_message(f"Patrol #{entity_id} gave up the chase.")

    def steer(self, pos, target, dt):
        """Moves pos straight toward target, never stepping past it."""
        dx = target.x - pos.x
        dy = target.y - pos.y
        distance = math.hypot(dx, dy)
        if distance <= self.config.steering_epsilon:
            return
        step = min(self.config.patrol_speed * dt, distance)
        pos.x += dx / distance * step
        pos.y += dy / distance * step

    def spawn_patrol(self, position):
        """Creates an active patrol with full stamina at position and returns its id."""
        if self.bounds:
            spawn_pos = PositionComponent(*position)
            clamp_to_bounds(spawn_pos, self.bounds)
            position = (spawn_pos.x, spawn_pos.y)
        return factory.create_patrol(self.world, position, self.config.patrol_stamina)

    def patrol_ids(self):
        """Ids of all patrol entities in ascending order, so iteration is repeatable."""
        return sorted(self.world.get_entities_with_components(PatrolComponent, PositionComponent))

    def active_patrols(self):
        """Yields (entity_id, position) for every active patrol in id order."""
        for entity_id in self.patrol_ids():
            if self.world.get_component(entity_id, PatrolComponent).active:
                yield entity_id, self.world.get_component(entity_id, PositionComponent)

    def active_count(self):
        return sum(1 for _ in self.active_patrols())
