# factory.py
# Contains functions for creating the player and patrol entities in the game world.

from components import (PatrolComponent, PlayerControllableComponent, PositionComponent,
                        RenderableComponent)

def create_player(world, position=(0.0, 0.0), glyph='P'):
    """
    Creates the player-controlled entity.

    Args:
        world: The ECS world to add the entity to.
        position (tuple): The starting (x, y) world coordinates.
        glyph (str): Character drawn at the player's cell.

    Returns:
        int: The new entity's id.
    """
    player = world.create_entity()
    world.add_component(player.id, PositionComponent(position[0], position[1]))
    world.add_component(player.id, RenderableComponent(glyph))
    world.add_component(player.id, PlayerControllableComponent())
    return player.id


def create_patrol(world, position, stamina):
    """
    Creates an active patrol with a full stamina budget.

    Args:
        world: The ECS world to add the entity to.
        position (tuple): The (x, y) world coordinates to spawn at.
        stamina (float): Seconds of pursuit before the patrol gives up.

    Returns:
        int: The new entity's id.
    """
    patrol = world.create_entity()
    world.add_component(patrol.id, PositionComponent(position[0], position[1]))
    world.add_component(patrol.id, PatrolComponent(stamina_remaining=stamina, active=True))
    return patrol.id
