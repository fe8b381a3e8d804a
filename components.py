# components.py
# Defines all the data components for the ECS.

import math

class Component:
    """A base class for components. Components hold data."""
    pass

class PositionComponent(Component):
    """Stores the continuous (x, y) world coordinates of an entity."""
    def __init__(self, x, y):
        self.x = float(x)
        self.y = float(y)

    def cell(self):
        """Returns the floored grid cell the entity stands in."""
        return (math.floor(self.x), math.floor(self.y))

class RenderableComponent(Component):
    """Stores the single-character glyph used to draw an entity."""
    def __init__(self, char):
        self.char = char

class PlayerControllableComponent(Component):
    """A tag component to identify the entity controlled by the player."""
    pass

class WantsToMoveComponent(Component):
    """Stores the displacement (dx, dy) an entity wants to apply this tick."""
    def __init__(self, dx, dy):
        self.dx = dx
        self.dy = dy

class PatrolComponent(Component):
    """Pursuit state of a patrol: seconds of stamina left and whether it is still hunting."""
    def __init__(self, stamina_remaining, active=True):
        self.stamina_remaining = stamina_remaining
        self.active = active
