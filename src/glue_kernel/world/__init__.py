from .registry import WorldFactory, WorldRegistry
from .world import World, WorldDelegate, WorldStateError, activated, current_world

__all__ = ["World", "WorldDelegate", "WorldFactory", "WorldRegistry", "WorldStateError", "activated", "current_world"]
