from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from glue_kernel.world.world import World, WorldStateError

WorldFactory = Callable[[], object]


@dataclass(slots=True)
class WorldRegistry:
    # Accumulates world factories and owns the world of the running scenario.
    _factories: list[WorldFactory] = field(default_factory=list)
    _world: World | None = None

    def register(self, factory: WorldFactory) -> None:
        # Order preserving; the same factory may be registered twice.
        if not callable(factory):
            raise TypeError("world factory must be callable")
        self._factories.append(factory)

    @property
    def factories(self) -> tuple[WorldFactory, ...]:
        return tuple(self._factories)

    def build(self) -> World:
        # A raising factory aborts the build; the previous world stays discarded.
        self._world = None
        world = World()
        for factory in self._factories:
            world.register(factory())
        self._world = world
        return world

    def dispose(self) -> None:
        self._world = None

    @property
    def is_built(self) -> bool:
        return self._world is not None

    @property
    def current(self) -> World:
        if self._world is None:
            raise WorldStateError("World is only available between build_world() and dispose_world()")
        return self._world
