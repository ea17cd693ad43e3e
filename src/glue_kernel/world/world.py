from __future__ import annotations

import builtins
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

_MISSING = object()


class WorldStateError(RuntimeError):
    # Raised when the world is used outside a scenario or through a detached delegate.
    pass


@dataclass(slots=True)
class World:
    # Ordered, mutable set of per-scenario objects produced by world factories.
    _members: list[object] = field(default_factory=list)

    def register(self, member: object) -> None:
        self._members.append(member)

    @property
    def members(self) -> tuple[object, ...]:
        return tuple(self._members)

    def __iter__(self) -> Iterator[object]:
        return iter(tuple(self._members))

    def __len__(self) -> int:
        return len(self._members)

    def owner_of(self, name: str) -> object | None:
        # First member in registration order exposing `name`.
        for member in self._members:
            if hasattr(member, name):
                return member
        return None

    def lookup(self, name: str) -> object:
        owner = self.owner_of(name)
        if owner is None:
            return _MISSING
        return getattr(owner, name)


class WorldDelegate:
    """Name resolver handed to a step/hook body.

    Reads resolve against the world members first (registration order, first
    match wins) and then against the body's lexical environment: the bound
    instance of a method, closure cells, the body's globals and builtins.
    Writes land on the first member that already exposes the attribute, or in
    the body's globals otherwise, which for source scripts is the shared
    binding namespace.
    """

    __slots__ = ("_world", "_body", "_detached")

    def __init__(self, world: World, body: Callable[..., Any]) -> None:
        object.__setattr__(self, "_world", world)
        object.__setattr__(self, "_body", body)
        object.__setattr__(self, "_detached", False)

    @property
    def world(self) -> World:
        self._ensure_attached()
        return self._world

    def detach(self) -> None:
        object.__setattr__(self, "_detached", True)

    @property
    def detached(self) -> bool:
        return self._detached

    def __getattr__(self, name: str) -> object:
        self._ensure_attached()
        value = self._world.lookup(name)
        if value is not _MISSING:
            return value
        value = _lexical_lookup(self._body, name)
        if value is not _MISSING:
            return value
        raise AttributeError(f"No world member or enclosing name '{name}'")

    def __setattr__(self, name: str, value: object) -> None:
        self._ensure_attached()
        owner = self._world.owner_of(name)
        if owner is not None:
            setattr(owner, name, value)
            return
        _function_of(self._body).__globals__[name] = value

    def _ensure_attached(self) -> None:
        if self._detached:
            raise WorldStateError("World delegate is detached from its scenario")

    def __repr__(self) -> str:
        return f"WorldDelegate(members={len(self._world)}, detached={self._detached})"


_current_delegate: ContextVar[WorldDelegate | None] = ContextVar("glue_kernel_world", default=None)


@contextmanager
def activated(delegate: WorldDelegate) -> Iterator[WorldDelegate]:
    # Publishes the delegate to current_world() for the duration of one call.
    token = _current_delegate.set(delegate)
    try:
        yield delegate
    finally:
        _current_delegate.reset(token)


def current_world() -> WorldDelegate:
    # Delegate of the body currently executing on this thread/context.
    delegate = _current_delegate.get()
    if delegate is None:
        raise WorldStateError("No step or hook body is executing")
    return delegate


def _function_of(body: Callable[..., Any]) -> Any:
    return getattr(body, "__func__", body)


def _lexical_lookup(body: Callable[..., Any], name: str) -> object:
    bound = getattr(body, "__self__", None)
    if bound is not None and hasattr(bound, name):
        return getattr(bound, name)
    function = _function_of(body)
    code = getattr(function, "__code__", None)
    closure = getattr(function, "__closure__", None) or ()
    if code is not None and name in code.co_freevars:
        cell = closure[code.co_freevars.index(name)]
        try:
            return cell.cell_contents
        except ValueError:
            # Cell not yet assigned in the enclosing scope.
            return _MISSING
    namespace = getattr(function, "__globals__", None)
    if namespace is not None and name in namespace:
        return namespace[name]
    return getattr(builtins, name, _MISSING)
