"""Decorators used by glue scripts to declare steps, hooks and world factories.

Each decorator registers against the backend published for the current thread
and returns the decorated function unchanged, so one body can carry several
declarations::

    from glue_kernel.backend.dsl import before, step, world_factory

    @world_factory
    def make_account():
        return Account()

    @before("@bank and not @slow", order=5)
    def open_ledger(scenario):
        ...

    @step(r"I deposit (\\d+)")
    def deposit(amount: int, world):
        world.balance += amount
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from glue_kernel.backend.backend import current_backend
from glue_kernel.kernel.definitions import DEFAULT_HOOK_ORDER
from glue_kernel.world.world import current_world

F = TypeVar("F", bound=Callable[..., Any])

__all__ = [
    "after",
    "after_step",
    "before",
    "before_step",
    "current_world",
    "step",
    "world_factory",
]


def step(pattern: str, *, timeout_ms: int = 0) -> Callable[[F], F]:
    def _decorate(body: F) -> F:
        current_backend().add_step_definition(pattern, timeout_ms, body)
        return body

    return _decorate


def before(tags: str | None = None, *, order: int = DEFAULT_HOOK_ORDER, timeout_ms: int = 0) -> Callable[[F], F]:
    def _decorate(body: F) -> F:
        current_backend().add_before_hook(tags, timeout_ms, order, body)
        return body

    return _decorate


def after(tags: str | None = None, *, order: int = DEFAULT_HOOK_ORDER, timeout_ms: int = 0) -> Callable[[F], F]:
    def _decorate(body: F) -> F:
        current_backend().add_after_hook(tags, timeout_ms, order, body)
        return body

    return _decorate


def before_step(tags: str | None = None, *, order: int = DEFAULT_HOOK_ORDER, timeout_ms: int = 0) -> Callable[[F], F]:
    def _decorate(body: F) -> F:
        current_backend().add_before_step_hook(tags, timeout_ms, order, body)
        return body

    return _decorate


def after_step(tags: str | None = None, *, order: int = DEFAULT_HOOK_ORDER, timeout_ms: int = 0) -> Callable[[F], F]:
    def _decorate(body: F) -> F:
        current_backend().add_after_step_hook(tags, timeout_ms, order, body)
        return body

    return _decorate


def world_factory(factory: F) -> F:
    current_backend().register_world(factory)
    return factory
