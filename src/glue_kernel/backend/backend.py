from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from contextvars import ContextVar
from enum import Enum
from pathlib import Path
from typing import Any

from glue_kernel.config.models import BackendConfig
from glue_kernel.execution.dispatcher import Dispatcher
from glue_kernel.kernel.definitions import HookDefinition, HookKind, StepDefinition
from glue_kernel.kernel.glue import Glue
from glue_kernel.kernel.location import current_location
from glue_kernel.kernel.tags import TagPredicate
from glue_kernel.kernel.types import TypeRegistry
from glue_kernel.loader.loader import DEFAULT_SCRIPT_SUFFIX, ScriptLoader
from glue_kernel.loader.resources import ResourceLoader
from glue_kernel.loader.scripts import GLUE_VARIABLE, ScriptBinding
from glue_kernel.observability.logging import JsonlLogSink, StdoutLogSink, close_log_sink, emit_log
from glue_kernel.world.registry import WorldFactory, WorldRegistry
from glue_kernel.world.world import World

# One backend per thread. Script callables that cannot be handed an explicit
# registry (module-level DSL decorators) reach it through this slot; everything
# else receives the backend as an argument or through the shared binding.
_local = threading.local()
# Backend running the current body; copied onto timeout workers with the context.
_invoking: ContextVar[GlueBackend | None] = ContextVar("glue_kernel_backend", default=None)


class BackendStateError(RuntimeError):
    # Raised when a lifecycle operation is called in the wrong backend state.
    pass


class BackendState(str, Enum):
    UNINITIALIZED = "uninitialized"
    GLUE_LOADED = "glue_loaded"
    WORLD_BUILT = "world_built"
    WORLD_DISPOSED = "world_disposed"


def current_backend() -> GlueBackend:
    backend = _invoking.get() or getattr(_local, "backend", None)
    if backend is None:
        raise BackendStateError("No glue backend is active on this thread")
    return backend


class GlueBackend:
    """Registers glue declared by scripts and runs it against per-scenario worlds.

    Lifecycle: ``load_glue`` once, then ``build_world``/``dispose_world`` around
    every scenario. Step and hook bodies run through ``invoke``, which is only
    valid while a world is built.
    """

    def __init__(
        self,
        *,
        resource_loader: ResourceLoader | None = None,
        type_registry: TypeRegistry | None = None,
        script_suffix: str = DEFAULT_SCRIPT_SUFFIX,
        log_sink: object | None = None,
        variables: dict[str, object] | None = None,
    ) -> None:
        self.type_registry = type_registry or TypeRegistry()
        self.log_sink = log_sink
        self.binding = ScriptBinding(dict(variables or {}))
        self.binding[GLUE_VARIABLE] = self
        self.loader = ScriptLoader(
            binding=self.binding,
            resource_loader=resource_loader or ResourceLoader(),
            script_suffix=script_suffix,
            log_sink=log_sink,
        )
        self.worlds = WorldRegistry()
        self.dispatcher = Dispatcher(log_sink=log_sink)
        self.state = BackendState.UNINITIALIZED
        self.glue_paths: list[str] = []
        self._glue: Glue | None = None
        _local.backend = self

    @classmethod
    def from_config(cls, config: BackendConfig, **kwargs: Any) -> GlueBackend:
        backend = cls(
            script_suffix=config.glue.script_suffix,
            log_sink=_build_log_sink(config),
            **kwargs,
        )
        backend.glue_paths = list(config.glue.paths)
        return backend

    @staticmethod
    def current() -> GlueBackend:
        return current_backend()

    def release(self) -> None:
        # Unpublish from this thread and close an owned log sink.
        if getattr(_local, "backend", None) is self:
            _local.backend = None
        close_log_sink(self.log_sink)

    # Script loading.

    def load_glue(self, glue: Glue, glue_paths: Sequence[str]) -> None:
        if self.state is not BackendState.UNINITIALIZED:
            raise BackendStateError(f"Glue is already loaded (state: {self.state.value})")
        self._glue = glue
        self.loader.load(list(glue_paths))
        self.state = BackendState.GLUE_LOADED

    def load_configured_glue(self, glue: Glue) -> None:
        self.load_glue(glue, self.glue_paths)

    # World lifecycle.

    def register_world(self, factory: WorldFactory) -> None:
        self.worlds.register(factory)

    def build_world(self) -> World:
        if self.state not in (BackendState.GLUE_LOADED, BackendState.WORLD_DISPOSED):
            raise BackendStateError(f"Cannot build a world in state {self.state.value}")
        world = self.worlds.build()
        self.state = BackendState.WORLD_BUILT
        emit_log(self.log_sink, level="debug", message="world.built", fields={"members": len(world)})
        return world

    def dispose_world(self) -> None:
        if self.state is not BackendState.WORLD_BUILT:
            raise BackendStateError(f"Cannot dispose a world in state {self.state.value}")
        self.worlds.dispose()
        self.state = BackendState.WORLD_DISPOSED
        emit_log(self.log_sink, level="debug", message="world.disposed")

    @property
    def world(self) -> World:
        return self.worlds.current

    # Registration (called by scripts while glue loads).

    def add_step_definition(self, pattern: str, timeout_ms: int, body: Callable[..., Any]) -> StepDefinition:
        definition = StepDefinition(
            pattern=pattern,
            timeout_ms=timeout_ms,
            body=body,
            location=current_location(),
            invoker=self,
            type_registry=self.type_registry,
        )
        self._sink().add_step_definition(definition)
        emit_log(
            self.log_sink,
            level="debug",
            message="glue.step_registered",
            fields={"pattern": pattern, "location": str(definition.location)},
        )
        return definition

    def add_before_hook(
        self,
        tag_expression: TagPredicate | str | None,
        timeout_ms: int,
        order: int,
        body: Callable[..., Any],
    ) -> HookDefinition:
        return self._add_hook(HookKind.BEFORE, tag_expression, timeout_ms, order, body)

    def add_after_hook(
        self,
        tag_expression: TagPredicate | str | None,
        timeout_ms: int,
        order: int,
        body: Callable[..., Any],
    ) -> HookDefinition:
        return self._add_hook(HookKind.AFTER, tag_expression, timeout_ms, order, body)

    def add_before_step_hook(
        self,
        tag_expression: TagPredicate | str | None,
        timeout_ms: int,
        order: int,
        body: Callable[..., Any],
    ) -> HookDefinition:
        return self._add_hook(HookKind.BEFORE_STEP, tag_expression, timeout_ms, order, body)

    def add_after_step_hook(
        self,
        tag_expression: TagPredicate | str | None,
        timeout_ms: int,
        order: int,
        body: Callable[..., Any],
    ) -> HookDefinition:
        return self._add_hook(HookKind.AFTER_STEP, tag_expression, timeout_ms, order, body)

    # Invocation.

    def invoke(self, body: Callable[..., Any], args: Sequence[object], *, timeout_ms: int = 0) -> object:
        if self.state is not BackendState.WORLD_BUILT:
            raise BackendStateError(f"Glue can only be invoked inside a scenario (state: {self.state.value})")
        token = _invoking.set(self)
        try:
            return self.dispatcher.invoke(body, args, self.worlds.current, timeout_ms=timeout_ms)
        finally:
            _invoking.reset(token)

    def _add_hook(
        self,
        kind: HookKind,
        tag_expression: TagPredicate | str | None,
        timeout_ms: int,
        order: int,
        body: Callable[..., Any],
    ) -> HookDefinition:
        definition = HookDefinition(
            kind=kind,
            tag_predicate=TagPredicate.of(tag_expression),
            timeout_ms=timeout_ms,
            order=order,
            body=body,
            location=current_location(),
            invoker=self,
        )
        sink = self._sink()
        {
            HookKind.BEFORE: sink.add_before_hook,
            HookKind.AFTER: sink.add_after_hook,
            HookKind.BEFORE_STEP: sink.add_before_step_hook,
            HookKind.AFTER_STEP: sink.add_after_step_hook,
        }[kind](definition)
        emit_log(
            self.log_sink,
            level="debug",
            message="glue.hook_registered",
            fields={"kind": kind.value, "order": order, "location": str(definition.location)},
        )
        return definition

    def _sink(self) -> Glue:
        if self._glue is None:
            raise BackendStateError("Definitions can only be registered once load_glue() has provided a glue sink")
        return self._glue


def _build_log_sink(config: BackendConfig) -> object | None:
    settings = config.logging
    if settings.sink == "stdout":
        return StdoutLogSink()
    if settings.sink == "jsonl":
        return JsonlLogSink(Path(settings.path or ""))
    return None
