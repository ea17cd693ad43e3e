from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from glue_kernel.execution.dispatcher import positional_parameters
from glue_kernel.kernel.location import SourceLocation
from glue_kernel.kernel.scenario import Scenario
from glue_kernel.kernel.tags import TagPredicate
from glue_kernel.kernel.types import TypeRegistry

DEFAULT_HOOK_ORDER = 10000


class HookKind(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    BEFORE_STEP = "before_step"
    AFTER_STEP = "after_step"


class Invoker(Protocol):
    # The backend side of a definition: runs a body against the current world.
    def invoke(self, body: Callable[..., Any], args: Sequence[object], *, timeout_ms: int = 0) -> object:
        raise NotImplementedError("Invoker.invoke must be implemented")


@dataclass(frozen=True, slots=True)
class StepDefinition:
    # Regular-expression step bound to a body; immutable once registered.
    pattern: str
    timeout_ms: int
    body: Callable[..., Any]
    location: SourceLocation
    invoker: Invoker = field(repr=False, compare=False)
    type_registry: TypeRegistry = field(default_factory=TypeRegistry, repr=False, compare=False)
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, str) or not self.pattern:
            raise ValueError("StepDefinition.pattern must be a non-empty string")
        object.__setattr__(self, "_regex", re.compile(self.pattern))

    def match(self, text: str) -> list[object] | None:
        # Whole-text match; captured groups are converted per the body's annotations.
        found = self._regex.fullmatch(text)
        if found is None:
            return None
        return self._convert(found.groups())

    def execute(self, args: Sequence[object]) -> object:
        return self.invoker.invoke(self.body, list(args), timeout_ms=self.timeout_ms)

    def get_location(self, detail: bool = False) -> str:
        return self.location.format(detail)

    def is_scenario_scoped(self) -> bool:
        return False

    def _convert(self, groups: Iterable[str | None]) -> list[object]:
        parameters = positional_parameters(self.body)
        variadic = parameters[-1] if parameters and parameters[-1].kind is inspect.Parameter.VAR_POSITIONAL else None
        fixed = [parameter for parameter in parameters if parameter is not variadic]
        converted: list[object] = []
        for index, value in enumerate(groups):
            if index < len(fixed):
                annotation = fixed[index].annotation
            elif variadic is not None:
                annotation = variadic.annotation
            else:
                annotation = inspect.Parameter.empty
            converted.append(self.type_registry.convert(value, annotation))
        return converted


@dataclass(frozen=True, slots=True)
class HookDefinition:
    # Lifecycle hook gated by a tag predicate; lower order runs first.
    kind: HookKind
    tag_predicate: TagPredicate
    timeout_ms: int
    order: int
    body: Callable[..., Any]
    location: SourceLocation
    invoker: Invoker = field(repr=False, compare=False)

    def execute(self, scenario: Scenario) -> object:
        # A hook body without positional parameters is called without the scenario.
        args: list[object] = [scenario] if positional_parameters(self.body) else []
        return self.invoker.invoke(self.body, args, timeout_ms=self.timeout_ms)

    def matches(self, tags: Iterable[object]) -> bool:
        return self.tag_predicate.matches(tags)

    def get_location(self, detail: bool = False) -> str:
        return self.location.format(detail)

    def is_scenario_scoped(self) -> bool:
        # Hooks are suite-lifetime objects; they are never re-created per scenario.
        return False
