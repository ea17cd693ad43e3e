from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from glue_kernel.kernel.definitions import HookDefinition, HookKind, StepDefinition
from glue_kernel.kernel.scenario import Scenario


class AmbiguousStepError(RuntimeError):
    # Raised when more than one step definition matches the same step text.
    def __init__(self, text: str, definitions: list[StepDefinition]) -> None:
        locations = ", ".join(definition.get_location() for definition in definitions)
        super().__init__(f"Step '{text}' matches {len(definitions)} definitions: {locations}")
        self.text = text
        self.definitions = definitions


@runtime_checkable
class Glue(Protocol):
    # Host-runner sink that receives every registered definition.
    def add_step_definition(self, definition: StepDefinition) -> None:
        raise NotImplementedError("Glue.add_step_definition must be implemented")

    def add_before_hook(self, definition: HookDefinition) -> None:
        raise NotImplementedError("Glue.add_before_hook must be implemented")

    def add_after_hook(self, definition: HookDefinition) -> None:
        raise NotImplementedError("Glue.add_after_hook must be implemented")

    def add_before_step_hook(self, definition: HookDefinition) -> None:
        raise NotImplementedError("Glue.add_before_step_hook must be implemented")

    def add_after_step_hook(self, definition: HookDefinition) -> None:
        raise NotImplementedError("Glue.add_after_step_hook must be implemented")


@dataclass(slots=True)
class GlueTable(Glue):
    # In-memory glue: keeps definitions in registration order and selects hooks by tags.
    step_definitions: list[StepDefinition] = field(default_factory=list)
    _hooks: dict[HookKind, list[HookDefinition]] = field(
        default_factory=lambda: {kind: [] for kind in HookKind}
    )

    def add_step_definition(self, definition: StepDefinition) -> None:
        self.step_definitions.append(definition)

    def add_before_hook(self, definition: HookDefinition) -> None:
        self._hooks[HookKind.BEFORE].append(definition)

    def add_after_hook(self, definition: HookDefinition) -> None:
        self._hooks[HookKind.AFTER].append(definition)

    def add_before_step_hook(self, definition: HookDefinition) -> None:
        self._hooks[HookKind.BEFORE_STEP].append(definition)

    def add_after_step_hook(self, definition: HookDefinition) -> None:
        self._hooks[HookKind.AFTER_STEP].append(definition)

    def all_hooks(self, kind: HookKind) -> list[HookDefinition]:
        return list(self._hooks[kind])

    def hooks(self, kind: HookKind, tags: Iterable[object]) -> list[HookDefinition]:
        # Ascending order; sorted() is stable so ties keep registration order.
        tag_set = list(tags)
        matching = [hook for hook in self._hooks[kind] if hook.matches(tag_set)]
        return sorted(matching, key=lambda hook: hook.order)

    def run_hooks(self, kind: HookKind, scenario: Scenario) -> list[HookDefinition]:
        # First failure propagates; hooks after it do not run.
        selected = self.hooks(kind, scenario.tags)
        for hook in selected:
            hook.execute(scenario)
        return selected

    def find_step(self, text: str) -> tuple[StepDefinition, list[object]] | None:
        matches: list[tuple[StepDefinition, list[object]]] = []
        for definition in self.step_definitions:
            arguments = definition.match(text)
            if arguments is not None:
                matches.append((definition, arguments))
        if not matches:
            return None
        if len(matches) > 1:
            raise AmbiguousStepError(text, [definition for definition, _ in matches])
        return matches[0]

    def run_step(self, text: str) -> object:
        found = self.find_step(text)
        if found is None:
            raise LookupError(f"Undefined step: {text}")
        definition, arguments = found
        return definition.execute(arguments)
