from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest

from glue_kernel.kernel.definitions import HookDefinition, HookKind, StepDefinition
from glue_kernel.kernel.location import SourceLocation
from glue_kernel.kernel.scenario import Scenario
from glue_kernel.kernel.tags import TagPredicate

LOCATION = SourceLocation(path="/glue/steps.glue.py", line=3)


@dataclass
class RecordingInvoker:
    calls: list[tuple[Callable[..., Any], list[object], int]] = field(default_factory=list)

    def invoke(self, body: Callable[..., Any], args: Sequence[object], *, timeout_ms: int = 0) -> object:
        self.calls.append((body, list(args), timeout_ms))
        return body(*args)


def _step(pattern: str, body: Callable[..., Any], invoker: RecordingInvoker | None = None) -> StepDefinition:
    return StepDefinition(
        pattern=pattern,
        timeout_ms=250,
        body=body,
        location=LOCATION,
        invoker=invoker or RecordingInvoker(),
    )


def test_step_match_converts_arguments_by_annotation() -> None:
    def body(count: int, name, ratio: float) -> None:
        return None

    definition = _step(r"(\d+) (\w+) at (\d+\.\d+)", body)
    assert definition.match("4 cukes at 0.5") == [4, "cukes", 0.5]
    assert definition.match("four cukes at 0.5") is None


def test_step_match_requires_whole_text() -> None:
    definition = _step(r"I have (\d+) cukes", lambda count: None)
    assert definition.match("I have 3 cukes in my belly") is None
    assert definition.match("I have 3 cukes") == ["3"]


def test_step_match_uses_variadic_annotation_for_extra_groups() -> None:
    def body(first: str, *rest: int) -> None:
        return None

    definition = _step(r"(\w+) (\d+) (\d+)", body)
    assert definition.match("sum 1 2") == ["sum", 1, 2]


def test_world_parameter_does_not_consume_arguments() -> None:
    def body(world, amount: int) -> None:
        return None

    assert _step(r"pay (\d+)", body).match("pay 5") == [5]


class Ledger:
    pass


def test_unresolvable_annotation_keeps_other_conversions() -> None:
    # A broken annotation on one parameter leaves that argument as text only.
    def body(amount: int, ledger: Ledger.Missing) -> None:  # type: ignore[name-defined]
        return None

    assert _step(r"pay (\d+) to (\w+)", body).match("pay 5 to main") == [5, "main"]


def test_step_execute_forwards_timeout_to_invoker() -> None:
    invoker = RecordingInvoker()
    seen: list[int] = []
    definition = _step(r"(\d+)", lambda value: seen.append(value), invoker)
    definition.execute([9])
    assert seen == [9]
    assert invoker.calls[0][1:] == ([9], 250)


def test_step_definition_rejects_empty_pattern() -> None:
    with pytest.raises(ValueError):
        _step("", lambda: None)


def test_step_definition_is_immutable() -> None:
    definition = _step("x", lambda: None)
    with pytest.raises(AttributeError):
        definition.pattern = "y"  # type: ignore[misc]
    assert definition.is_scenario_scoped() is False
    assert definition.get_location() == "steps.glue.py:3"


def _hook(body: Callable[..., Any], invoker: RecordingInvoker, expression: str | None = None) -> HookDefinition:
    return HookDefinition(
        kind=HookKind.BEFORE,
        tag_predicate=TagPredicate(expression),
        timeout_ms=0,
        order=7,
        body=body,
        location=LOCATION,
        invoker=invoker,
    )


def test_hook_receives_scenario_as_single_argument() -> None:
    invoker = RecordingInvoker()
    scenario = Scenario(name="checkout")
    seen: list[Scenario] = []
    _hook(lambda s: seen.append(s), invoker).execute(scenario)
    assert seen == [scenario]


def test_hook_without_parameters_is_called_without_scenario() -> None:
    invoker = RecordingInvoker()
    calls: list[str] = []
    _hook(lambda: calls.append("ran"), invoker).execute(Scenario(name="s"))
    assert calls == ["ran"]
    assert invoker.calls[0][1] == []


def test_hook_matching_and_scope() -> None:
    hook = _hook(lambda: None, RecordingInvoker(), "@db")
    assert hook.matches(["@db"]) is True
    assert hook.matches(["@ui"]) is False
    assert hook.order == 7
    assert hook.is_scenario_scoped() is False
    assert hook.get_location(detail=True) == "/glue/steps.glue.py:3"
