from __future__ import annotations

import asyncio
import contextvars
import inspect
from collections.abc import Callable, Coroutine, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from glue_kernel.execution.timeout import GlueTimeoutError, InvocationWrapperError, run_with_timeout
from glue_kernel.observability.logging import emit_log
from glue_kernel.world.world import World, WorldDelegate, activated

WORLD_PARAMETER = "world"

_ARGUMENT_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)
_WORLD_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


def _signature(body: Callable[..., Any]) -> inspect.Signature:
    # Postponed (string) annotations are resolved in the body's globals when possible.
    try:
        return inspect.signature(body, eval_str=True)
    except Exception:  # noqa: BLE001 - retried per parameter below
        signature = inspect.signature(body)
    namespace = getattr(inspect.unwrap(getattr(body, "__func__", body)), "__globals__", {})
    return signature.replace(
        parameters=[
            parameter.replace(annotation=_resolve_annotation(parameter.annotation, namespace))
            for parameter in signature.parameters.values()
        ]
    )


def _resolve_annotation(annotation: object, namespace: dict[str, Any]) -> object:
    # An annotation that does not resolve keeps its raw string and converts nothing.
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, namespace)  # noqa: S307 - same evaluation inspect applies for eval_str
    except Exception:  # noqa: BLE001
        return annotation


def accepts_world(body: Callable[..., Any]) -> bool:
    # Bodies opt into the delegate by declaring a `world` parameter.
    try:
        parameters = inspect.signature(body).parameters
    except (TypeError, ValueError):
        return False
    parameter = parameters.get(WORLD_PARAMETER)
    return parameter is not None and parameter.kind in _WORLD_KINDS


def positional_parameters(body: Callable[..., Any]) -> list[inspect.Parameter]:
    # Parameters that receive step/hook arguments; the `world` slot is excluded.
    try:
        parameters = _signature(body).parameters.values()
    except (TypeError, ValueError):
        return []
    return [
        parameter
        for parameter in parameters
        if parameter.name != WORLD_PARAMETER and parameter.kind in _ARGUMENT_KINDS
    ]


def bind_arguments(
    body: Callable[..., Any],
    args: Sequence[object],
    delegate: WorldDelegate,
) -> tuple[list[object], dict[str, object]]:
    """Lay out call arguments for ``body``.

    Matched arguments fill the positional slots in order, skipping the
    ``world`` slot wherever it sits; the delegate goes into that slot, or is
    passed by keyword once the positional arguments are used up.
    """
    if not accepts_world(body):
        return list(args), {}
    remaining = list(args)
    positional: list[object] = []
    placed = False
    for parameter in inspect.signature(body).parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            positional.extend(remaining)
            remaining = []
            break
        if parameter.kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            break
        if parameter.name == WORLD_PARAMETER:
            positional.append(delegate)
            placed = True
            continue
        if not remaining:
            break
        positional.append(remaining.pop(0))
    # Leftovers are passed through so an arity mismatch fails like a plain call.
    positional.extend(remaining)
    return positional, {} if placed else {WORLD_PARAMETER: delegate}



def _drive(coroutine: Coroutine[Any, Any, object]) -> object:
    # asyncio.run refuses to nest; a thread already running a loop hands the coroutine to a helper thread.
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coroutine)
    context = contextvars.copy_context()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="glue-async") as pool:
        return pool.submit(context.run, asyncio.run, coroutine).result()


@dataclass(slots=True)
class Dispatcher:
    # Calls step/hook bodies against the scenario world under a deadline.
    log_sink: object | None = None

    def invoke(
        self,
        body: Callable[..., Any],
        args: Sequence[object],
        world: World,
        *,
        timeout_ms: int = 0,
    ) -> object:
        delegate = WorldDelegate(world, body)
        positional, kwargs = bind_arguments(body, args, delegate)

        def _call() -> object:
            with activated(delegate):
                result = body(*positional, **kwargs)
                if inspect.iscoroutine(result):
                    result = _drive(result)
                return result

        try:
            return run_with_timeout(_call, timeout_ms)
        except InvocationWrapperError as exc:
            # Report what the body raised, not the worker-boundary wrapper.
            raise exc.cause from None
        except GlueTimeoutError:
            # The abandoned worker must not reach into later scenarios.
            delegate.detach()
            emit_log(
                self.log_sink,
                level="warning",
                message="invoke.timeout",
                fields={"body": getattr(body, "__qualname__", repr(body)), "timeout_ms": timeout_ms},
            )
            raise
