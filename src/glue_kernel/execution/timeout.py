from __future__ import annotations

import contextvars
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


class GlueTimeoutError(TimeoutError):
    # Raised when a body does not finish before its deadline.
    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"Timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class InvocationWrapperError(RuntimeError):
    # Carries a worker-side failure across the thread boundary; `cause` is what the body raised.
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause


@dataclass(slots=True)
class _Outcome(Generic[T]):
    # Completion and abandonment race on one lock so only one of them wins.
    done: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)
    abandoned: bool = False
    value: T | None = None
    error: BaseException | None = None

    def complete(self, value: T | None, error: BaseException | None) -> None:
        with self.lock:
            if self.abandoned:
                # Post-deadline result of an abandoned worker is discarded.
                return
            self.value = value
            self.error = error
            self.done.set()

    def abandon(self) -> bool:
        with self.lock:
            if self.done.is_set():
                return False
            self.abandoned = True
            return True


def run_with_timeout(call: Callable[[], T], timeout_ms: int, *, name: str = "glue-invoke") -> T:
    # timeout_ms <= 0 disables the deadline and runs on the caller's thread.
    if timeout_ms <= 0:
        return call()

    outcome: _Outcome[T] = _Outcome()
    context = contextvars.copy_context()
    # Daemon worker: an abandoned call must never hold up interpreter shutdown.
    worker = threading.Thread(target=_work, args=(context, call, outcome), name=name, daemon=True)
    worker.start()
    if not outcome.done.wait(timeout_ms / 1000.0) and outcome.abandon():
        raise GlueTimeoutError(timeout_ms)
    if outcome.error is not None:
        raise InvocationWrapperError(outcome.error)
    return outcome.value  # type: ignore[return-value]


def _work(context: contextvars.Context, call: Callable[[], T], outcome: _Outcome[T]) -> None:
    try:
        value = context.run(call)
    except BaseException as exc:  # noqa: BLE001 - ferried back to the waiting caller
        outcome.complete(None, exc)
        return
    outcome.complete(value, None)
