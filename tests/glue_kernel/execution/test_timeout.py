from __future__ import annotations

import threading
import time

import pytest

from glue_kernel.execution.timeout import GlueTimeoutError, InvocationWrapperError, run_with_timeout


def test_zero_or_negative_timeout_runs_inline() -> None:
    # No deadline: the call runs on the caller's own thread.
    caller = threading.get_ident()
    assert run_with_timeout(lambda: threading.get_ident(), 0) == caller
    assert run_with_timeout(lambda: threading.get_ident(), -5) == caller


def test_inline_failure_is_not_wrapped() -> None:
    def boom() -> None:
        raise KeyError("inline")

    with pytest.raises(KeyError):
        run_with_timeout(boom, 0)


def test_result_is_returned_before_deadline() -> None:
    assert run_with_timeout(lambda: 42, 1000) == 42


def test_worker_failure_is_wrapped_with_body_exception() -> None:
    error = ValueError("worker")

    def boom() -> None:
        raise error

    with pytest.raises(InvocationWrapperError) as excinfo:
        run_with_timeout(boom, 1000)
    assert excinfo.value.cause is error


def test_deadline_raises_timeout_within_margin() -> None:
    # The caller never waits for the blocked body beyond the deadline.
    release = threading.Event()
    started = time.monotonic()
    with pytest.raises(GlueTimeoutError) as excinfo:
        run_with_timeout(lambda: release.wait(5), 50)
    elapsed = time.monotonic() - started
    release.set()
    assert excinfo.value.timeout_ms == 50
    assert isinstance(excinfo.value, TimeoutError)
    assert elapsed < 1.0


def test_late_result_of_abandoned_worker_is_discarded() -> None:
    release = threading.Event()
    finished = threading.Event()
    produced: list[str] = []

    def slow() -> str:
        release.wait(5)
        produced.append("late")
        finished.set()
        return "late"

    with pytest.raises(GlueTimeoutError):
        run_with_timeout(slow, 20)
    release.set()
    assert finished.wait(5)
    # A fresh invocation is unaffected by the abandoned one.
    assert run_with_timeout(lambda: "fresh", 1000) == "fresh"
    assert produced == ["late"]
