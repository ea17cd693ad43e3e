from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class LogMessage:
    # Structured log payload emitted by the backend lifecycle.
    level: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    fields: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.level or not self.message:
            raise ValueError("LogMessage requires non-empty level/message")


@runtime_checkable
class LogSink(Protocol):
    def emit(self, message: LogMessage) -> None:
        raise NotImplementedError("LogSink.emit must be implemented")


class StdoutLogSink:
    # Compact JSON lines on stdout.
    def emit(self, message: LogMessage) -> None:
        print(json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str))


class JsonlLogSink:
    # File-backed structured log sink; one JSON object per line.
    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")

    def emit(self, message: LogMessage) -> None:
        payload = json.dumps(_log_to_dict(message), separators=(",", ":"), ensure_ascii=False, default=str)
        self._file.write(payload + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()


@dataclass(slots=True)
class MemoryLogSink:
    # Keeps every message in order; used by hosts that assert on backend events.
    messages: list[LogMessage] = field(default_factory=list)

    def emit(self, message: LogMessage) -> None:
        self.messages.append(message)

    def names(self) -> list[str]:
        return [item.message for item in self.messages]


def emit_log(
    sink: object | None,
    *,
    level: str,
    message: str,
    fields: dict[str, object] | None = None,
) -> None:
    # Logging never breaks glue execution: a missing or failing sink is ignored.
    emit = getattr(sink, "emit", None)
    if not callable(emit):
        return
    try:
        emit(
            LogMessage(
                level=level,
                message=message,
                timestamp=datetime.now(tz=UTC),
                fields={} if fields is None else dict(fields),
            )
        )
    except Exception:
        return


def close_log_sink(sink: object | None) -> None:
    close = getattr(sink, "close", None)
    if callable(close):
        close()


def _log_to_dict(message: LogMessage) -> dict[str, object]:
    return {
        "level": message.level,
        "message": message.message,
        "timestamp": message.timestamp.isoformat().replace("+00:00", "Z"),
        "fields": message.fields,
    }
