from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from glue_kernel.kernel.tags import normalize_tags


class ScenarioStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


@dataclass(slots=True)
class Scenario:
    # Per-scenario context handed to before/after hooks by the host runner.
    name: str
    tags: frozenset[str] = field(default_factory=frozenset)
    uri: str | None = None
    line: int | None = None
    status: ScenarioStatus = ScenarioStatus.PASSED
    entries: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.tags = normalize_tags(self.tags)

    @classmethod
    def tagged(cls, name: str, tags: Iterable[object]) -> Scenario:
        return cls(name=name, tags=normalize_tags(tags))

    def log(self, text: str) -> None:
        # Log entries are append-only in order of occurrence.
        self.entries.append(text)

    def mark_failed(self) -> None:
        self.status = ScenarioStatus.FAILED

    @property
    def is_failed(self) -> bool:
        return self.status is ScenarioStatus.FAILED
