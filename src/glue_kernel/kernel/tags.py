from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from cucumber_tag_expressions import parse


def normalize_tags(tags: Iterable[object]) -> frozenset[str]:
    # Host runners hand over tags as strings or pickle-tag objects with a `name`.
    normalized: set[str] = set()
    for tag in tags:
        name = tag if isinstance(tag, str) else getattr(tag, "name", None)
        if not isinstance(name, str) or not name:
            raise TypeError(f"Unsupported tag value: {tag!r}")
        normalized.add(name if name.startswith("@") else f"@{name}")
    return frozenset(normalized)


@dataclass(frozen=True, slots=True)
class TagPredicate:
    # Boolean tag expression evaluated by the cucumber tag-expression engine.
    expression: str | None = None
    _compiled: object | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        text = (self.expression or "").strip()
        object.__setattr__(self, "expression", text or None)
        object.__setattr__(self, "_compiled", parse(text) if text else None)

    @classmethod
    def of(cls, value: TagPredicate | str | None) -> TagPredicate:
        if isinstance(value, TagPredicate):
            return value
        if value is not None and not isinstance(value, str):
            raise TypeError("tag predicate must be a tag expression string or TagPredicate")
        return cls(value)

    def matches(self, tags: Iterable[object]) -> bool:
        # An absent expression matches every scenario.
        if self._compiled is None:
            return True
        return bool(self._compiled.evaluate(sorted(normalize_tags(tags))))  # type: ignore[attr-defined]
