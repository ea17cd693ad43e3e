from __future__ import annotations

from dataclasses import dataclass

import pytest

from glue_kernel.kernel.tags import TagPredicate, normalize_tags


@dataclass(frozen=True)
class PickleTag:
    name: str


def test_absent_expression_matches_every_tag_set() -> None:
    # No predicate means the hook applies unconditionally.
    predicate = TagPredicate()
    assert predicate.matches([]) is True
    assert predicate.matches(["@a", "@b"]) is True


def test_blank_expression_is_treated_as_absent() -> None:
    predicate = TagPredicate("   ")
    assert predicate.expression is None
    assert predicate.matches(["@anything"]) is True


def test_expression_is_evaluated_against_tag_set() -> None:
    predicate = TagPredicate("@a and not @b")
    assert predicate.matches(["@a"]) is True
    assert predicate.matches(["@a", "@b"]) is False
    assert predicate.matches(["@c"]) is False


def test_tags_without_at_sign_and_pickle_tags_are_normalized() -> None:
    # Host runners may hand over bare names or tag objects exposing `name`.
    predicate = TagPredicate("@smoke or @wip")
    assert predicate.matches(["smoke"]) is True
    assert predicate.matches([PickleTag("@wip")]) is True
    assert normalize_tags(["a", "@b", PickleTag("c")]) == frozenset({"@a", "@b", "@c"})


def test_of_accepts_strings_predicates_and_none() -> None:
    existing = TagPredicate("@x")
    assert TagPredicate.of(existing) is existing
    assert TagPredicate.of("@y").expression == "@y"
    assert TagPredicate.of(None).expression is None
    with pytest.raises(TypeError):
        TagPredicate.of(42)  # type: ignore[arg-type]


def test_unsupported_tag_values_are_rejected() -> None:
    with pytest.raises(TypeError):
        normalize_tags([3])
