from __future__ import annotations

import inspect
from decimal import Decimal

import pytest

from glue_kernel.kernel.types import ArgumentConversionError, TypeRegistry


def test_builtin_converters() -> None:
    registry = TypeRegistry()
    assert registry.convert("3", int) == 3
    assert registry.convert("2.5", float) == 2.5
    assert registry.convert("10.10", Decimal) == Decimal("10.10")
    assert registry.convert("yes", bool) is True
    assert registry.convert("off", bool) is False


def test_unannotated_and_none_values_pass_through() -> None:
    registry = TypeRegistry()
    assert registry.convert("raw", inspect.Parameter.empty) == "raw"
    assert registry.convert(None, int) is None


def test_unknown_types_pass_through_raw_text() -> None:
    class Colour:
        pass

    assert TypeRegistry().convert("red", Colour) == "red"


def test_registered_converter_is_used() -> None:
    class Colour:
        def __init__(self, name: str) -> None:
            self.name = name

    registry = TypeRegistry()
    registry.register(Colour, Colour)
    converted = registry.convert("red", Colour)
    assert isinstance(converted, Colour)
    assert converted.name == "red"


def test_failed_conversion_raises_explicit_error() -> None:
    with pytest.raises(ArgumentConversionError):
        TypeRegistry().convert("many", int)
