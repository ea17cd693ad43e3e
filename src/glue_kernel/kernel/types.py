from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

Converter = Callable[[str], object]

_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


class ArgumentConversionError(ValueError):
    # Raised when a matched step argument cannot be converted to the declared type.
    pass


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _default_converters() -> dict[type[Any], Converter]:
    return {str: str, int: int, float: float, bool: _to_bool, Decimal: Decimal}


@dataclass(slots=True)
class TypeRegistry:
    # Converts captured step text into the types declared on step body parameters.
    _converters: dict[type[Any], Converter] = field(default_factory=_default_converters)

    def register(self, target: type[Any], converter: Converter) -> None:
        # Later registration overrides earlier ones, including built-ins.
        self._converters[target] = converter

    def convert(self, value: str | None, annotation: object) -> object:
        if value is None or annotation is inspect.Parameter.empty or annotation is Any:
            return value
        converter = self._converters.get(annotation) if isinstance(annotation, type) else None
        if converter is None:
            return value
        try:
            return converter(value)
        except (TypeError, ValueError, ArithmeticError) as exc:
            name = getattr(annotation, "__name__", str(annotation))
            raise ArgumentConversionError(f"Cannot convert {value!r} to {name}") from exc
