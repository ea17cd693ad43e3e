from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

SCRIPT_EXTENSION = ".py"
_PACKAGE_ROOT = Path(__file__).resolve().parents[1]


class LocationError(RuntimeError):
    # Raised when a definition is registered from a stack without any glue script frame.
    pass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    # Where a step/hook was declared (captured at registration time).
    path: str
    line: int

    @property
    def file_name(self) -> str:
        return Path(self.path).name

    def format(self, detail: bool = False) -> str:
        return f"{self.path if detail else self.file_name}:{self.line}"

    def __str__(self) -> str:
        return self.format()


def current_location(*, skip: int = 1) -> SourceLocation:
    # Innermost caller frame that belongs to a script file outside this package.
    frame = sys._getframe(skip)
    while frame is not None:
        filename = frame.f_code.co_filename
        if _is_script_file(filename):
            return SourceLocation(path=filename, line=frame.f_lineno)
        frame = frame.f_back
    raise LocationError("Couldn't find location for step definition")


def _is_script_file(filename: str | None) -> bool:
    if not filename or not filename.endswith(SCRIPT_EXTENSION):
        return False
    try:
        resolved = Path(filename).resolve()
    except OSError:
        return False
    return not resolved.is_relative_to(_PACKAGE_ROOT)
