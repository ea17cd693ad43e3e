from __future__ import annotations

import inspect
from pathlib import Path

import pytest

from glue_kernel.kernel import location as location_module
from glue_kernel.kernel.location import LocationError, SourceLocation, current_location


def test_current_location_points_at_calling_script_frame() -> None:
    # The innermost frame outside the package is the caller in this file.
    found = current_location()
    expected_line = inspect.currentframe().f_lineno - 1  # type: ignore[union-attr]
    assert Path(found.path).resolve() == Path(__file__).resolve()
    assert found.line == expected_line
    assert str(found) == f"test_location.py:{expected_line}"


def test_location_formats_file_name_or_full_path() -> None:
    location = SourceLocation(path="/work/features/steps/bank.glue.py", line=12)
    assert location.format() == "bank.glue.py:12"
    assert location.format(detail=True) == "/work/features/steps/bank.glue.py:12"
    assert location.file_name == "bank.glue.py"


def test_missing_script_frame_is_a_location_error(monkeypatch: pytest.MonkeyPatch) -> None:
    # With no frame carrying the scripting extension the registration is a misuse.
    monkeypatch.setattr(location_module, "SCRIPT_EXTENSION", ".feature")
    with pytest.raises(LocationError):
        current_location()
