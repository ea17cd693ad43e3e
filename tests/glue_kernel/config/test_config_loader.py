from __future__ import annotations

from pathlib import Path

import pytest

from glue_kernel.config.loader import ConfigError, load_backend_config, load_yaml_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "glue.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_full_config_is_parsed(tmp_path: Path) -> None:
    # Both sections map onto typed models.
    path = _write(
        tmp_path,
        """
glue:
  paths: [steps, "classpath:acme.glue"]
  script_suffix: .steps.py
logging:
  sink: jsonl
  path: logs/glue.jsonl
""",
    )
    config = load_backend_config(path)
    assert config.glue.paths == ["steps", "classpath:acme.glue"]
    assert config.glue.script_suffix == ".steps.py"
    assert config.logging.sink == "jsonl"
    assert config.logging.path == "logs/glue.jsonl"


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    # An empty document is an empty mapping, so every default applies.
    config = load_backend_config(_write(tmp_path, ""))
    assert config.glue.paths == []
    assert config.glue.script_suffix == ".glue.py"
    assert config.logging.sink == "none"


def test_root_must_be_a_mapping(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="mapping"):
        load_yaml_config(_write(tmp_path, "- steps\n- hooks\n"))


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    # Typos fail fast instead of being silently ignored.
    with pytest.raises(ConfigError):
        load_backend_config(_write(tmp_path, "glue:\n  pathz: [steps]\n"))


def test_jsonl_sink_requires_a_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="logging.path"):
        load_backend_config(_write(tmp_path, "logging:\n  sink: jsonl\n"))


def test_script_suffix_must_be_a_python_extension(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="script_suffix"):
        load_backend_config(_write(tmp_path, "glue:\n  script_suffix: .feature\n"))


def test_blank_glue_path_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="glue.paths"):
        load_backend_config(_write(tmp_path, "glue:\n  paths: ['  ']\n"))
