from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from glue_kernel.config.models import BackendConfig


class ConfigError(ValueError):
    # Raised for an unreadable or invalid backend config (fail fast).
    pass


def load_yaml_config(path: Path) -> dict[str, object]:
    # Raw mapping; an empty file is an empty config.
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    return raw


def load_backend_config(path: Path) -> BackendConfig:
    raw = load_yaml_config(path)
    try:
        return BackendConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid backend config {path}: {exc}") from exc
