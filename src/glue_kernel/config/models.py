from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Config models map the YAML sections to typed structures.


class GlueConfig(BaseModel):
    # Glue paths scanned at suite start and the suffix that marks source scripts.
    model_config = ConfigDict(extra="forbid")
    paths: list[str] = Field(default_factory=list)
    script_suffix: str = ".glue.py"

    @model_validator(mode="after")
    def _check_suffix(self) -> GlueConfig:
        # Source scripts must carry the scripting extension so locations can be captured.
        if not self.script_suffix.endswith(".py"):
            raise ValueError("glue.script_suffix must end with '.py'")
        if any(not path.strip() for path in self.paths):
            raise ValueError("glue.paths entries must be non-empty strings")
        return self


class LoggingConfig(BaseModel):
    # Structured backend log sink selection.
    model_config = ConfigDict(extra="forbid")
    sink: Literal["none", "stdout", "jsonl"] = "none"
    path: str | None = None

    @model_validator(mode="after")
    def _check_path(self) -> LoggingConfig:
        if self.sink == "jsonl" and not self.path:
            raise ValueError("logging.path is required for the jsonl sink")
        return self


class BackendConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    glue: GlueConfig = Field(default_factory=GlueConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
