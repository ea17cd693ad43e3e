from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

CLASSPATH_SCHEME = "classpath:"


class ResourceResolutionError(ValueError):
    # Raised when one resolution strategy cannot resolve a glue path.
    pass


@dataclass(frozen=True, slots=True)
class Resource:
    # One addressable script source discovered under a glue path.
    path: Path

    @property
    def absolute_path(self) -> str:
        return str(self.path)

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")


def package_name(glue_path: str) -> str:
    # "classpath:features/steps" and "features/steps" both name package "features.steps".
    stripped = glue_path[len(CLASSPATH_SCHEME):] if glue_path.startswith(CLASSPATH_SCHEME) else glue_path
    return stripped.strip("/").replace("/", ".")


@dataclass(frozen=True, slots=True)
class ResourceLoader:
    # Filesystem paths resolve against `root`; classpath paths against every sys.path entry.
    root: Path | None = None

    def resources(self, glue_path: str, suffix: str) -> list[Resource]:
        if glue_path.startswith(CLASSPATH_SCHEME):
            return self._classpath_resources(glue_path[len(CLASSPATH_SCHEME):], suffix)
        return self._filesystem_resources(glue_path, suffix)

    def _filesystem_resources(self, glue_path: str, suffix: str) -> list[Resource]:
        base = self.root if self.root is not None else Path.cwd()
        candidate = Path(glue_path)
        if not candidate.is_absolute():
            candidate = base / candidate
        if not candidate.exists():
            raise ResourceResolutionError(f"Not a file or directory: {candidate}")
        return [Resource(path) for path in _collect(candidate, suffix)]

    def _classpath_resources(self, relative: str, suffix: str) -> list[Resource]:
        relative = relative.strip("/")
        found: list[Resource] = []
        seen: set[Path] = set()
        resolved_any = False
        for entry in sys.path:
            # An empty sys.path entry stands for the current directory.
            candidate = Path(entry or ".") / relative
            if not candidate.exists():
                continue
            resolved_any = True
            for path in _collect(candidate, suffix):
                if path in seen:
                    continue
                seen.add(path)
                found.append(Resource(path))
        if not resolved_any:
            raise ResourceResolutionError(f"Not found on sys.path: {CLASSPATH_SCHEME}{relative}")
        return found


def _collect(candidate: Path, suffix: str) -> list[Path]:
    # Deterministic order: sorted by path within a root.
    if candidate.is_file():
        return [candidate.resolve()] if candidate.name.endswith(suffix) else []
    return sorted(path.resolve() for path in candidate.rglob(f"*{suffix}") if path.is_file())
