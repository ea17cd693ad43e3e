from __future__ import annotations

from dataclasses import dataclass, field

from glue_kernel.loader.resources import (
    CLASSPATH_SCHEME,
    Resource,
    ResourceLoader,
    ResourceResolutionError,
    package_name,
)
from glue_kernel.loader.scripts import (
    GlueScript,
    ScriptBinding,
    ScriptUnit,
    compile_source,
    compiled_unit,
    find_descendants,
)
from glue_kernel.observability.logging import emit_log

DEFAULT_SCRIPT_SUFFIX = ".glue.py"


class GlueLoadError(RuntimeError):
    # Adapter-level load failure; the underlying cause is chained.
    pass


@dataclass(slots=True)
class ScriptLoader:
    # Discovers script units under glue paths and runs each one at most once.
    binding: ScriptBinding
    resource_loader: ResourceLoader = field(default_factory=ResourceLoader)
    script_suffix: str = DEFAULT_SCRIPT_SUFFIX
    log_sink: object | None = None
    _executed: set[object] = field(default_factory=set)

    def load(self, glue_paths: list[str]) -> None:
        for glue_path in glue_paths:
            for resource in self._resolve(glue_path):
                self.run_if_new(self._parse(resource))
            for script_cls in self._scan(glue_path):
                if script_cls in self._executed:
                    continue
                self._run_compiled(self._instantiate(script_cls))

    def run_if_new(self, unit: ScriptUnit) -> bool:
        # Errors raised by the unit itself propagate; load() decides how to report them.
        if not unit.runnable or unit.identity in self._executed:
            return False
        unit.run()
        self._executed.add(unit.identity)
        emit_log(
            self.log_sink,
            level="debug",
            message="glue.script_executed",
            fields={"origin": unit.origin},
        )
        return True

    @property
    def executed(self) -> frozenset[object]:
        return frozenset(self._executed)

    def _resolve(self, glue_path: str) -> list[Resource]:
        # Filesystem first; an unresolvable path is retried once through the classpath scheme.
        try:
            return self.resource_loader.resources(glue_path, self.script_suffix)
        except ResourceResolutionError as first:
            if glue_path.startswith(CLASSPATH_SCHEME):
                raise GlueLoadError(f"Cannot resolve glue path: {glue_path}") from first
            try:
                return self.resource_loader.resources(CLASSPATH_SCHEME + glue_path, self.script_suffix)
            except ResourceResolutionError as exc:
                raise GlueLoadError(f"Cannot resolve glue path: {glue_path}") from exc

    def _parse(self, resource: Resource) -> ScriptUnit:
        try:
            return compile_source(resource, self.binding)
        except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as exc:
            raise GlueLoadError(f"Failed to compile glue script: {resource.absolute_path}") from exc

    def _instantiate(self, script_cls: type[GlueScript]) -> ScriptUnit:
        try:
            return compiled_unit(script_cls, self.binding)
        except Exception as exc:  # noqa: BLE001 - constructor failures are load failures
            raise GlueLoadError(f"Failed to instantiate glue script: {script_cls.__qualname__}") from exc

    def _run_compiled(self, unit: ScriptUnit) -> None:
        # Unlike source scripts, a compiled unit failing in run() is a load failure.
        try:
            self.run_if_new(unit)
        except Exception as exc:  # noqa: BLE001 - wrapped with the cause chained
            raise GlueLoadError(f"Failed to run glue script: {unit.origin}") from exc

    def _scan(self, glue_path: str) -> list[type[GlueScript]]:
        package = package_name(glue_path)
        try:
            return find_descendants(GlueScript, package)
        except Exception as exc:  # noqa: BLE001 - any import failure is a load failure
            raise GlueLoadError(f"Failed to scan glue package: {package}") from exc
