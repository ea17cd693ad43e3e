from __future__ import annotations

import importlib
import inspect
import pkgutil
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, TypeVar

from glue_kernel.loader.resources import Resource

T = TypeVar("T")

GLUE_VARIABLE = "glue"


@dataclass(slots=True)
class ScriptBinding:
    # The one mutable namespace shared by every script unit of a run.
    namespace: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.namespace.setdefault("__name__", "__glue__")

    @property
    def glue(self) -> Any:
        return self.namespace[GLUE_VARIABLE]

    def get(self, name: str, default: object = None) -> object:
        return self.namespace.get(name, default)

    def __getitem__(self, name: str) -> object:
        return self.namespace[name]

    def __setitem__(self, name: str, value: object) -> None:
        self.namespace[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self.namespace


class GlueScript(ABC):
    """Base class of compiled glue units discovered in importable packages.

    Concrete subclasses are instantiated with the run's shared binding and
    their ``run`` is executed once per backend. Unknown attribute reads fall
    through to the binding, so ``self.some_variable`` sees what source scripts
    defined earlier.
    """

    def __init__(self, binding: ScriptBinding) -> None:
        self.binding = binding

    @property
    def glue(self) -> Any:
        return self.binding.glue

    def __getattr__(self, name: str) -> object:
        binding = self.__dict__.get("binding")
        if binding is not None and name in binding:
            return binding[name]
        raise AttributeError(name)

    @abstractmethod
    def run(self) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ScriptUnit:
    # identity is the resolved source path or the compiled class; runnable is fixed at compile/scan time.
    identity: object
    origin: str
    runnable: bool
    run: Callable[[], object] = field(repr=False, compare=False)


def compile_source(resource: Resource, binding: ScriptBinding) -> ScriptUnit:
    # SyntaxError/OSError propagate to the loader, which wraps them.
    code = compile(resource.read_text(), resource.absolute_path, "exec")

    def _run() -> None:
        binding["__file__"] = resource.absolute_path
        exec(code, binding.namespace)

    return ScriptUnit(identity=resource.path, origin=resource.absolute_path, runnable=True, run=_run)


def compiled_unit(script_cls: type[GlueScript], binding: ScriptBinding) -> ScriptUnit:
    # Abstract subclasses are scanned but never runnable, so they are never instantiated.
    origin = f"{script_cls.__module__}.{script_cls.__qualname__}"
    if inspect.isabstract(script_cls):
        return ScriptUnit(identity=script_cls, origin=origin, runnable=False, run=lambda: None)
    script = script_cls(binding)
    return ScriptUnit(identity=script_cls, origin=origin, runnable=True, run=script.run)


def find_descendants(base: type[T], package: str) -> list[type[T]]:
    """Subclasses of ``base`` defined in ``package`` and its submodules.

    A package that does not exist yields nothing; any other import failure
    propagates. Order follows module name, then definition order.
    """
    root = _import_package(package)
    if root is None:
        return []
    modules: list[ModuleType] = [root]
    module_path = getattr(root, "__path__", None)
    if module_path is not None:
        for info in sorted(pkgutil.walk_packages(module_path, prefix=f"{root.__name__}."), key=lambda i: i.name):
            modules.append(importlib.import_module(info.name))

    found: list[type[T]] = []
    seen: set[type[T]] = set()
    for module in modules:
        for value in module.__dict__.values():
            if not inspect.isclass(value) or value is base or not issubclass(value, base):
                continue
            # Re-exports of a class defined elsewhere are not declarations of this package.
            if value.__module__ != module.__name__ or value in seen:
                continue
            seen.add(value)
            found.append(value)
    return found


def _import_package(package: str) -> ModuleType | None:
    if not package or not all(part.isidentifier() for part in package.split(".")):
        return None
    importlib.invalidate_caches()
    try:
        return importlib.import_module(package)
    except ModuleNotFoundError as exc:
        # Only a missing package itself (or a parent) counts as "nothing to scan".
        if exc.name is not None and (package == exc.name or package.startswith(exc.name + ".")):
            return None
        raise
