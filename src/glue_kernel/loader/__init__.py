from .loader import DEFAULT_SCRIPT_SUFFIX, GlueLoadError, ScriptLoader
from .resources import CLASSPATH_SCHEME, Resource, ResourceLoader, ResourceResolutionError, package_name
from .scripts import GlueScript, ScriptBinding, ScriptUnit, compile_source, compiled_unit, find_descendants

__all__ = [
    "CLASSPATH_SCHEME",
    "DEFAULT_SCRIPT_SUFFIX",
    "GlueLoadError",
    "GlueScript",
    "Resource",
    "ResourceLoader",
    "ResourceResolutionError",
    "ScriptBinding",
    "ScriptLoader",
    "ScriptUnit",
    "compile_source",
    "compiled_unit",
    "find_descendants",
    "package_name",
]
