from .definitions import DEFAULT_HOOK_ORDER, HookDefinition, HookKind, Invoker, StepDefinition
from .glue import AmbiguousStepError, Glue, GlueTable
from .location import LocationError, SourceLocation, current_location
from .scenario import Scenario, ScenarioStatus
from .tags import TagPredicate, normalize_tags
from .types import ArgumentConversionError, TypeRegistry

# Kernel exports: definitions, glue sink and the value types they carry.
__all__ = [
    "DEFAULT_HOOK_ORDER",
    "AmbiguousStepError",
    "ArgumentConversionError",
    "Glue",
    "GlueTable",
    "HookDefinition",
    "HookKind",
    "Invoker",
    "LocationError",
    "Scenario",
    "ScenarioStatus",
    "SourceLocation",
    "StepDefinition",
    "TagPredicate",
    "TypeRegistry",
    "current_location",
    "normalize_tags",
]
