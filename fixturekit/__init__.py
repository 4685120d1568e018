"""fixturekit — composable mock API bodies for end-to-end frontend tests.

Replaces one-static-file-per-variant fixtures with factories that build
data on demand from a single definition per entity.

Contents:
    definitions.py  — Entity/response field layouts and composition markers
    factory.py      — Object factories (merge: override wins, else default)
    presets.py      — Named override sets per factory
    response.py     — Response factories composed from object factories
    bundle.py       — Read-only per-concept namespace over all of the above
    context.py      — Registration phase and freezing into a bundle
    server.py       — Optional FastAPI router serving bundle bodies
    config.py       — pydantic-settings configuration
    errors.py       — Error hierarchy
"""

from fixturekit.bundle import Bundle, BundleEntry, PresetNamespace, ResponseEntry, build_bundle
from fixturekit.config import FactoryPolicy, Settings, get_settings
from fixturekit.context import FixtureContext
from fixturekit.definitions import (
    EntityDefinition,
    ResponseDefinition,
    derived,
    many,
    ref,
    repeat,
)
from fixturekit.errors import (
    CompositionError,
    DefinitionMismatchError,
    DuplicateConceptError,
    DuplicatePresetError,
    FixtureError,
    InstanceValidationError,
    RegistryFrozenError,
    UnknownConceptError,
    UnknownPresetError,
)
from fixturekit.factory import ObjectFactory
from fixturekit.presets import Preset, PresetRegistry
from fixturekit.response import ResponseFactory

__version__ = "0.1.0"

__all__ = [
    "Bundle",
    "BundleEntry",
    "CompositionError",
    "DefinitionMismatchError",
    "DuplicateConceptError",
    "DuplicatePresetError",
    "EntityDefinition",
    "FactoryPolicy",
    "FixtureContext",
    "FixtureError",
    "InstanceValidationError",
    "ObjectFactory",
    "Preset",
    "PresetNamespace",
    "PresetRegistry",
    "RegistryFrozenError",
    "ResponseDefinition",
    "ResponseEntry",
    "ResponseFactory",
    "Settings",
    "UnknownConceptError",
    "UnknownPresetError",
    "build_bundle",
    "derived",
    "get_settings",
    "many",
    "ref",
    "repeat",
]
