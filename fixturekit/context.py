"""context.py — The registration phase, owned by one explicit object.

A ``FixtureContext`` is built once per test process. Fixture modules
declare entities, responses and presets on it; ``freeze()`` then ends the
registration phase, verifies every factory and preset builds, and returns
the read-only ``Bundle`` tests use. Nothing lives in module-level mutable
state, so two contexts never interfere.

Usage:
    ctx = FixtureContext()
    author = ctx.entity("Author", {"id": None, "name": ""})
    book = ctx.entity("Book", {"id": None, "title": "", "author": ref(author)})
    ctx.preset(book, "Dune", title="Dune")
    ctx.response("Book", "BooksList", {"items": many(book)}, root="items")
    bundle = ctx.freeze()

Called by: catalog/, tests/conftest.py, apps mounting server.py
Depends on: config.py, definitions.py, factory.py, response.py, bundle.py
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel

from fixturekit.bundle import Bundle, build_bundle
from fixturekit.config import FactoryPolicy, Settings, get_settings
from fixturekit.definitions import EntityDefinition, ResponseDefinition
from fixturekit.errors import (
    DuplicateConceptError,
    RegistryFrozenError,
    UnknownConceptError,
)
from fixturekit.factory import ObjectFactory
from fixturekit.presets import Preset
from fixturekit.response import ResponseFactory

logger = structlog.get_logger()


class FixtureContext:
    """Holds every factory of one test process until it is frozen."""

    def __init__(self, settings: Settings | None = None, *, policy: FactoryPolicy | None = None) -> None:
        self.settings = settings or get_settings()
        self.policy = policy or FactoryPolicy.from_settings(self.settings)
        self._entities: dict[str, ObjectFactory] = {}
        self._responses: dict[str, ResponseFactory] = {}
        self._lock = threading.Lock()
        self._bundle: Bundle | None = None

    @property
    def frozen(self) -> bool:
        return self._bundle is not None

    # ─── Registration ─────────────────────────────────────────────────────────

    def entity(
        self,
        name: str,
        fields: Mapping[str, Any],
        *,
        schema: type[BaseModel] | None = None,
    ) -> ObjectFactory:
        """Declare an entity and return its factory. The name is the concept."""
        factory = ObjectFactory(EntityDefinition(name, fields, schema=schema), policy=self.policy)
        return self.add_entity(factory)

    def add_entity(self, factory: ObjectFactory) -> ObjectFactory:
        with self._lock:
            self._ensure_open(factory.name)
            if factory.name in self._entities:
                raise DuplicateConceptError(
                    f"concept {factory.name!r} is already registered",
                    {"concept": factory.name},
                )
            self._entities[factory.name] = factory
        logger.debug("entity_registered", concept=factory.name, fields=list(factory.field_names))
        return factory

    def response(
        self,
        concept: str,
        name: str,
        fields: Mapping[str, Any],
        *,
        schema: type[BaseModel] | None = None,
        root: str | None = None,
        status: int | None = None,
    ) -> ResponseFactory:
        """Declare the response body served for ``concept``."""
        definition = ResponseDefinition(name, fields, schema=schema, root=root, status=status)
        return self.add_response(concept, ResponseFactory(definition, policy=self.policy))

    def add_response(self, concept: str, factory: ResponseFactory) -> ResponseFactory:
        with self._lock:
            self._ensure_open(factory.name)
            if concept not in self._entities:
                raise UnknownConceptError(
                    f"declare entity {concept!r} before its response",
                    {"concept": concept},
                )
            if concept in self._responses:
                raise DuplicateConceptError(
                    f"concept {concept!r} already has a response factory",
                    {"concept": concept},
                )
            self._responses[concept] = factory
        logger.debug("response_registered", concept=concept, response=factory.name)
        return factory

    def preset(
        self,
        factory: ObjectFactory,
        name: str,
        overrides: Mapping[str, Any] | None = None,
        /,
        **fields: Any,
    ) -> Mapping[str, Any]:
        """Register a preset on ``factory`` and return its stored mapping.

        The returned mapping can be used straight away in other presets,
        e.g. ``author=author_factory(tolkien)``.
        """
        with self._lock:
            self._ensure_open(name)
            preset: Preset = factory.presets.register(name, overrides, **fields)
        return preset.overrides

    # ─── Lookup ───────────────────────────────────────────────────────────────

    def factory(self, concept: str) -> ObjectFactory:
        try:
            return self._entities[concept]
        except KeyError:
            raise UnknownConceptError(
                f"no concept named {concept!r}",
                {"concept": concept, "available": sorted(self._entities)},
            ) from None

    # ─── Freezing ─────────────────────────────────────────────────────────────

    def freeze(self, *, verify: bool = True) -> Bundle:
        """End the registration phase and return the bundle.

        With ``verify`` every default and every preset is built once, so a
        broken fixture registry stops the suite before any test runs.
        Calling again returns the same bundle. Preset tables are closed
        before verification, so they stay closed even when it fails.
        """
        with self._lock:
            if self._bundle is not None:
                return self._bundle
            factories: list[ObjectFactory] = [*self._entities.values(), *self._responses.values()]
            for factory in factories:
                factory.presets.freeze()
            if verify:
                for factory in factories:
                    _verify(factory)
            self._bundle = build_bundle(
                ((concept, factory, factory.presets) for concept, factory in self._entities.items()),
                responses=self._responses,
            )

        logger.info(
            "registry_frozen",
            concepts=len(self._entities),
            responses=len(self._responses),
            presets=sum(len(factory.presets) for factory in factories),
        )
        return self._bundle

    @property
    def bundle(self) -> Bundle:
        """The frozen bundle (freezes on first access)."""
        return self.freeze()

    def _ensure_open(self, name: str) -> None:
        if self._bundle is not None:
            raise RegistryFrozenError(
                f"cannot register {name!r}: the fixture context is frozen",
                {"name": name},
            )


def _verify(factory: ObjectFactory) -> None:
    factory.create()
    for name in factory.presets:
        factory.create_from_preset(name)
