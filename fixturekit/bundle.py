"""bundle.py — One read-only namespace per domain concept.

A bundle removes per-test imports: instead of importing ``BookFactory``,
``BookPresets`` and ``BooksPageResponseFactory`` separately, a test reads

    bundle.Book.factory(title="Dune")
    bundle.Book.presets.Hobbit
    bundle.Book.Response.factory()
    bundle.Book.Response.presets.Empty

Every lookup is a dict access with no side effects. Unknown concepts raise
``UnknownConceptError`` and unknown presets raise ``UnknownPresetError``;
nothing falls back to a default.

Called by: context.py, server.py, tests
Depends on: factory.py, presets.py, response.py
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import structlog

from fixturekit.errors import DuplicateConceptError, UnknownConceptError
from fixturekit.factory import ObjectFactory
from fixturekit.presets import PresetRegistry
from fixturekit.response import ResponseFactory

logger = structlog.get_logger()


class PresetNamespace:
    """Attribute and item access over a preset registry.

    ``ns.Hobbit`` and ``ns["Hobbit"]`` both return the stored override
    mapping, ready to pass to the owning factory.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: PresetRegistry) -> None:
        object.__setattr__(self, "_registry", registry)

    def __getattr__(self, name: str) -> Mapping[str, Any]:
        # Dunder/private probes (copy, pickle, pytest) must see AttributeError.
        if name.startswith("_"):
            raise AttributeError(name)
        return self._registry.resolve(name)

    def __getitem__(self, name: str) -> Mapping[str, Any]:
        return self._registry.resolve(name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("preset namespaces are read-only")

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def __iter__(self) -> Iterator[str]:
        return iter(self._registry)

    def __len__(self) -> int:
        return len(self._registry)

    def names(self) -> tuple[str, ...]:
        return self._registry.names()

    def __repr__(self) -> str:
        return f"PresetNamespace({self._registry.factory_name!r}, {list(self.names())!r})"


@dataclass(frozen=True)
class ResponseEntry:
    """Response-level factory and presets for one concept."""

    factory: ResponseFactory
    presets: PresetNamespace

    def create(self, preset: str | None = None, overrides: Any = None) -> Any:
        if preset is None:
            return self.factory.create(overrides)
        return self.factory.create_from_preset(preset, overrides)


@dataclass(frozen=True)
class BundleEntry:
    """Object-level factory and presets for one concept, plus its response."""

    name: str
    factory: ObjectFactory
    presets: PresetNamespace
    response: ResponseEntry | None = None

    @property
    def Response(self) -> ResponseEntry:  # noqa: N802
        if self.response is None:
            raise UnknownConceptError(
                f"{self.name} has no response factory",
                {"concept": self.name},
            )
        return self.response

    @property
    def has_response(self) -> bool:
        return self.response is not None

    def create(self, preset: str | None = None, overrides: Mapping[str, Any] | None = None) -> Any:
        if preset is None:
            return self.factory.create(overrides)
        return self.factory.create_from_preset(preset, overrides)


class Bundle(Mapping[str, BundleEntry]):
    """Read-only concept name → ``BundleEntry`` mapping."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[BundleEntry]) -> None:
        table: dict[str, BundleEntry] = {}
        for entry in entries:
            if entry.name in table:
                raise DuplicateConceptError(
                    f"concept {entry.name!r} appears twice in the bundle",
                    {"concept": entry.name},
                )
            table[entry.name] = entry
        object.__setattr__(self, "_entries", MappingProxyType(table))

    def __getitem__(self, concept: str) -> BundleEntry:
        try:
            return self._entries[concept]
        except KeyError:
            raise UnknownConceptError(
                f"no concept named {concept!r}",
                {"concept": concept, "available": sorted(self._entries)},
            ) from None

    def __getattr__(self, concept: str) -> BundleEntry:
        if concept.startswith("_"):
            raise AttributeError(concept)
        return self[concept]

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("bundles are read-only")

    def __contains__(self, concept: object) -> bool:
        return concept in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def respond(
        self,
        concept: str,
        preset: str | None = None,
        overrides: Any = None,
    ) -> Any:
        """Body for an intercepted request: the transport-facing entry point.

        Uses the concept's response factory when it has one, else its
        object factory.
        """
        entry = self[concept]
        if entry.has_response:
            body = entry.Response.create(preset, overrides)
        else:
            body = entry.create(preset, overrides)
        logger.debug("fixture_served", concept=concept, preset=preset, overridden=bool(overrides))
        return body

    def __repr__(self) -> str:
        return f"Bundle({list(self._entries)!r})"


def build_bundle(
    triples: Iterable[tuple[str, ObjectFactory, PresetRegistry | None]],
    *,
    responses: Mapping[str, ResponseFactory] | None = None,
) -> Bundle:
    """Build a bundle from ``(concept, factory, presets)`` triples.

    Args:
        triples: One per concept. ``presets`` may be None to use the
            factory's own registry.
        responses: Optional concept → response factory map.
    """
    responses = dict(responses or {})
    entries = []
    for concept, factory, presets in triples:
        response = responses.pop(concept, None)
        entries.append(
            BundleEntry(
                name=concept,
                factory=factory,
                presets=PresetNamespace(presets if presets is not None else factory.presets),
                response=(
                    ResponseEntry(response, PresetNamespace(response.presets))
                    if response is not None else None
                ),
            )
        )
    if responses:
        raise UnknownConceptError(
            f"response factories for unregistered concepts: {', '.join(sorted(responses))}",
            {"concepts": sorted(responses)},
        )

    bundle = Bundle(entries)
    logger.info("bundle_built", concepts=list(bundle))
    return bundle
