"""factory.py — Object factories: one fresh entity instance per call.

Merge rule: for every declared field, the override wins, else the default.
The merge is shallow. A nested entity field is replaced wholesale by its
override, which must be a fully formed instance (every field of the nested
entity present); partial mappings are rejected, never deep-merged.

Every returned value is independently owned: plain defaults and override
values are deep-copied, nested defaults come from fresh nested factory
calls. Mutating an instance never reaches the definition, a preset, or any
other instance.

Called by: response.py, presets.py, bundle.py, context.py
Depends on: definitions.py, presets.py, config.py, errors.py
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from fixturekit.config import FactoryPolicy
from fixturekit.definitions import Derived, EntityDefinition, Many, Ref, Repeat
from fixturekit.errors import (
    CompositionError,
    DefinitionMismatchError,
    FixtureError,
    InstanceValidationError,
)
from fixturekit.presets import PresetRegistry, thaw_value

logger = structlog.get_logger()


class ObjectFactory:
    """Produces instances of one ``EntityDefinition``.

    Usage:
        book = ObjectFactory(book_definition)
        book()                         # defaults
        book({"title": "Dune"})        # mapping overrides
        book(title="Dune")             # keyword overrides
        book.create_from_preset("Hobbit", id=7)
    """

    kind = "entity"

    def __init__(self, definition: EntityDefinition, *, policy: FactoryPolicy | None = None) -> None:
        self.definition = definition
        self.policy = policy or FactoryPolicy.from_settings()
        self.presets = PresetRegistry(self)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def field_names(self) -> tuple[str, ...]:
        return self.definition.field_names

    def __call__(self, overrides: Mapping[str, Any] | None = None, /, **fields: Any) -> Any:
        return self.create(overrides, **fields)

    def create(self, overrides: Mapping[str, Any] | None = None, /, **fields: Any) -> Any:
        """Build one instance from defaults and overrides."""
        merged = self.check_overrides(_combine(overrides, fields))
        instance = self._build(merged)
        self._validate(instance)
        return self._finalize(instance)

    def create_from_preset(
        self,
        preset: str,
        overrides: Mapping[str, Any] | None = None,
        /,
        **fields: Any,
    ) -> Any:
        """Build from a named preset; explicit overrides win over the preset."""
        base = self.presets.resolve(preset)
        return self.create({**base, **_combine(overrides, fields)})

    def check_overrides(self, overrides: Mapping[str, Any], *, strict: bool = False) -> dict[str, Any]:
        """Apply the unknown-field policy and return the usable overrides.

        ``strict=True`` rejects unknown keys regardless of policy (used when
        registering presets, which must fail fast at load time).
        """
        unknown = [key for key in overrides if key not in self.definition.fields]
        if not unknown:
            return dict(overrides)
        if strict or self.policy.unknown_fields == "reject":
            raise DefinitionMismatchError(
                f"{self.name}: unknown fields {', '.join(sorted(unknown))}",
                {"definition": self.name, "unknown_fields": sorted(unknown)},
            )
        logger.warning("override_ignored", definition=self.name, fields=sorted(unknown))
        return {key: value for key, value in overrides.items() if key not in unknown}

    # ─── Building ─────────────────────────────────────────────────────────────

    def _build(self, overrides: Mapping[str, Any]) -> dict[str, Any]:
        instance: dict[str, Any] = {}
        pending: list[tuple[str, Derived]] = []

        for field, default in self.definition.fields.items():
            if field in overrides:
                instance[field] = self._resolve_override(field, default, overrides[field])
            elif isinstance(default, Derived):
                instance[field] = None  # keeps declaration order
                pending.append((field, default))
            else:
                instance[field] = self._resolve_default(field, default)

        for field, rule in pending:
            try:
                value = rule.compute(instance)
            except FixtureError:
                raise
            except Exception as exc:
                raise CompositionError(
                    f"{self.name}.{field}: derived value failed: {exc}",
                    {"definition": self.name, "field": field},
                ) from exc
            instance[field] = copy.deepcopy(value)
        return instance

    def _resolve_default(self, field: str, default: Any) -> Any:
        if isinstance(default, Ref):
            return self._nested(field, default.factory, default.build)
        if isinstance(default, Many):
            size = self.policy.default_collection_size
            return self._nested(field, default.factory, lambda: default.build(size))
        return copy.deepcopy(default)

    def _resolve_override(self, field: str, default: Any, value: Any) -> Any:
        value = thaw_value(value)
        if isinstance(value, Repeat):
            if not isinstance(default, Many):
                raise DefinitionMismatchError(
                    f"{self.name}.{field}: repeat() only applies to collection fields",
                    {"definition": self.name, "field": field},
                )
            return self._nested(field, default.factory, lambda: value.build(default.factory))

        if isinstance(default, Ref):
            value = self._check_whole(field, default.factory, value)
        elif isinstance(default, Many) and isinstance(value, list | tuple):
            value = [self._check_whole(field, default.factory, item) for item in value]
        return copy.deepcopy(value)

    def _check_whole(self, field: str, nested: ObjectFactory, value: Any) -> Any:
        """Return ``value`` as a full nested instance under the unknown-field policy."""
        # Non-mapping values (None, pre-serialized ids) pass through untouched.
        if not isinstance(value, Mapping) or nested.kind != "entity":
            return value
        value = nested.check_overrides(value)
        missing = [name for name in nested.field_names if name not in value]
        if missing:
            raise DefinitionMismatchError(
                f"{self.name}.{field}: expected a full {nested.name} instance, "
                f"missing {', '.join(missing)}",
                {"definition": self.name, "field": field, "missing_fields": missing},
            )
        return value

    def _nested(self, field: str, nested: ObjectFactory, build: Any) -> Any:
        try:
            return build()
        except FixtureError as exc:
            if isinstance(exc, CompositionError):
                raise
            raise CompositionError(
                f"{self.name}.{field}: could not build nested {nested.name}: {exc.message}",
                {"definition": self.name, "field": field, "nested": nested.name, "cause": exc.code},
            ) from exc
        except Exception as exc:
            raise CompositionError(
                f"{self.name}.{field}: could not build nested {nested.name}: {exc}",
                {"definition": self.name, "field": field, "nested": nested.name, "cause": type(exc).__name__},
            ) from exc

    def _validate(self, instance: dict[str, Any]) -> None:
        schema = self.definition.schema
        if schema is None or not self.policy.validate_instances:
            return
        try:
            schema.model_validate(instance)
        except ValidationError as exc:
            raise InstanceValidationError(
                f"{self.name}: instance does not match {schema.__name__}",
                {
                    "definition": self.name,
                    "errors": exc.errors(include_url=False, include_context=False, include_input=False),
                },
            ) from exc

    def _finalize(self, instance: dict[str, Any]) -> Any:
        return instance

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def _combine(overrides: Mapping[str, Any] | None, fields: Mapping[str, Any]) -> dict[str, Any]:
    if overrides is None:
        return dict(fields)
    if not isinstance(overrides, Mapping):
        raise DefinitionMismatchError(
            f"overrides must be a mapping, got {type(overrides).__name__}",
            {"type": type(overrides).__name__},
        )
    return {**overrides, **fields}
