"""definitions.py — Declared field layouts for entities and responses.

A definition is the single source of truth for one shape: it enumerates
every field and gives each a concrete default. Defaults are either plain
values (deep-copied on every call) or one of the composition markers below,
which are resolved eagerly at call time:

    ref(factory, preset=None)              → one nested entity instance
    many(factory, count=None, preset=None) → an ordered list of instances
    derived(func)                          → computed from the built fields

``repeat(count, overrides)`` is the override-side counterpart of ``many``:
it asks the nested factory for ``count`` fresh items instead of passing a
pre-built list.

Called by: factory.py, response.py, context.py
Depends on: errors.py
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from fixturekit.errors import DefinitionMismatchError

if TYPE_CHECKING:
    from fixturekit.factory import ObjectFactory

ItemOverrides = Mapping[str, Any] | Callable[[int], Mapping[str, Any]] | None


# ─── Composition Markers ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Ref:
    """Default produced by another factory (optionally via one of its presets)."""

    factory: ObjectFactory
    preset: str | None = None

    def build(self) -> Any:
        if self.preset is None:
            return self.factory.create()
        return self.factory.create_from_preset(self.preset)


@dataclass(frozen=True)
class Many:
    """Default list of instances produced by another factory.

    ``count=None`` defers to the policy's ``default_collection_size``.
    """

    factory: ObjectFactory
    count: int | None = None
    preset: str | None = None

    def build(self, default_count: int) -> list[Any]:
        count = default_count if self.count is None else self.count
        return [Ref(self.factory, self.preset).build() for _ in range(count)]


@dataclass(frozen=True)
class Derived:
    """Field computed from the other fields after they are built."""

    func: Callable[[Mapping[str, Any]], Any]

    def compute(self, instance: Mapping[str, Any]) -> Any:
        return self.func(MappingProxyType(instance))


@dataclass(frozen=True)
class Repeat:
    """Override for a collection field: ``count`` items from its factory.

    ``overrides`` is applied to every item, or, when callable, called with
    the item index to produce that item's overrides.
    """

    count: int
    overrides: ItemOverrides = None

    def __post_init__(self) -> None:
        if self.count < 0:
            raise DefinitionMismatchError(
                f"repeat() count must be >= 0, got {self.count}",
                {"count": self.count},
            )

    def item_overrides(self, index: int) -> Mapping[str, Any] | None:
        if callable(self.overrides):
            return self.overrides(index)
        return self.overrides

    def build(self, factory: ObjectFactory) -> list[Any]:
        return [factory.create(self.item_overrides(i)) for i in range(self.count)]


def ref(factory: ObjectFactory, preset: str | None = None) -> Ref:
    return Ref(factory, preset)


def many(factory: ObjectFactory, count: int | None = None, preset: str | None = None) -> Many:
    return Many(factory, count, preset)


def derived(func: Callable[[Mapping[str, Any]], Any]) -> Derived:
    return Derived(func)


def repeat(count: int, overrides: ItemOverrides = None) -> Repeat:
    return Repeat(count, overrides)


# ─── Definitions ──────────────────────────────────────────────────────────────


class EntityDefinition:
    """Field layout of one domain entity.

    Args:
        name: Entity name (e.g. 'Book'). Used in errors and log events.
        fields: Field name → default. Order is preserved in instances.
        schema: Optional pydantic model the instances must satisfy. Its
            field set must equal the declared field set.
    """

    def __init__(
        self,
        name: str,
        fields: Mapping[str, Any],
        *,
        schema: type[BaseModel] | None = None,
    ) -> None:
        self.name = name
        self.fields: Mapping[str, Any] = MappingProxyType(dict(fields))
        self.schema = schema
        self._check_defaults()
        self._check_schema()

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self.fields)

    def extend(self, name: str | None = None, **fields: Any) -> EntityDefinition:
        """New definition with extra (or replaced) field defaults.

        The schema is not carried over since the field set changes.
        """
        return type(self)(name or self.name, {**self.fields, **fields})

    def _check_defaults(self) -> None:
        # `...` is how pydantic spells "required"; here every field needs a value.
        missing = [name for name, default in self.fields.items() if default is Ellipsis]
        if missing:
            raise DefinitionMismatchError(
                f"{self.name}: fields without a concrete default: {', '.join(missing)}",
                {"definition": self.name, "fields": missing},
            )

    def _check_schema(self) -> None:
        if self.schema is None:
            return
        declared = set(self.fields)
        modelled = set(self.schema.model_fields)
        if declared != modelled:
            raise DefinitionMismatchError(
                f"{self.name}: fields do not match schema {self.schema.__name__}",
                {
                    "definition": self.name,
                    "missing_from_definition": sorted(modelled - declared),
                    "missing_from_schema": sorted(declared - modelled),
                },
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, fields={list(self.fields)!r})"


class ResponseDefinition(EntityDefinition):
    """Field layout of an HTTP response body.

    Args:
        root: When set, the body is the value of this field alone (for
            routes whose body is a bare JSON array).
        status: When set, the body is wrapped as ``{"status": ..., "body": ...}``
            for transports that expect that split.
    """

    def __init__(
        self,
        name: str,
        fields: Mapping[str, Any],
        *,
        schema: type[BaseModel] | None = None,
        root: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(name, fields, schema=schema)
        if root is not None and root not in self.fields:
            raise DefinitionMismatchError(
                f"{name}: root field {root!r} is not declared",
                {"definition": name, "root": root},
            )
        self.root = root
        self.status = status

    def extend(self, name: str | None = None, **fields: Any) -> ResponseDefinition:
        return type(self)(
            name or self.name,
            {**self.fields, **fields},
            root=self.root,
            status=self.status,
        )
