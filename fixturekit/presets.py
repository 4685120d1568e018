"""presets.py — Named override sets bound to one factory.

Stored mappings are frozen all the way down (nested dicts become
read-only mappings, lists become ``FrozenList`` tuples), so ``resolve()``
can hand out the same object every time without any test being able to
change it. Factories thaw the values into fresh lists and dicts on use.

A preset captures a commonly expected variant ("a book with a known
author", "an empty page") once, so tests ask for it by name instead of
rebuilding the same overrides. The same registry class serves object
factories and response factories.

Write discipline:
    - Writes (register, freeze) are serialized by a lock.
    - Each write publishes a brand-new read-only name table in a single
      reference swap, so readers never lock and never see half an update.
    - After ``freeze()`` the registry rejects writes for good.

Called by: factory.py (every factory owns one), bundle.py, context.py
Depends on: config.py, errors.py
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import structlog

from fixturekit.errors import DuplicatePresetError, RegistryFrozenError, UnknownPresetError

if TYPE_CHECKING:
    from fixturekit.factory import ObjectFactory

logger = structlog.get_logger()


class FrozenList(tuple):
    """Read-only list stored inside a preset; thawed back to ``list`` on use."""

    __slots__ = ()


def freeze_value(value: Any) -> Any:
    """Read-only copy of ``value`` all the way down.

    Mappings become ``MappingProxyType`` and lists become ``FrozenList``.
    Other values are deep-copied.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_value(item) for key, item in value.items()})
    if isinstance(value, list | FrozenList):
        return FrozenList(freeze_value(item) for item in value)
    return copy.deepcopy(value)


def thaw_value(value: Any) -> Any:
    """Fresh mutable copy of a value produced by ``freeze_value``.

    Plain tuples a caller passed in are left as tuples.
    """
    if isinstance(value, MappingProxyType):
        return {key: thaw_value(item) for key, item in value.items()}
    if isinstance(value, FrozenList):
        return [thaw_value(item) for item in value]
    if isinstance(value, dict):
        return {key: thaw_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [thaw_value(item) for item in value]
    return value


@dataclass(frozen=True)
class Preset:
    """A named, read-only override mapping for one factory."""

    name: str
    factory_name: str
    overrides: Mapping[str, Any]


class PresetRegistry:
    """Preset table for a single factory."""

    def __init__(self, factory: ObjectFactory) -> None:
        self._factory = factory
        self._presets: Mapping[str, Preset] = MappingProxyType({})
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def factory_name(self) -> str:
        return self._factory.name

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, name: str, overrides: Mapping[str, Any] | None = None, /, **fields: Any) -> Preset:
        """Register ``name`` with its override mapping.

        Keys are always checked against the factory's declared fields, even
        under the ``ignore`` policy: a preset typo is a load-time bug.

        Raises:
            DefinitionMismatchError: a key is not a declared field.
            DuplicatePresetError: name taken and the policy is ``reject``.
            RegistryFrozenError: the registration phase is over.
        """
        mapping = self._factory.check_overrides({**(overrides or {}), **fields}, strict=True)
        preset = Preset(
            name=name,
            factory_name=self.factory_name,
            overrides=freeze_value(mapping),
        )

        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"{self.factory_name}: cannot register preset {name!r} after freeze",
                    {"factory": self.factory_name, "preset": name},
                )
            if name in self._presets:
                if self._factory.policy.duplicate_presets == "reject":
                    raise DuplicatePresetError(
                        f"{self.factory_name}: preset {name!r} is already registered",
                        {"factory": self.factory_name, "preset": name},
                    )
                logger.warning("preset_overwritten", factory=self.factory_name, preset=name)
            table = dict(self._presets)
            table[name] = preset
            self._presets = MappingProxyType(table)

        logger.debug("preset_registered", factory=self.factory_name, preset=name)
        return preset

    def get(self, name: str) -> Preset:
        try:
            return self._presets[name]
        except KeyError:
            raise UnknownPresetError(
                f"{self.factory_name}: no preset named {name!r}",
                {"factory": self.factory_name, "preset": name, "available": sorted(self._presets)},
            ) from None

    def resolve(self, name: str) -> Mapping[str, Any]:
        """Return the stored override mapping, unchanged on every call."""
        return self.get(name).overrides

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    def names(self) -> tuple[str, ...]:
        return tuple(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets

    def __iter__(self) -> Iterator[str]:
        return iter(self._presets)

    def __len__(self) -> int:
        return len(self._presets)

    def __repr__(self) -> str:
        return f"PresetRegistry({self.factory_name!r}, presets={list(self._presets)!r})"
