"""Fixture error hierarchy.

Every error raised by the composition engine derives from ``FixtureError``
and carries a stable ``code`` plus a ``details`` dict, so the HTTP fixture
server (and test output) can report them without parsing messages.

Errors are always raised synchronously at the call that detected them.
No factory ever returns a half-built instance.
"""

from __future__ import annotations

from typing import Any


class FixtureError(Exception):
    """Base class for all fixture composition errors."""

    code = "FIXTURE_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError subclasses would otherwise repr() the message.
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used in HTTP error bodies."""
        return {"code": self.code, "message": self.message, "details": self.details}


class DefinitionMismatchError(FixtureError):
    """Overrides (or a preset, or a schema) reference undeclared fields."""

    code = "DEFINITION_MISMATCH"


class UnknownPresetError(FixtureError, KeyError):
    """A preset name was requested that is not registered on the factory."""

    code = "UNKNOWN_PRESET"


class DuplicatePresetError(FixtureError):
    """A preset name is already registered on the factory (strict policy)."""

    code = "DUPLICATE_PRESET"


class CompositionError(FixtureError):
    """A nested entity required by a factory could not be produced."""

    code = "COMPOSITION_FAILED"


class UnknownConceptError(FixtureError, KeyError):
    """A bundle lookup named a concept that was never registered."""

    code = "UNKNOWN_CONCEPT"


class DuplicateConceptError(FixtureError):
    """A concept name was registered twice on the same context."""

    code = "DUPLICATE_CONCEPT"


class RegistryFrozenError(FixtureError):
    """Registration was attempted after the registration phase ended."""

    code = "REGISTRY_FROZEN"


class InstanceValidationError(FixtureError):
    """A produced instance does not satisfy its attached schema model."""

    code = "INSTANCE_INVALID"
