"""Engine settings via pydantic-settings.

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  QUICK-START: which knobs exist?
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#
#  All settings read FIXTUREKIT_* env vars (or a local .env file):
#
#    FIXTUREKIT_UNKNOWN_FIELD_POLICY     reject | ignore      (default reject)
#    FIXTUREKIT_DUPLICATE_PRESET_POLICY  reject | overwrite   (default reject)
#    FIXTUREKIT_VALIDATE_INSTANCES       true | false         (default true)
#    FIXTUREKIT_DEFAULT_COLLECTION_SIZE  int >= 0             (default 1)
#    FIXTUREKIT_LOG_LEVEL                DEBUG | INFO | ...   (default INFO)
#    FIXTUREKIT_LOG_FORMAT               console | json       (default console)
#
#  Settings are read once per process. Factories take a ``FactoryPolicy``
#  snapshot at construction, so changing env vars mid-run has no effect on
#  factories that already exist.
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

UnknownFieldPolicy = Literal["reject", "ignore"]
DuplicatePresetPolicy = Literal["reject", "overwrite"]


class Settings(BaseSettings):
    """Typed configuration loaded from environment variables.

    Called by: ``FixtureContext`` (policy snapshot), ``configure_logging``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIXTUREKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Merge Policies ───────────────────────────────────────────────────────
    # reject → overrides naming undeclared fields raise DefinitionMismatchError
    # ignore → such keys are dropped and an `override_ignored` warning is logged
    unknown_field_policy: UnknownFieldPolicy = "reject"
    # reject    → re-registering a preset name raises DuplicatePresetError
    # overwrite → the new mapping replaces the old one, with a warning
    duplicate_preset_policy: DuplicatePresetPolicy = "reject"

    # Validate produced instances against their attached pydantic schema.
    validate_instances: bool = True

    # Size of a collection field when neither the definition nor the
    # caller names a count.
    default_collection_size: int = Field(default=1, ge=0)

    # ─── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


@dataclass(frozen=True)
class FactoryPolicy:
    """Immutable snapshot of the merge policies a factory was built with."""

    unknown_fields: UnknownFieldPolicy = "reject"
    duplicate_presets: DuplicatePresetPolicy = "reject"
    validate_instances: bool = True
    default_collection_size: int = 1

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> FactoryPolicy:
        settings = settings or get_settings()
        return cls(
            unknown_fields=settings.unknown_field_policy,
            duplicate_presets=settings.duplicate_preset_policy,
            validate_instances=settings.validate_instances,
            default_collection_size=settings.default_collection_size,
        )
