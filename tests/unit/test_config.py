"""Tests for engine configuration and logging setup."""

from __future__ import annotations

import pytest
import structlog
from pydantic import ValidationError

from fixturekit.config import FactoryPolicy, Settings
from fixturekit.context import FixtureContext
from fixturekit.log_config import configure_logging


def test_default_settings():
    """Settings should default to the strict policies."""
    settings = Settings(_env_file=None)
    assert settings.unknown_field_policy == "reject"
    assert settings.duplicate_preset_policy == "reject"
    assert settings.validate_instances is True
    assert settings.default_collection_size == 1
    assert settings.log_format == "console"


def test_env_vars_override_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FIXTUREKIT_UNKNOWN_FIELD_POLICY", "ignore")
    monkeypatch.setenv("FIXTUREKIT_DEFAULT_COLLECTION_SIZE", "3")
    settings = Settings(_env_file=None)
    assert settings.unknown_field_policy == "ignore"
    assert settings.default_collection_size == 3


def test_invalid_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, duplicate_preset_policy="merge")


def test_negative_collection_size_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_collection_size=-1)


def test_policy_snapshot_from_settings():
    settings = Settings(
        _env_file=None,
        unknown_field_policy="ignore",
        duplicate_preset_policy="overwrite",
        validate_instances=False,
        default_collection_size=2,
    )
    assert FactoryPolicy.from_settings(settings) == FactoryPolicy(
        unknown_fields="ignore",
        duplicate_presets="overwrite",
        validate_instances=False,
        default_collection_size=2,
    )


def test_context_uses_settings_policy():
    ctx = FixtureContext(Settings(_env_file=None, unknown_field_policy="ignore"))
    author = ctx.entity("Author", {"id": None})
    assert author(nonExistentField=1) == {"id": None}


def test_configure_logging_json():
    try:
        configure_logging(Settings(_env_file=None, log_format="json", log_level="warning"))
        config = structlog.get_config()
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()
