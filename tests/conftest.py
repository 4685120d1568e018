"""Global pytest fixtures."""

from __future__ import annotations

import pytest

from fixturekit.bundle import Bundle
from fixturekit.catalog import build_library_context
from fixturekit.config import FactoryPolicy, Settings
from fixturekit.context import FixtureContext


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only (no .env file)."""
    return Settings(_env_file=None)


@pytest.fixture
def policy() -> FactoryPolicy:
    """Default strict policy: reject unknown fields and duplicate presets."""
    return FactoryPolicy()


@pytest.fixture
def library_context(settings: Settings) -> FixtureContext:
    """Unfrozen sample library registry."""
    return build_library_context(settings)


@pytest.fixture
def bundle(library_context: FixtureContext) -> Bundle:
    """Frozen sample library bundle."""
    return library_context.freeze()
