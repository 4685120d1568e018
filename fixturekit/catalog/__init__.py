"""Sample fixture catalog for a small library API.

Contents:
    schemas.py  — Pydantic models the produced bodies are validated against
    library.py  — Entities, responses and presets registered on a context

Called by: tests, and as a worked example for new fixture modules
"""

from fixturekit.catalog.library import build_library_context

__all__ = ["build_library_context"]
