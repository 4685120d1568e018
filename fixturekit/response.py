"""response.py — Response factories: HTTP bodies composed from entities.

A response factory never lists entity fields itself. It only holds
``ref``/``many`` markers pointing at object factories, plus response-only
fields (counts, pagination, links). Adding a field to an entity therefore
changes no response definition: the new field simply flows through the
nested factory's output.

Collection fields take either an explicit list of pre-built instances or a
``repeat(count, overrides)`` request. Left alone, they hold
``default_collection_size`` (1 unless configured) default instances.

Called by: bundle.py, context.py, server.py
Depends on: factory.py, definitions.py
"""

from __future__ import annotations

from typing import Any

from fixturekit.config import FactoryPolicy
from fixturekit.definitions import Repeat, ResponseDefinition
from fixturekit.factory import ObjectFactory


class ResponseFactory(ObjectFactory):
    """Produces response bodies for one ``ResponseDefinition``.

    Shares the merge rules of ``ObjectFactory``; only the final shaping
    differs (bare-array root, optional ``status``/``body`` envelope).
    """

    kind = "response"
    definition: ResponseDefinition

    def __init__(self, definition: ResponseDefinition, *, policy: FactoryPolicy | None = None) -> None:
        super().__init__(definition, policy=policy)

    @property
    def enveloped(self) -> bool:
        return self.definition.status is not None

    def create(self, overrides: Any = None, /, **fields: Any) -> Any:
        """Build one body.

        For bare-array responses the overrides may also be the collection
        itself (a list of instances or a ``repeat()`` request).
        """
        root = self.definition.root
        if root is not None and isinstance(overrides, list | tuple | Repeat):
            overrides = {root: overrides}
        return super().create(overrides, **fields)

    def create_from_preset(self, preset: str, overrides: Any = None, /, **fields: Any) -> Any:
        root = self.definition.root
        if root is not None and isinstance(overrides, list | tuple | Repeat):
            overrides = {root: overrides}
        return super().create_from_preset(preset, overrides, **fields)

    def _finalize(self, instance: dict[str, Any]) -> Any:
        body: Any = instance
        if self.definition.root is not None:
            body = instance[self.definition.root]
        if self.enveloped:
            return {"status": self.definition.status, "body": body}
        return body

