"""Tests for bundles (bundle.py) using the sample library catalog."""

from __future__ import annotations

import pytest

from fixturekit.bundle import Bundle, build_bundle
from fixturekit.config import FactoryPolicy
from fixturekit.definitions import EntityDefinition, ResponseDefinition
from fixturekit.errors import DuplicateConceptError, UnknownConceptError, UnknownPresetError
from fixturekit.factory import ObjectFactory
from fixturekit.response import ResponseFactory


class TestLookup:
    def test_attribute_and_item_access_agree(self, bundle: Bundle):
        assert bundle.Book is bundle["Book"]
        assert bundle.Book.presets.Hobbit is bundle["Book"].presets["Hobbit"]

    def test_factory_from_bundle(self, bundle: Bundle):
        assert bundle.Book.factory(title="Dune")["title"] == "Dune"

    def test_preset_passes_straight_to_factory(self, bundle: Bundle):
        hobbit = bundle.Book.factory(bundle.Book.presets.Hobbit)
        assert hobbit["title"] == "The Hobbit"
        assert hobbit["author"]["name"] == "J. R. R. Tolkien"

    def test_unknown_preset(self, bundle: Bundle):
        with pytest.raises(UnknownPresetError):
            bundle.Book.presets.UnknownName

    def test_unknown_concept(self, bundle: Bundle):
        with pytest.raises(UnknownConceptError):
            bundle.Publisher
        with pytest.raises(UnknownConceptError):
            bundle["Publisher"]

    def test_mapping_protocol(self, bundle: Bundle):
        assert list(bundle) == ["Author", "Book", "Review"]
        assert "Book" in bundle
        assert "Publisher" not in bundle
        assert bundle.get("Publisher") is None
        assert len(bundle) == 3

    def test_response_entry(self, bundle: Bundle):
        body = bundle.Book.Response.factory()
        assert body["total"] == len(body["items"]) == 1
        assert "Empty" in bundle.Book.Response.presets

    def test_preset_names(self, bundle: Bundle):
        assert bundle.Book.presets.names() == ("Hobbit", "Untitled")
        assert bundle.Book.Response.presets.names() == ("Empty", "HasNextPage")


class TestReadOnly:
    def test_bundle_rejects_assignment(self, bundle: Bundle):
        with pytest.raises(AttributeError):
            bundle.Book = None

    def test_preset_namespace_rejects_assignment(self, bundle: Bundle):
        with pytest.raises(AttributeError):
            bundle.Book.presets.Hobbit = {}

    def test_entry_is_frozen(self, bundle: Bundle):
        with pytest.raises(AttributeError):
            bundle.Book.factory = None

    def test_nested_preset_values_cannot_be_mutated(self, bundle: Bundle):
        hobbit = bundle.Book.presets.Hobbit
        with pytest.raises(AttributeError):
            hobbit["tags"].append("horror")
        with pytest.raises(TypeError):
            hobbit["author"]["name"] = "Someone Else"

        built = bundle.Book.factory(hobbit)
        assert built["tags"] == ["fantasy", "classic"]
        assert built["author"]["name"] == "J. R. R. Tolkien"
        built["tags"].append("horror")
        built["author"]["name"] = "Someone Else"
        assert bundle.Book.factory(hobbit)["tags"] == ["fantasy", "classic"]


class TestRespond:
    def test_uses_response_factory_when_present(self, bundle: Bundle):
        body = bundle.respond("Book", "Empty")
        assert body == {"items": [], "total": 0, "page": 1, "next": None}

    def test_enveloped_bare_array(self, bundle: Bundle):
        body = bundle.respond("Author")
        assert body["status"] == 200
        assert body["body"] == [bundle.Author.factory()]

    def test_overrides_flow_through(self, bundle: Bundle):
        body = bundle.respond("Book", overrides={"page": 3})
        assert body["page"] == 3

    def test_unknown_preset_is_not_defaulted(self, bundle: Bundle):
        with pytest.raises(UnknownPresetError):
            bundle.respond("Book", "Nope")


class TestBuildBundle:
    def _factory(self, name: str, policy: FactoryPolicy) -> ObjectFactory:
        return ObjectFactory(EntityDefinition(name, {"id": None}), policy=policy)

    def test_entity_without_response(self, policy: FactoryPolicy):
        tag = self._factory("Tag", policy)
        built = build_bundle([("Tag", tag, None)])

        assert built.Tag.has_response is False
        assert built.respond("Tag") == {"id": None}
        with pytest.raises(UnknownConceptError):
            built.Tag.Response

    def test_response_for_unknown_concept_rejected(self, policy: FactoryPolicy):
        tag = self._factory("Tag", policy)
        orphan = ResponseFactory(ResponseDefinition("Orphan", {"x": 1}), policy=policy)
        with pytest.raises(UnknownConceptError):
            build_bundle([("Tag", tag, None)], responses={"Label": orphan})

    def test_duplicate_concept_rejected(self, policy: FactoryPolicy):
        tag = self._factory("Tag", policy)
        with pytest.raises(DuplicateConceptError):
            build_bundle([("Tag", tag, None), ("Tag", tag, None)])
