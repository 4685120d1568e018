"""End-to-end walkthrough of the Book/Author examples.

Mirrors how a test suite uses the engine: register once, freeze, then ask
the bundle for defaults, overrides, presets and list bodies.
"""

from __future__ import annotations

import pytest

from fixturekit.bundle import Bundle
from fixturekit.config import FactoryPolicy, Settings
from fixturekit.context import FixtureContext
from fixturekit.definitions import many
from fixturekit.errors import UnknownPresetError


@pytest.fixture
def books(settings: Settings, policy: FactoryPolicy) -> Bundle:
    ctx = FixtureContext(settings, policy=policy)
    author = ctx.entity("Author", {"id": None, "name": ""})
    author_preset = ctx.preset(author, "AuthorPreset", id=7, name="Frank Herbert")

    book = ctx.entity("Book", {"id": None, "title": "", "author": {}})
    ctx.preset(
        book,
        "BookPreset",
        id=1000,
        title="Preset Book Title",
        author=author(author_preset),
    )
    ctx.response("Book", "BooksListResponse", {"items": many(book)}, root="items")
    return ctx.freeze()


def test_book_defaults(books: Bundle):
    assert books.Book.factory() == {"id": None, "title": "", "author": {}}


def test_book_title_override(books: Bundle):
    assert books.Book.factory({"title": "Dune"}) == {"id": None, "title": "Dune", "author": {}}


def test_book_preset(books: Bundle):
    preset = books.Book.presets.BookPreset
    assert books.Book.factory(preset) == {
        "id": 1000,
        "title": "Preset Book Title",
        "author": {"id": 7, "name": "Frank Herbert"},
    }
    assert books.Book.factory(preset)["author"] == books.Author.factory(books.Author.presets.AuthorPreset)


def test_books_list_defaults_to_one_default_book(books: Bundle):
    assert books.Book.Response.factory() == [books.Book.factory()]


def test_unknown_book_preset(books: Bundle):
    with pytest.raises(UnknownPresetError):
        books.Book.presets.UnknownName
