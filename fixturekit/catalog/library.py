"""library.py — Sample fixture registry for a small library API.

Declares three entities (Author, Book, Review), their presets, and the
response bodies the frontend receives:

    GET /books                → BooksPage    (concept Book)
    GET /authors              → AuthorsList  (concept Author: bare array in a status/body envelope)
    GET /books/{id}/reviews   → BookReviews  (concept Review)

Presets are the variants the UI actually branches on: a known book, an
empty page, a page with a next link, a book nobody reviewed.

Called by: tests/conftest.py
Depends on: context.py, definitions.py, catalog/schemas.py
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fixturekit.catalog.schemas import AuthorRead, BookRead, BookReviews, BooksPage, ReviewRead
from fixturekit.config import Settings
from fixturekit.context import FixtureContext
from fixturekit.definitions import derived, many, ref, repeat


def _average_rating(body: Mapping[str, Any]) -> float | None:
    ratings = [review["rating"] for review in body["reviews"]]
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings), 2)


def build_library_context(settings: Settings | None = None) -> FixtureContext:
    """Register the library fixtures on a fresh, unfrozen context."""
    ctx = FixtureContext(settings)

    # ─── Entities ─────────────────────────────────────────────────────────────

    author = ctx.entity(
        "Author",
        {"id": None, "name": "", "born": None},
        schema=AuthorRead,
    )
    tolkien = ctx.preset(author, "Tolkien", id=1, name="J. R. R. Tolkien", born=1892)
    ctx.preset(author, "Anonymous", name="Anonymous")

    book = ctx.entity(
        "Book",
        {"id": None, "title": "", "isbn": "", "author": ref(author), "tags": []},
        schema=BookRead,
    )
    ctx.preset(
        book,
        "Hobbit",
        id=1000,
        title="The Hobbit",
        isbn="978-0-261-10295-4",
        author=author(tolkien),
        tags=["fantasy", "classic"],
    )
    ctx.preset(book, "Untitled", id=1001)

    review = ctx.entity(
        "Review",
        {"id": None, "rating": 3, "body": ""},
        schema=ReviewRead,
    )
    ctx.preset(review, "Glowing", rating=5, body="Could not put it down.")
    ctx.preset(review, "Scathing", rating=1, body="Dull from start to finish.")

    # ─── Responses ────────────────────────────────────────────────────────────

    books_page = ctx.response(
        "Book",
        "BooksPage",
        {
            "items": many(book),
            "total": derived(lambda body: len(body["items"])),
            "page": 1,
            "next": None,
        },
        schema=BooksPage,
    )
    ctx.preset(books_page, "Empty", items=[])
    ctx.preset(books_page, "HasNextPage", items=repeat(20), total=45, next="/books?page=2")

    ctx.response(
        "Author",
        "AuthorsList",
        {"items": many(author)},
        root="items",
        status=200,
    )

    book_reviews = ctx.response(
        "Review",
        "BookReviews",
        {
            "book": ref(book, preset="Hobbit"),
            "reviews": many(review, count=2),
            "review_count": derived(lambda body: len(body["reviews"])),
            "average_rating": derived(_average_rating),
        },
        schema=BookReviews,
    )
    ctx.preset(book_reviews, "NoReviews", reviews=[])

    return ctx
