"""Pydantic v2 schemas for the sample library API bodies."""

from __future__ import annotations

from pydantic import BaseModel, Field

# ─── Entities ──────────────────────────────────────────────────────────────────


class AuthorRead(BaseModel):
    id: int | None
    name: str
    born: int | None


class ReviewRead(BaseModel):
    id: int | None
    rating: int = Field(..., ge=1, le=5)
    body: str


class BookRead(BaseModel):
    id: int | None
    title: str
    isbn: str
    author: AuthorRead
    tags: list[str]


# ─── Responses ─────────────────────────────────────────────────────────────────


class BooksPage(BaseModel):
    items: list[BookRead]
    total: int
    page: int
    next: str | None


class BookReviews(BaseModel):
    book: BookRead
    reviews: list[ReviewRead]
    review_count: int
    average_rating: float | None
