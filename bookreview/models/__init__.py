"""ORM models for the base tables and the read-only aggregate view."""

from bookreview.models.book import Book
from bookreview.models.book_with_ratings import books_with_ratings
from bookreview.models.review import Review

__all__ = ["Book", "Review", "books_with_ratings"]
