"""
Book Review Service — Aggregated Book View
===========================================

What:  Read-only mapping of the `books_with_ratings` view: every book column
       plus `average_rating` and `review_count` computed by the backend.
How:   A Core `Table` on its own MetaData, so `Base.metadata.create_all()`
       never creates it as a table. The view itself is created by the
       migration from BOOKS_WITH_RATINGS_DDL.
Who:   Queried by CatalogService (listing) and ReviewService (detail).

This codebase never computes aggregates itself. After any review mutation
the flows re-read this view.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Uuid,
)

view_metadata = MetaData()

books_with_ratings = Table(
    "books_with_ratings",
    view_metadata,
    Column("id", Uuid, primary_key=True),
    Column("title", String(500)),
    Column("author", String(255)),
    Column("genre", String(100)),
    Column("created_by", String(255)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Column("average_rating", Float),
    Column("review_count", Integer),
)

# Portable across PostgreSQL and SQLite: average is 0 when a book has no reviews
BOOKS_WITH_RATINGS_DDL = """
CREATE VIEW books_with_ratings AS
SELECT
    b.id,
    b.title,
    b.author,
    b.genre,
    b.created_by,
    b.created_at,
    b.updated_at,
    COALESCE(AVG(r.rating), 0) AS average_rating,
    COUNT(r.id) AS review_count
FROM books b
LEFT JOIN reviews r ON r.book_id = b.id
GROUP BY b.id, b.title, b.author, b.genre, b.created_by, b.created_at, b.updated_at
"""

DROP_BOOKS_WITH_RATINGS_DDL = "DROP VIEW IF EXISTS books_with_ratings"
