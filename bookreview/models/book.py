"""
Book Review Service — Book SQLAlchemy Model
============================================

What:  ORM model representing the `books` base table (the catalog entity).
How:   Inherits from DeclarativeBase; Alembic mirrors it in migrations.
Who:   Used by BookService for inserts and by CatalogService for the
       DISTINCT filter-option queries.

Lifecycle:
    Created by the book creation flow; never updated or deleted by this
    codebase. `created_by` records the creating user for information only;
    no ownership rule is enforced here.

Aggregates (average rating, review count) are NOT columns of this table.
They are read from the `books_with_ratings` view (see book_with_ratings.py).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from bookreview.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Book(Base):
    """A book in the catalog."""

    __tablename__ = "books"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier (UUID)",
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    genre: Mapped[str] = mapped_column(String(100), nullable=False)

    # Opaque user id issued by the external auth provider
    created_by: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Auth provider id of the user who added the book (informational)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("length(trim(title)) > 0", name="ck_books_title_not_blank"),
        CheckConstraint("length(trim(author)) > 0", name="ck_books_author_not_blank"),
        CheckConstraint("length(trim(genre)) > 0", name="ck_books_genre_not_blank"),
        Index("idx_books_created_at", created_at.desc()),
        Index("idx_books_genre", "genre"),
        Index("idx_books_author", "author"),
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', author='{self.author}')>"
