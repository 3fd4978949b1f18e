"""Create books, reviews and the books_with_ratings view

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  The catalog schema: `books`, `reviews` (one per user per book) and
       the `books_with_ratings` view that computes each book's average
       rating and review count.
How:   PostgreSQL UUID primary keys with gen_random_uuid() defaults,
       TIMESTAMP WITH TIME ZONE columns, CHECK and UNIQUE constraints.

Rollback: downgrade() drops the view, then both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from bookreview.models.book_with_ratings import (
    BOOKS_WITH_RATINGS_DDL,
    DROP_BOOKS_WITH_RATINGS_DDL,
)

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("genre", sa.String(100), nullable=False),
        sa.Column(
            "created_by",
            sa.String(255),
            nullable=True,
            comment="Auth provider id of the user who added the book (informational)",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.CheckConstraint("length(trim(title)) > 0", name="ck_books_title_not_blank"),
        sa.CheckConstraint("length(trim(author)) > 0", name="ck_books_author_not_blank"),
        sa.CheckConstraint("length(trim(genre)) > 0", name="ck_books_genre_not_blank"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Default catalog order is newest first
    op.create_index("idx_books_created_at", "books", [sa.text("created_at DESC")])
    # Exact-match filters and the DISTINCT filter-option queries
    op.create_index("idx_books_genre", "books", ["genre"])
    op.create_index("idx_books_author", "books", ["author"])

    op.create_table(
        "reviews",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("book_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("review_text", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("reviewer_id", sa.String(255), nullable=False),
        sa.Column("reviewer_name", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["book_id"], ["books.id"], ondelete="CASCADE"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        sa.CheckConstraint("length(trim(review_text)) > 0", name="ck_reviews_text_not_blank"),
        sa.UniqueConstraint("book_id", "reviewer_id", name="uq_reviews_book_reviewer"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Detail view lists a book's reviews newest first
    op.create_index(
        "idx_reviews_book_created_at",
        "reviews",
        ["book_id", sa.text("created_at DESC")],
    )

    op.execute(BOOKS_WITH_RATINGS_DDL)


def downgrade() -> None:
    """Drop the view first; it depends on both tables."""
    op.execute(DROP_BOOKS_WITH_RATINGS_DDL)
    op.drop_index("idx_reviews_book_created_at", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("idx_books_author", table_name="books")
    op.drop_index("idx_books_genre", table_name="books")
    op.drop_index("idx_books_created_at", table_name="books")
    op.drop_table("books")
