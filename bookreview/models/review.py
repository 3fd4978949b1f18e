"""
Book Review Service — Review SQLAlchemy Model
==============================================

What:  ORM model representing the `reviews` base table.
Who:   Used by ReviewService for the ownership lookup, insert and update.

Constraints:
    - book_id references books.id and is NOT NULL
    - rating is an integer in 1..5 (CHECK)
    - UNIQUE(book_id, reviewer_id): at most one review per user per book.
      The submission flow treats a violation of this constraint on insert
      as "the user already has a review" and takes the update path.

Lifecycle:
    Created or updated by the review submission flow; never deleted here.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from bookreview.database import Base

MIN_RATING = 1
MAX_RATING = 5

ANONYMOUS_REVIEWER = "Anonymous"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Review(Base):
    """One user's rating and review text for one book."""

    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
    )

    review_text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    reviewer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    reviewer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

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
        CheckConstraint(
            f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}",
            name="ck_reviews_rating_range",
        ),
        CheckConstraint("length(trim(review_text)) > 0", name="ck_reviews_text_not_blank"),
        UniqueConstraint("book_id", "reviewer_id", name="uq_reviews_book_reviewer"),
        Index("idx_reviews_book_created_at", "book_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Review(id={self.id}, book_id={self.book_id}, "
            f"reviewer_id='{self.reviewer_id}', rating={self.rating})>"
        )
