"""
Book Review Service — Book Detail & Review Flow
================================================

What:  Loads one book with its reviews, and records a user's review of it
       (create the first time, update afterwards).
How:   Reads the aggregated view for the book, the `reviews` table for the
       list, and looks up the user's own review by (book_id, reviewer_id).
Who:   Called by GET /api/books/{id} and POST /api/books/{id}/reviews.

Submission Flow:
    ┌──────────┐   ┌───────────────┐   ┌──────────────────┐   ┌───────────┐
    │ Validate │──▶│ Own review?   │──▶│ UPDATE by id     │──▶│ Re-read   │
    │ text,    │   │ (book, user)  │   │   or INSERT      │   │ book view │
    │ rating   │   └───────────────┘   └──────────────────┘   │ + reviews │
    └──────────┘                                              └───────────┘

    - Validation failures never reach the database.
    - UNIQUE(book_id, reviewer_id) backs the "one review per user per book"
      rule. If an INSERT loses a race against another submission from the
      same user, the violation is turned into the UPDATE path.
    - Aggregates are never derived locally: after the write, the book row is
      re-read from the view and the review list is re-read from the table.
    - Failures surface the backend's message (or a generic fallback). No retry.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookreview.exceptions import (
    BookReviewError,
    DatabaseError,
    NotFoundError,
    ValidationError,
    backend_message,
)
from bookreview.models.book_with_ratings import books_with_ratings
from bookreview.models.review import ANONYMOUS_REVIEWER, Review
from bookreview.presenters.book_card import build_book_detail
from bookreview.presenters.rating import render_rating, select_rating
from bookreview.schemas.book import BookDetail
from bookreview.schemas.common import Notification
from bookreview.schemas.review import (
    BookDetailResponse,
    ReviewForm,
    ReviewItem,
    ReviewSubmission,
    ReviewSubmissionResponse,
)
from bookreview.services.session import SessionContext

logger = logging.getLogger(__name__)

CATALOG_URL = "/books"
SUBMIT_FALLBACK_MESSAGE = "Failed to submit review. Please try again."


def parse_book_id(book_id) -> uuid.UUID:
    """A malformed id can never match a row, so it is reported as not found."""
    if isinstance(book_id, uuid.UUID):
        return book_id
    try:
        return uuid.UUID(str(book_id))
    except (TypeError, ValueError):
        raise NotFoundError(resource="Book", resource_id=str(book_id), recovery_url=CATALOG_URL)


def review_form(existing: Optional[Review]) -> ReviewForm:
    """Blank form; only the mode and its labels depend on an existing review."""
    if existing is not None:
        return ReviewForm(
            mode="update",
            title="Update Your Review",
            description="You can update your existing review and rating.",
            submit_label="Update Review",
            existing_review_id=existing.id,
            rating_input=render_rating(0, interactive=True),
        )
    return ReviewForm(
        mode="create",
        title="Write a Review",
        description="Share your thoughts about this book with other readers.",
        submit_label="Submit Review",
        rating_input=render_rating(0, interactive=True),
    )


def review_item(review: Review) -> ReviewItem:
    return ReviewItem(
        id=review.id,
        book_id=review.book_id,
        review_text=review.review_text,
        rating=review.rating,
        rating_display=render_rating(review.rating),
        reviewer_id=review.reviewer_id,
        reviewer_name=review.reviewer_name or ANONYMOUS_REVIEWER,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def validate_submission(submission: ReviewSubmission) -> tuple:
    """
    Returns (trimmed_text, rating) or raises ValidationError.

    Text is checked first, matching the order of the form's messages.
    """
    text = (submission.review_text or "").strip()
    if not text:
        raise ValidationError(message="Please write a review", field="review_text")
    rating = select_rating(submission.rating)
    return text, rating


class ReviewService:
    """
    Business logic for the book detail view and review submission.

    Stateless: every call receives its database session and session context.
    """

    async def get_book(self, db: AsyncSession, book_id) -> BookDetail:
        """
        Single row of the aggregated view.

        Raises:
            NotFoundError: no book with this id (→ 404, recovery link to /books)
            DatabaseError: the read failed
        """
        book_uuid = parse_book_id(book_id)
        try:
            result = await db.execute(
                select(books_with_ratings).where(books_with_ratings.c.id == book_uuid)
            )
            row = result.mappings().one_or_none()
        except Exception as e:
            logger.error("Database error fetching book %s: %s", book_uuid, str(e))
            raise DatabaseError(
                message="Failed to fetch book details.",
                context={"book_id": str(book_uuid), "error_type": type(e).__name__},
            )

        if row is None:
            raise NotFoundError(resource="Book", resource_id=str(book_uuid), recovery_url=CATALOG_URL)
        return build_book_detail(row)

    async def list_reviews(self, db: AsyncSession, book_id: uuid.UUID) -> List[Review]:
        """All reviews of a book, newest first."""
        try:
            result = await db.execute(
                select(Review)
                .where(Review.book_id == book_id)
                .order_by(desc(Review.created_at), desc(Review.id))
            )
            return list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing reviews for %s: %s", book_id, str(e))
            raise DatabaseError(
                message="Failed to fetch reviews.",
                context={"book_id": str(book_id), "error_type": type(e).__name__},
            )

    async def find_user_review(
        self, db: AsyncSession, book_id: uuid.UUID, reviewer_id: Optional[str]
    ) -> Optional[Review]:
        """The review `reviewer_id` already wrote for `book_id`, if any."""
        if not reviewer_id:
            return None
        result = await db.execute(
            select(Review).where(
                Review.book_id == book_id,
                Review.reviewer_id == reviewer_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_book_detail(
        self, db: AsyncSession, book_id, session: SessionContext
    ) -> BookDetailResponse:
        """Book header, review list and the form state for this user."""
        book = await self.get_book(db, book_id)
        reviews = await self.list_reviews(db, book.id)

        existing = None
        if session.is_authenticated:
            try:
                existing = await self.find_user_review(db, book.id, session.user_id)
            except Exception as e:
                logger.error("Database error looking up own review: %s", str(e))
                raise DatabaseError(
                    message="Failed to fetch reviews.",
                    context={"book_id": str(book.id), "error_type": type(e).__name__},
                )

        return BookDetailResponse(
            book=book,
            reviews=[review_item(r) for r in reviews],
            review_form=review_form(existing),
        )

    async def submit_review(
        self,
        db: AsyncSession,
        book_id,
        session: SessionContext,
        submission: ReviewSubmission,
    ) -> ReviewSubmissionResponse:
        """
        Create or update the session user's review of a book.

        Raises:
            ValidationError: empty text or rating outside 1..5 (no DB request made)
            NotFoundError: the book does not exist
            DatabaseError: the write failed; message is the backend's or a fallback
        """
        text, rating = validate_submission(submission)
        book_uuid = parse_book_id(book_id)

        payload = {
            "book_id": book_uuid,
            "review_text": text,
            "rating": rating,
            "reviewer_id": session.user_id,
            "reviewer_name": session.display_name,
        }

        try:
            existing = await self.find_user_review(db, book_uuid, session.user_id)
            if existing is not None:
                await self._update(db, existing, payload)
                mode = "updated"
            else:
                mode = await self._insert_or_update(db, payload)
        except BookReviewError:
            raise
        except Exception as e:
            logger.error(
                "Review submission failed for book %s by %s: %s",
                book_uuid, session.user_id, str(e),
                exc_info=True,
            )
            raise DatabaseError(
                message=backend_message(e, SUBMIT_FALLBACK_MESSAGE),
                context={"book_id": str(book_uuid), "error_type": type(e).__name__},
            )

        logger.info("Review %s for book %s by %s", mode, book_uuid, session.user_id)

        # Two sequential reads: fresh aggregates, then the fresh list
        book = await self.get_book(db, book_uuid)
        reviews = await self.list_reviews(db, book_uuid)
        own = next((r for r in reviews if r.reviewer_id == session.user_id), None)

        if mode == "updated":
            notification = Notification(
                title="Review updated!",
                description="Your review has been updated successfully.",
            )
        else:
            notification = Notification(
                title="Review added!",
                description="Thank you for sharing your thoughts!",
            )

        return ReviewSubmissionResponse(
            mode=mode,
            notification=notification,
            book=book,
            reviews=[review_item(r) for r in reviews],
            review_form=review_form(own),
        )

    async def _update(self, db: AsyncSession, review: Review, payload: dict) -> None:
        review.review_text = payload["review_text"]
        review.rating = payload["rating"]
        review.reviewer_name = payload["reviewer_name"]
        review.updated_at = datetime.now(timezone.utc)
        await db.flush()

    async def _insert_or_update(self, db: AsyncSession, payload: dict) -> str:
        """
        INSERT the review; on a (book_id, reviewer_id) uniqueness violation,
        update the row that won the race instead.

        A foreign-key violation (the book vanished) is reported as not found.
        """
        await self._ensure_book_exists(db, payload["book_id"])
        db.add(Review(**payload))
        try:
            await db.flush()
            return "created"
        except IntegrityError as e:
            # The insert is the only write in this transaction
            await db.rollback()
            existing = await self.find_user_review(db, payload["book_id"], payload["reviewer_id"])
            if existing is None:
                # Raises NotFoundError when the book was deleted after the first check
                await self._ensure_book_exists(db, payload["book_id"])
                raise
            logger.warning(
                "Concurrent review insert for book %s by %s; updating instead (%s)",
                payload["book_id"], payload["reviewer_id"], type(e.orig).__name__,
            )
            await self._update(db, existing, payload)
            return "updated"

    async def _ensure_book_exists(self, db: AsyncSession, book_id: uuid.UUID) -> None:
        result = await db.execute(
            select(books_with_ratings.c.id).where(books_with_ratings.c.id == book_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError(resource="Book", resource_id=str(book_id), recovery_url=CATALOG_URL)


review_service = ReviewService()
