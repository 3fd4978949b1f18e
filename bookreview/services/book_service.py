"""
Book Review Service — Book Creation Flow
=========================================

What:  Validates and inserts a new book, then returns it as read back from
       the aggregated view so the client can navigate to its detail view.
Who:   Called by POST /api/books.

Flow:
    1. Trim title / author / genre; any blank → ValidationError naming all
       three required fields (no database request is made)
    2. INSERT with created_by = the signed-in user's id
    3. Flush to obtain the server-generated id and timestamp
    4. Read the new row back from `books_with_ratings` (review_count 0,
       average_rating 0) and return it with the detail navigation target

On backend failure the backend's message (or a generic fallback) is
surfaced; the client keeps the user's typed input.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from bookreview.exceptions import DatabaseError, ValidationError, backend_message
from bookreview.models.book import Book
from bookreview.presenters.book_card import book_detail_url
from bookreview.schemas.book import BookCreate, BookCreatedResponse
from bookreview.schemas.common import Notification
from bookreview.services.review_service import review_service
from bookreview.services.session import SessionContext

logger = logging.getLogger(__name__)

REQUIRED_BOOK_FIELDS = ("title", "author", "genre")
CREATE_FALLBACK_MESSAGE = "Failed to add book. Please try again."


def validate_book(submission: BookCreate) -> dict:
    """Trimmed field values, or ValidationError listing every required field."""
    values = {name: (getattr(submission, name) or "").strip() for name in REQUIRED_BOOK_FIELDS}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ValidationError(
            message="All fields are required: " + ", ".join(REQUIRED_BOOK_FIELDS) + ".",
            context={"fields": missing},
        )
    return values


class BookService:
    """Business logic for adding books to the catalog."""

    async def create_book(
        self,
        db: AsyncSession,
        session: SessionContext,
        submission: BookCreate,
    ) -> BookCreatedResponse:
        """
        Insert a new book attributed to the session user.

        Raises:
            ValidationError: a required field is blank (no DB request made)
            DatabaseError: the insert failed
        """
        values = validate_book(submission)

        book = Book(created_by=session.user_id, **values)
        try:
            db.add(book)
            await db.flush()
        except Exception as e:
            logger.error("Failed to add book %r: %s", values["title"], str(e), exc_info=True)
            raise DatabaseError(
                message=backend_message(e, CREATE_FALLBACK_MESSAGE),
                context={"error_type": type(e).__name__},
            )

        logger.info("Book %s added by %s", book.id, session.user_id)

        created = await review_service.get_book(db, book.id)

        return BookCreatedResponse(
            book=created,
            notification=Notification(
                title="Book added successfully!",
                description=f'"{created.title}" has been added to the platform.',
            ),
            redirect_url=book_detail_url(created.id),
        )


book_service = BookService()
