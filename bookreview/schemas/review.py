"""
Book Review Service — Review Schemas
=====================================

What:  Pydantic models for the book detail view, the review form state and
       the review submission contract.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from bookreview.schemas.book import BookDetail
from bookreview.schemas.common import Notification, RatingDisplay


class ReviewItem(BaseModel):
    """One review in the detail view's list (newest first)."""
    id: uuid.UUID
    book_id: uuid.UUID
    review_text: str
    rating: int
    rating_display: RatingDisplay
    reviewer_id: str
    reviewer_name: str = Field(description="Display name, 'Anonymous' when none was stored")
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReviewForm(BaseModel):
    """
    State of the review form.

    The form is always blank: in update mode the user's previous text and
    rating are NOT pre-filled, only the mode and its labels change.
    """
    mode: Literal["create", "update"]
    title: str
    description: str
    submit_label: str
    existing_review_id: Optional[uuid.UUID] = None
    review_text: str = ""
    rating_input: RatingDisplay


class ReviewSubmission(BaseModel):
    """
    Body of POST /api/books/{book_id}/reviews.

    rating defaults to 0 (nothing selected); the flow rejects it with
    "Please select a rating" rather than a schema error.
    """
    review_text: str = ""
    rating: int = 0


class BookDetailResponse(BaseModel):
    """Returned by GET /api/books/{book_id}."""
    book: BookDetail
    reviews: List[ReviewItem]
    review_form: ReviewForm


class ReviewSubmissionResponse(BookDetailResponse):
    """
    Returned after a successful submission: the re-read book (fresh
    aggregates), the re-read review list, a blank form and a notification.
    """
    mode: Literal["created", "updated"]
    notification: Notification
