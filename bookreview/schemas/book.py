"""
Book Review Service — Book Schemas
===================================

What:  Pydantic models for the catalog listing, filter options, book detail
       and book creation contracts.
How:   FastAPI validates query parameters and bodies against these models and
       serializes responses from them.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from bookreview.schemas.common import Notification, RatingDisplay


class CatalogSort(str, Enum):
    """Sort keys offered by the catalog."""
    NEWEST = "newest"   # created_at DESC
    TITLE = "title"     # title ASC
    RATING = "rating"   # average_rating DESC


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BookCard(BaseModel):
    """
    What:  Summary of one book for the catalog grid.
    Who:   Items of CatalogPage.books.
    """
    id: uuid.UUID
    title: str
    author: str
    genre: str
    average_rating: float = Field(description="Mean rating computed by the backend view (0 without reviews)")
    review_count: int = Field(ge=0)
    rating: RatingDisplay = Field(description="Read-only star display of average_rating")
    review_label: str = Field(description="Pluralised count, e.g. '1 review', '3 reviews'")
    detail_url: str = Field(description="Navigation target of the book's detail view")


class BookDetail(BookCard):
    """Full book header for the detail view."""
    created_at: datetime
    created_by: Optional[str] = None


class EmptyState(BaseModel):
    """
    Shown instead of the grid when a catalog page has no books.

    kind:
        no_matches:   filters or search are active but nothing matched
        no_books:     nobody has added a book yet
        out_of_range: books match, but the requested page is past the last one
    """
    kind: Literal["no_matches", "no_books", "out_of_range"]
    title: str
    message: str
    action_url: str = "/books/add"


class CatalogPage(BaseModel):
    """
    What:  One page of the catalog plus pagination state.
    Who:   Returned by GET /api/books.

    `seq` echoes the client's request sequence number. Requests are never
    cancelled server-side, so a client that issues several in quick succession
    keeps only the response carrying its highest `seq`.
    """
    books: List[BookCard]
    page: int = Field(ge=1)
    page_size: int
    total_count: int = Field(description="Books matching the filters, independent of the page window")
    total_pages: int = Field(description="ceil(total_count / page_size)")
    has_previous: bool
    has_next: bool
    empty_state: Optional[EmptyState] = None
    seq: Optional[int] = None


class FilterOptions(BaseModel):
    """Distinct genre and author values for the filter controls."""
    genres: List[str]
    authors: List[str]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BookCreate(BaseModel):
    """
    Body of POST /api/books.

    Fields default to "" so that missing values reach the creation flow's
    own validation and produce a single message naming every required field.
    """
    title: str = ""
    author: str = ""
    genre: str = ""


class BookCreatedResponse(BaseModel):
    """Returned with HTTP 201 after a book is added."""
    book: BookDetail
    notification: Notification
    redirect_url: str = Field(description="Detail view of the new book")
