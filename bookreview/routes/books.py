"""
Book Review Service — Book Route Handlers
==========================================

What:  Catalog listing, filter options, book creation, book detail and
       review submission.
How:   Every handler is gated by `require_session` and delegates to a service.
Who:   Called by the catalog (/books), add-book (/books/add) and detail
       (/books/{id}) views of the frontend.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bookreview.database import get_db_session
from bookreview.schemas.book import (
    BookCreate,
    BookCreatedResponse,
    CatalogPage,
    CatalogSort,
    FilterOptions,
)
from bookreview.schemas.common import ErrorResponse
from bookreview.schemas.review import (
    BookDetailResponse,
    ReviewSubmission,
    ReviewSubmissionResponse,
)
from bookreview.services.book_service import book_service
from bookreview.services.catalog_service import MAX_CATALOG_PAGE, catalog_service
from bookreview.services.review_service import review_service
from bookreview.services.session import SessionContext, require_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Books"])

_GATED = {401: {"description": "Not signed in", "model": ErrorResponse}}


@router.get(
    "/books",
    response_model=CatalogPage,
    responses={**_GATED, 500: {"description": "Server error", "model": ErrorResponse}},
    summary="List books with search, filters, sort and pagination",
)
async def list_books(
    response: Response,
    search: Optional[str] = Query(default=None, description="Matches title or author (case-insensitive substring)"),
    genre: Optional[str] = Query(default=None, description="Exact genre"),
    author: Optional[str] = Query(default=None, description="Exact author"),
    sort: CatalogSort = Query(default=CatalogSort.NEWEST, description="newest, title or rating"),
    page: int = Query(default=1, ge=1, le=MAX_CATALOG_PAGE, description="1-indexed page number (12 books per page)"),
    seq: Optional[int] = Query(default=None, ge=0, description="Client request sequence number, echoed back"),
    session: SessionContext = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> CatalogPage:
    """
    One page of the catalog.

    Example:
        GET /api/books?search=tolkien&sort=rating&page=2&seq=7
    """
    result = await catalog_service.list_books(
        db=db,
        search=search,
        genre=genre,
        author=author,
        sort=sort,
        page=page,
        seq=seq,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/books/filters",
    response_model=FilterOptions,
    responses=_GATED,
    summary="Distinct genres and authors for the filter controls",
)
async def list_filter_options(
    session: SessionContext = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> FilterOptions:
    return await catalog_service.list_filter_options(db)


@router.post(
    "/books",
    status_code=201,
    response_model=BookCreatedResponse,
    responses={
        **_GATED,
        400: {"description": "A required field is blank", "model": ErrorResponse},
        500: {"description": "Insert failed", "model": ErrorResponse},
    },
    summary="Add a book to the catalog",
)
async def create_book(
    body: BookCreate,
    response: Response,
    session: SessionContext = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> BookCreatedResponse:
    result = await book_service.create_book(db=db, session=session, submission=body)
    response.headers["Location"] = result.redirect_url
    return result


@router.get(
    "/books/{book_id}",
    response_model=BookDetailResponse,
    responses={**_GATED, 404: {"description": "Book not found", "model": ErrorResponse}},
    summary="Book detail with reviews and the caller's review form state",
)
async def get_book_detail(
    book_id: str,
    session: SessionContext = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> BookDetailResponse:
    return await review_service.get_book_detail(db=db, book_id=book_id, session=session)


@router.post(
    "/books/{book_id}/reviews",
    response_model=ReviewSubmissionResponse,
    responses={
        **_GATED,
        400: {"description": "Empty review or no rating selected", "model": ErrorResponse},
        404: {"description": "Book not found", "model": ErrorResponse},
        500: {"description": "Write failed", "model": ErrorResponse},
    },
    summary="Create or update the caller's review of a book",
)
async def submit_review(
    book_id: str,
    body: ReviewSubmission,
    session: SessionContext = Depends(require_session),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewSubmissionResponse:
    """
    The caller's first submission for a book creates a review; later
    submissions update it in place. The response carries the re-read book
    (fresh average and count) and review list.
    """
    return await review_service.submit_review(
        db=db, book_id=book_id, session=session, submission=body
    )
