"""
Book Review Service — Catalog Query Flow
=========================================

What:  Filtered, sorted, paginated listing of books with their aggregates,
       plus the distinct genre/author values that populate the filter controls.
How:   Builds one SELECT over the `books_with_ratings` view and a COUNT under
       the same filter; filter options come from dedicated DISTINCT queries on
       the `books` base table.
Who:   Called by GET /api/books and GET /api/books/filters.

Query Composition:
    search  → title ILIKE %term% OR author ILIKE %term%  (wildcards escaped)
    genre   → genre = :genre     (only when non-empty)
    author  → author = :author   (only when non-empty)
    sort    → newest: created_at DESC | title: title ASC | rating: average_rating DESC
              (id breaks ties so page windows are stable)
    page    → OFFSET (page-1)*12 LIMIT 12

Every request is independent: nothing is cached and nothing is cancelled.
Responses echo the client's `seq` so a client can drop superseded ones.
"""

import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy import ColumnElement, Select, and_, asc, desc, func, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from bookreview.exceptions import DatabaseError
from bookreview.models.book import Book
from bookreview.models.book_with_ratings import books_with_ratings
from bookreview.presenters.book_card import build_book_card
from bookreview.schemas.book import CatalogPage, CatalogSort, EmptyState, FilterOptions

logger = logging.getLogger(__name__)

CATALOG_PAGE_SIZE = 12
# Keeps (page - 1) * page size well inside a bigint OFFSET
MAX_CATALOG_PAGE = 100_000

view = books_with_ratings.c


def page_range(page: int, page_size: int = CATALOG_PAGE_SIZE) -> Tuple[int, int]:
    """
    Zero-indexed, half-open row window for a 1-indexed page.

    >>> page_range(1)
    (0, 12)
    >>> page_range(2)
    (12, 24)
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    start = (page - 1) * page_size
    return start, start + page_size


def total_pages_for(count: int, page_size: int = CATALOG_PAGE_SIZE) -> int:
    return math.ceil(count / page_size) if count > 0 else 0


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def build_catalog_filter(
    search: Optional[str] = None,
    genre: Optional[str] = None,
    author: Optional[str] = None,
) -> ColumnElement[bool]:
    """WHERE clause shared by the page query and its COUNT."""
    clauses = []

    term = _clean(search)
    if term:
        clauses.append(
            or_(
                view.title.icontains(term, autoescape=True),
                view.author.icontains(term, autoescape=True),
            )
        )

    genre = _clean(genre)
    if genre:
        clauses.append(view.genre == genre)

    author = _clean(author)
    if author:
        clauses.append(view.author == author)

    return and_(true(), *clauses)


def order_clause(sort: CatalogSort) -> list:
    if sort == CatalogSort.TITLE:
        primary = asc(view.title)
    elif sort == CatalogSort.RATING:
        primary = desc(view.average_rating)
    else:
        primary = desc(view.created_at)
    return [primary, asc(view.id)]


def build_catalog_query(
    search: Optional[str] = None,
    genre: Optional[str] = None,
    author: Optional[str] = None,
    sort: CatalogSort = CatalogSort.NEWEST,
    page: int = 1,
    page_size: int = CATALOG_PAGE_SIZE,
) -> Select:
    """The page query: filtered, ordered, windowed."""
    start, stop = page_range(page, page_size)
    return (
        select(books_with_ratings)
        .where(build_catalog_filter(search, genre, author))
        .order_by(*order_clause(sort))
        .offset(start)
        .limit(stop - start)
    )


def empty_state_for(filters_active: bool, total_count: int = 0) -> EmptyState:
    """
    no_books only when the catalog itself is empty; a page past the end of a
    non-empty result set is out_of_range.
    """
    if total_count > 0:
        return EmptyState(
            kind="out_of_range",
            title="No books on this page",
            message="This page is past the end of the results.",
            action_url="/books",
        )
    if filters_active:
        return EmptyState(
            kind="no_matches",
            title="No books found",
            message="Try adjusting your filters or search terms.",
        )
    return EmptyState(
        kind="no_books",
        title="No books found",
        message="Be the first to add a book to the platform!",
    )


class CatalogService:
    """
    Business logic for the catalog listing.

    Error Handling Strategy:
        Any failed read becomes a DatabaseError carrying the message the
        client shows as a transient notification. The client keeps whatever
        it was showing before; the service keeps serving.
    """

    async def list_books(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        genre: Optional[str] = None,
        author: Optional[str] = None,
        sort: CatalogSort = CatalogSort.NEWEST,
        page: int = 1,
        seq: Optional[int] = None,
    ) -> CatalogPage:
        """
        One page of the catalog.

        Args:
            db: Async database session
            search: Free-text term matched against title and author
            genre / author: Exact-match filters; empty means "all"
            sort: Sort key
            page: 1-indexed page number
            seq: Client request sequence number, echoed back

        Returns:
            CatalogPage with cards, total count, total pages and an empty
            state when there is nothing to show.
        """
        try:
            query = build_catalog_query(search, genre, author, sort, page)
            result = await db.execute(query)
            rows = result.mappings().all()

            count_query = (
                select(func.count())
                .select_from(books_with_ratings)
                .where(build_catalog_filter(search, genre, author))
            )
            count_result = await db.execute(count_query)
            total_count = count_result.scalar() or 0
        except Exception as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch books. Please try again.",
                context={"error_type": type(e).__name__},
            )

        total_pages = total_pages_for(total_count)
        books = [build_book_card(row) for row in rows]

        empty_state = None
        if not books:
            filters_active = bool(_clean(search) or _clean(genre) or _clean(author))
            empty_state = empty_state_for(filters_active, total_count)

        logger.debug(
            "Catalog page %d: %d of %d books (sort=%s)",
            page, len(books), total_count, sort.value,
        )

        return CatalogPage(
            books=books,
            page=page,
            page_size=CATALOG_PAGE_SIZE,
            total_count=total_count,
            total_pages=total_pages,
            has_previous=page > 1,
            has_next=page < total_pages,
            empty_state=empty_state,
            seq=seq,
        )

    async def list_filter_options(self, db: AsyncSession) -> FilterOptions:
        """Distinct genres and authors across the whole catalog, sorted."""
        try:
            genres = await self._distinct(db, Book.genre)
            authors = await self._distinct(db, Book.author)
        except Exception as e:
            logger.error("Database error loading filter options: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to load filter options.",
                context={"error_type": type(e).__name__},
            )
        return FilterOptions(genres=genres, authors=authors)

    @staticmethod
    async def _distinct(db: AsyncSession, column) -> List[str]:
        result = await db.execute(select(column).distinct().order_by(column))
        return list(result.scalars().all())


catalog_service = CatalogService()
