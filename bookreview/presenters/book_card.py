"""
Catalog card and detail header for one row of the aggregated view.
"""

from typing import Any, Mapping

from bookreview.presenters.rating import render_rating
from bookreview.schemas.book import BookCard, BookDetail


def book_detail_url(book_id: Any) -> str:
    return f"/books/{book_id}"


def review_count_label(count: int) -> str:
    """'1 review', '0 reviews', '12 reviews'."""
    return f"{count} review{'' if count == 1 else 's'}"


def _card_fields(row: Mapping[str, Any]) -> dict:
    average = float(row["average_rating"] or 0)
    count = int(row["review_count"] or 0)
    return {
        "id": row["id"],
        "title": row["title"],
        "author": row["author"],
        "genre": row["genre"],
        "average_rating": average,
        "review_count": count,
        "rating": render_rating(average),
        "review_label": review_count_label(count),
        "detail_url": book_detail_url(row["id"]),
    }


def build_book_card(row: Mapping[str, Any]) -> BookCard:
    """Summary card for the catalog grid."""
    return BookCard(**_card_fields(row))


def build_book_detail(row: Mapping[str, Any]) -> BookDetail:
    """Card fields plus creation metadata, for the detail view header."""
    return BookDetail(
        **_card_fields(row),
        created_at=row["created_at"],
        created_by=row.get("created_by"),
    )
