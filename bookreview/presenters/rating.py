"""
Star rating display and input.

A rating control renders `max_rating` units. Unit *i* (1-indexed) is:

    full   when i <= rating
    half   when i - 0.5 <= rating < i
    empty  otherwise

so a read-only 3.5 shows three full units and one half unit. The numeric
label is the rating to one decimal; 0 renders all-empty with label "0.0".
"""

from typing import Optional

from bookreview.exceptions import ValidationError
from bookreview.models.review import MAX_RATING
from bookreview.schemas.common import RatingDisplay, RatingUnit


def _fill(position: int, rating: float) -> str:
    if position <= rating:
        return "full"
    if position - 0.5 <= rating:
        return "half"
    return "empty"


def render_rating(
    rating: float,
    max_rating: int = MAX_RATING,
    interactive: bool = False,
) -> RatingDisplay:
    """Build the display for `rating` out of `max_rating` units."""
    value = float(rating or 0)
    return RatingDisplay(
        rating=value,
        max_rating=max_rating,
        label=f"{value:.1f}",
        interactive=interactive,
        units=[
            RatingUnit(value=position, fill=_fill(position, value))
            for position in range(1, max_rating + 1)
        ],
    )


def select_rating(
    position: int,
    max_rating: int = MAX_RATING,
    interactive: bool = True,
) -> Optional[int]:
    """
    Map a click on unit `position` to a rating.

    Read-only displays accept no input and return None. For interactive
    ones the selected rating IS the 1-indexed position; anything outside
    1..max_rating (including 0, "nothing selected") is rejected.
    """
    if not interactive:
        return None
    if not isinstance(position, int) or isinstance(position, bool) or not 1 <= position <= max_rating:
        raise ValidationError(
            message="Please select a rating",
            field="rating",
            context={"min": 1, "max": max_rating},
        )
    return position
