"""
Book Review Service — Presenters
=================================

What:  Pure functions that turn rows into render-ready view models.
How:   No I/O and no state; the same input always yields the same output.

Presenter Inventory:
    - rating.py:    star rating display and click-to-rating mapping
    - book_card.py: catalog card and detail header for one aggregated row
"""
