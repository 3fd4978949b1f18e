"""
Book Review Service — Shared Response Schemas
==============================================

What:  Pydantic models shared by every flow: the rating display, transient
       notifications, the error envelope and the health check.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class RatingUnit(BaseModel):
    """One star of a rating display."""
    value: int = Field(description="1-indexed position; clicking it selects this rating")
    fill: Literal["full", "half", "empty"] = Field(description="How much of the unit is filled")


class RatingDisplay(BaseModel):
    """
    What:  Render-ready rating control (read-only or interactive).
    Who:   Embedded in book cards, book details, review items and the review form.
    """
    rating: float = Field(description="Current rating value (fractional in read-only mode)")
    max_rating: int = Field(description="Number of units rendered")
    label: str = Field(description="Rating formatted to one decimal, e.g. '4.5'")
    interactive: bool = Field(description="Whether units accept clicks")
    units: List[RatingUnit]


class Notification(BaseModel):
    """
    Transient notification (toast) the client shows after an action.

    Example: {"title": "Review added!", "description": "Thank you for sharing your thoughts!"}
    """
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class ErrorResponse(BaseModel):
    """
    Standardized error envelope returned by every exception handler.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description, shown inline or as a notification
        details: Optional extra context (fallback prompt, recovery target, field)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    auth: str = Field(description="Auth provider status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
