"""
Book Review Service — Session Schemas
======================================

What:  The signed-in user as seen by this service, and the access gate's
       answer for the current request.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SessionUser(BaseModel):
    """
    Identity + profile returned by the external auth provider.

    `id` is opaque to this service; it is stored as the reviewer / creator id.
    """
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class GateView(str, Enum):
    """The single thing the access gate lets the client render."""
    LOADING = "loading"
    FALLBACK = "fallback"
    CONTENT = "content"


class SessionResponse(BaseModel):
    """Returned by GET /api/session."""
    state: str = Field(description="resolving, authenticated or unauthenticated")
    view: GateView
    user: Optional[SessionUser] = None
    display_name: Optional[str] = None
    fallback: Optional[dict] = None
    redirect_url: Optional[str] = Field(
        default=None,
        description="Where the landing page sends a signed-in user",
    )
