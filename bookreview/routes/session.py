"""
Book Review Service — Session Route Handlers
=============================================

What:  Tells the client which view the access gate allows, and ends sessions.
Who:   Called by the landing page (/) and the catalog header's sign-out button.
"""

import logging

from fastapi import APIRouter, Depends

from bookreview.schemas.common import Notification
from bookreview.schemas.session import GateView, SessionResponse
from bookreview.services.session import (
    AccessGate,
    SessionContext,
    get_session_context,
    require_session,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["Session"])

CATALOG_URL = "/books"


@router.get(
    "",
    response_model=SessionResponse,
    summary="Current session and the access gate's view",
)
async def get_session(
    context: SessionContext = Depends(get_session_context),
) -> SessionResponse:
    """
    Signed-in callers get view=content and a redirect to the catalog;
    everyone else gets view=fallback with the sign-in prompt.
    """
    view = AccessGate.view(context)
    return SessionResponse(
        state=context.state.value,
        view=view,
        user=context.user,
        display_name=context.display_name if context.is_authenticated else None,
        fallback=require_session.fallback_payload() if view is GateView.FALLBACK else None,
        redirect_url=CATALOG_URL if view is GateView.CONTENT else None,
    )


@router.post(
    "/sign-out",
    response_model=Notification,
    summary="End the caller's session at the auth provider",
)
async def sign_out(
    context: SessionContext = Depends(require_session),
) -> Notification:
    await context.sign_out()
    return Notification(
        title="Signed out",
        description="You have been successfully signed out.",
    )
