"""
Book Review Service — Session Context & Access Gate
====================================================

What:  The per-request view of the auth session, and the gate that
       restricts protected flows to signed-in users.
How:   A SessionContext is created for every request (state `resolving`),
       resolved once against the auth provider, and injected into each flow
       through FastAPI dependencies. Nothing about the session lives in
       module-level mutable state.

Session State Machine:
    resolving ──resolve(token)──▶ authenticated
        │                              │
        └──────────────────▶ unauthenticated ◀──sign_out()──┘

Access Gate:
    resolving        → loading   (client shows a spinner)
    unauthenticated  → fallback  (caller-supplied or the default sign-in prompt)
    authenticated    → content   (the protected flow runs)
    Exactly one view is chosen. There is no timeout or retry: the gate trusts
    the provider's answer to settle.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from bookreview.config import settings
from bookreview.exceptions import AuthenticationError
from bookreview.models.review import ANONYMOUS_REVIEWER
from bookreview.schemas.session import GateView, SessionUser
from bookreview.services.auth_service import AuthService, auth_service

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    RESOLVING = "resolving"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


def display_name_for(user: Optional[SessionUser]) -> str:
    """Profile full name, falling back to email, falling back to 'Anonymous'."""
    if user is None:
        return ANONYMOUS_REVIEWER
    return user.full_name or user.email or ANONYMOUS_REVIEWER


class SessionContext:
    """
    Explicit session object with a well-defined lifecycle.

    Lifecycle:
        1. __init__     → state RESOLVING, no user
        2. resolve()    → AUTHENTICATED with a user, or UNAUTHENTICATED
        3. sign_in()    → AUTHENTICATED (provider already issued the token)
        4. sign_out()   → provider logout, user cleared, UNAUTHENTICATED
    """

    def __init__(self, auth: AuthService):
        self._auth = auth
        self.state = SessionState.RESOLVING
        self.user: Optional[SessionUser] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED and self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    @property
    def display_name(self) -> str:
        return display_name_for(self.user)

    async def resolve(self, token: Optional[str]) -> SessionState:
        """
        Settle the session from a bearer token.

        A missing token settles UNAUTHENTICATED without calling the provider.
        AuthServiceError from the provider propagates (503), leaving the
        context RESOLVING.
        """
        if not token:
            self._clear()
            return self.state

        user = await self._auth.get_user(token)
        if user is None:
            self._clear()
        else:
            self.sign_in(user, token)
        return self.state

    def sign_in(self, user: SessionUser, token: str) -> None:
        self.user = user
        self.token = token
        self.state = SessionState.AUTHENTICATED

    async def sign_out(self) -> None:
        """End the session at the provider, then tear down local state."""
        if self.token:
            await self._auth.sign_out(self.token)
            logger.info("User %s signed out", self.user_id)
        self._clear()

    def _clear(self) -> None:
        self.user = None
        self.token = None
        self.state = SessionState.UNAUTHENTICATED


# ── Dependencies ──────────────────────────────────────────────────────────


def get_auth_service() -> AuthService:
    return auth_service


def bearer_token(request: Request) -> Optional[str]:
    """Extract the token from `Authorization: Bearer <token>`, if any."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_session_context(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> SessionContext:
    """Create and resolve the session for the current request."""
    context = SessionContext(auth)
    await context.resolve(bearer_token(request))
    request.state.user_id = context.user_id
    return context


def default_fallback() -> Dict[str, Any]:
    """The sign-in / sign-up prompt shown to signed-out users."""
    return {
        "title": "Authentication Required",
        "description": "You need to be logged in to access this feature.",
        "sign_in_url": settings.sign_in_path,
        "sign_up_url": settings.sign_up_path,
    }


class AccessGate:
    """
    Wraps protected flows.

    Usage as a dependency:
        require_session = AccessGate()

        @router.get("/books")
        async def list_books(session: SessionContext = Depends(require_session)):
            ...

    A custom fallback replaces the default sign-in prompt:
        AccessGate(fallback={"title": "Members only", "sign_in_url": "/join"})
    """

    def __init__(self, fallback: Optional[Dict[str, Any]] = None):
        self.fallback = fallback

    def fallback_payload(self) -> Dict[str, Any]:
        return self.fallback if self.fallback is not None else default_fallback()

    @staticmethod
    def view(context: SessionContext) -> GateView:
        if context.state is SessionState.RESOLVING:
            return GateView.LOADING
        if context.is_authenticated:
            return GateView.CONTENT
        return GateView.FALLBACK

    async def __call__(
        self, context: SessionContext = Depends(get_session_context)
    ) -> SessionContext:
        if self.view(context) is not GateView.CONTENT:
            raise AuthenticationError(fallback=self.fallback_payload())
        return context


require_session = AccessGate()
