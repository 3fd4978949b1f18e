"""
Book Review Service — Auth Provider Client
===========================================

What:  Async HTTP client for the external, managed auth service.
How:   httpx.AsyncClient against a GoTrue-compatible REST API:
           GET  {auth_url}/user    → current user for a bearer token
           POST {auth_url}/logout  → revoke the session behind a token
Who:   Used by SessionContext (resolve / sign_out) and the health check.

Session issuance, sign-in and sign-up forms, password handling and token
refresh all belong to the provider. This client only observes whether a
token maps to a user, and asks the provider to end a session.

Response mapping for GET /user:
    200        → SessionUser (id, email, user_metadata.full_name)
    401 / 403  → None (no session; the access gate shows its fallback)
    other      → AuthServiceError (503), never retried
"""

import logging
from typing import Optional

import httpx

from bookreview.config import settings
from bookreview.exceptions import AuthServiceError
from bookreview.schemas.session import SessionUser

logger = logging.getLogger(__name__)


class AuthService:
    """
    Thin wrapper over the auth provider's REST API.

    The underlying httpx client is created lazily and reused across requests;
    `close()` is called from the application lifespan on shutdown.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = timeout or settings.auth_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"apikey": self.api_key},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _bearer(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    async def get_user(self, token: str) -> Optional[SessionUser]:
        """
        Resolve a bearer token to the signed-in user.

        Returns:
            SessionUser when the token is valid, None when the provider
            rejects it (expired, revoked, malformed).

        Raises:
            AuthServiceError: provider unreachable or answered unexpectedly.
        """
        try:
            response = await self.client.get("/user", headers=self._bearer(token))
        except httpx.HTTPError as e:
            logger.error("Auth provider request failed: %s", str(e))
            raise AuthServiceError(context={"error_type": type(e).__name__})

        if response.status_code in (401, 403):
            logger.debug("Auth provider rejected token (status=%d)", response.status_code)
            return None

        if response.status_code != 200:
            logger.error("Auth provider returned unexpected status %d", response.status_code)
            raise AuthServiceError(context={"status": response.status_code})

        try:
            payload = response.json()
        except ValueError:
            raise AuthServiceError(context={"reason": "invalid_json"})

        user_id = payload.get("id")
        if not user_id:
            raise AuthServiceError(context={"reason": "missing_user_id"})

        metadata = payload.get("user_metadata") or {}
        return SessionUser(
            id=str(user_id),
            email=payload.get("email") or None,
            full_name=metadata.get("full_name") or None,
        )

    async def sign_out(self, token: str) -> None:
        """
        Ask the provider to end the session behind `token`.

        A 401 means the session is already gone, which is the desired end state.
        """
        try:
            response = await self.client.post("/logout", headers=self._bearer(token))
        except httpx.HTTPError as e:
            logger.error("Auth provider logout failed: %s", str(e))
            raise AuthServiceError(context={"error_type": type(e).__name__})

        if response.status_code not in (200, 204, 401):
            logger.error("Auth provider logout returned status %d", response.status_code)
            raise AuthServiceError(context={"status": response.status_code})

    async def health_check(self) -> bool:
        """Probe the provider's public health endpoint."""
        try:
            response = await self.client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Auth provider health check failed: %s", str(e))
            return False


auth_service = AuthService()
