"""
Book Review Service — Session Context, Access Gate & Auth Client Tests
=======================================================================

What:  The auth provider client against an httpx MockTransport, the
       session lifecycle, and the gate's single-view decision.
How:   No network: every provider response comes from a handler function.

What we test:
    ✅ Provider 200 / 401 / 5xx / transport error mapping
    ✅ resolve() settles to exactly one terminal state
    ✅ Display name fallback chain
    ✅ Gate chooses exactly one of loading / fallback / content
    ✅ Custom fallback replaces the default prompt
"""

import httpx
import pytest

from bookreview.exceptions import AuthenticationError, AuthServiceError
from bookreview.schemas.session import GateView, SessionUser
from bookreview.services.auth_service import AuthService
from bookreview.services.session import (
    AccessGate,
    SessionContext,
    SessionState,
    default_fallback,
    display_name_for,
)

from tests.auth_fakes import READER, VALID_TOKEN


def _service(handler) -> AuthService:
    return AuthService(
        base_url="http://auth.test/auth/v1",
        api_key="k",
        transport=httpx.MockTransport(handler),
    )


class TestAuthService:

    @pytest.mark.asyncio
    async def test_get_user_success(self, auth_service):
        user = await auth_service.get_user(VALID_TOKEN)
        assert user.id == READER["id"]
        assert user.email == "reader@example.com"
        assert user.full_name == "Ada Reader"

    @pytest.mark.asyncio
    async def test_get_user_sends_headers(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["apikey"] = request.headers.get("apikey")
            seen["path"] = request.url.path
            return httpx.Response(200, json={"id": "u1"})

        service = _service(handler)
        user = await service.get_user("tok")
        await service.close()

        assert user.id == "u1"
        assert user.full_name is None
        assert seen == {"auth": "Bearer tok", "apikey": "k", "path": "/auth/v1/user"}

    @pytest.mark.asyncio
    async def test_rejected_token_is_no_user(self, auth_service):
        assert await auth_service.get_user("expired") is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        service = _service(lambda request: httpx.Response(500))
        with pytest.raises(AuthServiceError):
            await service.get_user("tok")
        await service.close()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(handler)
        with pytest.raises(AuthServiceError) as exc_info:
            await service.get_user("tok")
        assert exc_info.value.context["error_type"] == "ConnectError"
        await service.close()

    @pytest.mark.asyncio
    async def test_missing_user_id_raises(self):
        service = _service(lambda request: httpx.Response(200, json={"email": "x@y.z"}))
        with pytest.raises(AuthServiceError):
            await service.get_user("tok")
        await service.close()

    @pytest.mark.asyncio
    async def test_sign_out_accepts_already_gone(self):
        service = _service(lambda request: httpx.Response(401))
        await service.sign_out("tok")
        await service.close()

    @pytest.mark.asyncio
    async def test_health_check(self, auth_service):
        assert await auth_service.health_check() is True


class TestSessionContext:

    @pytest.mark.asyncio
    async def test_starts_resolving(self, auth_service):
        context = SessionContext(auth_service)
        assert context.state is SessionState.RESOLVING
        assert context.is_authenticated is False

    @pytest.mark.asyncio
    async def test_resolve_valid_token(self, auth_service):
        context = SessionContext(auth_service)
        state = await context.resolve(VALID_TOKEN)
        assert state is SessionState.AUTHENTICATED
        assert context.user_id == READER["id"]
        assert context.display_name == "Ada Reader"

    @pytest.mark.asyncio
    async def test_resolve_without_token_skips_provider(self):
        def handler(request):
            raise AssertionError("provider must not be called")

        context = SessionContext(_service(handler))
        assert await context.resolve(None) is SessionState.UNAUTHENTICATED
        assert context.user is None

    @pytest.mark.asyncio
    async def test_resolve_rejected_token(self, auth_service):
        context = SessionContext(auth_service)
        assert await context.resolve("bogus") is SessionState.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_sign_out_clears_state(self, signed_in):
        await signed_in.sign_out()
        assert signed_in.state is SessionState.UNAUTHENTICATED
        assert signed_in.user is None
        assert signed_in.token is None


class TestDisplayName:

    def test_full_name_first(self):
        assert display_name_for(SessionUser(id="1", email="a@b.c", full_name="Ann")) == "Ann"

    def test_email_second(self):
        assert display_name_for(SessionUser(id="1", email="a@b.c")) == "a@b.c"

    def test_anonymous_last(self):
        assert display_name_for(SessionUser(id="1")) == "Anonymous"
        assert display_name_for(None) == "Anonymous"


class TestAccessGate:

    @pytest.mark.asyncio
    async def test_exactly_one_view_per_state(self, auth_service, signed_in):
        resolving = SessionContext(auth_service)
        signed_out = SessionContext(auth_service)
        await signed_out.resolve(None)

        assert AccessGate.view(resolving) is GateView.LOADING
        assert AccessGate.view(signed_out) is GateView.FALLBACK
        assert AccessGate.view(signed_in) is GateView.CONTENT

    @pytest.mark.asyncio
    async def test_admits_authenticated(self, signed_in):
        gate = AccessGate()
        assert await gate(signed_in) is signed_in

    @pytest.mark.asyncio
    async def test_rejects_with_default_fallback(self, auth_service):
        context = SessionContext(auth_service)
        await context.resolve(None)
        with pytest.raises(AuthenticationError) as exc_info:
            await AccessGate()(context)
        assert exc_info.value.fallback == default_fallback()
        assert exc_info.value.fallback["sign_in_url"] == "/auth/login"
        assert exc_info.value.fallback["sign_up_url"] == "/auth/signup"

    @pytest.mark.asyncio
    async def test_custom_fallback(self, auth_service):
        custom = {"title": "Members only", "sign_in_url": "/join"}
        context = SessionContext(auth_service)
        await context.resolve(None)
        with pytest.raises(AuthenticationError) as exc_info:
            await AccessGate(fallback=custom)(context)
        assert exc_info.value.fallback == custom

    @pytest.mark.asyncio
    async def test_resolving_context_is_not_admitted(self, auth_service):
        with pytest.raises(AuthenticationError):
            await AccessGate()(SessionContext(auth_service))
