"""
Tests for federated provider token validation.

Provider endpoints are served by an httpx.MockTransport, so nothing
leaves the process.
"""

import hashlib
import hmac

import httpx
import pytest

from keeper.core.config import Settings
from keeper.domains.user.models import AuthProvider
from keeper.domains.user.social_auth import SocialAuthError, SocialAuthValidator

CLIENT_ID = "our-client"
APP_ID = "our-app"
APP_SECRET = "our-app-secret"


def make_validator(handler, **overrides) -> SocialAuthValidator:
    config = {
        "GOOGLE_CLIENT_ID": CLIENT_ID,
        "FACEBOOK_APP_ID": APP_ID,
        "FACEBOOK_APP_SECRET": APP_SECRET,
        **overrides,
    }
    settings = Settings(_env_file=None, **config)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SocialAuthValidator(settings, client=client)


def google(access_info=None, id_info=None, profile=None, seen=None):
    """Handler for Google's tokeninfo and userinfo endpoints."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request.url.path)
        if request.url.path == "/tokeninfo":
            params = request.url.params
            info = access_info if "access_token" in params else id_info
            if info is None:
                return httpx.Response(400, json={"error": "invalid_token"})
            return httpx.Response(200, json=info)
        if request.url.path == "/oauth2/v3/userinfo":
            if profile is None:
                return httpx.Response(401, json={"error": "invalid_token"})
            return httpx.Response(200, json=profile)
        return httpx.Response(404)

    return handler


def facebook(debug=None, profile=None, seen=None):
    """Handler for the Graph API's debug_token and me endpoints."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == "/debug_token":
            if debug is None:
                return httpx.Response(400, json={"error": {"message": "Invalid OAuth access token."}})
            return httpx.Response(200, json={"data": debug})
        if request.url.path == "/me":
            return httpx.Response(200, json=profile or {})
        return httpx.Response(404)

    return handler


class TestGoogleAccessToken:
    """Tests for Google access tokens."""

    @pytest.mark.asyncio
    async def test_access_token_for_our_client(self):
        seen = []
        handler = google(
            access_info={"azp": CLIENT_ID, "aud": CLIENT_ID, "sub": "g-1"},
            profile={"sub": "g-1", "email": "ada@example.com", "email_verified": True, "name": "Ada"},
            seen=seen,
        )

        validator = make_validator(handler)
        info = await validator.validate_token(AuthProvider.GOOGLE, "access-123")
        await validator.close()

        assert info.provider == AuthProvider.GOOGLE
        assert info.social_id == "g-1"
        assert info.email == "ada@example.com"
        assert info.full_name == "Ada"
        assert seen == ["/tokeninfo", "/oauth2/v3/userinfo"]

    @pytest.mark.asyncio
    async def test_access_token_of_another_client_rejected(self):
        """Test a token minted for another app is refused even though userinfo accepts it."""
        seen = []
        handler = google(
            access_info={"azp": "other-client", "aud": "other-client", "sub": "victim"},
            profile={"sub": "victim"},
            seen=seen,
        )

        with pytest.raises(SocialAuthError) as exc_info:
            await make_validator(handler).validate_token(AuthProvider.GOOGLE, "stolen")
        assert exc_info.value.message == "Token not issued for this application"
        assert "/oauth2/v3/userinfo" not in seen

    @pytest.mark.asyncio
    async def test_profile_for_other_subject_rejected(self):
        handler = google(
            access_info={"azp": CLIENT_ID, "sub": "g-1"},
            profile={"sub": "g-2"},
        )

        with pytest.raises(SocialAuthError):
            await make_validator(handler).validate_token(AuthProvider.GOOGLE, "t")

    @pytest.mark.asyncio
    async def test_unverified_email_is_dropped(self):
        handler = google(
            access_info={"azp": CLIENT_ID, "sub": "g-1"},
            profile={"sub": "g-1", "email": "ada@example.com", "email_verified": False},
        )

        info = await make_validator(handler).validate_token(AuthProvider.GOOGLE, "t")

        assert info.social_id == "g-1"
        assert info.email is None

    @pytest.mark.asyncio
    async def test_unconfigured_client_id_refuses_google(self):
        seen = []
        handler = google(access_info={"azp": "", "sub": "g-1"}, profile={"sub": "g-1"}, seen=seen)

        with pytest.raises(SocialAuthError):
            await make_validator(handler, GOOGLE_CLIENT_ID="").validate_token(AuthProvider.GOOGLE, "t")
        assert seen == []


class TestGoogleIdToken:
    """Tests for Google ID tokens."""

    @pytest.mark.asyncio
    async def test_id_token_for_our_client(self):
        handler = google(
            id_info={"sub": "g-2", "aud": CLIENT_ID, "email": "g@example.com", "email_verified": "true"},
        )

        info = await make_validator(handler).validate_token(AuthProvider.GOOGLE, "id-token")

        assert info.social_id == "g-2"
        assert info.email == "g@example.com"

    @pytest.mark.asyncio
    async def test_id_token_for_other_audience_rejected(self):
        handler = google(id_info={"sub": "g-2", "aud": "someone-else"})

        with pytest.raises(SocialAuthError) as exc_info:
            await make_validator(handler).validate_token(AuthProvider.GOOGLE, "t")
        assert exc_info.value.provider == AuthProvider.GOOGLE

    @pytest.mark.asyncio
    async def test_unknown_token(self):
        with pytest.raises(SocialAuthError):
            await make_validator(google()).validate_token(AuthProvider.GOOGLE, "bad")

    @pytest.mark.asyncio
    async def test_token_without_subject_rejected(self):
        handler = google(id_info={"aud": CLIENT_ID, "email": "ada@example.com"})

        with pytest.raises(SocialAuthError):
            await make_validator(handler).validate_token(AuthProvider.GOOGLE, "t")


class TestFacebook:
    """Tests for Facebook token validation."""

    @pytest.mark.asyncio
    async def test_token_for_our_app(self):
        seen = []
        handler = facebook(
            debug={"is_valid": True, "app_id": APP_ID, "user_id": "fb-1"},
            profile={"id": "fb-1", "name": "Grace"},
            seen=seen,
        )

        info = await make_validator(handler).validate_token(AuthProvider.FACEBOOK, "fb-token")

        assert info.provider == AuthProvider.FACEBOOK
        assert info.social_id == "fb-1"
        assert info.email is None

        debug_request, me_request = seen
        assert debug_request.url.params["input_token"] == "fb-token"
        assert debug_request.url.params["access_token"] == f"{APP_ID}|{APP_SECRET}"
        assert me_request.url.params["fields"] == "id,email,name"
        expected_proof = hmac.new(APP_SECRET.encode(), b"fb-token", hashlib.sha256).hexdigest()
        assert me_request.url.params["appsecret_proof"] == expected_proof

    @pytest.mark.asyncio
    async def test_token_of_another_app_rejected(self):
        """Test a valid user token issued to a different app is refused."""
        seen = []
        handler = facebook(
            debug={"is_valid": True, "app_id": "other-app", "user_id": "victim-fb"},
            profile={"id": "victim-fb", "email": "v@example.com"},
            seen=seen,
        )

        with pytest.raises(SocialAuthError) as exc_info:
            await make_validator(handler).validate_token(AuthProvider.FACEBOOK, "stolen")
        assert exc_info.value.message == "Token not issued for this application"
        assert [r.url.path for r in seen] == ["/debug_token"]

    @pytest.mark.asyncio
    async def test_profile_for_other_user_rejected(self):
        handler = facebook(
            debug={"is_valid": True, "app_id": APP_ID, "user_id": "fb-1"},
            profile={"id": "fb-2"},
        )

        with pytest.raises(SocialAuthError):
            await make_validator(handler).validate_token(AuthProvider.FACEBOOK, "t")

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self):
        handler = facebook(debug={"is_valid": False, "app_id": APP_ID})

        with pytest.raises(SocialAuthError):
            await make_validator(handler).validate_token(AuthProvider.FACEBOOK, "t")

    @pytest.mark.asyncio
    async def test_graph_error_message_is_kept(self):
        with pytest.raises(SocialAuthError) as exc_info:
            await make_validator(facebook()).validate_token(AuthProvider.FACEBOOK, "bad")
        assert exc_info.value.message == "Invalid OAuth access token."

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(SocialAuthError) as exc_info:
            await make_validator(handler).validate_token(AuthProvider.FACEBOOK, "t")
        assert exc_info.value.message == "Invalid Facebook token"

    @pytest.mark.asyncio
    async def test_unconfigured_app_refuses_facebook(self):
        seen = []
        handler = facebook(debug={"is_valid": True, "app_id": ""}, seen=seen)

        with pytest.raises(SocialAuthError):
            await make_validator(handler, FACEBOOK_APP_SECRET="").validate_token(AuthProvider.FACEBOOK, "t")
        assert seen == []


class TestTransportErrors:
    """Tests for network failures talking to a provider."""

    @pytest.mark.asyncio
    async def test_transport_error_becomes_social_auth_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SocialAuthError) as exc_info:
            await make_validator(handler).validate_token(AuthProvider.FACEBOOK, "t")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
