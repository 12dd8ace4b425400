"""Federated provider token validation.

This module resolves an access token (or, for Google, an ID token)
issued by Google or Facebook into the provider's identifier for the
user and, when shared, their email.
"""

import hashlib
import hmac
import logging
from dataclasses import dataclass

import httpx

from keeper.core.config import Settings
from keeper.domains.user.models import AuthProvider

logger = logging.getLogger(__name__)


@dataclass
class SocialUserInfo:
    """User information extracted from a provider profile."""

    provider: AuthProvider
    social_id: str
    email: str | None = None
    full_name: str | None = None


class SocialAuthError(Exception):
    """Exception raised when provider token validation fails."""

    def __init__(self, message: str, provider: AuthProvider) -> None:
        self.message = message
        self.provider = provider
        super().__init__(message)


class SocialAuthValidator:
    """Validates tokens from federated identity providers.

    Supports Google and Facebook. A token is only accepted when the
    provider confirms it was issued to this application.
    """

    # Provider token info endpoints
    GOOGLE_TOKEN_INFO_URL = "https://oauth2.googleapis.com/tokeninfo"
    GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
    FACEBOOK_DEBUG_TOKEN_URL = "https://graph.facebook.com/debug_token"
    FACEBOOK_GRAPH_URL = "https://graph.facebook.com/me"

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the validator with an HTTP client."""
        self._google_client_id = settings.GOOGLE_CLIENT_ID
        self._facebook_app_id = settings.FACEBOOK_APP_ID
        self._facebook_app_secret = settings.FACEBOOK_APP_SECRET.get_secret_value()
        self._client = client or httpx.AsyncClient(timeout=30.0)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def validate_token(
        self,
        provider: AuthProvider,
        token: str,
    ) -> SocialUserInfo:
        """Validate a provider token and extract the user's identity.

        Args:
            provider: The identity provider
            token: The access token or ID token from the provider

        Returns:
            SocialUserInfo with the provider identity

        Raises:
            SocialAuthError: If validation fails
        """
        try:
            if provider == AuthProvider.GOOGLE:
                return await self._validate_google_token(token)
            if provider == AuthProvider.FACEBOOK:
                return await self._validate_facebook_token(token)
        except httpx.HTTPError as e:
            logger.warning("Transport error talking to %s: %s", provider.value, type(e).__name__)
            raise SocialAuthError(
                f"Failed to validate {provider.value} token",
                provider,
            ) from e
        raise SocialAuthError(f"Unsupported provider: {provider}", provider)

    # ==================== Google ====================

    async def _google_token_info(self, kind: str, token: str) -> dict | None:
        """Ask Google to introspect a token; None if it does not know it."""
        response = await self._client.get(self.GOOGLE_TOKEN_INFO_URL, params={kind: token})
        if response.status_code != 200:
            return None
        return response.json()

    def _check_google_audience(self, data: dict) -> None:
        # Access tokens carry the client in ``azp``, ID tokens in ``aud``
        if self._google_client_id not in (data.get("aud"), data.get("azp")):
            logger.info("Rejected Google token issued to another client")
            raise SocialAuthError(
                "Token not issued for this application",
                AuthProvider.GOOGLE,
            )

    async def _validate_google_token(self, token: str) -> SocialUserInfo:
        """Validate a Google access token or ID token.

        Either kind goes through tokeninfo first so the issuing client
        can be checked. Access tokens then fetch the profile from
        userinfo, which must describe the same subject.
        """
        if not self._google_client_id:
            raise SocialAuthError("Google login is not configured", AuthProvider.GOOGLE)

        data = await self._google_token_info("access_token", token)
        if data is not None:
            self._check_google_audience(data)
            response = await self._client.get(
                self.GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {token}"},
            )
            if response.status_code != 200:
                raise SocialAuthError("Invalid Google token", AuthProvider.GOOGLE)
            profile = response.json()
            if data.get("sub") and str(data["sub"]) != str(profile.get("sub")):
                raise SocialAuthError("Google profile does not match token", AuthProvider.GOOGLE)
            return self._google_info(profile)

        data = await self._google_token_info("id_token", token)
        if data is None:
            raise SocialAuthError("Invalid Google token", AuthProvider.GOOGLE)
        self._check_google_audience(data)
        return self._google_info(data)

    @staticmethod
    def _google_info(data: dict) -> SocialUserInfo:
        if not data.get("sub"):
            raise SocialAuthError("Missing user ID in Google profile", AuthProvider.GOOGLE)
        verified = data.get("email_verified") in (True, "true")
        return SocialUserInfo(
            provider=AuthProvider.GOOGLE,
            social_id=str(data["sub"]),
            # An unverified email must not be treated as the user's address
            email=data.get("email") if verified else None,
            full_name=data.get("name"),
        )

    # ==================== Facebook ====================

    @staticmethod
    def _facebook_error(response: httpx.Response, default: str) -> SocialAuthError:
        try:
            error_data = response.json().get("error", {})
        except ValueError:
            error_data = {}
        return SocialAuthError(error_data.get("message", default), AuthProvider.FACEBOOK)

    async def _validate_facebook_token(self, token: str) -> SocialUserInfo:
        """Validate a Facebook access token with the Graph API.

        ``debug_token``, called with the app access token, confirms the
        user token is valid and belongs to this app before the profile
        is read.
        """
        if not (self._facebook_app_id and self._facebook_app_secret):
            raise SocialAuthError("Facebook login is not configured", AuthProvider.FACEBOOK)

        response = await self._client.get(
            self.FACEBOOK_DEBUG_TOKEN_URL,
            params={
                "input_token": token,
                "access_token": f"{self._facebook_app_id}|{self._facebook_app_secret}",
            },
        )
        if response.status_code != 200:
            raise self._facebook_error(response, "Invalid Facebook token")

        debug = response.json().get("data", {})
        if not debug.get("is_valid"):
            raise SocialAuthError("Invalid Facebook token", AuthProvider.FACEBOOK)
        if str(debug.get("app_id")) != self._facebook_app_id:
            logger.info("Rejected Facebook token issued to another app")
            raise SocialAuthError("Token not issued for this application", AuthProvider.FACEBOOK)

        response = await self._client.get(
            self.FACEBOOK_GRAPH_URL,
            params={
                "access_token": token,
                "fields": "id,email,name",
                "appsecret_proof": hmac.new(
                    self._facebook_app_secret.encode(),
                    token.encode(),
                    hashlib.sha256,
                ).hexdigest(),
            },
        )
        if response.status_code != 200:
            raise self._facebook_error(response, "Invalid Facebook token")

        data = response.json()
        if not data.get("id"):
            raise SocialAuthError("Missing user ID in Facebook profile", AuthProvider.FACEBOOK)
        if debug.get("user_id") and str(debug["user_id"]) != str(data["id"]):
            raise SocialAuthError("Facebook profile does not match token", AuthProvider.FACEBOOK)

        return SocialUserInfo(
            provider=AuthProvider.FACEBOOK,
            social_id=str(data["id"]),
            email=data.get("email"),
            full_name=data.get("name"),
        )
