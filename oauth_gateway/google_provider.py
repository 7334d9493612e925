# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Google OAuth2/OIDC provider adapter.

Google returns the email inside the single userinfo response, so one
profile call is enough.
"""

from typing import Any

from .errors import ProfileError
from .models import CanonicalIdentity, RawProviderProfile
from .normalizer import normalize_google_profile
from .oauth_provider import OAuthProvider


class GoogleOAuthProvider(OAuthProvider):
    """Google OAuth2 provider.

    The authorization URL requests offline access and forces the consent
    screen (``access_type=offline``, ``prompt=consent``) via the configured
    authorization parameters.
    """

    def _token_request(self, code: str) -> dict[str, Any]:
        return {
            "data": {
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "redirect_uri": self.config.redirect_uri,
                "grant_type": "authorization_code",
                "code": code,
            },
            "headers": {"Accept": "application/json"},
        }

    def _auth_headers(self, access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    async def fetch_profile(self, access_token: str) -> RawProviderProfile:
        """Fetch the Google userinfo document."""
        async with self._client() as client:
            userinfo = await self._get_json(client, self.config.profile_endpoint, access_token)

        if not isinstance(userinfo, dict):
            raise ProfileError("Google userinfo response is not an object")

        return RawProviderProfile(provider_id=self.provider_id, profile=userinfo)

    def normalize(self, raw: RawProviderProfile) -> CanonicalIdentity:
        return normalize_google_profile(raw)
