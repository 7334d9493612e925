# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""GitHub OAuth provider adapter.

GitHub differs from Google in three ways: the token endpoint reports
failures as a 200 response with an ``error`` field, API calls authenticate
with ``Authorization: token ...``, and verified emails come from a second
call to ``/user/emails``.
"""

from datetime import datetime, timezone
from typing import Any

import httpx

from .errors import ProfileError, RateLimitError
from .models import CanonicalIdentity, RawProviderProfile
from .normalizer import normalize_github_profile
from .oauth_provider import OAuthProvider

GITHUB_API_MEDIA_TYPE = "application/vnd.github.v3+json"
USER_AGENT = "oauth-gateway"
RATE_LIMIT_RESOURCES = ("core", "search")


class GitHubOAuthProvider(OAuthProvider):
    """GitHub OAuth provider.

    Attributes:
        config: Provider settings; ``emails_endpoint`` must be set
    """

    def _token_request(self, code: str) -> dict[str, Any]:
        return {
            "json": {
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "code": code,
                "redirect_uri": self.config.redirect_uri,
            },
            "headers": {"Accept": "application/json"},
        }

    def _auth_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"token {access_token}",
            "Accept": GITHUB_API_MEDIA_TYPE,
        }

    async def fetch_profile(self, access_token: str) -> RawProviderProfile:
        """Fetch ``/user`` and then ``/user/emails``.

        Raises:
            ProfileError: If either call fails or returns an unexpected shape
        """
        async with self._client() as client:
            user = await self._get_json(client, self.config.profile_endpoint, access_token)
            emails = await self._get_json(client, self.config.emails_endpoint, access_token)

        if not isinstance(user, dict):
            raise ProfileError("GitHub user response is not an object")
        if not isinstance(emails, list):
            raise ProfileError("GitHub emails response is not a list")

        return RawProviderProfile(
            provider_id=self.provider_id,
            profile=user,
            emails=[record for record in emails if isinstance(record, dict)],
        )

    def normalize(self, raw: RawProviderProfile) -> CanonicalIdentity:
        return normalize_github_profile(raw)

    async def fetch_rate_limit(self) -> dict[str, dict[str, Any]]:
        """Report the unauthenticated GitHub API quota.

        Token exchange is rate limited separately; this covers the REST API
        the profile calls go through.

        Returns:
            ``{"core": {...}, "search": {...}}`` each with ``limit``,
            ``remaining``, ``reset`` (ISO 8601) and ``used``

        Raises:
            RateLimitError: If the endpoint is unset, unreachable, returns a
                non-success status or an unexpected body
        """
        if not self.config.rate_limit_endpoint:
            raise RateLimitError("GitHub rate limit endpoint is not configured")

        try:
            async with self._client() as client:
                response = await client.get(
                    self.config.rate_limit_endpoint,
                    headers={"Accept": GITHUB_API_MEDIA_TYPE, "User-Agent": USER_AGENT},
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RateLimitError(f"GitHub rate limit request returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise RateLimitError(f"GitHub API unavailable: {e}") from e

        try:
            resources = response.json()["resources"]
            limits: dict[str, dict[str, Any]] = {}
            for name in RATE_LIMIT_RESOURCES:
                resource = resources[name]
                limits[name] = {
                    "limit": resource["limit"],
                    "remaining": resource["remaining"],
                    "reset": datetime.fromtimestamp(resource["reset"], tz=timezone.utc)
                    .isoformat()
                    .replace("+00:00", "Z"),
                    "used": resource["used"],
                }
        except (ValueError, KeyError, TypeError, OverflowError, OSError) as e:
            raise RateLimitError(f"Unexpected GitHub rate limit response: {e}") from e

        return limits
