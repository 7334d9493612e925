# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""OAuth2 provider base class with the common authorization-code flow.

This module provides the contract every provider adapter implements and the
shared plumbing for building authorization URLs and talking to token and
profile endpoints. Provider-specific request and response shapes live in
the subclasses.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from .errors import (
    ExchangeNetworkError,
    NoTokenError,
    ProfileError,
    ProfileNetworkError,
    ProfileUnauthorizedError,
    ProviderRejectedError,
)
from .models import CanonicalIdentity, ProviderConfig, ProviderId, RawProviderProfile


class OAuthProvider(ABC):
    """Base class for OAuth2 provider adapters.

    Provides common OAuth2 functionality including:
    - Authorization URL generation
    - Authorization code exchange
    - Authenticated JSON requests against profile endpoints

    Each call makes exactly one attempt; failures surface immediately to the
    caller.

    Attributes:
        config: Static settings for this provider
        timeout: Timeout for outbound calls in seconds (None waits forever)
    """

    def __init__(
        self,
        config: ProviderConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = 10.0,
    ):
        """Initialize the provider.

        Args:
            config: Static settings for this provider
            http_client: Shared client to use for outbound calls. When omitted
                a short-lived client is created per call.
            timeout: Timeout for outbound calls made with a per-call client
        """
        self.config = config
        self.timeout = timeout
        self._http_client = http_client

    @property
    def provider_id(self) -> ProviderId:
        return self.config.provider_id

    def build_authorization_url(self) -> str:
        """Build the URL the browser is sent to for user consent.

        Deterministic for a given configuration; no network call.

        Returns:
            Authorization URL with query parameters
        """
        params: dict[str, str] = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.config.scopes),
        }
        params.update(dict(self.config.authorization_params))

        return f"{self.config.authorize_endpoint}?{httpx.QueryParams(params)}"

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    @abstractmethod
    def _token_request(self, code: str) -> dict[str, Any]:
        """Keyword arguments for the token endpoint POST (data/json/headers)."""
        pass

    @abstractmethod
    def _auth_headers(self, access_token: str) -> dict[str, str]:
        """Headers authenticating a profile request with ``access_token``."""
        pass

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token.

        Args:
            code: Authorization code from the provider redirect

        Returns:
            Access token

        Raises:
            ProviderRejectedError: If the token endpoint returns a non-success status
            ExchangeNetworkError: If the token endpoint cannot be reached
            NoTokenError: If the response carries no access token
        """
        try:
            async with self._client() as client:
                response = await client.post(self.config.token_endpoint, **self._token_request(code))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderRejectedError(
                f"{self.provider_id.value} token endpoint returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ExchangeNetworkError(f"{self.provider_id.value} token endpoint unavailable: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise NoTokenError(f"{self.provider_id.value} token response is not JSON") from e

        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token:
            reason = ""
            if isinstance(body, dict):
                reason = body.get("error_description") or body.get("error") or ""
            raise NoTokenError(
                f"No access token in {self.provider_id.value} response"
                + (f": {reason}" if reason else "")
            )
        return access_token

    async def _get_json(self, client: httpx.AsyncClient, url: str, access_token: str) -> Any:
        """GET ``url`` with the access token and decode the JSON body.

        Raises:
            ProfileUnauthorizedError: If the provider rejects the token
            ProfileError: On any other non-success status or a non-JSON body
            ProfileNetworkError: If the endpoint cannot be reached
        """
        try:
            response = await client.get(url, headers=self._auth_headers(access_token))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                raise ProfileUnauthorizedError(
                    f"{self.provider_id.value} rejected the access token ({status})"
                ) from e
            raise ProfileError(f"{self.provider_id.value} profile request returned {status}") from e
        except httpx.HTTPError as e:
            raise ProfileNetworkError(f"{self.provider_id.value} profile endpoint unavailable: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ProfileError(f"{self.provider_id.value} profile response is not JSON") from e

    @abstractmethod
    async def fetch_profile(self, access_token: str) -> RawProviderProfile:
        """Retrieve the raw profile for the user owning ``access_token``.

        Raises:
            ProfileUnauthorizedError: If the token is rejected
            ProfileNetworkError: If the provider cannot be reached
            ProfileError: If the response is unusable
        """
        pass

    @abstractmethod
    def normalize(self, raw: RawProviderProfile) -> CanonicalIdentity:
        """Map a raw profile from this provider to a canonical identity."""
        pass
