# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Factory for creating provider adapters from configuration."""

from typing import Mapping, Optional

import httpx

from .github_provider import GitHubOAuthProvider
from .google_provider import GoogleOAuthProvider
from .models import ProviderConfig, ProviderId
from .oauth_provider import OAuthProvider

_ADAPTERS: dict[ProviderId, type[OAuthProvider]] = {
    ProviderId.GOOGLE: GoogleOAuthProvider,
    ProviderId.GITHUB: GitHubOAuthProvider,
}


def create_oauth_provider(
    config: ProviderConfig,
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = 10.0,
) -> OAuthProvider:
    """Create the adapter for ``config.provider_id``.

    Args:
        config: Provider settings
        http_client: Optional shared client for outbound calls
        timeout: Timeout for outbound calls

    Returns:
        OAuthProvider instance

    Raises:
        ValueError: If the provider has no adapter or required settings are missing

    Example:
        >>> provider = create_oauth_provider(config.providers[ProviderId.GITHUB])
        >>> provider.build_authorization_url()
        'https://github.com/login/oauth/authorize?client_id=...'
    """
    adapter_cls = _ADAPTERS.get(config.provider_id)
    if adapter_cls is None:
        raise ValueError(
            f"No adapter for provider: {config.provider_id}. "
            f"Supported providers: {', '.join(p.value for p in _ADAPTERS)}"
        )

    for name in ("client_id", "client_secret", "redirect_uri"):
        if not getattr(config, name):
            raise ValueError(
                f"{name} is required for {config.provider_id.value} provider. "
                f"Provide the OAuth {name.replace('_', ' ')} explicitly"
            )

    if config.provider_id is ProviderId.GITHUB and not config.emails_endpoint:
        raise ValueError("emails_endpoint is required for github provider")

    return adapter_cls(config=config, http_client=http_client, timeout=timeout)


def create_oauth_providers(
    configs: Mapping[ProviderId, ProviderConfig],
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = 10.0,
) -> dict[ProviderId, OAuthProvider]:
    """Create one adapter per configured provider, keyed by provider id."""
    return {
        provider_id: create_oauth_provider(config, http_client=http_client, timeout=timeout)
        for provider_id, config in configs.items()
    }
