# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Exception hierarchy for the OAuth gateway.

Provider adapters raise ``ExchangeError`` and ``ProfileError`` subclasses;
the orchestrator converts them into failure outcomes. ``VerifyError``
subclasses are raised by the token verifier for credentials that are present
but unusable.
"""


class GatewayError(Exception):
    """Base class for all gateway errors."""
    pass


class ConfigurationError(GatewayError):
    """Raised when required configuration is missing or invalid.

    Fatal: the process must not start.
    """
    pass


class UnknownProviderError(GatewayError):
    """Raised when a request names a provider that is not configured."""

    def __init__(self, provider_id: str, supported: list[str] | None = None):
        self.provider_id = provider_id
        self.supported = supported or []
        message = f"Unknown provider: {provider_id}"
        if self.supported:
            message += f". Supported providers: {', '.join(self.supported)}"
        super().__init__(message)


class MissingAuthorizationCodeError(GatewayError):
    """Raised when a callback arrives without an authorization code."""
    pass


class ExchangeError(GatewayError):
    """Raised when an authorization code cannot be exchanged for a token."""
    pass


class NoTokenError(ExchangeError):
    """The token endpoint answered but did not return an access token."""
    pass


class ExchangeNetworkError(ExchangeError):
    """The token endpoint could not be reached."""
    pass


class ProviderRejectedError(ExchangeError):
    """The token endpoint answered with a non-success status."""
    pass


class ProfileError(GatewayError):
    """Raised when the user profile cannot be retrieved."""
    pass


class ProfileNetworkError(ProfileError):
    """A profile endpoint could not be reached."""
    pass


class ProfileUnauthorizedError(ProfileError):
    """A profile endpoint rejected the access token."""
    pass


class RateLimitError(GatewayError):
    """Raised when the provider API quota cannot be retrieved."""
    pass


class VerifyError(GatewayError):
    """Raised when a presented credential cannot be accepted."""
    pass


class MalformedTokenError(VerifyError):
    """The credential is not a token this gateway issued."""
    pass


class TokenExpiredError(VerifyError):
    """The credential's validity window has passed."""
    pass


class BadSignatureError(VerifyError):
    """The credential's signature does not match its contents."""
    pass
