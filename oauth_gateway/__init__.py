# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""OAuth gateway.

Signs users in with Google or GitHub and issues one provider-agnostic,
signed identity credential.
"""

__version__ = "0.1.0"

from .config import GatewayConfig, load_gateway_config
from .credentials import CredentialIssuer, TokenVerifier
from .errors import (
    BadSignatureError,
    ConfigurationError,
    ExchangeError,
    ExchangeNetworkError,
    GatewayError,
    MalformedTokenError,
    MissingAuthorizationCodeError,
    NoTokenError,
    ProfileError,
    ProfileNetworkError,
    ProfileUnauthorizedError,
    ProviderRejectedError,
    RateLimitError,
    TokenExpiredError,
    UnknownProviderError,
    VerifyError,
)
from .factory import create_oauth_provider, create_oauth_providers
from .github_provider import GitHubOAuthProvider
from .google_provider import GoogleOAuthProvider
from .models import (
    AuthFailure,
    AuthOutcome,
    AuthSuccess,
    AuthorizationRequest,
    CanonicalIdentity,
    FailureReason,
    FlowState,
    IssuedCredential,
    ProviderConfig,
    ProviderId,
    RawProviderProfile,
    TokenDelivery,
)
from .normalizer import normalize_github_profile, normalize_google_profile
from .oauth_provider import OAuthProvider
from .orchestrator import AuthOrchestrator
from .sessions import InMemorySessionStore, SessionStore

SUPPORTED_PROVIDERS = [provider.value for provider in ProviderId]

__all__ = [
    "__version__",
    "SUPPORTED_PROVIDERS",
    # Configuration
    "GatewayConfig",
    "load_gateway_config",
    # Models
    "AuthFailure",
    "AuthOutcome",
    "AuthSuccess",
    "AuthorizationRequest",
    "CanonicalIdentity",
    "FailureReason",
    "FlowState",
    "IssuedCredential",
    "ProviderConfig",
    "ProviderId",
    "RawProviderProfile",
    "TokenDelivery",
    # Providers
    "OAuthProvider",
    "GoogleOAuthProvider",
    "GitHubOAuthProvider",
    "create_oauth_provider",
    "create_oauth_providers",
    "normalize_google_profile",
    "normalize_github_profile",
    # Credentials and sessions
    "CredentialIssuer",
    "TokenVerifier",
    "SessionStore",
    "InMemorySessionStore",
    # Orchestration
    "AuthOrchestrator",
    # Exceptions
    "GatewayError",
    "ConfigurationError",
    "UnknownProviderError",
    "MissingAuthorizationCodeError",
    "ExchangeError",
    "NoTokenError",
    "ExchangeNetworkError",
    "ProviderRejectedError",
    "ProfileError",
    "ProfileNetworkError",
    "ProfileUnauthorizedError",
    "RateLimitError",
    "VerifyError",
    "MalformedTokenError",
    "TokenExpiredError",
    "BadSignatureError",
]
