# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Identity, credential and flow-outcome models.

All models are frozen dataclasses: they are constructed fresh for each
request and may be shared between concurrent requests without locking.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class ProviderId(str, Enum):
    """Identity providers the gateway knows how to talk to."""
    GOOGLE = "google"
    GITHUB = "github"

    @classmethod
    def parse(cls, value: str) -> "ProviderId | None":
        """Return the matching member, or None for an unknown tag."""
        try:
            return cls(value.lower())
        except (ValueError, AttributeError):
            return None


class TokenDelivery(str, Enum):
    """How a freshly issued credential reaches the browser."""
    URL = "url"
    SESSION = "session"


class FlowState(str, Enum):
    """States of one sign-in flow."""
    IDLE = "idle"
    AWAITING_PROVIDER_REDIRECT = "awaiting_provider_redirect"
    CALLBACK_RECEIVED = "callback_received"
    TOKEN_EXCHANGED = "token_exchanged"
    PROFILE_FETCHED = "profile_fetched"
    IDENTITY_NORMALIZED = "identity_normalized"
    CREDENTIAL_ISSUED = "credential_issued"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureReason(str, Enum):
    """Categorized reason a callback did not succeed."""
    UNKNOWN_PROVIDER = "unknown_provider"
    MISSING_CODE = "missing_authorization_code"
    EXCHANGE_FAILED = "exchange_failed"
    PROFILE_FETCH_FAILED = "profile_fetch_failed"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class ProviderConfig:
    """Static OAuth settings for one provider.

    Attributes:
        provider_id: Which provider these settings belong to
        client_id: OAuth application client ID
        client_secret: OAuth application client secret (never printed)
        redirect_uri: Callback URL registered with the provider
        authorize_endpoint: Provider's authorization endpoint
        token_endpoint: Provider's token endpoint
        profile_endpoint: Endpoint returning the user's profile
        emails_endpoint: Endpoint returning the user's email list, if the
            provider keeps emails separate from the profile
        rate_limit_endpoint: Endpoint reporting the provider API quota, if
            the provider exposes one
        scopes: Scopes requested at authorization time
        authorization_params: Extra provider-specific authorization query
            parameters (consent / offline-access flags)
    """
    provider_id: ProviderId
    client_id: str
    client_secret: str = field(repr=False)
    redirect_uri: str
    authorize_endpoint: str
    token_endpoint: str
    profile_endpoint: str
    emails_endpoint: str | None = None
    rate_limit_endpoint: str | None = None
    scopes: tuple[str, ...] = ()
    authorization_params: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class AuthorizationRequest:
    """A request to start signing in with ``provider_id``."""
    provider_id: str


@dataclass(frozen=True)
class RawProviderProfile:
    """Profile data exactly as the provider returned it.

    Attributes:
        provider_id: Provider that produced the data
        profile: Body of the primary profile call
        emails: Body of the secondary email-list call, or None when the
            provider does not need one
    """
    provider_id: ProviderId
    profile: dict[str, Any]
    emails: list[dict[str, Any]] | None = None


@dataclass(frozen=True)
class CanonicalIdentity:
    """Provider-agnostic user identity.

    ``external_id`` is unique only within ``provider_id``. ``email`` may be
    empty when the provider exposes none.
    """
    external_id: str
    email: str
    display_name: str
    avatar_url: str | None
    provider_id: ProviderId

    def __post_init__(self) -> None:
        if not isinstance(self.provider_id, ProviderId):
            raise ValueError(f"Unsupported provider_id: {self.provider_id!r}")
        if not self.external_id:
            raise ValueError("external_id must be non-empty")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the shape used in tokens, sessions and API responses."""
        return {
            "id": self.external_id,
            "email": self.email,
            "name": self.display_name,
            "picture": self.avatar_url,
            "provider": self.provider_id.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CanonicalIdentity":
        """Inverse of ``to_dict``.

        Raises:
            ValueError: If the provider tag is unknown or the id is empty
        """
        provider = ProviderId.parse(str(data.get("provider", "")))
        if provider is None:
            raise ValueError(f"Unsupported provider: {data.get('provider')!r}")
        return cls(
            external_id=str(data.get("id") or ""),
            email=data.get("email") or "",
            display_name=data.get("name") or "",
            avatar_url=data.get("picture"),
            provider_id=provider,
        )


@dataclass(frozen=True)
class IssuedCredential:
    """A signed credential and the identity it vouches for.

    ``issued_at`` and ``expires_at`` are seconds since the epoch.
    """
    encoded_token: str = field(repr=False)
    identity: CanonicalIdentity
    issued_at: int
    expires_at: int


@dataclass(frozen=True)
class AuthSuccess:
    """Terminal result of a callback that produced a credential."""
    redirect_target: str
    credential: IssuedCredential
    session_id: str | None = field(default=None, repr=False)

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class AuthFailure:
    """Terminal result of a callback that did not produce a credential.

    Attributes:
        reason: Failure category
        user_message: Human-readable message shown to the user
        failed_at: State the flow was in when it failed
        detail: Diagnostic detail for logs, never shown to the user
    """
    reason: FailureReason
    user_message: str
    failed_at: FlowState
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return False


AuthOutcome = Union[AuthSuccess, AuthFailure]
