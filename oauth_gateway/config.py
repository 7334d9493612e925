# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Gateway configuration.

Configuration is read from the environment exactly once at startup into an
immutable ``GatewayConfig`` which is then handed to every component that
needs it. Missing provider credentials are fatal.
"""

import os
import secrets
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from gateway_logging import Logger, create_logger

from .errors import ConfigurationError
from .models import ProviderConfig, ProviderId, TokenDelivery

logger = create_logger(name="gateway.config")

CREDENTIAL_TTL_SECONDS = 24 * 60 * 60
MIN_SECRET_LENGTH = 32
SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")

GOOGLE_AUTHORIZE_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
GOOGLE_PROFILE_ENDPOINT = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
)

GITHUB_AUTHORIZE_ENDPOINT = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_ENDPOINT = "https://github.com/login/oauth/access_token"
GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_SCOPES = ("user:email",)


class EnvConfigProvider:
    """Typed accessors over an environment mapping.

    Unlike a lenient reader, malformed numbers raise ``ConfigurationError``
    so that a typo fails the deployment instead of silently using a default.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._environ.get(key)
        if value is None or value.strip() == "":
            return default
        return value.strip()

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be a number, got {value!r}") from None


@dataclass(frozen=True)
class GatewayConfig:
    """Immutable process-wide configuration.

    Attributes:
        environment: Deployment environment name (e.g. "development")
        base_url: Public base URL of the gateway
        host: Interface to bind
        port: Port to listen on
        providers: Provider settings keyed by provider id
        signing_secret: HMAC secret for issued credentials (never printed)
        signing_secret_is_ephemeral: True when no secret was configured and a
            random per-process secret is in use
        jwt_algorithm: HMAC algorithm for issued credentials
        token_delivery: How issued credentials reach the browser
        http_timeout: Timeout for outbound provider calls in seconds, or None
        session_ttl_seconds: Lifetime of server-side sessions
        cors_origins: Origins allowed to call the API with credentials
    """
    environment: str
    base_url: str
    host: str
    port: int
    providers: Mapping[ProviderId, ProviderConfig]
    signing_secret: str = field(repr=False)
    signing_secret_is_ephemeral: bool = False
    jwt_algorithm: str = "HS256"
    token_delivery: TokenDelivery = TokenDelivery.URL
    http_timeout: float | None = 10.0
    session_ttl_seconds: int = CREDENTIAL_TTL_SECONDS
    cors_origins: tuple[str, ...] = ()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def credential_ttl_seconds(self) -> int:
        return CREDENTIAL_TTL_SECONDS


def _resolve_base_url(env: EnvConfigProvider, port: int) -> str:
    vercel_url = env.get("VERCEL_URL")
    if vercel_url:
        return f"https://{vercel_url}"
    return (env.get("APP_URL") or f"http://localhost:{port}").rstrip("/")


def _resolve_signing_secret(env: EnvConfigProvider, environment: str, log: Logger) -> tuple[str, bool]:
    secret = env.get("SESSION_SECRET")
    if secret:
        if len(secret) < MIN_SECRET_LENGTH:
            log.warning(
                "SESSION_SECRET is shorter than recommended",
                min_length=MIN_SECRET_LENGTH,
            )
        return secret, False

    if environment.lower() == "production":
        raise ConfigurationError("SESSION_SECRET must be set in production")

    log.warning(
        "SESSION_SECRET is not set; using a random per-process signing secret. "
        "Issued tokens will not survive a restart. Never run like this in production.",
        environment=environment,
    )
    return secrets.token_urlsafe(48), True


def _build_provider_configs(env: EnvConfigProvider, base_url: str) -> dict[ProviderId, ProviderConfig]:
    missing = [
        key for key in (
            "GOOGLE_CLIENT_ID",
            "GOOGLE_CLIENT_SECRET",
            "GITHUB_CLIENT_ID",
            "GITHUB_CLIENT_SECRET",
        )
        if not env.get(key)
    ]
    if missing:
        raise ConfigurationError(
            f"OAuth credentials not found in environment: {', '.join(missing)}"
        )

    github_api = (env.get("GITHUB_API_BASE_URL") or GITHUB_API_BASE_URL).rstrip("/")

    return {
        ProviderId.GOOGLE: ProviderConfig(
            provider_id=ProviderId.GOOGLE,
            client_id=env.get("GOOGLE_CLIENT_ID"),
            client_secret=env.get("GOOGLE_CLIENT_SECRET"),
            redirect_uri=env.get("GOOGLE_REDIRECT_URI") or f"{base_url}/auth/google/callback",
            authorize_endpoint=GOOGLE_AUTHORIZE_ENDPOINT,
            token_endpoint=GOOGLE_TOKEN_ENDPOINT,
            profile_endpoint=GOOGLE_PROFILE_ENDPOINT,
            scopes=GOOGLE_SCOPES,
            authorization_params=(("access_type", "offline"), ("prompt", "consent")),
        ),
        ProviderId.GITHUB: ProviderConfig(
            provider_id=ProviderId.GITHUB,
            client_id=env.get("GITHUB_CLIENT_ID"),
            client_secret=env.get("GITHUB_CLIENT_SECRET"),
            redirect_uri=env.get("GITHUB_REDIRECT_URI") or f"{base_url}/auth/github/callback",
            authorize_endpoint=GITHUB_AUTHORIZE_ENDPOINT,
            token_endpoint=GITHUB_TOKEN_ENDPOINT,
            profile_endpoint=f"{github_api}/user",
            emails_endpoint=f"{github_api}/user/emails",
            rate_limit_endpoint=f"{github_api}/rate_limit",
            scopes=GITHUB_SCOPES,
        ),
    }


def load_gateway_config(
    environ: Optional[Mapping[str, str]] = None,
    log: Optional[Logger] = None,
) -> GatewayConfig:
    """Load gateway configuration from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ``
        log: Logger for configuration warnings (defaults to module logger)

    Returns:
        Immutable GatewayConfig

    Raises:
        ConfigurationError: If provider credentials are missing, the signing
            secret is missing in production, or a value is malformed

    Example:
        >>> config = load_gateway_config({"GOOGLE_CLIENT_ID": "...", ...})
        >>> config.token_delivery
        <TokenDelivery.URL: 'url'>
    """
    env = EnvConfigProvider(environ)
    log = log or logger

    environment = env.get("APP_ENV") or env.get("NODE_ENV") or "development"
    port = env.get_int("PORT", 3000)
    base_url = _resolve_base_url(env, port)
    providers = _build_provider_configs(env, base_url)
    signing_secret, ephemeral = _resolve_signing_secret(env, environment, log)

    algorithm = (env.get("JWT_ALGORITHM") or "HS256").upper()
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ConfigurationError(
            f"Unsupported JWT_ALGORITHM: {algorithm}. Use one of {', '.join(SUPPORTED_ALGORITHMS)}"
        )

    delivery_raw = (env.get("TOKEN_DELIVERY") or TokenDelivery.URL.value).lower()
    try:
        token_delivery = TokenDelivery(delivery_raw)
    except ValueError:
        raise ConfigurationError(
            f"Unsupported TOKEN_DELIVERY: {delivery_raw}. Use 'url' or 'session'"
        ) from None

    timeout = env.get_float("HTTP_TIMEOUT_SECONDS", 10.0)
    session_ttl = env.get_int("SESSION_TTL_SECONDS", CREDENTIAL_TTL_SECONDS)
    if session_ttl <= 0:
        raise ConfigurationError("SESSION_TTL_SECONDS must be positive")

    cors_origins = tuple(dict.fromkeys([base_url, "http://localhost:3000", "https://localhost:3000"]))

    config = GatewayConfig(
        environment=environment,
        base_url=base_url,
        host=env.get("HOST") or "0.0.0.0",
        port=port,
        providers=MappingProxyType(providers),
        signing_secret=signing_secret,
        signing_secret_is_ephemeral=ephemeral,
        jwt_algorithm=algorithm,
        token_delivery=token_delivery,
        http_timeout=timeout if timeout > 0 else None,
        session_ttl_seconds=session_ttl,
        cors_origins=cors_origins,
    )

    log.info(
        "Gateway configuration loaded",
        environment=environment,
        base_url=base_url,
        providers=[p.value for p in providers],
        token_delivery=token_delivery.value,
    )
    return config
