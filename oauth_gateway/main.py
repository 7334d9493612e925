# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""OAuth Gateway HTTP service.

This service provides:
- Sign-in initiation for Google and GitHub
- OAuth callbacks that issue a signed, provider-agnostic credential
- Session status (server-side session channel)
- Current user from a bearer token (token channel)
- Health and usage information

The session channel and the bearer-token channel are independent: each
endpoint states which one it trusts, and the two may disagree.
"""

import os
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import uvicorn
from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway_logging import create_logger, create_uvicorn_log_config

from . import __version__
from .config import GatewayConfig, load_gateway_config
from .credentials import CredentialIssuer, TokenVerifier
from .errors import (
    ConfigurationError,
    RateLimitError,
    TokenExpiredError,
    UnknownProviderError,
    VerifyError,
)
from .factory import create_oauth_providers
from .github_provider import GitHubOAuthProvider
from .models import AuthorizationRequest, AuthSuccess, ProviderId
from .orchestrator import AuthOrchestrator, failure_redirect
from .sessions import InMemorySessionStore, SessionStore

logger = create_logger(name="gateway")

SESSION_COOKIE = "gateway_session"


@dataclass
class Gateway:
    """Components shared by all request handlers."""
    config: GatewayConfig
    orchestrator: AuthOrchestrator
    session_store: SessionStore
    token_verifier: TokenVerifier


class AuthUrlResponse(BaseModel):
    auth_url: str = Field(..., description="Provider authorization URL")


class AuthStatusResponse(BaseModel):
    authenticated: bool
    user: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: str
    environment: str


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_gateway(
    config: GatewayConfig,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Gateway:
    """Wire provider adapters, issuer, session store and orchestrator.

    Args:
        config: Loaded gateway configuration
        http_client: Optional shared client for provider calls

    Returns:
        Gateway with every component constructed
    """
    issuer = CredentialIssuer(
        issuer=config.base_url,
        secret_key=config.signing_secret,
        algorithm=config.jwt_algorithm,
        validity_seconds=config.credential_ttl_seconds,
    )
    session_store = InMemorySessionStore(ttl_seconds=config.session_ttl_seconds)
    providers = create_oauth_providers(
        config.providers,
        http_client=http_client,
        timeout=config.http_timeout,
    )
    orchestrator = AuthOrchestrator(
        providers=providers,
        issuer=issuer,
        session_store=session_store,
        token_delivery=config.token_delivery,
    )
    return Gateway(
        config=config,
        orchestrator=orchestrator,
        session_store=session_store,
        token_verifier=issuer,
    )


router = APIRouter()


def get_gateway(request: Request) -> Gateway:
    gateway: Optional[Gateway] = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return gateway


@router.post("/api/auth/{provider}", response_model=AuthUrlResponse)
async def initiate_login(provider: str, request: Request) -> Any:
    """Generate the provider authorization URL.

    Returns:
        ``{"auth_url": ...}`` or 500 with ``{"error": ...}`` for an unknown
        or unconfigured provider
    """
    gateway = get_gateway(request)

    try:
        auth_url = gateway.orchestrator.initiate(AuthorizationRequest(provider_id=provider))
    except UnknownProviderError as e:
        logger.error("Error generating auth URL", provider=provider, error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": f"Failed to generate {provider} auth URL"},
        )

    return AuthUrlResponse(auth_url=auth_url)


@router.get("/auth/{provider}/callback")
async def oauth_callback(
    provider: str,
    request: Request,
    code: Optional[str] = Query(None, description="Authorization code from provider"),
) -> RedirectResponse:
    """OAuth callback handler.

    Always answers with a redirect: to ``/?login=success`` (with the token
    in the URL or a session cookie, depending on deployment mode) or to
    ``/?error=<message>``.
    """
    gateway = get_gateway(request)

    outcome = await gateway.orchestrator.callback(provider, code)

    if not isinstance(outcome, AuthSuccess):
        return RedirectResponse(url=failure_redirect(outcome), status_code=status.HTTP_302_FOUND)

    response = RedirectResponse(url=outcome.redirect_target, status_code=status.HTTP_302_FOUND)
    if outcome.session_id:
        response.set_cookie(
            key=SESSION_COOKIE,
            value=outcome.session_id,
            max_age=gateway.config.session_ttl_seconds,
            httponly=True,
            secure=gateway.config.base_url.startswith("https://"),
            samesite="lax",
            path="/",
        )
    return response


@router.get("/auth/status", response_model=AuthStatusResponse, response_model_exclude_none=True)
async def auth_status(request: Request) -> Any:
    """Report the server-side session state.

    Only the session cookie is consulted; bearer tokens are ignored here.
    """
    gateway = get_gateway(request)

    identity = await gateway.session_store.get(request.cookies.get(SESSION_COOKIE))
    if identity is None:
        return AuthStatusResponse(authenticated=False)
    return AuthStatusResponse(authenticated=True, user=identity.to_dict())


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


@router.get("/api/me")
async def current_user(request: Request) -> JSONResponse:
    """Return the user named by the bearer token.

    Only the ``Authorization: Bearer`` header is consulted; the session
    cookie is ignored here.
    """
    gateway = get_gateway(request)

    try:
        identity = gateway.token_verifier.verify(_bearer_token(request))
    except TokenExpiredError:
        message = "Token expired"
        identity = None
    except VerifyError as e:
        logger.info("Bearer token rejected", reason=type(e).__name__)
        message = "Invalid token"
        identity = None
    else:
        message = "Not logged in"

    if identity is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"authenticated": False, "message": message},
        )

    return JSONResponse(content={"authenticated": True, "user": identity.to_dict()})


@router.get("/auth/logout")
async def logout(request: Request) -> RedirectResponse:
    """End the server-side session and go home, even if teardown fails."""
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(SESSION_COOKIE, path="/")

    try:
        gateway = get_gateway(request)
        await gateway.session_store.destroy(request.cookies.get(SESSION_COOKIE))
    except Exception as e:
        logger.error("Logout error", error=str(e))

    return response


@router.get("/api/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Liveness check."""
    gateway: Optional[Gateway] = getattr(request.app.state, "gateway", None)
    environment = gateway.config.environment if gateway else "unknown"
    return HealthResponse(status="OK", timestamp=_now_iso(), environment=environment)


@router.get("/api/usage")
async def usage(request: Request) -> dict[str, Any]:
    """Describe the sign-in endpoints and report flow counters."""
    gateway = get_gateway(request)

    endpoints: dict[str, str] = {}
    for provider in gateway.orchestrator.supported_providers:
        endpoints[f"{provider}_oauth"] = f"/api/auth/{provider}"
        endpoints[f"{provider}_callback"] = f"/auth/{provider}/callback"
    if ProviderId.GITHUB.value in gateway.orchestrator.supported_providers:
        endpoints["github_rate_limit"] = "/api/github-rate-limit"

    return {
        "message": "OAuth Usage Information",
        "endpoints": endpoints,
        "token_delivery": gateway.config.token_delivery.value,
        "stats": gateway.orchestrator.get_stats(),
        "timestamp": _now_iso(),
    }


@router.get("/api/github-rate-limit")
async def github_rate_limit(request: Request) -> JSONResponse:
    """Report the GitHub REST API quota.

    Returns:
        Core and search quotas, or 500 with ``{"error", "message"}`` when
        GitHub cannot be queried
    """
    gateway = get_gateway(request)
    github = gateway.orchestrator.providers.get(ProviderId.GITHUB)

    try:
        if not isinstance(github, GitHubOAuthProvider):
            raise RateLimitError("GitHub provider is not configured")
        rate_limits = await github.fetch_rate_limit()
    except RateLimitError as e:
        logger.error("Error checking GitHub rate limits", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to check GitHub rate limits", "message": str(e)},
        )

    return JSONResponse(content={
        "message": "GitHub API Rate Limit Information",
        "rate_limits": rate_limits,
        "note": "OAuth token exchange has separate rate limits",
        "timestamp": _now_iso(),
    })


@router.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render 404s as JSON; other HTTP errors keep FastAPI's shape."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.info("Route not found", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "Route not found",
                "path": request.url.path,
                "message": "This route is not handled by the server",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    config: Optional[GatewayConfig] = None,
    gateway: Optional[Gateway] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Components are built eagerly so that configuration errors surface
    before the server starts accepting connections.

    Args:
        config: Configuration to use (loaded from the environment if omitted)
        gateway: Pre-built components (tests); overrides ``config``

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If configuration is missing or invalid
    """
    if gateway is None:
        if config is None:
            # e.g. uvicorn --factory; .env values apply before reading the environment
            load_dotenv()
            config = load_gateway_config()
        gateway = build_gateway(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting OAuth Gateway",
            base_url=gateway.config.base_url,
            environment=gateway.config.environment,
            providers=gateway.orchestrator.supported_providers,
        )
        yield
        logger.info("Shutting down OAuth Gateway")

    app = FastAPI(
        title="OAuth Gateway",
        version=__version__,
        description="Google and GitHub sign-in with provider-agnostic credentials",
        lifespan=lifespan,
    )
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(gateway.config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.include_router(router)

    return app


def main() -> None:
    """Load configuration and serve with uvicorn."""
    load_dotenv()

    try:
        config = load_gateway_config()
    except ConfigurationError as e:
        logger.error("Invalid configuration; refusing to start", error=str(e))
        sys.exit(1)

    app = create_app(config)
    log_level = os.getenv("LOG_LEVEL", "INFO")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_config=create_uvicorn_log_config("gateway", log_level),
        access_log=True,
    )


if __name__ == "__main__":
    main()
