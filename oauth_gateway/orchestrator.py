# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Sign-in orchestration.

``AuthOrchestrator`` drives one sign-in flow per request:

    IDLE -> AWAITING_PROVIDER_REDIRECT                      (initiate)
    CALLBACK_RECEIVED -> TOKEN_EXCHANGED -> PROFILE_FETCHED
        -> IDENTITY_NORMALIZED -> CREDENTIAL_ISSUED -> SUCCEEDED
                                           any step -> FAILED  (callback)

Each callback is a single stateless pass. Provider errors never escape: they
become an ``AuthFailure`` carrying a message that is safe to show the user.
"""

from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlencode

from gateway_logging import Logger, create_logger

from .credentials import CredentialIssuer
from .errors import (
    ExchangeError,
    MissingAuthorizationCodeError,
    ProfileError,
    UnknownProviderError,
)
from .models import (
    AuthFailure,
    AuthOutcome,
    AuthSuccess,
    AuthorizationRequest,
    FailureReason,
    FlowState,
    IssuedCredential,
    ProviderId,
    TokenDelivery,
)
from .oauth_provider import OAuthProvider
from .sessions import SessionStore

logger = create_logger(name="gateway.orchestrator")

USER_MESSAGES = {
    FailureReason.UNKNOWN_PROVIDER: "Unknown authentication provider",
    FailureReason.MISSING_CODE: "No authorization code received",
    FailureReason.EXCHANGE_FAILED: "Failed to get access token",
    FailureReason.PROFILE_FETCH_FAILED: "Failed to retrieve user profile",
    FailureReason.INTERNAL_ERROR: "Authentication failed",
}


def failure_redirect(outcome: AuthFailure) -> str:
    """Redirect target that reports ``outcome`` to the frontend."""
    return "/?" + urlencode({"error": outcome.user_message})


class AuthOrchestrator:
    """Runs the authorization-code flow across provider adapters.

    Attributes:
        providers: Provider adapters keyed by provider id
        issuer: Credential issuer for successful sign-ins
        session_store: Session store used in session delivery mode
        token_delivery: How credentials reach the browser
        stats: Flow counters
    """

    def __init__(
        self,
        providers: Mapping[ProviderId, OAuthProvider],
        issuer: CredentialIssuer,
        session_store: Optional[SessionStore] = None,
        token_delivery: TokenDelivery = TokenDelivery.URL,
        log: Optional[Logger] = None,
    ):
        """Initialize the orchestrator.

        Args:
            providers: Provider adapters keyed by provider id
            issuer: Credential issuer
            session_store: Required when ``token_delivery`` is SESSION
            token_delivery: Deployment mode for issued credentials
            log: Logger (defaults to the module logger)

        Raises:
            ValueError: If session delivery is requested without a store
        """
        if token_delivery is TokenDelivery.SESSION and session_store is None:
            raise ValueError("Session delivery requires a session store")

        self.providers = dict(providers)
        self.issuer = issuer
        self.session_store = session_store
        self.token_delivery = token_delivery
        self.logger = log or logger

        self.stats: Dict[str, int] = {
            "logins_initiated": 0,
            "callbacks_succeeded": 0,
            "callbacks_failed": 0,
            "tokens_issued": 0,
        }

    @property
    def supported_providers(self) -> list[str]:
        return [provider_id.value for provider_id in self.providers]

    def _resolve(self, provider: str) -> Optional[OAuthProvider]:
        provider_id = ProviderId.parse(provider)
        if provider_id is None:
            return None
        return self.providers.get(provider_id)

    def initiate(self, provider: Union[str, AuthorizationRequest]) -> str:
        """Start a sign-in flow.

        Nothing is stored; the request lives only while the URL is built.

        Args:
            provider: Provider tag from the request path, or a request
                wrapping it

        Returns:
            Authorization URL to send the browser to

        Raises:
            UnknownProviderError: If the provider is not configured
        """
        if not isinstance(provider, AuthorizationRequest):
            provider = AuthorizationRequest(provider_id=provider)

        adapter = self._resolve(provider.provider_id)
        if adapter is None:
            raise UnknownProviderError(provider.provider_id, self.supported_providers)

        authorization_url = adapter.build_authorization_url()
        self.stats["logins_initiated"] += 1
        self.logger.info(
            "Authorization URL generated",
            provider=adapter.provider_id.value,
            state=FlowState.AWAITING_PROVIDER_REDIRECT.value,
        )
        return authorization_url

    def _fail(
        self,
        provider: str,
        reason: FailureReason,
        failed_at: FlowState,
        detail: str = "",
    ) -> AuthFailure:
        self.stats["callbacks_failed"] += 1
        self.logger.warning(
            "Sign-in failed",
            provider=provider,
            reason=reason.value,
            failed_at=failed_at.value,
            detail=detail,
        )
        return AuthFailure(
            reason=reason,
            user_message=USER_MESSAGES[reason],
            failed_at=failed_at,
            detail=detail,
        )

    async def callback(self, provider: str, code: Optional[str]) -> AuthOutcome:
        """Complete a sign-in flow from the provider's redirect.

        Args:
            provider: Provider tag from the request path
            code: Authorization code query parameter (may be missing)

        Returns:
            AuthSuccess with the issued credential, or AuthFailure
        """
        state = FlowState.IDLE
        try:
            adapter = self._resolve(provider)
            if adapter is None:
                raise UnknownProviderError(provider, self.supported_providers)

            state = FlowState.AWAITING_PROVIDER_REDIRECT
            if not code or not code.strip():
                raise MissingAuthorizationCodeError("Callback carried no code parameter")

            state = FlowState.CALLBACK_RECEIVED
            self.logger.info("Callback received", provider=provider, state=state.value)
            access_token = await adapter.exchange_code(code.strip())

            state = FlowState.TOKEN_EXCHANGED
            self.logger.debug("Access token received", provider=provider, state=state.value)
            raw_profile = await adapter.fetch_profile(access_token)

            state = FlowState.PROFILE_FETCHED
            try:
                identity = adapter.normalize(raw_profile)
            except ValueError as e:
                raise ProfileError(f"Profile has no usable identifier: {e}") from e

            state = FlowState.IDENTITY_NORMALIZED
            credential = self.issuer.issue(identity)
            self.stats["tokens_issued"] += 1

            state = FlowState.CREDENTIAL_ISSUED
            return await self._succeed(provider, credential)

        except UnknownProviderError as e:
            return self._fail(provider, FailureReason.UNKNOWN_PROVIDER, state, detail=str(e))
        except MissingAuthorizationCodeError as e:
            return self._fail(provider, FailureReason.MISSING_CODE, state, detail=str(e))
        except ExchangeError as e:
            return self._fail(provider, FailureReason.EXCHANGE_FAILED, state, detail=str(e))
        except ProfileError as e:
            return self._fail(provider, FailureReason.PROFILE_FETCH_FAILED, state, detail=str(e))
        except Exception as e:
            self.logger.exception("Unexpected error during callback", provider=provider, state=state.value)
            return self._fail(provider, FailureReason.INTERNAL_ERROR, state, detail=str(e))

    async def _succeed(self, provider: str, credential: IssuedCredential) -> AuthSuccess:
        session_id = None
        params: Dict[str, Any] = {"login": "success"}
        if self.token_delivery is TokenDelivery.SESSION:
            session_id = await self.session_store.create(credential.identity)
        else:
            params["token"] = credential.encoded_token

        self.stats["callbacks_succeeded"] += 1
        self.logger.info(
            "Sign-in succeeded",
            provider=provider,
            user_id=credential.identity.external_id,
            token_delivery=self.token_delivery.value,
            state=FlowState.SUCCEEDED.value,
        )

        return AuthSuccess(
            redirect_target="/?" + urlencode(params),
            credential=credential,
            session_id=session_id,
        )

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)
