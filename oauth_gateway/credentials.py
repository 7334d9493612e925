# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Signed credential issuance and verification.

Credentials are HMAC-signed JWTs carrying the full canonical identity and a
fixed 24-hour validity window. Verification distinguishes three failure
kinds (malformed, expired, bad signature) from the anonymous state of not
presenting a token at all.
"""

import json
import secrets
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

import jwt
from jwt.utils import base64url_decode, base64url_encode

from .config import CREDENTIAL_TTL_SECONDS, SUPPORTED_ALGORITHMS
from .errors import BadSignatureError, MalformedTokenError, TokenExpiredError
from .models import CanonicalIdentity, IssuedCredential

_IDENTITY_CLAIMS = ("id", "email", "name", "picture", "provider")


def _check_signature_segment(token: str) -> None:
    """Reject a damaged signature segment on an otherwise well-formed token.

    PyJWT reports an undecodable signature as a decode error, and the
    lenient base64 decoder accepts non-canonical encodings of the same
    bytes. Once the header and payload parse, any change to the signature
    segment counts as a signature failure.

    Raises:
        BadSignatureError: If the signature segment is not canonical base64url
    """
    segments = token.split(".", 2)
    if len(segments) != 3:
        return

    header_b64, payload_b64, signature_b64 = segments
    try:
        json.loads(base64url_decode(header_b64))
        json.loads(base64url_decode(payload_b64))
    except ValueError:
        # Not a token we could have issued; jwt.decode reports it as malformed
        return

    try:
        signature = base64url_decode(signature_b64)
    except ValueError as e:
        raise BadSignatureError("Token signature is not valid base64url") from e

    if base64url_encode(signature).decode("ascii") != signature_b64:
        raise BadSignatureError("Token signature is not canonically encoded")


class TokenVerifier(ABC):
    """Capability to resolve a bearer token to an identity."""

    @abstractmethod
    def verify(self, token: str | None) -> CanonicalIdentity | None:
        """Verify a bearer token.

        Args:
            token: Encoded token, or None/empty when the client sent none

        Returns:
            The identity the token vouches for, or None when no token was
            presented (anonymous)

        Raises:
            MalformedTokenError: If the token cannot be decoded or is not ours
            TokenExpiredError: If the token's validity window has passed
            BadSignatureError: If the signature does not match
        """
        pass


class CredentialIssuer(TokenVerifier):
    """Issues and verifies HMAC-signed identity tokens.

    Attributes:
        issuer: Value of the ``iss`` claim (the gateway's base URL)
        algorithm: HMAC algorithm (HS256, HS384 or HS512)
        key_id: Key identifier placed in the JWT header
        validity_seconds: Lifetime of issued credentials
    """

    def __init__(
        self,
        issuer: str,
        secret_key: str,
        algorithm: str = "HS256",
        key_id: str | None = None,
        validity_seconds: int = CREDENTIAL_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the issuer.

        Args:
            issuer: Token issuer identifier
            secret_key: HMAC signing secret
            algorithm: Signing algorithm
            key_id: Key identifier for rotation
            validity_seconds: Credential lifetime in seconds
            clock: Returns the current time in epoch seconds

        Raises:
            ValueError: If the algorithm is unsupported or the secret is empty
        """
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported algorithm: {algorithm}. Use one of {', '.join(SUPPORTED_ALGORITHMS)}")
        if not secret_key:
            raise ValueError(f"{algorithm} requires secret_key")

        self.issuer = issuer
        self.algorithm = algorithm
        self.key_id = key_id or "default"
        self.validity_seconds = validity_seconds
        self._secret_key = secret_key
        self._clock = clock

    def issue(self, identity: CanonicalIdentity) -> IssuedCredential:
        """Sign ``identity`` into a new credential.

        Args:
            identity: Identity to vouch for

        Returns:
            IssuedCredential valid for ``validity_seconds`` from now
        """
        now = int(self._clock())
        expires_at = now + self.validity_seconds

        claims: dict[str, Any] = {
            "iss": self.issuer,
            "sub": f"{identity.provider_id.value}:{identity.external_id}",
            "iat": now,
            "exp": expires_at,
            "jti": secrets.token_urlsafe(16),
        }
        claims.update(identity.to_dict())

        token = jwt.encode(
            claims,
            self._secret_key,
            algorithm=self.algorithm,
            headers={"kid": self.key_id},
        )

        return IssuedCredential(
            encoded_token=token,
            identity=identity,
            issued_at=now,
            expires_at=expires_at,
        )

    def verify(self, token: str | None) -> CanonicalIdentity | None:
        if token is None or (isinstance(token, str) and not token.strip()):
            return None
        if not isinstance(token, str):
            raise MalformedTokenError("Token must be a string")

        token = token.strip()
        _check_signature_segment(token)

        try:
            # Expiry is checked below against the injected clock
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "require": ["iss", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise BadSignatureError("Token signature verification failed") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(f"Invalid token: {e}") from e

        expires_at = claims.get("exp")
        if not isinstance(expires_at, (int, float)):
            raise MalformedTokenError("Token exp claim is not a number")
        if expires_at <= self._clock():
            raise TokenExpiredError("Token has expired")

        missing = [name for name in _IDENTITY_CLAIMS if name not in claims]
        if missing:
            raise MalformedTokenError(f"Token missing identity claims: {', '.join(missing)}")

        try:
            return CanonicalIdentity.from_dict(claims)
        except ValueError as e:
            raise MalformedTokenError(str(e)) from e
