# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Map provider-specific profiles to ``CanonicalIdentity``.

These are pure functions: no network access, no side effects, and the same
input always yields the same identity.
"""

from typing import Any, Optional

from .models import CanonicalIdentity, ProviderId, RawProviderProfile


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def select_primary_email(emails: Optional[list[dict[str, Any]]], fallback: Any = None) -> str:
    """Pick the address to use from a provider's email list.

    The first record flagged ``primary`` wins. Without one, ``fallback`` is
    used; without that, the result is empty.

    Args:
        emails: Email records as returned by the provider (may be None)
        fallback: Email from the primary profile object

    Returns:
        Selected email address, or "" if none is available
    """
    for record in emails or []:
        if isinstance(record, dict) and record.get("primary") and _text(record.get("email")):
            return _text(record.get("email"))
    return _text(fallback)


def normalize_google_profile(raw: RawProviderProfile) -> CanonicalIdentity:
    """Normalize a Google userinfo response.

    Google returns a single object with the email embedded. The v2 userinfo
    endpoint uses ``id``; the OIDC endpoint uses ``sub``.
    """
    profile = raw.profile
    email = _text(profile.get("email"))

    return CanonicalIdentity(
        external_id=_text(profile.get("id")) or _text(profile.get("sub")),
        email=email,
        display_name=_text(profile.get("name")) or email,
        avatar_url=profile.get("picture") or None,
        provider_id=ProviderId.GOOGLE,
    )


def normalize_github_profile(raw: RawProviderProfile) -> CanonicalIdentity:
    """Normalize a GitHub ``/user`` response plus its ``/user/emails`` list.

    GitHub ids are integers; logins are the fallback for both the id and the
    display name.
    """
    profile = raw.profile
    login = _text(profile.get("login"))

    return CanonicalIdentity(
        external_id=_text(profile.get("id")) or login,
        email=select_primary_email(raw.emails, fallback=profile.get("email")),
        display_name=_text(profile.get("name")) or login,
        avatar_url=profile.get("avatar_url") or None,
        provider_id=ProviderId.GITHUB,
    )
