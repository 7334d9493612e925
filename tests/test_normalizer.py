# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Tests for profile normalization."""

import pytest

from oauth_gateway import CanonicalIdentity, ProviderId, RawProviderProfile
from oauth_gateway.normalizer import (
    normalize_github_profile,
    normalize_google_profile,
    select_primary_email,
)


def github_raw(profile, emails=None):
    return RawProviderProfile(provider_id=ProviderId.GITHUB, profile=profile, emails=emails)


def google_raw(profile):
    return RawProviderProfile(provider_id=ProviderId.GOOGLE, profile=profile)


class TestSelectPrimaryEmail:
    """Tests for select_primary_email."""

    def test_primary_wins_over_order(self):
        emails = [
            {"email": "old@x.com", "primary": False},
            {"email": "new@x.com", "primary": True},
        ]
        assert select_primary_email(emails) == "new@x.com"

    def test_first_primary_wins(self):
        emails = [
            {"email": "one@x.com", "primary": True},
            {"email": "two@x.com", "primary": True},
        ]
        assert select_primary_email(emails) == "one@x.com"

    def test_falls_back_without_primary(self):
        emails = [{"email": "other@x.com", "primary": False}]
        assert select_primary_email(emails, fallback="profile@x.com") == "profile@x.com"

    @pytest.mark.parametrize("emails", [None, []])
    def test_empty_without_any_email(self, emails):
        assert select_primary_email(emails) == ""


class TestNormalizeGoogle:
    """Tests for Google profile normalization."""

    def test_full_profile(self):
        identity = normalize_google_profile(google_raw({
            "id": "42",
            "email": "a@x.com",
            "name": "A",
            "picture": "https://example.com/a.png",
        }))

        assert identity == CanonicalIdentity(
            external_id="42",
            email="a@x.com",
            display_name="A",
            avatar_url="https://example.com/a.png",
            provider_id=ProviderId.GOOGLE,
        )

    def test_sub_used_when_id_missing(self):
        identity = normalize_google_profile(google_raw({"sub": "1099", "email": "s@x.com"}))

        assert identity.external_id == "1099"
        assert identity.display_name == "s@x.com"

    def test_missing_picture_is_none(self):
        identity = normalize_google_profile(google_raw({"id": "42", "name": "A"}))

        assert identity.avatar_url is None
        assert identity.email == ""

    def test_missing_identifier_raises(self):
        with pytest.raises(ValueError):
            normalize_google_profile(google_raw({"email": "a@x.com"}))

    def test_is_deterministic(self):
        raw = google_raw({"id": "42", "email": "a@x.com", "name": "A"})
        assert normalize_google_profile(raw) == normalize_google_profile(raw)


class TestNormalizeGithub:
    """Tests for GitHub profile normalization."""

    def test_primary_email_and_login_fallback(self):
        identity = normalize_github_profile(github_raw(
            {"id": 7, "login": "bob", "name": None, "avatar_url": "https://avatars.example.com/7"},
            emails=[
                {"email": "old@x.com", "primary": False},
                {"email": "new@x.com", "primary": True},
            ],
        ))

        assert identity.external_id == "7"
        assert identity.email == "new@x.com"
        assert identity.display_name == "bob"
        assert identity.avatar_url == "https://avatars.example.com/7"
        assert identity.provider_id == ProviderId.GITHUB

    def test_empty_emails_gives_empty_email(self):
        """Test a user with no visible email still authenticates."""
        identity = normalize_github_profile(github_raw({"id": 7, "login": "bob"}, emails=[]))

        assert identity.email == ""
        assert identity.external_id == "7"

    def test_profile_email_fallback(self):
        identity = normalize_github_profile(github_raw(
            {"id": 7, "login": "bob", "email": "public@x.com"},
            emails=[{"email": "secondary@x.com", "primary": False}],
        ))

        assert identity.email == "public@x.com"

    def test_name_preferred_over_login(self):
        identity = normalize_github_profile(github_raw({"id": 7, "login": "bob", "name": "Bob B"}, emails=[]))
        assert identity.display_name == "Bob B"

    def test_login_used_when_id_missing(self):
        identity = normalize_github_profile(github_raw({"login": "bob"}, emails=[]))
        assert identity.external_id == "bob"

    def test_missing_identifier_raises(self):
        with pytest.raises(ValueError):
            normalize_github_profile(github_raw({"name": "Nobody"}, emails=[]))
