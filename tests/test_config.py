# SPDX-License-Identifier: MIT
# Copyright (c) 2025 oauth-gateway contributors

"""Tests for gateway configuration loading."""

import dataclasses

import pytest

from oauth_gateway import ConfigurationError, ProviderId, TokenDelivery, load_gateway_config
from oauth_gateway.config import EnvConfigProvider


class TestEnvConfigProvider:
    """Tests for typed environment access."""

    def test_blank_values_are_missing(self):
        env = EnvConfigProvider({"APP_URL": "   "})
        assert env.get("APP_URL", "fallback") == "fallback"

    def test_get_int(self):
        env = EnvConfigProvider({"PORT": "8080"})
        assert env.get_int("PORT", 3000) == 8080
        assert env.get_int("MISSING", 3000) == 3000

    def test_malformed_int_raises(self):
        env = EnvConfigProvider({"PORT": "eighty"})
        with pytest.raises(ConfigurationError, match="PORT must be an integer"):
            env.get_int("PORT", 3000)

    def test_malformed_float_raises(self):
        env = EnvConfigProvider({"HTTP_TIMEOUT_SECONDS": "soon"})
        with pytest.raises(ConfigurationError, match="HTTP_TIMEOUT_SECONDS"):
            env.get_float("HTTP_TIMEOUT_SECONDS", 10.0)


class TestLoadGatewayConfig:
    """Tests for load_gateway_config."""

    def test_loads_complete_environment(self, base_environ, silent_logger):
        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.environment == "development"
        assert config.base_url == "http://localhost:3000"
        assert config.port == 3000
        assert config.token_delivery == TokenDelivery.URL
        assert config.jwt_algorithm == "HS256"
        assert config.http_timeout == 10.0
        assert config.credential_ttl_seconds == 24 * 60 * 60
        assert not config.signing_secret_is_ephemeral
        assert set(config.providers) == {ProviderId.GOOGLE, ProviderId.GITHUB}
        assert silent_logger.has_log("Gateway configuration loaded", level="INFO")

    def test_missing_credentials_are_all_reported(self, base_environ, silent_logger):
        """Test every missing credential is named in one error."""
        del base_environ["GOOGLE_CLIENT_SECRET"]
        base_environ["GITHUB_CLIENT_ID"] = ""

        with pytest.raises(ConfigurationError) as exc_info:
            load_gateway_config(base_environ, log=silent_logger)

        message = str(exc_info.value)
        assert "GOOGLE_CLIENT_SECRET" in message
        assert "GITHUB_CLIENT_ID" in message
        assert "GOOGLE_CLIENT_ID" not in message

    def test_production_requires_signing_secret(self, base_environ, silent_logger):
        del base_environ["SESSION_SECRET"]
        base_environ["APP_ENV"] = "production"

        with pytest.raises(ConfigurationError, match="SESSION_SECRET"):
            load_gateway_config(base_environ, log=silent_logger)

    def test_development_uses_ephemeral_secret_with_warning(self, base_environ, silent_logger):
        del base_environ["SESSION_SECRET"]

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.signing_secret_is_ephemeral
        assert len(config.signing_secret) >= 32
        assert silent_logger.has_log("SESSION_SECRET is not set", level="WARNING")

    def test_ephemeral_secret_differs_per_load(self, base_environ, silent_logger):
        del base_environ["SESSION_SECRET"]

        first = load_gateway_config(base_environ, log=silent_logger)
        second = load_gateway_config(base_environ, log=silent_logger)

        assert first.signing_secret != second.signing_secret

    def test_short_secret_warns(self, base_environ, silent_logger):
        base_environ["SESSION_SECRET"] = "short"

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.signing_secret == "short"
        assert silent_logger.has_log("shorter than recommended", level="WARNING")

    def test_secret_never_logged(self, base_environ, silent_logger):
        load_gateway_config(base_environ, log=silent_logger)

        assert base_environ["SESSION_SECRET"] not in repr(silent_logger.logs)
        assert "google-client-secret" not in repr(silent_logger.logs)

    def test_repr_hides_secrets(self, gateway_config):
        text = repr(gateway_config)

        assert gateway_config.signing_secret not in text
        assert "google-client-secret" not in text
        assert "github-client-secret" not in text

    def test_config_is_immutable(self, gateway_config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            gateway_config.port = 8080

        with pytest.raises(TypeError):
            gateway_config.providers[ProviderId.GOOGLE] = None

    def test_default_redirect_uris(self, gateway_config):
        google = gateway_config.providers[ProviderId.GOOGLE]
        github = gateway_config.providers[ProviderId.GITHUB]

        assert google.redirect_uri == "http://localhost:3000/auth/google/callback"
        assert github.redirect_uri == "http://localhost:3000/auth/github/callback"

    def test_explicit_redirect_uri(self, base_environ, silent_logger):
        base_environ["GITHUB_REDIRECT_URI"] = "https://auth.example.com/auth/github/callback"

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.providers[ProviderId.GITHUB].redirect_uri == (
            "https://auth.example.com/auth/github/callback"
        )

    def test_vercel_url_takes_precedence(self, base_environ, silent_logger):
        base_environ["VERCEL_URL"] = "my-app.vercel.app"

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.base_url == "https://my-app.vercel.app"
        assert "https://my-app.vercel.app" in config.cors_origins
        assert config.providers[ProviderId.GOOGLE].redirect_uri.startswith("https://my-app.vercel.app/")

    def test_base_url_defaults_to_localhost_port(self, base_environ, silent_logger):
        del base_environ["APP_URL"]
        base_environ["PORT"] = "4000"

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.base_url == "http://localhost:4000"

    def test_cors_origins_include_local_development(self, gateway_config):
        assert "http://localhost:3000" in gateway_config.cors_origins
        assert "https://localhost:3000" in gateway_config.cors_origins
        assert len(gateway_config.cors_origins) == len(set(gateway_config.cors_origins))

    def test_github_api_base_url_override(self, base_environ, silent_logger):
        base_environ["GITHUB_API_BASE_URL"] = "https://github.example.com/api/v3/"

        config = load_gateway_config(base_environ, log=silent_logger)
        github = config.providers[ProviderId.GITHUB]

        assert github.profile_endpoint == "https://github.example.com/api/v3/user"
        assert github.emails_endpoint == "https://github.example.com/api/v3/user/emails"

    def test_session_token_delivery(self, base_environ, silent_logger):
        base_environ["TOKEN_DELIVERY"] = "SESSION"

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.token_delivery == TokenDelivery.SESSION

    @pytest.mark.parametrize("key,value", [
        ("TOKEN_DELIVERY", "carrier-pigeon"),
        ("JWT_ALGORITHM", "RS256"),
        ("PORT", "not-a-port"),
        ("SESSION_TTL_SECONDS", "0"),
    ])
    def test_invalid_values_rejected(self, base_environ, silent_logger, key, value):
        base_environ[key] = value

        with pytest.raises(ConfigurationError):
            load_gateway_config(base_environ, log=silent_logger)

    def test_zero_timeout_disables_timeout(self, base_environ, silent_logger):
        base_environ["HTTP_TIMEOUT_SECONDS"] = "0"

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.http_timeout is None

    def test_node_env_fallback(self, base_environ, silent_logger):
        base_environ["NODE_ENV"] = "staging"

        assert load_gateway_config(base_environ, log=silent_logger).environment == "staging"

    def test_app_env_wins_over_node_env(self, base_environ, silent_logger):
        base_environ["NODE_ENV"] = "staging"
        base_environ["APP_ENV"] = "qa"

        assert load_gateway_config(base_environ, log=silent_logger).environment == "qa"

    def test_production_flag(self, base_environ, silent_logger):
        base_environ["APP_ENV"] = "Production"

        config = load_gateway_config(base_environ, log=silent_logger)

        assert config.is_production
