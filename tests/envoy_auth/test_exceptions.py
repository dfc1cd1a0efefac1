"""Tests for Envoy authentication exceptions."""

import pytest

from envoy_auth.exceptions import (
    AuthorizationError,
    ConfigurationError,
    EnvoyAuthError,
    EnvoyGraphQLError,
    EnvoyTokenError,
    InternalOAuthError,
    TokenError,
)


class TestEnvoyAuthExceptions:
    """Tests for the exception hierarchy."""

    def test_envoy_auth_error_is_base_exception(self):
        """EnvoyAuthError is base for all authentication errors."""
        error = EnvoyAuthError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    def test_configuration_error_inherits_from_base(self):
        """ConfigurationError inherits from EnvoyAuthError."""
        error = ConfigurationError("config error")
        assert isinstance(error, EnvoyAuthError)
        assert str(error) == "config error"

    def test_token_error_carries_code_and_uri(self):
        """TokenError keeps the OAuth error code, uri and status."""
        error = TokenError("bad code", "invalid_grant", "https://example.com/err")

        assert isinstance(error, EnvoyAuthError)
        assert str(error) == "bad code"
        assert error.message == "bad code"
        assert error.code == "invalid_grant"
        assert error.uri == "https://example.com/err"
        assert error.status == 500

    def test_token_error_defaults_code(self):
        """TokenError defaults its code to invalid_request."""
        assert TokenError("oops").code == "invalid_request"

    def test_authorization_error_defaults_code(self):
        """AuthorizationError defaults its code to server_error."""
        error = AuthorizationError("provider down")
        assert error.code == "server_error"
        assert error.status == 500

    def test_internal_oauth_error_keeps_cause(self):
        """InternalOAuthError keeps the underlying failure."""
        cause = RuntimeError("boom")
        error = InternalOAuthError("Failed to obtain access token", cause)

        assert str(error) == "Failed to obtain access token"
        assert error.oauth_error is cause

    def test_envoy_token_error_message(self):
        """EnvoyTokenError uses the provider message verbatim."""
        error = EnvoyTokenError("subject not found")
        assert str(error) == "subject not found"

    def test_envoy_graphql_error_keeps_cause(self):
        """EnvoyGraphQLError keeps the underlying failure."""
        cause = ValueError("unreachable")
        error = EnvoyGraphQLError("Failed to fetch user profile", cause)

        assert str(error) == "Failed to fetch user profile"
        assert error.cause is cause

    def test_envoy_token_error_is_not_a_token_error(self):
        """Non-conformant and standard token errors are disjoint."""
        assert not isinstance(EnvoyTokenError("x"), TokenError)
        assert not isinstance(TokenError("x"), EnvoyTokenError)

    def test_exceptions_can_be_caught_as_base_type(self):
        """All exceptions can be caught as EnvoyAuthError."""
        exceptions = [
            ConfigurationError("error"),
            AuthorizationError("error"),
            TokenError("error"),
            InternalOAuthError("error"),
            EnvoyTokenError("error"),
            EnvoyGraphQLError("error"),
        ]

        for exc in exceptions:
            with pytest.raises(EnvoyAuthError):
                raise exc
