"""
Exception classes for Envoy OAuth authentication.

This module defines the exception hierarchy raised by the authentication
flow. Every kind is a distinct class so callers can discriminate failures
with ``isinstance`` (or ``except``) rather than by inspecting names.
"""

from typing import Any, Optional


class EnvoyAuthError(Exception):
    """Base exception for all Envoy authentication errors."""

    pass


class ConfigurationError(EnvoyAuthError):
    """Strategy configuration error (missing or invalid configuration)."""

    pass


class AuthorizationError(EnvoyAuthError):
    """
    The provider redirected back with an error other than a user denial.

    Attributes:
        code: OAuth error code from the ``error`` query parameter
        uri: Optional ``error_uri`` supplied by the provider
        status: HTTP status suggested for the host response
    """

    def __init__(
        self,
        message: Optional[str],
        code: Optional[str] = None,
        uri: Optional[str] = None,
        status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "server_error"
        self.uri = uri
        self.status = status


class TokenError(EnvoyAuthError):
    """
    Standard OAuth 2.0 error returned from the token endpoint.

    Raised for failures that follow the ``{"error", "error_description"}``
    shape of RFC 6749 section 5.2.
    """

    def __init__(
        self,
        message: Optional[str],
        code: Optional[str] = None,
        uri: Optional[str] = None,
        status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "invalid_request"
        self.uri = uri
        self.status = status


class InternalOAuthError(EnvoyAuthError):
    """
    Failed to obtain an access token for a reason no parser recognised.

    Wraps network failures and token endpoint responses that carry no
    recognisable error body.
    """

    def __init__(self, message: str, oauth_error: Any = None):
        super().__init__(message)
        self.message = message
        self.oauth_error = oauth_error


class EnvoyTokenError(EnvoyAuthError):
    """
    Error received from Envoy's token endpoint.

    These responses don't conform to the OAuth 2.0 specification: the body
    is a plain ``{"error": "<message>"}`` returned with HTTP 404.
    """

    pass


class EnvoyGraphQLError(EnvoyAuthError):
    """Failed to fetch the user profile from Envoy's GraphQL endpoint."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
