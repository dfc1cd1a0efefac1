"""
OAuth 2.0 authentication strategy for Envoy.

This module lets a web application delegate login to Envoy: it redirects
to Envoy's authorization endpoint, exchanges the returned code for an
access token, and fetches the user profile from Envoy's GraphQL API.

Public API:
    EnvoyOAuthConfig: Strategy configuration
    EnvoyStrategy: The Envoy strategy
    default_verify: Verify callback used when none is supplied
    AuthorizationCodeFlow: Provider-agnostic authorization code flow
    AuthenticationResult: Outcome of authenticating a request
    OAuth2Client: Authorization URL and code-for-token exchange
    fetch_profile: GraphQL profile fetcher

Exceptions:
    EnvoyAuthError: Base exception
    ConfigurationError: Configuration error
    AuthorizationError: Provider redirected back with an error
    TokenError: Standard OAuth 2.0 token endpoint error
    InternalOAuthError: Token could not be obtained
    EnvoyTokenError: Non-conformant Envoy token endpoint error
    EnvoyGraphQLError: Profile could not be fetched
"""

from .config import EnvoyOAuthConfig
from .exceptions import (
    AuthorizationError,
    ConfigurationError,
    EnvoyAuthError,
    EnvoyGraphQLError,
    EnvoyTokenError,
    InternalOAuthError,
    TokenError,
)
from .flow import (
    AuthenticationResult,
    AuthOutcome,
    AuthorizationCodeFlow,
    SessionStateStore,
)
from .oauth2 import OAuth2Client, OAuthResponseError, TokenResponse
from .profile import fetch_profile
from .strategy import EnvoyStrategy, default_verify

__all__ = [
    # Configuration
    "EnvoyOAuthConfig",
    # Strategy
    "EnvoyStrategy",
    "default_verify",
    # Flow
    "AuthorizationCodeFlow",
    "AuthenticationResult",
    "AuthOutcome",
    "SessionStateStore",
    # OAuth client
    "OAuth2Client",
    "OAuthResponseError",
    "TokenResponse",
    # Profile
    "fetch_profile",
    # Exceptions
    "EnvoyAuthError",
    "ConfigurationError",
    "AuthorizationError",
    "TokenError",
    "InternalOAuthError",
    "EnvoyTokenError",
    "EnvoyGraphQLError",
]
