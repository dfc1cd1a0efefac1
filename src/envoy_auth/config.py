"""
Configuration for the Envoy OAuth strategy.

This module provides configuration management for OAuth 2.0 authentication
with Envoy. Configuration can be loaded from environment variables or
provided programmatically.
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Union

from .exceptions import ConfigurationError

DEFAULT_HOST = "envoy.com"

DEFAULT_PROFILE_QUERY = """
    query UserQuery {
      me {
        id
        name: formattedName
        email
      }
    }
"""


@dataclass
class EnvoyOAuthConfig:
    """
    Configuration for the Envoy OAuth 2.0 strategy.

    Endpoint URLs left unset are derived from ``host``, so pointing a test
    or staging deployment at another environment only needs ``host``.

    Attributes:
        client_id: Envoy application client ID
        client_secret: Envoy application client secret
        callback_url: URL Envoy redirects to after authorization. May be
            relative to the URL of the inbound request.
        scope: Requested scopes, as a list or a comma-delimited string
        host: Envoy host the endpoint defaults are derived from
        authorization_url: Envoy OAuth authorization endpoint
        token_url: Envoy OAuth token endpoint
        graphql_url: Envoy GraphQL endpoint used for the profile
        profile_query: GraphQL query issued to build the profile
        scope_separator: Separator used to join a list of scopes
        state: Whether to protect the flow with a session-bound state value
        skip_user_profile: Whether to skip the profile fetch entirely
    """

    # Required - from the Envoy developer dashboard
    client_id: str
    client_secret: str

    callback_url: Optional[str] = None
    scope: Optional[Union[List[str], str]] = None

    # Envoy endpoints
    host: str = DEFAULT_HOST
    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    graphql_url: Optional[str] = None

    profile_query: str = DEFAULT_PROFILE_QUERY

    scope_separator: str = " "
    state: bool = False
    skip_user_profile: bool = False

    def __post_init__(self) -> None:
        """Validate configuration and derive endpoint defaults."""
        if not self.client_id:
            raise ConfigurationError("client_id cannot be empty")

        if not self.client_secret:
            raise ConfigurationError("client_secret cannot be empty")

        if not self.host:
            raise ConfigurationError("host cannot be empty")

        if not self.profile_query or not self.profile_query.strip():
            raise ConfigurationError("profile_query cannot be empty")

        if self.authorization_url is None:
            self.authorization_url = f"https://dashboard.{self.host}/a/auth/v0/authorize"
        if self.token_url is None:
            self.token_url = f"https://app.{self.host}/a/auth/v0/token"
        if self.graphql_url is None:
            self.graphql_url = f"https://app.{self.host}/a/graphql"

    @classmethod
    def from_env(cls) -> "EnvoyOAuthConfig":
        """
        Load configuration from environment variables.

        Required environment variables:
            ENVOY_CLIENT_ID: Envoy application client ID
            ENVOY_CLIENT_SECRET: Envoy application client secret

        Optional environment variables:
            ENVOY_CALLBACK_URL: Redirect target registered with Envoy
            ENVOY_SCOPE: Comma-delimited scopes
            ENVOY_HOST: Envoy host (default: envoy.com)

        Returns:
            EnvoyOAuthConfig instance

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        client_id = os.environ.get("ENVOY_CLIENT_ID")
        client_secret = os.environ.get("ENVOY_CLIENT_SECRET")

        if not client_id or not client_secret:
            raise ConfigurationError(
                "Missing Envoy OAuth credentials. Set environment variables:\n"
                "  ENVOY_CLIENT_ID=your_client_id\n"
                "  ENVOY_CLIENT_SECRET=your_client_secret"
            )

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            callback_url=os.environ.get("ENVOY_CALLBACK_URL"),
            scope=os.environ.get("ENVOY_SCOPE"),
            host=os.environ.get("ENVOY_HOST", DEFAULT_HOST),
        )
