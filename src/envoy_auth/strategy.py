"""
Envoy authentication strategy.

The Envoy strategy authenticates requests by delegating to Envoy using the
OAuth 2.0 protocol.

Applications may supply a ``verify`` callback which accepts an
``access_token``, an optional ``refresh_token`` and the Envoy ``profile``,
and returns the user (or a falsy value if the credentials are not valid).
If none is passed in, the strategy uses ``default_verify``, which stores
the access token in the session and yields the ``me`` object of the
profile.

Example:

    strategy = EnvoyStrategy(
        EnvoyOAuthConfig(
            client_id="123-456-789",
            client_secret="shhh-its-a-secret",
            callback_url="https://www.example.com/auth/envoy/callback",
            scope=["public", "token.refresh"],
        ),
        verify=find_or_create_user,
    )

    @app.get("/auth/envoy/callback")
    async def callback(request: Request):
        result = await strategy.authenticate(request)
        ...
"""

import json
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Request

from .config import EnvoyOAuthConfig
from .exceptions import ConfigurationError, EnvoyTokenError
from .flow import AuthenticationResult, AuthorizationCodeFlow, SessionStateStore, get_session
from .oauth2 import OAuth2Client, parse_error_response
from .profile import fetch_profile

logger = logging.getLogger(__name__)

PROVIDER_NAME = "envoy"


def default_verify(
    request: Request,
    access_token: str,
    refresh_token: Optional[str],
    profile: Dict[str, Any],
) -> Any:
    """Store the access token in the session, if any, and yield ``profile["me"]``."""
    session = get_session(request)
    if session is not None:
        session["access_token"] = access_token
    return profile.get("me") if profile else None


class EnvoyStrategy:
    """
    OAuth 2.0 strategy for Envoy.

    Composes a generic ``AuthorizationCodeFlow`` with Envoy's endpoints, its
    GraphQL profile fetcher and its token error parser.
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        config: Optional[EnvoyOAuthConfig],
        verify: Optional[Callable[..., Any]] = None,
    ):
        """
        Initialize the strategy.

        Args:
            config: Envoy OAuth configuration (required)
            verify: Verify callback; ``default_verify`` if not provided

        Raises:
            ConfigurationError: If no configuration is provided
        """
        if config is None:
            raise ConfigurationError("EnvoyStrategy requires an EnvoyOAuthConfig")

        self.config = config
        self.client = OAuth2Client(
            client_id=config.client_id,
            client_secret=config.client_secret,
            authorization_url=config.authorization_url,
            token_url=config.token_url,
        )

        state_store = None
        if config.state:
            state_store = SessionStateStore(f"oauth2:{config.host}")

        self.flow = AuthorizationCodeFlow(
            self.client,
            verify or default_verify,
            callback_url=config.callback_url,
            scope=config.scope,
            scope_separator=config.scope_separator,
            pass_request_to_callback=verify is None,
            parse_error_response=self.parse_error_response,
            user_profile=self.user_profile,
            state_store=state_store,
            skip_user_profile=config.skip_user_profile,
            name=self.name,
        )

    @property
    def graphql_url(self) -> str:
        return self.config.graphql_url

    @property
    def profile_query(self) -> str:
        return self.config.profile_query

    async def authenticate(self, request: Request, **options: Any) -> AuthenticationResult:
        """Authenticate the current request. See ``AuthorizationCodeFlow.authenticate``."""
        return await self.flow.authenticate(request, **options)

    async def user_profile(self, access_token: str) -> Dict[str, Any]:
        """
        Retrieve the user profile from Envoy.

        The profile has a ``provider`` key set to ``"envoy"`` plus whatever
        the configured ``profile_query`` selects; the default query yields
        ``me.id``, ``me.name`` and ``me.email``.

        Raises:
            EnvoyGraphQLError: If the profile could not be fetched
        """
        return await fetch_profile(
            access_token,
            graphql_url=self.graphql_url,
            query=self.profile_query,
            provider=self.name,
        )

    def parse_error_response(self, body: str, status: int) -> Optional[Exception]:
        """
        Parse a token endpoint error.

        Envoy answers some failures with HTTP 404 and a plain
        ``{"error": "<message>"}`` body; those become ``EnvoyTokenError``.
        Everything else goes through the standard OAuth 2.0 parser.

        Raises:
            json.JSONDecodeError: If the body is not JSON
        """
        payload = json.loads(body)
        if isinstance(payload, dict) and isinstance(payload.get("error"), str) and status == 404:
            return EnvoyTokenError(payload["error"])
        return parse_error_response(body, status)
