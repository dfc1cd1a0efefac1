"""
Authorization code flow for OAuth 2.0 strategies.

This module drives one inbound request through the authorization code
grant:
1. Redirects to the provider when the request carries neither a code nor
   an error
2. Turns a provider error redirect into a failure or an error
3. Exchanges the code for tokens
4. Fetches the user profile
5. Hands tokens and profile to the verify callback

Provider specifics plug in through two hooks, ``parse_error_response`` and
``user_profile``, instead of subclassing.
"""

import inspect
import logging
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urljoin

import httpx
from fastapi import Request

from .exceptions import AuthorizationError, ConfigurationError, InternalOAuthError
from .oauth2 import OAuth2Client, OAuthResponseError, parse_error_response

logger = logging.getLogger(__name__)

ErrorParser = Callable[[str, int], Optional[Exception]]
ProfileLoader = Callable[[str], Awaitable[Dict[str, Any]]]


class AuthOutcome(str, Enum):
    """Terminal outcomes of a flow that did not raise."""

    REDIRECT = "redirect"
    SUCCESS = "success"
    FAIL = "fail"


@dataclass
class AuthenticationResult:
    """
    Result of authenticating one request.

    Errors are not represented here: they are raised out of
    ``AuthorizationCodeFlow.authenticate``.

    Attributes:
        outcome: What the host should do with the request
        location: Redirect target (REDIRECT only)
        user: Authenticated identity (SUCCESS only)
        info: Extra details from the provider or the verify callback
        status: Suggested HTTP status for the host response
    """

    outcome: AuthOutcome
    location: Optional[str] = None
    user: Any = None
    info: Optional[Dict[str, Any]] = None
    status: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.outcome is AuthOutcome.SUCCESS

    @classmethod
    def redirect(cls, location: str, status: int = 302) -> "AuthenticationResult":
        return cls(outcome=AuthOutcome.REDIRECT, location=location, status=status)

    @classmethod
    def authenticated(cls, user: Any, info: Optional[Dict[str, Any]] = None) -> "AuthenticationResult":
        return cls(outcome=AuthOutcome.SUCCESS, user=user, info=info)

    @classmethod
    def failed(cls, info: Optional[Dict[str, Any]] = None, status: Optional[int] = None) -> "AuthenticationResult":
        return cls(outcome=AuthOutcome.FAIL, info=info, status=status)


def get_session(request: Request) -> Optional[Dict[str, Any]]:
    """Session mapping populated by a session middleware, if any."""
    return request.scope.get("session")


class SessionStateStore:
    """
    Keeps the ``state`` parameter in the request session.

    A random handle is written before redirecting and must come back
    unchanged on the callback. Each handle is single use.
    """

    def __init__(self, key: str):
        self.key = key

    def store(self, request: Request) -> str:
        session = get_session(request)
        if session is None:
            raise ConfigurationError(
                "OAuth 2.0 authentication requires session support when using state"
            )

        state = secrets.token_urlsafe(24)
        session[self.key] = {"state": state}
        return state

    def verify(self, request: Request, provided: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Check a returned state value.

        Returns:
            ``(True, None)`` when it matches, otherwise ``(False, message)``
        """
        session = get_session(request)
        if session is None:
            raise ConfigurationError(
                "OAuth 2.0 authentication requires session support when using state"
            )

        stored = session.get(self.key)
        if not stored or "state" not in stored:
            return False, "Unable to verify authorization request state."

        expected = stored.pop("state")
        if not stored:
            del session[self.key]

        if provided is None or not secrets.compare_digest(str(provided), expected):
            return False, "Invalid authorization request state."
        return True, None


class AuthorizationCodeFlow:
    """
    Authorization code grant bound to one OAuth client.

    The verify callback receives ``(access_token, refresh_token, profile)``,
    preceded by the request when ``pass_request_to_callback`` is set. It may
    be a plain function or a coroutine function and returns either the user
    or a plain ``(user, info)`` 2-tuple. Any other value, namedtuples
    included, is taken as the user itself. A falsy user fails
    authentication; raising errors it.
    """

    def __init__(
        self,
        client: OAuth2Client,
        verify: Callable[..., Any],
        *,
        callback_url: Optional[str] = None,
        scope: Optional[Union[List[str], str]] = None,
        scope_separator: str = " ",
        pass_request_to_callback: bool = False,
        parse_error_response: ErrorParser = parse_error_response,
        user_profile: Optional[ProfileLoader] = None,
        authorization_params: Optional[Callable[[Mapping[str, Any]], Dict[str, Any]]] = None,
        token_params: Optional[Callable[[Mapping[str, Any]], Dict[str, Any]]] = None,
        state_store: Optional[SessionStateStore] = None,
        skip_user_profile: bool = False,
        name: str = "oauth2",
    ):
        if verify is None:
            raise ConfigurationError("OAuth 2.0 flow requires a verify callback")

        self.client = client
        self.verify = verify
        self.callback_url = callback_url
        self.scope = scope
        self.scope_separator = scope_separator
        self.pass_request_to_callback = pass_request_to_callback
        self.parse_error_response = parse_error_response
        self.user_profile = user_profile
        self.authorization_params = authorization_params or (lambda options: {})
        self.token_params = token_params or (lambda options: {})
        self.state_store = state_store
        self.skip_user_profile = skip_user_profile
        self.name = name

    async def authenticate(self, request: Request, **options: Any) -> AuthenticationResult:
        """
        Authenticate one inbound request.

        Args:
            request: Inbound request carrying ``code`` or ``error`` in its
                query string, or neither to start the flow
            **options: Per-call overrides (``callback_url``, ``scope``)

        Returns:
            AuthenticationResult (redirect, success or fail)

        Raises:
            AuthorizationError: Provider redirected back with an error
            TokenError, InternalOAuthError: Token exchange failed, or any
                error the ``parse_error_response`` hook returns
            json.JSONDecodeError: Token error body was not JSON
            Exception: Whatever ``user_profile`` or ``verify`` raise
        """
        query = request.query_params

        error = query.get("error")
        if error:
            if error == "access_denied":
                logger.info(f"{self.name}: authorization denied by user")
                return AuthenticationResult.failed({"message": query.get("error_description")})
            raise AuthorizationError(
                query.get("error_description"), error, query.get("error_uri")
            )

        callback_url = options.get("callback_url", self.callback_url)
        if callback_url:
            callback_url = urljoin(str(request.url), callback_url)

        code = query.get("code")
        if code:
            if self.state_store is not None:
                ok, message = self.state_store.verify(request, query.get("state"))
                if not ok:
                    return AuthenticationResult.failed({"message": message}, status=403)
            return await self._complete(request, code, callback_url, options)

        return self._redirect(request, callback_url, options)

    def _redirect(
        self, request: Request, callback_url: Optional[str], options: Mapping[str, Any]
    ) -> AuthenticationResult:
        params: Dict[str, Any] = dict(self.authorization_params(options))
        params["response_type"] = "code"
        if callback_url:
            params["redirect_uri"] = callback_url

        scope = options.get("scope", self.scope)
        if scope:
            if not isinstance(scope, str):
                scope = self.scope_separator.join(scope)
            params["scope"] = scope

        if self.state_store is not None:
            params["state"] = self.state_store.store(request)

        location = self.client.get_authorize_url(params)
        logger.info(f"{self.name}: redirecting to authorization endpoint")
        logger.debug(f"Authorization URL: {location}")
        return AuthenticationResult.redirect(location)

    async def _complete(
        self,
        request: Request,
        code: str,
        callback_url: Optional[str],
        options: Mapping[str, Any],
    ) -> AuthenticationResult:
        params: Dict[str, Any] = dict(self.token_params(options))
        params["grant_type"] = "authorization_code"
        if callback_url:
            params["redirect_uri"] = callback_url

        try:
            token = await self.client.get_oauth_access_token(code, params)
        except OAuthResponseError as e:
            raise self._create_oauth_error(e) from e
        except httpx.HTTPError as e:
            raise InternalOAuthError("Failed to obtain access token", e) from e

        profile: Optional[Dict[str, Any]] = None
        if not self.skip_user_profile and self.user_profile is not None:
            profile = await self.user_profile(token.access_token)

        args: Tuple[Any, ...] = (token.access_token, token.refresh_token, profile)
        if self.pass_request_to_callback:
            args = (request,) + args

        verified = self.verify(*args)
        if inspect.isawaitable(verified):
            verified = await verified

        user, info = _split_verified(verified)
        if not user:
            logger.info(f"{self.name}: verify callback rejected the user")
            return AuthenticationResult.failed(info)

        logger.info(f"{self.name}: authentication succeeded")
        return AuthenticationResult.authenticated(user, info)

    def _create_oauth_error(self, failure: OAuthResponseError) -> Exception:
        """Translate a raw token failure; the parser's own errors propagate."""
        error = self.parse_error_response(failure.data, failure.status_code)
        if error is None:
            return InternalOAuthError("Failed to obtain access token", failure)
        return error


def _split_verified(verified: Any) -> Tuple[Any, Optional[Dict[str, Any]]]:
    """Split a verify return value into ``(user, info)``."""
    if type(verified) is tuple and len(verified) == 2:
        return verified
    return verified, None
