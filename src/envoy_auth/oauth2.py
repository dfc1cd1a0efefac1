"""
OAuth 2.0 authorization code client.

This module implements the provider-agnostic half of the authorization
code grant:
- Building the authorization URL the user is redirected to
- Exchanging an authorization code for access/refresh tokens
- Parsing standard RFC 6749 error bodies from the token endpoint
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode

import httpx

from .exceptions import InternalOAuthError, TokenError

logger = logging.getLogger(__name__)


@dataclass
class TokenResponse:
    """
    Result of a successful code-for-token exchange.

    Attributes:
        access_token: Bearer token for API calls
        refresh_token: Refresh token, if the provider issued one
        params: The full decoded token response
    """

    access_token: str
    refresh_token: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)


class OAuthResponseError(Exception):
    """
    Raw non-2xx response from the token endpoint.

    Carries the status and body untouched so a provider-specific parser can
    decide how to interpret them.
    """

    def __init__(self, status_code: int, data: str):
        super().__init__(f"Token endpoint returned status {status_code}")
        self.status_code = status_code
        self.data = data


class OAuth2Client:
    """
    Minimal OAuth 2.0 client for the authorization code grant.

    Each exchange opens its own ``httpx.AsyncClient`` and issues exactly one
    request; nothing is retried and no timeout is imposed unless one is
    passed in.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        authorization_url: str,
        token_url: str,
        timeout: Optional[float] = None,
    ):
        """
        Initialize OAuth client.

        Args:
            client_id: Application client ID
            client_secret: Application client secret
            authorization_url: Provider authorization endpoint
            token_url: Provider token endpoint
            timeout: Optional request timeout in seconds (default: none)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.timeout = timeout

    def get_authorize_url(self, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Generate the authorization URL.

        Args:
            params: Extra query parameters (redirect_uri, scope, state, ...)

        Returns:
            Complete authorization URL with query parameters
        """
        query = {"client_id": self.client_id}
        query.update({k: v for k, v in (params or {}).items() if v is not None})

        separator = "&" if "?" in self.authorization_url else "?"
        return f"{self.authorization_url}{separator}{urlencode(query)}"

    async def get_oauth_access_token(
        self, code: str, params: Optional[Mapping[str, Any]] = None
    ) -> TokenResponse:
        """
        Exchange authorization code for access and refresh tokens.

        Args:
            code: Code received from the OAuth callback
            params: Extra form parameters (redirect_uri, ...)

        Returns:
            TokenResponse with the access token and the raw response

        Raises:
            OAuthResponseError: If the endpoint answers with a non-2xx status
            InternalOAuthError: If a 2xx answer carries no access token
            httpx.HTTPError: On network failure
        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
        }
        data.update({k: v for k, v in (params or {}).items() if v is not None})
        data["code"] = code

        logger.info("Exchanging authorization code for tokens")
        logger.debug(f"Token endpoint: {self.token_url}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.token_url,
                data=data,
                headers={"Accept": "application/json"},
            )

        if response.status_code not in (200, 201):
            raise OAuthResponseError(response.status_code, response.text)

        results = _decode_token_body(response.text)
        access_token = results.get("access_token")
        if not access_token:
            raise InternalOAuthError("Failed to obtain access token", results)

        logger.info("Successfully obtained access token")
        return TokenResponse(
            access_token=access_token,
            refresh_token=results.get("refresh_token"),
            params=results,
        )


def _decode_token_body(body: str) -> Dict[str, Any]:
    """Decode a token response as JSON, falling back to form encoding."""
    try:
        results = json.loads(body)
    except ValueError:
        return dict(parse_qsl(body))
    return results if isinstance(results, dict) else {}


def parse_error_response(body: str, status: int) -> Optional[TokenError]:
    """
    Parse a standard OAuth 2.0 error body from the token endpoint.

    Args:
        body: Raw response body
        status: HTTP status code (unused by the standard parser)

    Returns:
        TokenError if the body carries an ``error`` member, otherwise None

    Raises:
        json.JSONDecodeError: If the body is not JSON
    """
    payload = json.loads(body)
    if isinstance(payload, dict) and payload.get("error"):
        return TokenError(
            payload.get("error_description"),
            payload["error"],
            payload.get("error_uri"),
        )
    return None
