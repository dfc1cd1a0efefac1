"""Pytest fixtures for Envoy strategy tests."""

from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import pytest
from fastapi import Request

from envoy_auth.config import EnvoyOAuthConfig

_NO_SESSION = object()


@pytest.fixture
def config() -> EnvoyOAuthConfig:
    """Create test Envoy OAuth config."""
    return EnvoyOAuthConfig(client_id="ABC123", client_secret="secret")


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build inbound requests from an ASGI scope.

    Returns:
        Factory taking query parameters and an optional session mapping.
        Passing ``session=None`` builds a request without session support.

    Example:
        >>> request = make_request({"code": "abc"}, session={})
    """

    def _make(
        query: Optional[Dict[str, str]] = None,
        session: Any = _NO_SESSION,
        path: str = "/auth/envoy/callback",
    ) -> Request:
        scope: Dict[str, Any] = {
            "type": "http",
            "method": "GET",
            "scheme": "https",
            "server": ("www.example.com", 443),
            "root_path": "",
            "path": path,
            "query_string": urlencode(query or {}).encode(),
            "headers": [],
        }
        if session is _NO_SESSION:
            scope["session"] = {}
        elif session is not None:
            scope["session"] = session
        return Request(scope)

    return _make
