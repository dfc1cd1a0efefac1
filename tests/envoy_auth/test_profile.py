"""Tests for the GraphQL profile fetcher."""

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from envoy_auth.config import DEFAULT_PROFILE_QUERY
from envoy_auth.exceptions import EnvoyGraphQLError
from envoy_auth.profile import fetch_profile

GRAPHQL_URL = "https://app.envoy.com/a/graphql"


class TestFetchProfile:
    """Tests for fetch_profile."""

    @pytest.mark.asyncio
    async def test_returns_normalized_profile(self, httpx_mock: HTTPXMock):
        """The profile is the GraphQL data plus the provider name."""
        httpx_mock.add_response(
            url=GRAPHQL_URL,
            method="POST",
            json={"data": {"me": {"id": "500308595", "name": "Kamal Mahyuddin"}}},
        )

        profile = await fetch_profile(
            "token", graphql_url=GRAPHQL_URL, query=DEFAULT_PROFILE_QUERY
        )

        assert profile == {
            "provider": "envoy",
            "me": {"id": "500308595", "name": "Kamal Mahyuddin"},
        }

    @pytest.mark.asyncio
    async def test_sends_bearer_token_and_query(self, httpx_mock: HTTPXMock):
        """The request carries the bearer token and the configured query."""
        httpx_mock.add_response(url=GRAPHQL_URL, method="POST", json={"data": {"me": {"id": "1"}}})

        await fetch_profile("token", graphql_url=GRAPHQL_URL, query=DEFAULT_PROFILE_QUERY)

        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == "Bearer token"
        assert "UserQuery" in json.loads(request.content)["query"]

    @pytest.mark.asyncio
    async def test_provider_key_cannot_be_overridden(self, httpx_mock: HTTPXMock):
        """A provider field selected by the query does not replace the provider name."""
        httpx_mock.add_response(
            url=GRAPHQL_URL,
            method="POST",
            json={"data": {"provider": "someone-else", "me": {"id": "1"}}},
        )

        profile = await fetch_profile(
            "token", graphql_url=GRAPHQL_URL, query="query { provider me { id } }"
        )

        assert profile["provider"] == "envoy"

    @pytest.mark.asyncio
    async def test_http_error_raises_graphql_error(self, httpx_mock: HTTPXMock):
        """A 500 from the GraphQL endpoint becomes EnvoyGraphQLError."""
        httpx_mock.add_response(url=GRAPHQL_URL, method="POST", status_code=500)

        with pytest.raises(EnvoyGraphQLError, match="^Failed to fetch user profile$") as exc_info:
            await fetch_profile("token", graphql_url=GRAPHQL_URL, query=DEFAULT_PROFILE_QUERY)

        assert exc_info.value.cause is not None
        assert exc_info.value.__cause__ is exc_info.value.cause

    @pytest.mark.asyncio
    async def test_graphql_errors_raise_graphql_error(self, httpx_mock: HTTPXMock):
        """GraphQL errors in the response become EnvoyGraphQLError."""
        httpx_mock.add_response(
            url=GRAPHQL_URL,
            method="POST",
            json={"data": None, "errors": [{"message": "envoy-web is unreachable"}]},
        )

        with pytest.raises(EnvoyGraphQLError, match="^Failed to fetch user profile$"):
            await fetch_profile("token", graphql_url=GRAPHQL_URL, query=DEFAULT_PROFILE_QUERY)

    @pytest.mark.asyncio
    async def test_null_data_raises_graphql_error(self, httpx_mock: HTTPXMock):
        """An answer with null data and no errors becomes EnvoyGraphQLError."""
        httpx_mock.add_response(url=GRAPHQL_URL, method="POST", json={"data": None})

        with pytest.raises(EnvoyGraphQLError, match="^Failed to fetch user profile$"):
            await fetch_profile("token", graphql_url=GRAPHQL_URL, query=DEFAULT_PROFILE_QUERY)

    @pytest.mark.asyncio
    async def test_network_error_raises_graphql_error(self, httpx_mock: HTTPXMock):
        """Connection failures become EnvoyGraphQLError."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with pytest.raises(EnvoyGraphQLError, match="^Failed to fetch user profile$"):
            await fetch_profile("token", graphql_url=GRAPHQL_URL, query=DEFAULT_PROFILE_QUERY)

    @pytest.mark.asyncio
    async def test_invalid_query_raises_graphql_error(self):
        """A query that does not parse becomes EnvoyGraphQLError."""
        with pytest.raises(EnvoyGraphQLError, match="^Failed to fetch user profile$"):
            await fetch_profile("token", graphql_url=GRAPHQL_URL, query="query {")
