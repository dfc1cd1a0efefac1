"""
Profile fetcher for Envoy's GraphQL API.
"""

import logging
from typing import Any, Dict

import httpx
from gql import Client, gql
from gql.transport.exceptions import TransportError
from gql.transport.httpx import HTTPXAsyncTransport
from graphql import GraphQLError

from .exceptions import EnvoyGraphQLError

logger = logging.getLogger(__name__)

PROFILE_ERROR_MESSAGE = "Failed to fetch user profile"


async def fetch_profile(
    access_token: str,
    *,
    graphql_url: str,
    query: str,
    provider: str = "envoy",
) -> Dict[str, Any]:
    """
    Fetch and normalize a user profile.

    Issues ``query`` once against ``graphql_url`` with the access token as a
    bearer credential. The profile is the GraphQL ``data`` object with a
    ``provider`` key added, so its shape follows whatever the query selects.

    Args:
        access_token: OAuth access token
        graphql_url: GraphQL endpoint
        query: GraphQL query document
        provider: Value stored under the ``provider`` key

    Returns:
        Normalized profile, e.g. ``{"provider": "envoy", "me": {...}}``

    Raises:
        EnvoyGraphQLError: On network failure, a non-2xx answer, GraphQL
            errors in the response, or an unparseable query
    """
    transport = HTTPXAsyncTransport(
        url=graphql_url,
        headers={"Authorization": f"Bearer {access_token}"},
    )

    try:
        document = gql(query)
        async with Client(transport=transport) as session:
            response = await session.execute(document)
    except (TransportError, GraphQLError, httpx.HTTPError, AssertionError) as e:
        # gql asserts on an answer carrying neither data nor errors
        raise EnvoyGraphQLError(PROFILE_ERROR_MESSAGE, e) from e

    if not isinstance(response, dict):
        raise EnvoyGraphQLError(PROFILE_ERROR_MESSAGE)

    logger.info(f"Fetched {provider} user profile")
    return {**response, "provider": provider}
