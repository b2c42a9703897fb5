"""HTTP transport for GraphQL operations."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from jsonschema import Draft4Validator
from jsonschema.exceptions import best_match
from requests.auth import HTTPBasicAuth

from . import __version__
from .config import SonarConfig
from .errors import RequestFailure

logger = logging.getLogger(__name__)


@dataclass
class GraphQLRequest:
    operation_name: str
    query: str
    variables: Dict[str, Any] = field(default_factory=dict)

    def payload(self) -> Dict[str, Any]:
        return {
            "operationName": self.operation_name,
            "query": self.query,
            "variables": self.variables,
        }


@dataclass(frozen=True)
class SonarResult:
    """A decoded GraphQL response paired with the operation that produced it."""

    graphql: Dict[str, Any]
    operation: str


def validate_variables(request: GraphQLRequest, variables_schema: dict) -> None:
    """
    Check request variables against a JSON Schema before sending.

    Raises:
        RequestFailure: If the variables do not match the schema
    """
    error = best_match(Draft4Validator(variables_schema).iter_errors(request.variables))
    if error is not None:
        raise RequestFailure(
            f"Invalid variables: {error.message}", request.operation_name
        )


def perform_graphql_request(
    config: SonarConfig,
    request: GraphQLRequest,
    variables_schema: Optional[dict] = None,
) -> SonarResult:
    """
    Send a GraphQL operation to the configured endpoint.

    Args:
        config: Endpoint, headers and credentials to use
        request: The operation to send
        variables_schema: Optional JSON Schema the variables must satisfy

    Returns:
        SonarResult wrapping the decoded response body

    Raises:
        RequestFailure: On network failure, a 5xx response or an unparseable body
    """
    if variables_schema is not None:
        validate_variables(request, variables_schema)

    headers = {
        "Content-Type": "application/json",
        "User-Agent": f"graphql-sonar v{__version__}",
        **config.headers,
    }
    auth = HTTPBasicAuth(*config.auth) if config.auth else None

    logger.debug("Sending %s to %s", request.operation_name, config.endpoint)
    try:
        response = requests.post(
            url=config.endpoint,
            json=request.payload(),
            headers=headers,
            auth=auth,
            timeout=config.timeout,
        )
    except requests.RequestException as e:
        raise RequestFailure(
            f"Failed to initiate request: {str(e)}", request.operation_name
        ) from e

    if response.status_code >= 500:
        raise RequestFailure(
            f"Received server response with status {response.status_code}",
            request.operation_name,
        )

    try:
        body = response.json()
    except ValueError as e:
        raise RequestFailure(
            f"Failed to parse server response: {str(e)}", request.operation_name
        ) from e

    logger.debug(
        "Received %s for %s", response.status_code, request.operation_name
    )
    return SonarResult(graphql=body, operation=request.operation_name)


async def perform_graphql_request_async(
    config: SonarConfig,
    request: GraphQLRequest,
    variables_schema: Optional[dict] = None,
) -> SonarResult:
    """Awaitable form of perform_graphql_request, run in a worker thread."""
    return await asyncio.to_thread(
        perform_graphql_request, config, request, variables_schema
    )
