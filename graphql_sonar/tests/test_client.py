"""Tests for the client module."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from graphql_sonar import __version__
from graphql_sonar.client import (
    GraphQLRequest,
    SonarResult,
    perform_graphql_request,
    perform_graphql_request_async,
)
from graphql_sonar.config import SonarConfig
from graphql_sonar.errors import RequestFailure


class TestPerformGraphQLRequest(unittest.TestCase):
    """Test sending GraphQL operations."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = SonarConfig(endpoint="https://example.com/graphql")
        self.request = GraphQLRequest(
            operation_name="fetchPosts",
            query="query fetchPosts { posts { title } }",
            variables={"first": 1},
        )
        self.response = MagicMock(spec=requests.Response)
        self.response.status_code = 200
        self.response.json.return_value = {"data": {"posts": []}}

    @patch("requests.post")
    def test_success(self, mock_post):
        """Test a successful request is wrapped with its operation name."""
        mock_post.return_value = self.response

        result = perform_graphql_request(self.config, self.request)

        self.assertEqual(
            result,
            SonarResult(graphql={"data": {"posts": []}}, operation="fetchPosts"),
        )
        mock_post.assert_called_once_with(
            url="https://example.com/graphql",
            json={
                "operationName": "fetchPosts",
                "query": "query fetchPosts { posts { title } }",
                "variables": {"first": 1},
            },
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"graphql-sonar v{__version__}",
            },
            auth=None,
            timeout=None,
        )

    @patch("requests.post")
    def test_config_headers_and_auth(self, mock_post):
        """Test configured headers override defaults and credentials are sent."""
        mock_post.return_value = self.response
        config = SonarConfig(
            endpoint="https://example.com/graphql",
            headers={"Authorization": "Bearer token", "User-Agent": "custom"},
            username="user",
            password="secret",
            timeout=5.0,
        )

        perform_graphql_request(config, self.request)

        kwargs = mock_post.call_args.kwargs
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer token")
        self.assertEqual(kwargs["headers"]["User-Agent"], "custom")
        self.assertEqual(kwargs["auth"], requests.auth.HTTPBasicAuth("user", "secret"))
        self.assertEqual(kwargs["timeout"], 5.0)

    @patch("requests.post")
    def test_network_failure(self, mock_post):
        """Test connection errors become request failures."""
        mock_post.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(RequestFailure) as context:
            perform_graphql_request(self.config, self.request)

        self.assertEqual(context.exception.operation_name, "fetchPosts")
        self.assertIn("Failed to initiate request", str(context.exception))
        self.assertIn("connection refused", str(context.exception))

    @patch("requests.post")
    def test_server_error(self, mock_post):
        """Test 5xx responses become request failures."""
        self.response.status_code = 502
        mock_post.return_value = self.response

        with self.assertRaises(RequestFailure) as context:
            perform_graphql_request(self.config, self.request)

        self.assertEqual(
            str(context.exception), "Received server response with status 502"
        )
        self.response.json.assert_not_called()

    @patch("requests.post")
    def test_client_error_body_is_returned(self, mock_post):
        """Test 4xx responses are passed on for assertion."""
        self.response.status_code = 400
        self.response.json.return_value = {"errors": [{"message": "bad query"}]}
        mock_post.return_value = self.response

        result = perform_graphql_request(self.config, self.request)

        self.assertEqual(result.graphql, {"errors": [{"message": "bad query"}]})

    @patch("requests.post")
    def test_unparseable_body(self, mock_post):
        """Test non-JSON bodies become request failures."""
        self.response.json.side_effect = ValueError("Expecting value")
        mock_post.return_value = self.response

        with self.assertRaises(RequestFailure) as context:
            perform_graphql_request(self.config, self.request)

        self.assertIn("Failed to parse server response", str(context.exception))

    @patch("requests.post")
    def test_invalid_variables(self, mock_post):
        """Test variables are checked before anything is sent."""
        schema = {
            "$schema": "http://json-schema.org/draft-04/schema#",
            "type": "object",
            "properties": {"first": {"type": "string"}},
        }

        with self.assertRaises(RequestFailure) as context:
            perform_graphql_request(self.config, self.request, variables_schema=schema)

        self.assertIn("Invalid variables", str(context.exception))
        mock_post.assert_not_called()

    @patch("requests.post")
    def test_valid_variables(self, mock_post):
        """Test matching variables are sent."""
        mock_post.return_value = self.response
        schema = {
            "$schema": "http://json-schema.org/draft-04/schema#",
            "type": "object",
            "properties": {"first": {"type": ["integer", "null"]}},
            "required": ["first"],
        }

        perform_graphql_request(self.config, self.request, variables_schema=schema)

        mock_post.assert_called_once()


class TestPerformGraphQLRequestAsync(unittest.IsolatedAsyncioTestCase):
    """Test the awaitable request form."""

    @patch("requests.post")
    async def test_success(self, mock_post):
        response = MagicMock(spec=requests.Response)
        response.status_code = 200
        response.json.return_value = {"data": {"ok": True}}
        mock_post.return_value = response

        result = await perform_graphql_request_async(
            SonarConfig(endpoint="https://example.com/graphql"),
            GraphQLRequest(operation_name="ping", query="query ping { ok }"),
        )

        self.assertEqual(result.operation, "ping")
        self.assertEqual(result.graphql, {"data": {"ok": True}})


if __name__ == "__main__":
    unittest.main()
