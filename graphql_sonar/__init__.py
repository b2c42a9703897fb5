"""Harness for exercising GraphQL endpoints."""

__version__ = "0.1.0"

from .client import (
    GraphQLRequest,
    SonarResult,
    perform_graphql_request,
    perform_graphql_request_async,
)
from .codegen import generate
from .config import SonarConfig, load_environment
from .errors import AssertionFailure, CodegenError, ConfigError, RequestFailure, SonarError
from .runner import (
    AssertedResult,
    Fail,
    Pass,
    RunOptions,
    RunReport,
    assert_no_errors,
    run,
    run_operations,
)

__all__ = [
    "AssertedResult",
    "AssertionFailure",
    "CodegenError",
    "ConfigError",
    "Fail",
    "GraphQLRequest",
    "Pass",
    "RequestFailure",
    "RunOptions",
    "RunReport",
    "SonarConfig",
    "SonarError",
    "SonarResult",
    "assert_no_errors",
    "generate",
    "load_environment",
    "perform_graphql_request",
    "perform_graphql_request_async",
    "run",
    "run_operations",
]
