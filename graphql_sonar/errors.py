"""Error types raised by graphql-sonar."""


class SonarError(Exception):
    """Base error for failures tied to a named GraphQL operation."""

    def __init__(self, message: str, operation_name: str) -> None:
        super().__init__(message)
        self.operation_name = operation_name


class AssertionFailure(SonarError):
    """The GraphQL response did not pass assertion."""


class RequestFailure(SonarError):
    """The request could not be sent, or the server response was unusable."""


class CodegenError(Exception):
    """Raised when client code cannot be generated from the given documents."""


class ConfigError(EnvironmentError):
    """Raised when the environment does not describe a usable configuration."""
