"""Endpoint configuration for graphql-sonar."""
import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .errors import ConfigError


@dataclass
class SonarConfig:
    endpoint: str
    headers: Dict[str, Union[str, List[str]]] = field(default_factory=dict)
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.endpoint:
            raise ValueError("Endpoint is required")
        self.headers = {
            name: _header_value(name, value) for name, value in self.headers.items()
        }

    @property
    def auth(self) -> Optional[tuple]:
        """Basic auth credentials, only when both username and password are set."""
        if self.username and self.password:
            return self.username, self.password
        return None


def _header_value(name: str, value) -> str:
    # repeated headers are sent as one comma separated value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return ", ".join(value)
    if not isinstance(value, str):
        raise ValueError(f"Header {name} must be a string or a list of strings")
    return value


def load_environment() -> SonarConfig:
    """
    Build a SonarConfig from SONAR_* environment variables.

    Returns:
        SonarConfig: Configuration for the endpoint under test

    Raises:
        ConfigError: If the endpoint is missing or a value is malformed
    """
    endpoint = os.getenv("SONAR_ENDPOINT")
    raw_headers = os.getenv("SONAR_HEADERS")
    raw_timeout = os.getenv("SONAR_TIMEOUT")

    headers: Dict[str, str] = {}
    if raw_headers:
        try:
            headers = json.loads(raw_headers)
        except json.JSONDecodeError as e:
            raise ConfigError(f"SONAR_HEADERS is not valid JSON: {str(e)}")
        if not isinstance(headers, dict):
            raise ConfigError("SONAR_HEADERS must be a JSON object")

    timeout = None
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"SONAR_TIMEOUT is not a number: {raw_timeout}")

    try:
        return SonarConfig(
            endpoint=endpoint,
            headers=headers,
            username=os.getenv("SONAR_USERNAME"),
            password=os.getenv("SONAR_PASSWORD"),
            timeout=timeout,
        )
    except ValueError as e:
        raise ConfigError(f"Environment configuration error: {str(e)}")
