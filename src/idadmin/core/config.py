"""Configuration utilities for identity backend access."""

import os

import dotenv

from ..models.config import ClientConfig
from .exceptions import AuthConfigError

# Global constants for API configuration
API_TIMEOUT = 30  # request timeout in seconds
MAX_IMPORT_BATCH_SIZE = 1000
MAX_DELETE_BATCH_SIZE = 1000
MAX_LOOKUP_IDENTIFIERS = 100
MAX_CLAIMS_PAYLOAD_SIZE = 1000

# Session cookie lifetime bounds in milliseconds
MIN_SESSION_COOKIE_DURATION_MS = 5 * 60 * 1000
MAX_SESSION_COOKIE_DURATION_MS = 14 * 24 * 60 * 60 * 1000

VALID_ENVIRONMENTS = ("dev", "prod")


def check_env_file() -> None:
    """Check if .env file exists and load it."""
    env_path = ".env"
    if os.path.exists(env_path):
        dotenv.load_dotenv(env_path)


def validate_env_var(name: str, value: str | None) -> str:
    """Validate that an environment variable is set and not empty.

    Args:
        name: Environment variable name
        value: Environment variable value

    Returns:
        str: The value with surrounding whitespace removed

    Raises:
        AuthConfigError: If the environment variable is missing or empty
    """
    if not value or not value.strip():
        raise AuthConfigError(
            f"Environment variable {name} is required but not set or empty"
        )

    cleaned = value.strip()
    if any(ord(char) < 32 for char in cleaned):
        raise AuthConfigError(
            f"Environment variable {name} contains invalid characters"
        )

    return cleaned


def env_prefix(env: str) -> str:
    return "DEV_" if env == "dev" else ""


def get_env_config(env: str = "dev") -> ClientConfig:
    """Get the client configuration from environment variables.

    Args:
        env: Environment to get config for ('dev' or 'prod')

    Returns:
        ClientConfig: Validated configuration

    Raises:
        AuthConfigError: If required environment variables are missing or invalid
    """
    if env not in VALID_ENVIRONMENTS:
        raise AuthConfigError(f"Unknown environment: {env}. Use 'dev' or 'prod'")

    check_env_file()

    prefix = env_prefix(env)
    validate_env_var(
        f"{prefix}IDADMIN_PROJECT_ID", os.getenv(f"{prefix}IDADMIN_PROJECT_ID")
    )

    try:
        config = ClientConfig.from_env_vars(os.environ, env)
    except ValueError as e:
        raise AuthConfigError(str(e)) from e
    config.timeout = API_TIMEOUT

    if not config.validate():
        raise AuthConfigError(
            f"Invalid configuration for {env}",
            details=str(config.to_dict()),
        )

    return config
