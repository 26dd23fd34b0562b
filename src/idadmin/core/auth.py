"""Bearer credential sources and the credential health check."""

import os
from typing import Any

from dotenv import load_dotenv

from ..utils.logging_utils import get_logger
from .config import env_prefix, get_env_config, validate_env_var
from .exceptions import AuthConfigError, IdAdminError

logger = get_logger(__name__)


class StaticTokenCredential:
    """Credential returning a fixed bearer token."""

    def __init__(self, token: str) -> None:
        if not token:
            raise AuthConfigError("Access token must be a non-empty string")
        self._token = token

    def get_access_token(self) -> str:
        return self._token


class EnvTokenCredential:
    """Credential reading ``[DEV_]IDADMIN_ACCESS_TOKEN`` on every request.

    Re-reading lets an external process rotate the token in the
    environment or the ``.env`` file without restarting the client.
    """

    def __init__(self, env: str = "dev") -> None:
        self.env = env

    def get_access_token(self) -> str:
        return get_access_token(self.env)


def get_access_token(env: str = "dev") -> str:
    """Get the bearer token for the given environment.

    Args:
        env: Environment to use ('dev' or 'prod')

    Returns:
        str: Access token for authentication

    Raises:
        AuthConfigError: If the token variable is missing or empty
    """
    load_dotenv(override=True)
    name = f"{env_prefix(env)}IDADMIN_ACCESS_TOKEN"
    return validate_env_var(name, os.getenv(name))


def doctor(env: str = "dev", test_api: bool = False) -> dict[str, Any]:
    """Check that the configuration and credentials work.

    Args:
        env: Environment to use ('dev' or 'prod')
        test_api: Whether to also list one account through the backend

    Returns:
        Dict[str, Any]: Status information including success status and details
    """
    try:
        logger.info(
            f"Checking configuration for {env.upper()} environment...",
            extra={"operation": "doctor_check"},
        )
        config = get_env_config(env)
        logger.info(f"  Project ID: {config.project_id}")
        if config.tenant_id:
            logger.info(f"  Tenant ID: {config.tenant_id}")
        logger.info(f"  API host: {config.api_host}")

        get_access_token(env)
        logger.info("  Access token found", extra={"operation": "doctor_check"})

        result: dict[str, Any] = {
            "success": True,
            "environment": env,
            "token_obtained": True,
            "api_tested": False,
            "details": "Configuration and credentials are present",
        }

        if test_api:
            from .admin_client import get_admin_client

            try:
                get_admin_client(env).list_users(max_results=1)
            except IdAdminError as api_error:
                logger.warning(
                    f"  API access test failed: {api_error}",
                    extra={"operation": "api_test"},
                )
                result["api_tested"] = True
                result["api_status"] = "failed"
                result["details"] = f"Token found but API access failed: {api_error}"
            else:
                logger.info("  API access successful", extra={"operation": "api_test"})
                result["api_tested"] = True
                result["api_status"] = "success"
                result["details"] = "Credentials and API access are working correctly"

        return result

    except AuthConfigError as e:
        logger.error(
            f"Authentication configuration error: {e}",
            extra={"operation": "doctor_check"},
        )
        return {
            "success": False,
            "environment": env,
            "token_obtained": False,
            "api_tested": False,
            "error": str(e),
            "details": "Authentication configuration is invalid",
        }
