"""Client configuration model."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_API_HOST = "https://identitytoolkit.googleapis.com"


@dataclass
class ClientConfig:
    """Configuration for one identity backend project."""

    project_id: str
    environment: str = "dev"
    tenant_id: str | None = None
    access_token: str | None = None
    api_host: str = DEFAULT_API_HOST
    timeout: float = 30

    def __post_init__(self) -> None:
        self.api_host = self.api_host.rstrip("/")

    @classmethod
    def from_env_vars(
        cls, env_vars: Mapping[str, str], environment: str
    ) -> "ClientConfig":
        """Create a ClientConfig from environment variables.

        Args:
            env_vars: Dictionary of environment variables
            environment: Environment name ('dev' or 'prod')

        Returns:
            ClientConfig: Configuration instance

        Raises:
            ValueError: If the project id is missing
        """
        prefix = "DEV_" if environment == "dev" else ""

        project_id = env_vars.get(f"{prefix}IDADMIN_PROJECT_ID")
        if not project_id:
            raise ValueError(f"Missing {prefix}IDADMIN_PROJECT_ID environment variable")

        return cls(
            project_id=project_id,
            environment=environment,
            tenant_id=env_vars.get(f"{prefix}IDADMIN_TENANT_ID") or None,
            access_token=env_vars.get(f"{prefix}IDADMIN_ACCESS_TOKEN") or None,
            api_host=env_vars.get(f"{prefix}IDADMIN_API_HOST") or DEFAULT_API_HOST,
        )

    def validate(self) -> bool:
        """Validate that all required fields are present and valid.

        Returns:
            bool: True if configuration is valid
        """
        if not self.project_id or "/" in self.project_id:
            return False

        if self.environment not in ["dev", "prod"]:
            return False

        if self.tenant_id is not None and (not self.tenant_id or "/" in self.tenant_id):
            return False

        if not self.api_host.startswith(("https://", "http://")):
            return False

        return self.timeout > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary format with the token redacted."""
        return {
            "project_id": self.project_id,
            "environment": self.environment,
            "tenant_id": self.tenant_id,
            "access_token": "***REDACTED***" if self.access_token else None,
            "api_host": self.api_host,
            "timeout": self.timeout,
        }
