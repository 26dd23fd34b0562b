"""Admin client facade wiring the dispatcher to the typed operations."""

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from ..models.config import ClientConfig
from ..models.page import PageResult
from ..models.provider_config import (
    ProviderConfig,
    ProviderConfigCreate,
    ProviderConfigUpdate,
    ProviderKind,
)
from ..models.user import (
    AccountRecord,
    GetUsersResult,
    UserCreate,
    UserIdentifier,
    UserImportRecord,
    UserUpdate,
)
from ..models.user_import import DeleteUsersResult, HashConfig, ImportResult
from ..operations.action_code import ActionCodeSettings
from ..operations.provider_ops import ProviderConfigManager
from ..operations.user_ops import UserManager
from ..utils.logging_utils import get_logger
from ..utils.validators import FieldValidator, default_validator
from .auth import EnvTokenCredential, StaticTokenCredential
from .config import get_env_config
from .dispatcher import ProjectPathResolver, RequestDispatcher
from .error_translator import BackendErrorTranslator
from .exceptions import AuthConfigError
from .interfaces import CredentialSourceProtocol, TokenVerifierProtocol, TransportProtocol
from .transport import RequestsTransport

logger = get_logger(__name__)

# Clients are cached per environment and project
_client_cache: dict[str, "AdminClient"] = {}


class AdminClient:
    """Account and provider-config administration for one project."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        validator: FieldValidator = default_validator,
        token_verifier: TokenVerifierProtocol | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.validator = validator
        self.token_verifier = token_verifier
        self.users = UserManager(dispatcher, validator, token_verifier)
        self.providers = ProviderConfigManager(dispatcher, validator)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: TransportProtocol | None = None,
        credential: CredentialSourceProtocol | None = None,
        translator: BackendErrorTranslator | None = None,
        validator: FieldValidator = default_validator,
        token_verifier: TokenVerifierProtocol | None = None,
    ) -> "AdminClient":
        """Build a client from a :class:`ClientConfig`.

        Without an explicit credential, the config's access token is used,
        and failing that the token is read from the environment on each call.
        A config carrying a tenant id yields a tenant-scoped client.
        """
        if credential is None:
            if config.access_token:
                credential = StaticTokenCredential(config.access_token)
            else:
                credential = EnvTokenCredential(config.environment)

        dispatcher = RequestDispatcher(
            transport=transport or RequestsTransport(timeout=config.timeout),
            credential=credential,
            path_resolver=ProjectPathResolver(project_id=config.project_id),
            api_host=config.api_host,
            translator=translator,
            timeout=config.timeout,
        )
        client = cls(dispatcher, validator, token_verifier)
        if config.tenant_id:
            return client.tenant(config.tenant_id)
        return client

    @property
    def tenant_id(self) -> str | None:
        return self.dispatcher.tenant_id

    def tenant(self, tenant_id: str) -> "TenantAwareAdminClient":
        """Return a client scoped to one tenant of this project.

        Raises:
            ArgumentError: If the tenant id is not a non-empty string
            AuthConfigError: If the path resolver cannot be tenant-scoped
        """
        self.validator.require_tenant_id(tenant_id)
        resolver = self.dispatcher.path_resolver
        if not isinstance(resolver, ProjectPathResolver):
            raise AuthConfigError(
                "Tenant-scoped clients require a project path resolver"
            )
        dispatcher = self.dispatcher.with_path_resolver(resolver.for_tenant(tenant_id))
        return TenantAwareAdminClient(dispatcher, self.validator, self.token_verifier)

    # Accounts

    def get_user(self, uid: Any) -> AccountRecord:
        return self.users.get_user(uid)

    def get_user_by_email(self, email: Any) -> AccountRecord:
        return self.users.get_user_by_email(email)

    def get_user_by_phone_number(self, phone_number: Any) -> AccountRecord:
        return self.users.get_user_by_phone_number(phone_number)

    def get_users(self, identifiers: Sequence[UserIdentifier]) -> GetUsersResult:
        return self.users.get_users(identifiers)

    def create_user(self, properties: UserCreate | Mapping[str, Any]) -> AccountRecord:
        return self.users.create_user(properties)

    def update_user(self, uid: Any, update: UserUpdate | Mapping[str, Any]) -> AccountRecord:
        return self.users.update_user(uid, update)

    def delete_user(self, uid: Any) -> None:
        self.users.delete_user(uid)

    def delete_users(self, uids: Sequence[Any]) -> DeleteUsersResult:
        return self.users.delete_users(uids)

    def set_custom_user_claims(self, uid: Any, claims: Mapping[str, Any] | None) -> None:
        self.users.set_custom_user_claims(uid, claims)

    def revoke_refresh_tokens(self, uid: Any) -> None:
        self.users.revoke_refresh_tokens(uid)

    def list_users(
        self, max_results: Any = None, page_token: Any = None
    ) -> PageResult[AccountRecord]:
        return self.users.list_users(max_results, page_token)

    def iterate_users(
        self, page_size: Any = None, limit: int | None = None
    ) -> Iterator[AccountRecord]:
        return self.users.iterate_users(page_size, limit)

    def import_users(
        self,
        records: Sequence[UserImportRecord],
        hash_config: HashConfig | None = None,
    ) -> ImportResult:
        return self.users.import_users(records, hash_config)

    # Session artifacts and email links

    def create_session_cookie(self, id_token: Any, expires_in_ms: Any) -> str:
        return self.users.create_session_cookie(id_token, expires_in_ms)

    def verify_id_token(self, id_token: str, check_revoked: bool = False) -> dict[str, Any]:
        return self.users.verify_id_token(id_token, check_revoked)

    def verify_session_cookie(
        self, session_cookie: str, check_revoked: bool = False
    ) -> dict[str, Any]:
        return self.users.verify_session_cookie(session_cookie, check_revoked)

    def generate_password_reset_link(
        self, email: Any, settings: ActionCodeSettings | Mapping[str, Any] | None = None
    ) -> str:
        return self.users.generate_password_reset_link(email, settings)

    def generate_email_verification_link(
        self, email: Any, settings: ActionCodeSettings | Mapping[str, Any] | None = None
    ) -> str:
        return self.users.generate_email_verification_link(email, settings)

    def generate_sign_in_with_email_link(
        self, email: Any, settings: ActionCodeSettings | Mapping[str, Any]
    ) -> str:
        return self.users.generate_sign_in_with_email_link(email, settings)

    # Provider configs

    def create_provider_config(
        self, config: ProviderConfigCreate | Mapping[str, Any]
    ) -> ProviderConfig:
        return self.providers.create_provider_config(config)

    def get_provider_config(self, provider_id: Any) -> ProviderConfig:
        return self.providers.get_provider_config(provider_id)

    def update_provider_config(
        self, provider_id: Any, update: ProviderConfigUpdate | Mapping[str, Any]
    ) -> ProviderConfig:
        return self.providers.update_provider_config(provider_id, update)

    def delete_provider_config(self, provider_id: Any) -> None:
        self.providers.delete_provider_config(provider_id)

    def list_provider_configs(
        self,
        provider_type: str | ProviderKind,
        max_results: Any = None,
        page_token: Any = None,
    ) -> PageResult[ProviderConfig]:
        return self.providers.list_provider_configs(provider_type, max_results, page_token)

    def iterate_provider_configs(
        self, provider_type: str | ProviderKind, limit: int | None = None
    ) -> Iterator[ProviderConfig]:
        return self.providers.iterate_provider_configs(provider_type, limit)


class TenantAwareAdminClient(AdminClient):
    """Client whose every call is scoped to ``/projects/{p}/tenants/{t}``.

    Session cookies cannot be minted here, and verified artifacts must carry
    this tenant in their ``firebase.tenant`` claim.
    """

    def tenant(self, tenant_id: str) -> "TenantAwareAdminClient":
        raise AuthConfigError(
            f"Client is already scoped to tenant {self.tenant_id}"
        )


def get_admin_client(env: str = "dev") -> AdminClient:
    """Get a cached admin client for an environment.

    Args:
        env: Environment to use ('dev' or 'prod')

    Returns:
        AdminClient: Client configured from the environment

    Raises:
        AuthConfigError: If the environment configuration is incomplete
    """
    config = get_env_config(env)
    cache_key = f"{env}:{config.project_id}:{config.tenant_id or ''}"

    if cache_key in _client_cache:
        logger.debug(
            f"Reusing cached admin client for {env}",
            extra={"operation": "get_admin_client"},
        )
        return _client_cache[cache_key]

    client = AdminClient.from_config(config)
    _client_cache[cache_key] = client
    logger.info(
        f"Initialized admin client for {env} (project {config.project_id})",
        extra={"operation": "get_admin_client", "tenant_id": config.tenant_id},
    )
    return client


def clear_cache() -> None:
    """Clear the client cache. Useful for testing or environment switches."""
    _client_cache.clear()
