"""Identity backend administration client - Main Package."""

# Defined before the imports below: the dispatcher reads it at import time
__version__ = "1.0.0"

# Core functionality
from .core.admin_client import (
    AdminClient,
    TenantAwareAdminClient,
    clear_cache,
    get_admin_client,
)
from .core.auth import EnvTokenCredential, StaticTokenCredential, doctor, get_access_token
from .core.config import API_TIMEOUT, MAX_IMPORT_BATCH_SIZE, get_env_config
from .core.dispatcher import ProjectPathResolver, RequestDispatcher
from .core.error_codes import AuthErrorCode, ErrorInfo
from .core.error_translator import BackendErrorTranslator
from .core.exceptions import (
    ArgumentError,
    AuthConfigError,
    BackendError,
    IdAdminError,
    ProtocolError,
    TokenRejectedError,
    TransportError,
)
from .core.transport import HttpRequest, HttpResponse, RequestsTransport

# Models
from .models.config import ClientConfig
from .models.fields import CLEAR, UNSET
from .models.page import PageResult
from .models.provider_config import (
    OIDCConfigCreate,
    OIDCConfigUpdate,
    OIDCProviderConfig,
    SAMLConfigCreate,
    SAMLConfigUpdate,
    SAMLProviderConfig,
)
from .models.user import (
    AccountRecord,
    EmailIdentifier,
    ImportMetadata,
    PhoneIdentifier,
    ProviderIdentifier,
    ProviderProfile,
    SecondFactor,
    UidIdentifier,
    UserCreate,
    UserImportRecord,
    UserUpdate,
)
from .models.user_import import DeleteUsersResult, HashConfig, ImportResult

# Operations
from .operations.action_code import ActionCodeSettings

__all__ = [
    "__version__",
    # Core
    "AdminClient",
    "TenantAwareAdminClient",
    "get_admin_client",
    "clear_cache",
    "StaticTokenCredential",
    "EnvTokenCredential",
    "get_access_token",
    "doctor",
    "get_env_config",
    "API_TIMEOUT",
    "MAX_IMPORT_BATCH_SIZE",
    "ProjectPathResolver",
    "RequestDispatcher",
    "BackendErrorTranslator",
    "HttpRequest",
    "HttpResponse",
    "RequestsTransport",
    # Errors
    "AuthErrorCode",
    "ErrorInfo",
    "IdAdminError",
    "ArgumentError",
    "AuthConfigError",
    "BackendError",
    "ProtocolError",
    "TokenRejectedError",
    "TransportError",
    # Models
    "ClientConfig",
    "UNSET",
    "CLEAR",
    "PageResult",
    "AccountRecord",
    "UserCreate",
    "UserUpdate",
    "UserImportRecord",
    "ImportMetadata",
    "ProviderProfile",
    "SecondFactor",
    "UidIdentifier",
    "EmailIdentifier",
    "PhoneIdentifier",
    "ProviderIdentifier",
    "HashConfig",
    "ImportResult",
    "DeleteUsersResult",
    "OIDCProviderConfig",
    "SAMLProviderConfig",
    "OIDCConfigCreate",
    "SAMLConfigCreate",
    "OIDCConfigUpdate",
    "SAMLConfigUpdate",
    # Operations
    "ActionCodeSettings",
]
