"""Request dispatcher composing descriptors, credentials and transport."""

import time
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

from .. import __version__
from ..models.config import DEFAULT_API_HOST
from ..utils.logging_utils import get_logger
from .endpoints import ApiSettings
from .error_translator import BackendErrorTranslator, default_translator
from .exceptions import AuthConfigError, IdAdminError, ProtocolError, wrap_transport_exception
from .interfaces import CredentialSourceProtocol, PathPrefixResolverProtocol, TransportProtocol
from .transport import HttpRequest

logger = get_logger(__name__)

CLIENT_VERSION_HEADER = "X-Client-Version"


class ProjectPathResolver:
    """Resolves ``/projects/{projectId}[/tenants/{tenantId}]``.

    The project id may be given directly or produced lazily by a callable,
    for example one reading the environment.
    """

    def __init__(
        self,
        project_id: str | None = None,
        tenant_id: str | None = None,
        project_id_source: Callable[[], str | None] | None = None,
    ) -> None:
        self.project_id = project_id
        self.tenant_id = tenant_id
        self.project_id_source = project_id_source

    def resolve(self) -> str:
        project_id = self.project_id
        if not project_id and self.project_id_source is not None:
            project_id = self.project_id_source()
        if not project_id:
            raise AuthConfigError(
                "Failed to determine project ID. Set IDADMIN_PROJECT_ID or pass "
                "a project ID explicitly."
            )

        prefix = f"/projects/{quote(project_id, safe='')}"
        if self.tenant_id:
            prefix += f"/tenants/{quote(self.tenant_id, safe='')}"
        return prefix

    def for_tenant(self, tenant_id: str) -> "ProjectPathResolver":
        """Return a resolver scoped to a tenant of the same project."""
        return ProjectPathResolver(
            project_id=self.project_id,
            tenant_id=tenant_id,
            project_id_source=self.project_id_source,
        )


class RequestDispatcher:
    """Sends one backend operation described by an :class:`ApiSettings`.

    The project path prefix is resolved on first use and memoized. It is
    published with a single attribute assignment, so concurrent first calls
    at worst resolve it twice with identical results.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        credential: CredentialSourceProtocol,
        path_resolver: PathPrefixResolverProtocol,
        api_host: str = DEFAULT_API_HOST,
        translator: BackendErrorTranslator | None = None,
        client_version: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.transport = transport
        self.credential = credential
        self.path_resolver = path_resolver
        self.api_host = api_host.rstrip("/")
        self.translator = translator or default_translator
        self.client_version = client_version or f"Python/Admin/{__version__}"
        self.timeout = timeout
        self._path_prefix: str | None = None

    @property
    def path_prefix(self) -> str:
        prefix = self._path_prefix
        if prefix is None:
            prefix = self.path_resolver.resolve()
            self._path_prefix = prefix
        return prefix

    @property
    def tenant_id(self) -> str | None:
        return getattr(self.path_resolver, "tenant_id", None)

    def with_path_resolver(self, path_resolver: PathPrefixResolverProtocol) -> "RequestDispatcher":
        """Return a dispatcher sharing collaborators but with another path prefix."""
        return RequestDispatcher(
            transport=self.transport,
            credential=self.credential,
            path_resolver=path_resolver,
            api_host=self.api_host,
            translator=self.translator,
            client_version=self.client_version,
            timeout=self.timeout,
        )

    def build_url(
        self, settings: ApiSettings, path_params: Mapping[str, Any] | None = None
    ) -> str:
        return (
            f"{self.api_host}/{settings.version}{self.path_prefix}"
            f"{settings.render_path(path_params)}"
        )

    def build_headers(self) -> dict[str, str]:
        token = self.credential.get_access_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            CLIENT_VERSION_HEADER: self.client_version,
        }

    def invoke(
        self,
        settings: ApiSettings,
        payload: Mapping[str, Any] | None = None,
        path_params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Validate, send and validate the response of one operation.

        Args:
            settings: Descriptor of the operation
            payload: Request payload (query parameters for GET and DELETE)
            path_params: Values for the endpoint template slots

        Returns:
            Dict[str, Any]: Decoded response body

        Raises:
            ArgumentError: If the request validator rejects the payload
            BackendError: If the backend reports an error
            ProtocolError: If the response does not have the expected shape
            TransportError: If the request could not be delivered
        """
        request_payload = dict(payload or {})
        if settings.request_validator is not None:
            settings.request_validator(request_payload)

        url = self.build_url(settings, path_params)
        request = HttpRequest(
            method=settings.method.value,
            url=url,
            headers=self.build_headers(),
            params=request_payload if settings.sends_query and request_payload else None,
            json_body=None if settings.sends_query else request_payload,
            timeout=self.timeout,
        )

        log_context = {
            "operation": settings.name,
            "api_endpoint": url,
            "http_method": settings.method.value,
        }
        logger.debug(f"Sending {settings.name} request", extra=log_context)

        start = time.monotonic()
        try:
            response = self.transport.send(request)
        except IdAdminError:
            raise
        except Exception as e:
            raise wrap_transport_exception(e, url) from e
        duration = time.monotonic() - start

        logger.debug(
            f"Received {settings.name} response",
            extra={
                **log_context,
                "status_code": response.status_code,
                "duration": duration,
            },
        )

        if not response.ok:
            error = self.translator.from_http_failure(
                response.status_code, response.body, endpoint=settings.name
            )
            logger.debug(
                f"{settings.name} failed: {error.code}",
                extra={**log_context, "status_code": response.status_code},
            )
            raise error

        body = response.body if response.body is not None else {}
        if not isinstance(body, Mapping):
            raise ProtocolError(
                f"INTERNAL ASSERT FAILED: Unexpected response body for {settings.name}",
                details=str(body),
            )
        body = dict(body)

        if settings.response_validator is not None:
            settings.response_validator(body)
        return body
