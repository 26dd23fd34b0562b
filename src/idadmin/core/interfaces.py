"""Protocol interfaces for the collaborators injected into the dispatcher."""

from collections.abc import Mapping
from typing import Any, Protocol

from .transport import HttpRequest, HttpResponse


class TransportProtocol(Protocol):
    """Protocol for the HTTP transport."""

    def send(self, request: HttpRequest) -> HttpResponse:
        """Send one request.

        Args:
            request: Fully built request

        Returns:
            HttpResponse: Response for any HTTP status, including errors

        Raises:
            TransportError: On network failure or timeout
        """
        ...


class CredentialSourceProtocol(Protocol):
    """Protocol for bearer-token sources."""

    def get_access_token(self) -> str:
        """Return a bearer token for the Authorization header.

        Raises:
            AuthConfigError: If no token can be produced
        """
        ...


class PathPrefixResolverProtocol(Protocol):
    """Protocol for resolving the project/tenant base path."""

    def resolve(self) -> str:
        """Return the path prefix, e.g. ``/projects/p/tenants/t``.

        Raises:
            AuthConfigError: If the project id cannot be determined
        """
        ...


class TokenVerifierProtocol(Protocol):
    """Protocol for verifying signed session artifacts.

    Implementations check signatures and standard claims and return the
    decoded claims; revocation and tenant checks happen afterwards.
    """

    def verify_id_token(self, token: str) -> Mapping[str, Any]:
        ...

    def verify_session_cookie(self, cookie: str) -> Mapping[str, Any]:
        ...
