"""HTTP transport built on requests."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from ..utils.logging_utils import get_logger
from .config import API_TIMEOUT
from .exceptions import wrap_transport_exception

logger = get_logger(__name__)


@dataclass(frozen=True)
class HttpRequest:
    """A request ready to be sent; ``json_body`` is None for GET/DELETE."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] | None = None
    json_body: Any = None
    timeout: float | None = None


@dataclass(frozen=True)
class HttpResponse:
    """A received response; ``body`` is decoded JSON or raw text."""

    status_code: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class RequestsTransport:
    """Transport sending requests through a shared ``requests.Session``.

    No retries are attempted; network failures and timeouts surface as
    :class:`TransportError`.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = API_TIMEOUT,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, request: HttpRequest) -> HttpResponse:
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                params=request.params,
                json=request.json_body,
                timeout=request.timeout or self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.debug(
                f"Transport failure: {e}",
                extra={"api_endpoint": request.url, "http_method": request.method},
            )
            raise wrap_transport_exception(e, request.url) from e

        return HttpResponse(
            status_code=response.status_code,
            body=decode_body(response),
            headers=dict(response.headers),
        )

    def close(self) -> None:
        self.session.close()


def decode_body(response: requests.Response) -> Any:
    """Decode a JSON body, falling back to the raw text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
