from collections import deque
from typing import Any

import pytest

from idadmin.core.admin_client import AdminClient, clear_cache
from idadmin.core.auth import StaticTokenCredential
from idadmin.core.dispatcher import ProjectPathResolver, RequestDispatcher
from idadmin.core.transport import HttpRequest, HttpResponse

TEST_HOST = "https://identity.test"


class RecordingTransport:
    """Transport double returning queued responses and recording requests."""

    def __init__(self) -> None:
        self.requests: list[HttpRequest] = []
        self.responses: deque[Any] = deque()

    def queue(self, body: Any = None, status_code: int = 200) -> "RecordingTransport":
        self.responses.append(HttpResponse(status_code=status_code, body=body))
        return self

    def queue_error(self, exc: Exception) -> "RecordingTransport":
        self.responses.append(exc)
        return self

    def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_request(self) -> HttpRequest:
        return self.requests[-1]


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def credential():
    return StaticTokenCredential("test_token")


@pytest.fixture
def dispatcher(transport, credential):
    """Dispatcher for project ``project-id`` sending through the recording transport."""
    return RequestDispatcher(
        transport=transport,
        credential=credential,
        path_resolver=ProjectPathResolver("project-id"),
        api_host=TEST_HOST,
    )


@pytest.fixture
def tenant_dispatcher(dispatcher):
    return dispatcher.with_path_resolver(ProjectPathResolver("project-id", tenant_id="tenant-1"))


@pytest.fixture
def client(dispatcher):
    return AdminClient(dispatcher)


@pytest.fixture(autouse=True)
def _reset_client_cache():
    clear_cache()
    yield
    clear_cache()

