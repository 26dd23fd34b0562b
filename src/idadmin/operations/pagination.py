"""Pagination cursor protocol shared by account export and config listing."""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.dispatcher import RequestDispatcher
from ..core.endpoints import (
    DOWNLOAD_ACCOUNTS,
    LIST_INBOUND_SAML_CONFIGS,
    LIST_OAUTH_IDP_CONFIGS,
    ApiSettings,
)
from ..core.error_codes import AuthErrorCode
from ..core.exceptions import ArgumentError
from ..models.page import PageRequest, PageResult
from ..utils.logging_utils import get_logger
from ..utils.validators import is_non_empty_string, is_number

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PageEndpoint:
    """Paging parameters of one listing endpoint."""

    settings: ApiSettings
    bound: int
    default: int
    max_results_field: str
    page_token_field: str
    collection_field: str


ACCOUNT_EXPORT = PageEndpoint(
    settings=DOWNLOAD_ACCOUNTS,
    bound=1000,
    default=1000,
    max_results_field="maxResults",
    page_token_field="nextPageToken",
    collection_field="users",
)
OIDC_LISTING = PageEndpoint(
    settings=LIST_OAUTH_IDP_CONFIGS,
    bound=100,
    default=100,
    max_results_field="pageSize",
    page_token_field="pageToken",
    collection_field="oauthIdpConfigs",
)
SAML_LISTING = PageEndpoint(
    settings=LIST_INBOUND_SAML_CONFIGS,
    bound=100,
    default=100,
    max_results_field="pageSize",
    page_token_field="pageToken",
    collection_field="inboundSamlConfigs",
)


def build_page_request(
    endpoint: PageEndpoint,
    max_results: Any = None,
    page_token: Any = None,
) -> PageRequest:
    """Validate caller paging arguments against an endpoint's bounds.

    Args:
        endpoint: Endpoint paging parameters
        max_results: Page size; the endpoint default when None
        page_token: Token of the page to fetch; the first page when None

    Returns:
        PageRequest: Validated request

    Raises:
        ArgumentError: If the page size is not a positive integer within the
            bound, or the page token is not a non-empty string
    """
    if max_results is None:
        max_results = endpoint.default
    if (
        not is_number(max_results)
        or not float(max_results).is_integer()
        or max_results <= 0
        or max_results > endpoint.bound
    ):
        raise ArgumentError(
            AuthErrorCode.INVALID_ARGUMENT,
            f'Required "maxResults" must be a positive integer that does not '
            f"exceed {endpoint.bound}.",
            field="maxResults",
            value=max_results,
        )

    if page_token is not None and not is_non_empty_string(page_token):
        raise ArgumentError(
            AuthErrorCode.INVALID_PAGE_TOKEN, field="pageToken", value=page_token
        )

    return PageRequest(max_results=int(max_results), page_token=page_token)


def encode_page_request(endpoint: PageEndpoint, request: PageRequest) -> dict[str, Any]:
    """Return the wire query parameters; an absent page token is omitted."""
    params: dict[str, Any] = {endpoint.max_results_field: request.max_results}
    if request.page_token is not None:
        params[endpoint.page_token_field] = request.page_token
    return params


def parse_page_response(
    endpoint: PageEndpoint,
    response: Mapping[str, Any],
    parse_item: Callable[[Mapping[str, Any]], T],
) -> PageResult[T]:
    """Normalize a listing response.

    A missing collection becomes an empty list; ``nextPageToken`` is passed
    through as returned, including an empty string, and is None only when
    the key is absent.
    """
    raw_items = response.get(endpoint.collection_field) or []
    next_page_token = response.get("nextPageToken")
    return PageResult(
        items=[parse_item(item) for item in raw_items],
        next_page_token=next_page_token,
    )


def fetch_page(
    dispatcher: RequestDispatcher,
    endpoint: PageEndpoint,
    parse_item: Callable[[Mapping[str, Any]], T],
    max_results: Any = None,
    page_token: Any = None,
) -> PageResult[T]:
    """Fetch one page with a single backend call."""
    request = build_page_request(endpoint, max_results, page_token)
    response = dispatcher.invoke(endpoint.settings, encode_page_request(endpoint, request))
    page = parse_page_response(endpoint, response, parse_item)
    logger.debug(
        f"Fetched {len(page.items)} {endpoint.collection_field}",
        extra={"operation": endpoint.settings.name},
    )
    return page


def iterate_all(
    fetch: Callable[[str | None], PageResult[T]],
    limit: int | None = None,
) -> Iterator[T]:
    """Yield items across pages until the backend stops returning a token.

    Args:
        fetch: Callable fetching the page for a token (None for the first)
        limit: Optional maximum number of items to yield
    """
    yielded = 0
    page_token: str | None = None
    while True:
        page = fetch(page_token)
        for item in page.items:
            if limit is not None and yielded >= limit:
                return
            yield item
            yielded += 1
        # An empty token cannot be sent back
        if not page.next_page_token or page.next_page_token == page_token:
            return
        page_token = page.next_page_token
