"""
Cursor pagination helpers for Relay-style connections.

Shopify connections look like ``{"edges": [{"node": ..., "cursor": ...}],
"pageInfo": {...}}``. These helpers flatten single pages and drain
multi-page connections into one list.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from shopify_mcp.utils.logger import get_logger

logger = get_logger(__name__)

# Hard ceiling for accumulate_pages, guards against a server that keeps
# reporting hasNextPage forever.
MAX_ACCUMULATED_ITEMS = 10000

PageExtractor = Callable[[Dict[str, Any]], Tuple[List[Any], Dict[str, Any]]]
PageFetcher = Callable[[str, Dict[str, Any]], Awaitable[Dict[str, Any]]]


@dataclass
class PaginatedResult:
    items: List[Any] = field(default_factory=list)
    page_info: Dict[str, Any] = field(default_factory=lambda: create_page_info())

    def to_dict(self) -> Dict[str, Any]:
        return {"items": self.items, "pageInfo": self.page_info}


def create_page_info(
    has_next_page: bool = False,
    has_previous_page: bool = False,
    start_cursor: Optional[str] = None,
    end_cursor: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a pageInfo dict using the wire field names."""
    return {
        "hasNextPage": has_next_page,
        "hasPreviousPage": has_previous_page,
        "startCursor": start_cursor,
        "endCursor": end_cursor,
    }


def _normalize_page_info(page_info: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    page_info = page_info or {}
    return create_page_info(
        has_next_page=bool(page_info.get("hasNextPage", False)),
        has_previous_page=bool(page_info.get("hasPreviousPage", False)),
        start_cursor=page_info.get("startCursor"),
        end_cursor=page_info.get("endCursor"),
    )


def extract_nodes(connection: Optional[Dict[str, Any]]) -> List[Any]:
    """Return the nodes of a connection, in edge order."""
    if not connection:
        return []
    return [edge.get("node") for edge in connection.get("edges", []) if edge.get("node")]


def connection_to_result(connection: Optional[Dict[str, Any]]) -> PaginatedResult:
    """Convert a single connection page to a PaginatedResult."""
    connection = connection or {}
    return PaginatedResult(
        items=extract_nodes(connection),
        page_info=_normalize_page_info(connection.get("pageInfo")),
    )


def connection_extractor(root_field: str) -> PageExtractor:
    """Build an extractor for a top-level connection such as ``products``."""

    def extractor(data: Dict[str, Any]) -> Tuple[List[Any], Dict[str, Any]]:
        connection = (data or {}).get(root_field) or {}
        return extract_nodes(connection), connection.get("pageInfo") or {}

    return extractor


def build_pagination_args(
    first: Optional[int] = None,
    after: Optional[str] = None,
    last: Optional[int] = None,
    before: Optional[str] = None,
) -> Dict[str, Any]:
    """Build GraphQL pagination variables, omitting anything unset."""
    args: Dict[str, Any] = {}
    if first is not None:
        args["first"] = first
    if after:
        args["after"] = after
    if last is not None:
        args["last"] = last
    if before:
        args["before"] = before
    return args


def combine_paginated_results(results: List[PaginatedResult]) -> PaginatedResult:
    """Merge consecutive pages.

    Backward cursor info comes from the first page, forward cursor info
    from the last.
    """
    if not results:
        return PaginatedResult()

    first, last = results[0], results[-1]
    items: List[Any] = []
    for result in results:
        items.extend(result.items)

    return PaginatedResult(
        items=items,
        page_info=create_page_info(
            has_next_page=last.page_info.get("hasNextPage", False),
            has_previous_page=first.page_info.get("hasPreviousPage", False),
            start_cursor=first.page_info.get("startCursor"),
            end_cursor=last.page_info.get("endCursor"),
        ),
    )


async def accumulate_pages(
    fetch_page: PageFetcher,
    document: str,
    variables: Optional[Dict[str, Any]],
    extractor: PageExtractor,
    max_items: int = MAX_ACCUMULATED_ITEMS,
) -> PaginatedResult:
    """
    Drain a cursor-paginated connection into a single ordered list.

    Pages are requested one after another with ``after`` set to the
    previous page's ``endCursor``. Items keep the server's order.

    Stops early, with a warning and without raising, when ``max_items``
    is reached (the result is truncated to exactly ``max_items``) or when
    the server reports another page but no cursor to reach it.

    Args:
        fetch_page: Coroutine taking ``(document, variables)`` and returning
            the response ``data`` (normally ``ShopifyGraphQLClient.query``).
        document: GraphQL query with an ``$after`` variable.
        variables: Base variables, sent with every page.
        extractor: Returns ``(nodes, pageInfo)`` for one response.
        max_items: Safety ceiling on the number of accumulated items.

    Returns:
        PaginatedResult with all items and the merged pageInfo.
    """
    base_variables = dict(variables or {})
    items: List[Any] = []
    cursor: Optional[str] = None
    has_next = True
    first_page_info: Optional[Dict[str, Any]] = None
    last_page_info: Dict[str, Any] = create_page_info()
    pages_fetched = 0

    while has_next:
        data = await fetch_page(document, {**base_variables, "after": cursor})
        nodes, page_info = extractor(data)
        page_info = _normalize_page_info(page_info)
        pages_fetched += 1

        if first_page_info is None:
            first_page_info = page_info
        last_page_info = page_info

        items.extend(nodes)
        cursor = page_info["endCursor"]
        has_next = page_info["hasNextPage"]

        if len(items) >= max_items:
            if len(items) > max_items or has_next:
                logger.warning(
                    "Pagination safety limit reached, returning partial result",
                    max_items=max_items,
                    pages_fetched=pages_fetched,
                )
            items = items[:max_items]
            break

        if has_next and not cursor:
            logger.warning(
                "Connection reported another page without an endCursor, stopping",
                pages_fetched=pages_fetched,
                items=len(items),
            )
            break

    logger.debug("Pagination complete", pages_fetched=pages_fetched, items=len(items))

    first_page_info = first_page_info or create_page_info()
    return PaginatedResult(
        items=items,
        page_info=create_page_info(
            has_next_page=last_page_info["hasNextPage"],
            has_previous_page=first_page_info["hasPreviousPage"],
            start_cursor=first_page_info["startCursor"],
            end_cursor=last_page_info["endCursor"],
        ),
    )
