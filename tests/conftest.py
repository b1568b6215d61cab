"""Pytest configuration and shared fixtures for the Shopify MCP gateway tests."""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from shopify_mcp.config.settings import Settings, ShopifyConfig
from shopify_mcp.services.shopify_graphql import MutationResult, ShopifyGraphQLClient
from shopify_mcp.services.tools.base import ToolContext


@pytest.fixture
def shopify_config():
    """Explicit client configuration, independent of the environment."""
    return ShopifyConfig(
        store_url="https://test-store.myshopify.com/",
        access_token="shpat_test123",
        api_version="2025-01",
        timeout_seconds=5.0,
        max_retries=0,
    )


@pytest.fixture
def test_settings(shopify_config):
    """Settings built around the explicit Shopify config."""
    return Settings(shopify=shopify_config)


@pytest.fixture
def mock_graphql_client():
    """Return a mock ShopifyGraphQLClient for testing without network access.

    ``query`` returns an empty data payload and ``mutate`` a successful
    MutationResult unless a test overrides them.
    """
    mock = MagicMock(spec=ShopifyGraphQLClient)
    mock.query = AsyncMock(return_value={})
    mock.mutate = AsyncMock(return_value=MutationResult(success=True, data={}))
    return mock


@pytest.fixture
def tool_context(mock_graphql_client, test_settings):
    """ToolContext wired to the mock client."""
    return ToolContext(client=mock_graphql_client, settings=test_settings)


@pytest.fixture
def make_client(shopify_config):
    """Factory for a real client backed by an ``httpx.MockTransport``.

    The handler receives each ``httpx.Request`` and returns an
    ``httpx.Response``. Requests are recorded on ``client.requests``.
    """

    def factory(handler, config=None):
        requests = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        client = ShopifyGraphQLClient(config or shopify_config, http_client=http_client)
        client.requests = requests
        return client

    return factory


def graphql_response(data=None, errors=None, extensions=None, status_code=200):
    """Build an httpx.Response carrying a GraphQL body."""
    body = {}
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors
    if extensions is not None:
        body["extensions"] = extensions
    return httpx.Response(status_code, json=body)


def request_body(request: httpx.Request):
    return json.loads(request.content)


def connection(nodes, has_next=False, end_cursor=None, has_previous=False, start_cursor=None):
    """Relay connection payload for a list of nodes."""
    return {
        "edges": [{"node": node, "cursor": f"c{i}"} for i, node in enumerate(nodes)],
        "pageInfo": {
            "hasNextPage": has_next,
            "hasPreviousPage": has_previous,
            "startCursor": start_cursor,
            "endCursor": end_cursor,
        },
    }


@pytest.fixture
def sample_product():
    """A product node as returned by the Admin API."""
    return {
        "id": "gid://shopify/Product/123",
        "title": "Premium Widget",
        "handle": "premium-widget",
        "status": "ACTIVE",
        "vendor": "Acme",
        "productType": "Widgets",
        "tags": ["new"],
        "totalInventory": 42,
        "descriptionHtml": "<p>Great</p>",
        "featuredImage": {"url": "https://cdn.shopify.com/widget.png"},
        "createdAt": "2024-01-15T10:30:00Z",
        "updatedAt": "2024-01-16T08:05:00Z",
        "variants": connection([
            {
                "id": "gid://shopify/ProductVariant/456",
                "title": "Default Title",
                "sku": "WID-1",
                "price": "19.99",
                "compareAtPrice": None,
                "inventoryQuantity": 42,
                "inventoryItem": {"id": "gid://shopify/InventoryItem/789"},
            }
        ]),
        "images": connection([
            {
                "id": "gid://shopify/ProductImage/1",
                "url": "https://cdn.shopify.com/widget.png",
                "altText": "Widget",
            }
        ]),
    }


@pytest.fixture
def sample_order():
    """An order node as returned by the Admin API."""
    return {
        "id": "gid://shopify/Order/1001",
        "name": "#1001",
        "email": "jane@example.com",
        "displayFinancialStatus": "PAID",
        "displayFulfillmentStatus": "UNFULFILLED",
        "currencyCode": "USD",
        "totalPriceSet": {"shopMoney": {"amount": "1234.5", "currencyCode": "USD"}},
        "subtotalPriceSet": {"shopMoney": {"amount": "1200.00", "currencyCode": "USD"}},
        "customer": {
            "id": "gid://shopify/Customer/77",
            "email": "jane@example.com",
            "displayName": "Jane Doe",
        },
        "lineItems": connection([
            {
                "id": "gid://shopify/LineItem/5",
                "title": "Premium Widget",
                "quantity": 2,
                "sku": "WID-1",
                "fulfillmentStatus": "unfulfilled",
                "discountedUnitPriceSet": {"shopMoney": {"amount": "600", "currencyCode": "USD"}},
                "discountedTotalSet": {"shopMoney": {"amount": "1200", "currencyCode": "USD"}},
            }
        ]),
        "createdAt": "2024-01-15T10:30:00Z",
    }
