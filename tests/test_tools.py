"""Tests for the resource tools, run against a mocked GraphQL client."""

import pytest

from conftest import connection
from shopify_mcp.services.errors import ErrorCodes, ShopifyNotFoundError
from shopify_mcp.services.shopify_graphql import MutationResult
from shopify_mcp.services.tools import TOOL_CATEGORIES
from shopify_mcp.services.tools.discounts import (
    build_customer_gets_value,
    build_minimum_requirement,
)
from shopify_mcp.services.tools.fulfillments import group_line_items_by_fulfillment_order

TOOLS_BY_NAME = {
    tool.name: tool for tools in TOOL_CATEGORIES.values() for tool in tools
}


async def call(ctx, name, args=None):
    return await TOOLS_BY_NAME[name].run(ctx, args or {})


def mutation_ok(data):
    return MutationResult(success=True, data=data)


def rejected(*messages):
    return MutationResult(
        success=False,
        user_errors=[{"field": ["input"], "message": m} for m in messages],
    )


class TestProductTools:
    """Test suite for product tools.

    Verifies:
    - Status filter is appended to the search query
    - Ids are encoded before reaching the client
    - Missing products and user errors map to error envelopes
    """

    @pytest.mark.asyncio
    async def test_list_products(self, tool_context, mock_graphql_client, sample_product):
        mock_graphql_client.query.return_value = {
            "products": connection([sample_product], has_next=True, end_cursor="e1")
        }

        result = await call(tool_context, "list_products", {"query": "widget", "status": "ACTIVE"})

        assert result["success"] is True
        assert result["data"]["count"] == 1
        assert result["data"]["products"][0]["title"] == "Premium Widget"
        assert result["data"]["pageInfo"]["endCursor"] == "e1"
        _, variables = mock_graphql_client.query.await_args.args
        assert variables == {"first": 50, "query": "widget AND status:ACTIVE"}

    @pytest.mark.asyncio
    async def test_list_products_status_only(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {"products": connection([])}
        await call(tool_context, "list_products", {"status": "DRAFT", "first": 10})
        _, variables = mock_graphql_client.query.await_args.args
        assert variables == {"first": 10, "query": "status:DRAFT"}

    @pytest.mark.asyncio
    async def test_list_products_rejects_page_size(self, tool_context, mock_graphql_client):
        result = await call(tool_context, "list_products", {"first": 500})
        assert result["error"]["code"] == ErrorCodes.INVALID_INPUT
        mock_graphql_client.query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_product_encodes_id(self, tool_context, mock_graphql_client, sample_product):
        mock_graphql_client.query.return_value = {"product": sample_product}

        result = await call(tool_context, "get_product", {"id": "123"})

        assert result["data"]["product"]["id"] == "123"
        _, variables = mock_graphql_client.query.await_args.args
        assert variables == {"id": "gid://shopify/Product/123"}

    @pytest.mark.asyncio
    async def test_get_product_not_found(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {"product": None}
        result = await call(tool_context, "get_product", {"id": "999"})
        assert result["error"] == {
            "code": ErrorCodes.NOT_FOUND,
            "message": "Product with ID 999 not found",
        }

    @pytest.mark.asyncio
    async def test_create_product_defaults_to_draft(self, tool_context, mock_graphql_client, sample_product):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"productCreate": {"product": sample_product, "userErrors": []}}
        )

        result = await call(tool_context, "create_product", {"title": "Premium Widget"})

        assert result["data"]["message"] == "Product created successfully"
        _, variables, result_key = mock_graphql_client.mutate.await_args.args
        assert result_key == "productCreate"
        assert variables == {"input": {"title": "Premium Widget", "status": "DRAFT"}}

    @pytest.mark.asyncio
    async def test_create_product_user_errors(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = rejected("Title can't be blank")

        result = await call(tool_context, "create_product", {"title": " "})

        assert result["error"]["code"] == ErrorCodes.VALIDATION_ERROR
        assert result["error"]["message"] == "Failed to create product"
        assert result["error"]["details"]["userErrors"][0]["message"] == "Title can't be blank"

    @pytest.mark.asyncio
    async def test_create_product_null_payload(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({"productCreate": None})

        result = await call(tool_context, "create_product", {"title": "Premium Widget"})

        assert result["success"] is False
        assert result["error"]["code"] == ErrorCodes.API_ERROR
        assert result["error"]["message"] == "Product was not created"

    @pytest.mark.asyncio
    async def test_update_product_sends_only_given_fields(self, tool_context, mock_graphql_client, sample_product):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"productUpdate": {"product": sample_product, "userErrors": []}}
        )

        await call(tool_context, "update_product", {"id": "123", "title": "New"})

        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables == {"input": {"id": "gid://shopify/Product/123", "title": "New"}}

    @pytest.mark.asyncio
    async def test_delete_product(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"productDelete": {"deletedProductId": "gid://shopify/Product/123", "userErrors": []}}
        )
        result = await call(tool_context, "delete_product", {"id": "123"})
        assert result["data"] == {
            "message": "Product deleted successfully",
            "deletedProductId": "123",
        }

    @pytest.mark.asyncio
    async def test_transport_error_becomes_envelope(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.side_effect = ShopifyNotFoundError("Product not found")
        result = await call(tool_context, "get_product", {"id": "1"})
        assert result["error"] == {"code": ErrorCodes.NOT_FOUND, "message": "Product not found"}


class TestOrderTools:
    @pytest.mark.asyncio
    async def test_list_orders_reverse_by_default(self, tool_context, mock_graphql_client, sample_order):
        mock_graphql_client.query.return_value = {"orders": connection([sample_order])}

        result = await call(tool_context, "list_orders")

        assert result["data"]["orders"][0]["total"] == "1,234.50 USD"
        _, variables = mock_graphql_client.query.await_args.args
        assert variables["reverse"] is True

    @pytest.mark.asyncio
    async def test_list_orders_fetch_all(self, tool_context, mock_graphql_client, sample_order):
        second = dict(sample_order, id="gid://shopify/Order/1002")
        mock_graphql_client.query.side_effect = [
            {"orders": connection([sample_order], has_next=True, end_cursor="c1", start_cursor="s1")},
            {"orders": connection([second], has_next=False, end_cursor="c2")},
        ]

        result = await call(tool_context, "list_orders", {"fetchAll": True, "first": 1})

        assert [o["id"] for o in result["data"]["orders"]] == ["1001", "1002"]
        assert result["data"]["pageInfo"]["startCursor"] == "s1"
        assert result["data"]["pageInfo"]["endCursor"] == "c2"
        assert mock_graphql_client.query.await_count == 2

    @pytest.mark.asyncio
    async def test_get_order_adds_fulfillments(self, tool_context, mock_graphql_client, sample_order):
        sample_order["fulfillments"] = [{"id": "gid://shopify/Fulfillment/3", "status": "SUCCESS"}]
        mock_graphql_client.query.return_value = {"order": sample_order}

        result = await call(tool_context, "get_order", {"id": "gid://shopify/Order/1001"})

        order = result["data"]["order"]
        assert order["fulfillments"][0]["id"] == "3"
        assert order["refunds"] == []
        _, variables = mock_graphql_client.query.await_args.args
        assert variables == {"id": "gid://shopify/Order/1001"}

    @pytest.mark.asyncio
    async def test_create_draft_order_requires_line_items(self, tool_context, mock_graphql_client):
        result = await call(tool_context, "create_draft_order", {"lineItems": []})
        assert result["error"]["code"] == ErrorCodes.INVALID_INPUT
        mock_graphql_client.mutate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_draft_order(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({
            "draftOrderCreate": {
                "draftOrder": {"id": "gid://shopify/DraftOrder/8", "name": "#D8", "status": "OPEN"},
                "userErrors": [],
            }
        })

        result = await call(tool_context, "create_draft_order", {
            "lineItems": [{"variantId": "456", "quantity": 2}],
            "customerId": "77",
        })

        assert result["data"]["draftOrder"]["id"] == "8"
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables["input"]["lineItems"] == [
            {"variantId": "gid://shopify/ProductVariant/456", "quantity": 2}
        ]
        assert variables["input"]["customerId"] == "gid://shopify/Customer/77"

    @pytest.mark.asyncio
    async def test_cancel_order_uses_cancel_user_errors(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"orderCancel": {"job": {"id": "gid://shopify/Job/1"}, "orderCancelUserErrors": []}}
        )

        result = await call(tool_context, "cancel_order", {"id": "1001", "reason": "CUSTOMER"})

        assert result["data"]["jobId"] == "gid://shopify/Job/1"
        call_args = mock_graphql_client.mutate.await_args
        assert call_args.kwargs == {"user_errors_key": "orderCancelUserErrors"}
        assert call_args.args[1] == {
            "orderId": "gid://shopify/Order/1001",
            "reason": "CUSTOMER",
            "notifyCustomer": True,
            "refund": False,
            "restock": True,
        }

    @pytest.mark.asyncio
    async def test_cancel_order_null_payload(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({"orderCancel": None})

        result = await call(tool_context, "cancel_order", {"id": "1001"})

        assert result["success"] is True
        assert result["data"]["jobId"] is None

    @pytest.mark.asyncio
    async def test_add_order_note(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"orderUpdate": {"order": {"id": "gid://shopify/Order/1001"}, "userErrors": []}}
        )
        result = await call(tool_context, "add_order_note", {"id": "1001", "note": "Gift"})
        assert result["data"]["note"] == "Gift"


class TestCustomerTools:
    @pytest.mark.asyncio
    async def test_get_customer_with_orders(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "customer": {
                "id": "gid://shopify/Customer/77",
                "firstName": "Jane",
                "addresses": [{"address1": "1 Main St"}],
                "orders": connection([
                    {
                        "id": "gid://shopify/Order/1001",
                        "name": "#1001",
                        "totalPriceSet": {"shopMoney": {"amount": "5", "currencyCode": "USD"}},
                    }
                ]),
            }
        }

        result = await call(tool_context, "get_customer", {"id": "77", "includeOrders": True})

        customer = result["data"]["customer"]
        assert customer["addresses"][0]["address1"] == "1 Main St"
        assert customer["orders"][0]["total"] == "5.00 USD"
        _, variables = mock_graphql_client.query.await_args.args
        assert variables == {
            "id": "gid://shopify/Customer/77",
            "includeOrders": True,
            "ordersFirst": 10,
        }

    @pytest.mark.asyncio
    async def test_create_customer_needs_identity(self, tool_context, mock_graphql_client):
        result = await call(tool_context, "create_customer", {"note": "VIP"})
        assert result["error"]["code"] == ErrorCodes.INVALID_INPUT
        mock_graphql_client.mutate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_customer_null_payload(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({"customerCreate": None})

        result = await call(tool_context, "create_customer", {"email": "jane@example.com"})

        assert result["error"]["code"] == ErrorCodes.API_ERROR
        assert result["error"]["message"] == "Customer was not created"

    @pytest.mark.asyncio
    async def test_search_customers(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "customers": connection([{"id": "gid://shopify/Customer/1", "email": "a@b.c"}])
        }
        result = await call(tool_context, "search_customers", {"query": "email:a@b.c"})
        assert result["data"]["count"] == 1
        assert result["data"]["customers"][0]["email"] == "a@b.c"


class TestInventoryTools:
    @pytest.mark.asyncio
    async def test_get_inventory_levels(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "inventoryItem": {
                "id": "gid://shopify/InventoryItem/789",
                "sku": "WID-1",
                "tracked": True,
                "inventoryLevels": connection([
                    {
                        "id": "gid://shopify/InventoryLevel/1",
                        "location": {"id": "gid://shopify/Location/5", "name": "Warehouse"},
                        "quantities": [
                            {"name": "available", "quantity": 7},
                            {"name": "on_hand", "quantity": 9},
                        ],
                    }
                ]),
            }
        }

        result = await call(tool_context, "get_inventory_levels", {"inventoryItemId": "789"})

        level = result["data"]["levels"][0]
        assert level["locationId"] == "5"
        assert level["quantities"] == {"available": 7, "on_hand": 9}

    @pytest.mark.asyncio
    async def test_get_inventory_item_not_found(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {"inventoryItem": None}
        result = await call(tool_context, "get_inventory_item", {"id": "1"})
        assert result["error"]["message"] == "Inventory item with ID 1 not found"

    @pytest.mark.asyncio
    async def test_adjust_inventory(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({
            "inventoryAdjustQuantities": {
                "inventoryAdjustmentGroup": {"changes": [{"delta": -2, "quantityAfterChange": 5}]},
                "userErrors": [],
            }
        })

        result = await call(tool_context, "adjust_inventory", {
            "inventoryItemId": "789",
            "locationId": "5",
            "delta": -2,
        })

        assert result["data"]["adjustment"]["newQuantity"] == 5
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables["input"]["reason"] == "correction"
        assert variables["input"]["name"] == "available"
        assert variables["input"]["changes"] == [{
            "inventoryItemId": "gid://shopify/InventoryItem/789",
            "locationId": "gid://shopify/Location/5",
            "delta": -2,
        }]

    @pytest.mark.asyncio
    async def test_set_inventory(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"inventorySetOnHandQuantities": {"userErrors": []}}
        )
        result = await call(tool_context, "set_inventory", {
            "inventoryItemId": "789",
            "locationId": "5",
            "available": 12,
            "reason": "received",
        })
        assert result["data"]["inventory"]["quantity"] == 12
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables["input"]["reason"] == "received"
        assert variables["input"]["setQuantities"][0]["quantity"] == 12


class TestCollectionTools:
    @pytest.mark.asyncio
    async def test_get_collection_with_products(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "collection": {
                "id": "gid://shopify/Collection/9",
                "title": "Summer",
                "productsCount": {"count": 1},
                "ruleSet": None,
                "products": connection([
                    {
                        "id": "gid://shopify/Product/123",
                        "title": "Premium Widget",
                        "variants": connection([{"price": "19.99"}]),
                    }
                ]),
            }
        }

        result = await call(tool_context, "get_collection", {"id": "9"})

        assert result["data"]["collection"]["isManual"] is True
        assert result["data"]["products"] == [{
            "id": "123",
            "title": "Premium Widget",
            "handle": None,
            "status": None,
            "featuredImage": None,
            "totalInventory": None,
            "price": "19.99",
        }]
        assert result["data"]["productsPageInfo"]["hasNextPage"] is False

    @pytest.mark.asyncio
    async def test_add_products_to_collection(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({
            "collectionAddProducts": {
                "collection": {"title": "Summer", "productsCount": {"count": 3}},
                "userErrors": [],
            }
        })

        result = await call(tool_context, "add_products_to_collection", {
            "collectionId": "9",
            "productIds": ["1", "gid://shopify/Product/2"],
        })

        assert result["data"]["collection"]["productsCount"] == 3
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables == {
            "id": "gid://shopify/Collection/9",
            "productIds": ["gid://shopify/Product/1", "gid://shopify/Product/2"],
        }


class TestDiscountTools:
    def test_percentage_is_sent_as_fraction(self):
        assert build_customer_gets_value("PERCENTAGE", 15) == {"percentage": 0.15}

    def test_percentage_over_100_rejected(self):
        with pytest.raises(ValueError, match="exceed 100"):
            build_customer_gets_value("PERCENTAGE", 150)

    def test_fixed_amount(self):
        assert build_customer_gets_value("FIXED_AMOUNT", 5) == {
            "discountAmount": {"amount": "5", "appliesOnEachItem": False}
        }

    def test_minimum_requirements(self):
        assert build_minimum_requirement({"type": "SUBTOTAL", "value": 50}) == {
            "subtotal": {"greaterThanOrEqualToSubtotal": "50"}
        }
        assert build_minimum_requirement({"type": "QUANTITY", "value": 3.0}) == {
            "quantity": {"greaterThanOrEqualToQuantity": "3"}
        }

    @pytest.mark.asyncio
    async def test_create_discount_code(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({
            "discountCodeBasicCreate": {
                "codeDiscountNode": {
                    "id": "gid://shopify/DiscountCodeNode/4",
                    "codeDiscount": {
                        "title": "Summer sale",
                        "status": "ACTIVE",
                        "codes": connection([{"code": "SUMMER10"}]),
                    },
                },
                "userErrors": [],
            }
        })

        result = await call(tool_context, "create_discount_code", {
            "title": "Summer sale",
            "code": "SUMMER10",
            "startsAt": "2024-06-01T00:00:00Z",
            "discountType": "PERCENTAGE",
            "discountValue": 10,
            "minimumRequirement": {"type": "SUBTOTAL", "value": 50},
        })

        assert result["data"]["discount"]["code"] == "SUMMER10"
        assert result["data"]["discount"]["id"] == "4"
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        discount = variables["basicCodeDiscount"]
        assert discount["customerGets"] == {"items": {"all": True}, "value": {"percentage": 0.1}}
        assert discount["customerSelection"] == {"all": True}
        assert discount["appliesOncePerCustomer"] is True
        assert "endsAt" not in discount

    @pytest.mark.asyncio
    async def test_create_discount_code_bad_percentage(self, tool_context, mock_graphql_client):
        result = await call(tool_context, "create_discount_code", {
            "title": "Too generous",
            "code": "FREE",
            "startsAt": "2024-06-01T00:00:00Z",
            "discountType": "PERCENTAGE",
            "discountValue": 120,
        })
        assert result["error"]["code"] == ErrorCodes.INVALID_INPUT
        mock_graphql_client.mutate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_discount_encodes_code_node(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"discountCodeDelete": {"deletedCodeDiscountId": "x", "userErrors": []}}
        )
        await call(tool_context, "delete_discount", {"id": "4"})
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables == {"id": "gid://shopify/DiscountCodeNode/4"}


FULFILLMENT_ORDERS = [
    {
        "id": "gid://shopify/FulfillmentOrder/10",
        "status": "CLOSED",
        "lineItems": connection([
            {"id": "gid://shopify/FulfillmentOrderLineItem/100", "lineItem": {"id": "gid://shopify/LineItem/5"}},
        ]),
    },
    {
        "id": "gid://shopify/FulfillmentOrder/11",
        "status": "OPEN",
        "lineItems": connection([
            {"id": "gid://shopify/FulfillmentOrderLineItem/110", "lineItem": {"id": "gid://shopify/LineItem/5"}},
            {"id": "gid://shopify/FulfillmentOrderLineItem/111", "lineItem": {"id": "gid://shopify/LineItem/6"}},
        ]),
    },
    {
        "id": "gid://shopify/FulfillmentOrder/12",
        "status": "IN_PROGRESS",
        "lineItems": connection([
            {"id": "gid://shopify/FulfillmentOrderLineItem/120", "lineItem": {"id": "gid://shopify/LineItem/7"}},
        ]),
    },
]


class TestFulfillmentTools:
    """Test suite for fulfillment tools.

    Verifies:
    - Order line items are resolved to open fulfillment order lines
    - Closed fulfillment orders are skipped
    - Tracking info is only sent when a number is given
    """

    def test_group_line_items(self):
        grouped = group_line_items_by_fulfillment_order(
            FULFILLMENT_ORDERS,
            [{"id": "5", "quantity": 1}, {"id": "7", "quantity": 2}, {"id": "6", "quantity": 1}],
        )
        assert grouped == [
            {
                "fulfillmentOrderId": "gid://shopify/FulfillmentOrder/11",
                "fulfillmentOrderLineItems": [
                    {"id": "gid://shopify/FulfillmentOrderLineItem/110", "quantity": 1},
                    {"id": "gid://shopify/FulfillmentOrderLineItem/111", "quantity": 1},
                ],
            },
            {
                "fulfillmentOrderId": "gid://shopify/FulfillmentOrder/12",
                "fulfillmentOrderLineItems": [
                    {"id": "gid://shopify/FulfillmentOrderLineItem/120", "quantity": 2},
                ],
            },
        ]

    def test_unknown_line_item(self):
        with pytest.raises(ValueError, match="Line item 99 is not open"):
            group_line_items_by_fulfillment_order(FULFILLMENT_ORDERS, [{"id": "99", "quantity": 1}])

    @pytest.mark.asyncio
    async def test_create_fulfillment(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "order": {
                "id": "gid://shopify/Order/1001",
                "name": "#1001",
                "fulfillmentOrders": connection(FULFILLMENT_ORDERS),
            }
        }
        mock_graphql_client.mutate.return_value = mutation_ok({
            "fulfillmentCreateV2": {
                "fulfillment": {"id": "gid://shopify/Fulfillment/3", "status": "SUCCESS"},
                "userErrors": [],
            }
        })

        result = await call(tool_context, "create_fulfillment", {
            "orderId": "1001",
            "lineItems": [{"id": "6", "quantity": 1}],
            "trackingInfo": {"number": "1Z999", "company": "UPS"},
        })

        assert result["data"]["fulfillment"]["id"] == "3"
        _, variables, result_key = mock_graphql_client.mutate.await_args.args
        assert result_key == "fulfillmentCreateV2"
        assert variables == {
            "fulfillment": {
                "notifyCustomer": True,
                "lineItemsByFulfillmentOrder": [{
                    "fulfillmentOrderId": "gid://shopify/FulfillmentOrder/11",
                    "fulfillmentOrderLineItems": [
                        {"id": "gid://shopify/FulfillmentOrderLineItem/111", "quantity": 1}
                    ],
                }],
                "trackingInfo": {"company": "UPS", "number": "1Z999"},
            }
        }

    @pytest.mark.asyncio
    async def test_create_fulfillment_order_not_found(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {"order": None}
        result = await call(tool_context, "create_fulfillment", {
            "orderId": "1",
            "lineItems": [{"id": "6", "quantity": 1}],
        })
        assert result["error"]["code"] == ErrorCodes.NOT_FOUND
        mock_graphql_client.mutate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_tracking(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok({
            "fulfillmentTrackingInfoUpdateV2": {
                "fulfillment": {"id": "gid://shopify/Fulfillment/3"},
                "userErrors": [],
            }
        })
        await call(tool_context, "update_tracking", {
            "fulfillmentId": "3",
            "trackingInfo": {"number": "1Z999"},
        })
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables == {
            "fulfillmentId": "gid://shopify/Fulfillment/3",
            "trackingInfoInput": {"number": "1Z999"},
            "notifyCustomer": False,
        }


class TestRefundTools:
    @pytest.mark.asyncio
    async def test_calculate_full_refund(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "order": {
                "suggestedRefund": {
                    "amountSet": {"shopMoney": {"amount": "25", "currencyCode": "USD"}},
                    "refundLineItems": [],
                }
            }
        }

        result = await call(tool_context, "calculate_refund", {"orderId": "1001"})

        assert result["data"]["calculation"]["amount"] == "25.00 USD"
        _, variables = mock_graphql_client.query.await_args.args
        assert variables["suggestFullRefund"] is True
        assert variables["refundLineItems"] is None

    @pytest.mark.asyncio
    async def test_calculate_partial_refund(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {"order": {"suggestedRefund": {}}}
        await call(tool_context, "calculate_refund", {
            "orderId": "1001",
            "refundLineItems": [{"lineItemId": "5", "quantity": 1}],
        })
        _, variables = mock_graphql_client.query.await_args.args
        assert variables["suggestFullRefund"] is False
        assert variables["refundLineItems"] == [
            {"lineItemId": "gid://shopify/LineItem/5", "quantity": 1}
        ]

    @pytest.mark.asyncio
    async def test_create_refund_defaults(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"refundCreate": {"refund": {"id": "gid://shopify/Refund/2"}, "userErrors": []}}
        )

        result = await call(tool_context, "create_refund", {
            "orderId": "1001",
            "refundLineItems": [{"lineItemId": "5", "quantity": 1}],
            "shipping": {"amount": 4.5},
        })

        assert result["data"]["refund"]["id"] == "2"
        _, variables, _ = mock_graphql_client.mutate.await_args.args
        refund_input = variables["input"]
        assert refund_input["notify"] is True
        assert refund_input["refundLineItems"][0]["restockType"] == "NO_RESTOCK"
        assert refund_input["shipping"] == {"amount": "4.5"}

    @pytest.mark.asyncio
    async def test_create_return_defaults(self, tool_context, mock_graphql_client):
        mock_graphql_client.mutate.return_value = mutation_ok(
            {"returnCreate": {"return": {"id": "gid://shopify/Return/6", "status": "OPEN"}, "userErrors": []}}
        )

        await call(tool_context, "create_return", {
            "orderId": "1001",
            "returnLineItems": [{"fulfillmentLineItemId": "31", "quantity": 1}],
        })

        _, variables, _ = mock_graphql_client.mutate.await_args.args
        assert variables["input"]["notifyCustomer"] is True
        assert variables["input"]["returnLineItems"] == [{
            "fulfillmentLineItemId": "gid://shopify/FulfillmentLineItem/31",
            "quantity": 1,
            "returnReason": "UNKNOWN",
        }]

    @pytest.mark.asyncio
    async def test_list_refunds_order_not_found(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {"order": None}
        result = await call(tool_context, "list_refunds", {"orderId": "1"})
        assert result["error"]["message"] == "Order with ID 1 not found"


class TestShopTools:
    @pytest.mark.asyncio
    async def test_get_shop_info(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "shop": {
                "id": "gid://shopify/Shop/1",
                "name": "Test Store",
                "currencyCode": "USD",
                "plan": {"displayName": "Basic"},
            }
        }
        result = await call(tool_context, "get_shop_info")
        shop = result["data"]["shop"]
        assert shop["id"] == "1"
        assert shop["plan"]["name"] == "Basic"
        assert shop["currency"]["code"] == "USD"

    @pytest.mark.asyncio
    async def test_get_locations(self, tool_context, mock_graphql_client):
        mock_graphql_client.query.return_value = {
            "locations": connection([
                {"id": "gid://shopify/Location/5", "name": "Warehouse", "isActive": True}
            ])
        }
        result = await call(tool_context, "get_locations")
        assert result["data"]["locations"][0]["id"] == "5"
        _, variables = mock_graphql_client.query.await_args.args
        assert variables == {"first": 50, "includeInactive": False}
