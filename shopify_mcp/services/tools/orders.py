"""Order tools: listing, details, draft orders, edits and cancellation."""

from typing import Any, Dict

from shopify_mcp.services.tools.base import (
    PAGINATION_PROPERTIES,
    FunctionTool,
    ToolContext,
    ToolResult,
    compact,
    fetch_connection,
    mutation_failed,
    not_found,
    success_result,
)
from shopify_mcp.utils.formatters import format_order
from shopify_mcp.utils.gid import from_gid, to_gid

ORDER_FRAGMENT = """
fragment OrderFields on Order {
  id
  name
  email
  phone
  createdAt
  updatedAt
  processedAt
  closedAt
  cancelledAt
  cancelReason
  displayFinancialStatus
  displayFulfillmentStatus
  confirmed
  test
  currencyCode
  note
  tags
  subtotalPriceSet { shopMoney { amount currencyCode } presentmentMoney { amount currencyCode } }
  totalPriceSet { shopMoney { amount currencyCode } presentmentMoney { amount currencyCode } }
  totalTaxSet { shopMoney { amount currencyCode } }
  totalDiscountsSet { shopMoney { amount currencyCode } }
  totalShippingPriceSet { shopMoney { amount currencyCode } }
  totalRefundedSet { shopMoney { amount currencyCode } }
  customer {
    id
    email
    displayName
  }
  shippingAddress {
    address1
    address2
    city
    province
    provinceCode
    country
    countryCodeV2
    zip
    phone
    firstName
    lastName
    company
  }
  billingAddress {
    address1
    address2
    city
    province
    country
    zip
    firstName
    lastName
  }
}
"""

LINE_ITEM_FRAGMENT = """
fragment LineItemFields on LineItem {
  id
  title
  quantity
  sku
  variantTitle
  vendor
  originalUnitPriceSet { shopMoney { amount currencyCode } presentmentMoney { amount currencyCode } }
  discountedUnitPriceSet { shopMoney { amount currencyCode } presentmentMoney { amount currencyCode } }
  discountedTotalSet { shopMoney { amount currencyCode } presentmentMoney { amount currencyCode } }
  variant {
    id
    product {
      id
    }
  }
  image {
    url
    altText
  }
}
"""

LIST_ORDERS = ORDER_FRAGMENT + """
query ListOrders($first: Int!, $after: String, $query: String, $sortKey: OrderSortKeys, $reverse: Boolean) {
  orders(first: $first, after: $after, query: $query, sortKey: $sortKey, reverse: $reverse) {
    edges {
      cursor
      node {
        ...OrderFields
        lineItems(first: 5) {
          edges {
            node {
              id
              title
              quantity
              sku
            }
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      hasPreviousPage
      startCursor
      endCursor
    }
  }
}
"""

GET_ORDER = ORDER_FRAGMENT + LINE_ITEM_FRAGMENT + """
query GetOrder($id: ID!) {
  order(id: $id) {
    ...OrderFields
    lineItems(first: 100) {
      edges {
        cursor
        node {
          ...LineItemFields
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
    fulfillments {
      id
      status
      createdAt
      updatedAt
      trackingInfo {
        number
        url
        company
      }
    }
    refunds {
      id
      createdAt
      note
      totalRefundedSet { shopMoney { amount currencyCode } }
    }
  }
}
"""

CREATE_DRAFT_ORDER = """
mutation CreateDraftOrder($input: DraftOrderInput!) {
  draftOrderCreate(input: $input) {
    draftOrder {
      id
      name
      status
      email
      createdAt
      updatedAt
      invoiceUrl
      note
      tags
      subtotalPriceSet { shopMoney { amount currencyCode } }
      totalPriceSet { shopMoney { amount currencyCode } }
      customer {
        id
        email
        displayName
      }
      lineItems(first: 50) {
        edges {
          node {
            id
            title
            quantity
            originalUnitPriceSet { shopMoney { amount currencyCode } }
          }
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

COMPLETE_DRAFT_ORDER = """
mutation CompleteDraftOrder($id: ID!, $paymentPending: Boolean) {
  draftOrderComplete(id: $id, paymentPending: $paymentPending) {
    draftOrder {
      id
      name
      status
      completedAt
      order {
        id
        name
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

UPDATE_ORDER = """
mutation UpdateOrder($input: OrderInput!) {
  orderUpdate(input: $input) {
    order {
      id
      name
      note
      tags
      email
      shippingAddress {
        address1
        address2
        city
        province
        country
        zip
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

CANCEL_ORDER = """
mutation CancelOrder($orderId: ID!, $reason: OrderCancelReason, $notifyCustomer: Boolean, $refund: Boolean, $restock: Boolean) {
  orderCancel(orderId: $orderId, reason: $reason, notifyCustomer: $notifyCustomer, refund: $refund, restock: $restock) {
    job {
      id
      done
    }
    orderCancelUserErrors {
      field
      message
      code
    }
  }
}
"""

ADD_ORDER_NOTE = """
mutation AddOrderNote($input: OrderInput!) {
  orderUpdate(input: $input) {
    order {
      id
      name
      note
    }
    userErrors {
      field
      message
    }
  }
}
"""

ORDER_SORT_KEYS = [
    "CREATED_AT", "UPDATED_AT", "PROCESSED_AT", "TOTAL_PRICE", "CUSTOMER_NAME", "ORDER_NUMBER",
]
CANCEL_REASONS = ["CUSTOMER", "DECLINED", "FRAUD", "INVENTORY", "OTHER", "STAFF"]

ADDRESS_SCHEMA = {
    "type": "object",
    "properties": {
        "address1": {"type": "string"},
        "address2": {"type": "string"},
        "city": {"type": "string"},
        "province": {"type": "string"},
        "country": {"type": "string"},
        "zip": {"type": "string"},
        "firstName": {"type": "string"},
        "lastName": {"type": "string"},
        "phone": {"type": "string"},
    },
}


async def list_orders(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await fetch_connection(
        ctx,
        LIST_ORDERS,
        {
            "first": args.get("first", 50),
            "after": args.get("after"),
            "query": args.get("query"),
            "sortKey": args.get("sortKey"),
            # Most recent first unless asked otherwise
            "reverse": args.get("reverse", True),
        },
        "orders",
        fetch_all=args.get("fetchAll", False),
    )
    return success_result({
        "orders": [format_order(o) for o in result.items],
        "pageInfo": result.page_info,
        "count": len(result.items),
    })


async def get_order(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(GET_ORDER, {"id": to_gid("Order", args["id"])})
    order = data.get("order")
    if not order:
        return not_found("Order", args["id"])

    formatted = format_order(order)
    formatted["fulfillments"] = [
        {
            "id": from_gid(f["id"]),
            "gid": f["id"],
            "status": f.get("status"),
            "trackingInfo": f.get("trackingInfo") or [],
        }
        for f in order.get("fulfillments") or []
    ]
    formatted["refunds"] = [
        {"id": from_gid(r["id"]), "gid": r["id"], "note": r.get("note")}
        for r in order.get("refunds") or []
    ]
    return success_result({"order": formatted})


async def create_draft_order(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    draft_input = compact({
        "lineItems": [
            compact({
                "variantId": to_gid("ProductVariant", item["variantId"]) if item.get("variantId") else None,
                "title": item.get("title"),
                "quantity": item["quantity"],
                "originalUnitPrice": item.get("originalUnitPrice"),
            })
            for item in args["lineItems"]
        ],
        "email": args.get("email"),
        "note": args.get("note"),
        "tags": args.get("tags"),
        "shippingAddress": args.get("shippingAddress"),
        "billingAddress": args.get("billingAddress"),
    })
    if args.get("customerId"):
        draft_input["customerId"] = to_gid("Customer", args["customerId"])

    result = await ctx.client.mutate(
        CREATE_DRAFT_ORDER, {"input": draft_input}, "draftOrderCreate"
    )
    if not result.success:
        return mutation_failed("create draft order", result)

    draft_order = (result.data.get("draftOrderCreate") or {}).get("draftOrder") or {}
    return success_result({
        "message": "Draft order created successfully",
        "draftOrder": {
            "id": from_gid(draft_order["id"]) if draft_order.get("id") else None,
            "gid": draft_order.get("id"),
            "name": draft_order.get("name"),
            "status": draft_order.get("status"),
            "invoiceUrl": draft_order.get("invoiceUrl"),
        },
    })


async def complete_draft_order(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        COMPLETE_DRAFT_ORDER,
        {
            "id": to_gid("DraftOrder", args["id"]),
            "paymentPending": args.get("paymentPending", False),
        },
        "draftOrderComplete",
    )
    if not result.success:
        return mutation_failed("complete draft order", result)

    draft_order = (result.data.get("draftOrderComplete") or {}).get("draftOrder") or {}
    order = draft_order.get("order") or {}
    return success_result({
        "message": "Draft order completed successfully",
        "draftOrder": {
            "id": from_gid(draft_order["id"]) if draft_order.get("id") else None,
            "status": draft_order.get("status"),
            "orderId": from_gid(order["id"]) if order.get("id") else None,
            "orderName": order.get("name"),
        },
    })


async def update_order(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    order_input = {"id": to_gid("Order", args["id"])}
    for key in ("note", "tags", "email", "shippingAddress"):
        if key in args:
            order_input[key] = args[key]

    result = await ctx.client.mutate(UPDATE_ORDER, {"input": order_input}, "orderUpdate")
    if not result.success:
        return mutation_failed("update order", result)

    order = (result.data.get("orderUpdate") or {}).get("order") or {}
    return success_result({
        "message": "Order updated successfully",
        "order": {
            "id": args["id"],
            "note": order.get("note"),
            "tags": order.get("tags"),
        },
    })


async def cancel_order(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        CANCEL_ORDER,
        compact({
            "orderId": to_gid("Order", args["id"]),
            "reason": args.get("reason"),
            "notifyCustomer": args.get("notifyCustomer", True),
            "refund": args.get("refund", False),
            "restock": args.get("restock", True),
        }),
        "orderCancel",
        user_errors_key="orderCancelUserErrors",
    )
    if not result.success:
        return mutation_failed("cancel order", result)

    job = (result.data.get("orderCancel") or {}).get("job") or {}
    return success_result({
        "message": "Order cancellation initiated",
        "orderId": args["id"],
        "jobId": job.get("id"),
    })


async def add_order_note(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        ADD_ORDER_NOTE,
        {"input": {"id": to_gid("Order", args["id"]), "note": args["note"]}},
        "orderUpdate",
    )
    if not result.success:
        return mutation_failed("add order note", result)

    return success_result({
        "message": "Note added to order",
        "orderId": args["id"],
        "note": args["note"],
    })


TOOLS = [
    FunctionTool(
        name="list_orders",
        description="List orders from the Shopify store with optional filtering and pagination",
        input_schema={
            "type": "object",
            "properties": {
                **PAGINATION_PROPERTIES,
                "query": {
                    "type": "string",
                    "description": 'Filter query (e.g., "fulfillment_status:unfulfilled", "financial_status:paid")',
                },
                "sortKey": {"type": "string", "enum": ORDER_SORT_KEYS, "description": "Sort field"},
                "reverse": {
                    "type": "boolean",
                    "description": "Reverse sort order (default: true for most recent first)",
                },
            },
        },
        handler=list_orders,
    ),
    FunctionTool(
        name="get_order",
        description="Get detailed information about a specific order including line items, customer, and fulfillments",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Order ID (numeric or GID format)"},
            },
            "required": ["id"],
        },
        handler=get_order,
    ),
    FunctionTool(
        name="create_draft_order",
        description="Create a draft order that can be sent to customer or completed directly",
        input_schema={
            "type": "object",
            "properties": {
                "lineItems": {
                    "type": "array",
                    "description": "Line items for the order",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "properties": {
                            "variantId": {"type": "string", "description": "Product variant ID"},
                            "title": {
                                "type": "string",
                                "description": "Custom line item title (if no variantId)",
                            },
                            "quantity": {"type": "integer", "minimum": 1},
                            "originalUnitPrice": {
                                "type": "string",
                                "description": "Price for custom line items",
                            },
                        },
                        "required": ["quantity"],
                    },
                },
                "customerId": {"type": "string", "description": "Customer ID"},
                "email": {"type": "string", "description": "Customer email"},
                "note": {"type": "string", "description": "Order note"},
                "tags": {"type": "array", "items": {"type": "string"}},
                "shippingAddress": {
                    **ADDRESS_SCHEMA,
                    "required": ["address1", "city", "country", "zip"],
                },
                "billingAddress": ADDRESS_SCHEMA,
            },
            "required": ["lineItems"],
        },
        handler=create_draft_order,
    ),
    FunctionTool(
        name="complete_draft_order",
        description="Complete a draft order and convert it to a regular order",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Draft order ID"},
                "paymentPending": {
                    "type": "boolean",
                    "description": "Mark payment as pending (default: false)",
                },
            },
            "required": ["id"],
        },
        handler=complete_draft_order,
    ),
    FunctionTool(
        name="update_order",
        description="Update order details (note, tags, email, shipping address)",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Order ID"},
                "note": {"type": "string", "description": "New note"},
                "tags": {"type": "array", "items": {"type": "string"}},
                "email": {"type": "string", "description": "New email"},
                "shippingAddress": ADDRESS_SCHEMA,
            },
            "required": ["id"],
        },
        handler=update_order,
    ),
    FunctionTool(
        name="cancel_order",
        description="Cancel an order with optional refund and restock",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Order ID"},
                "reason": {
                    "type": "string",
                    "enum": CANCEL_REASONS,
                    "description": "Cancellation reason",
                },
                "notifyCustomer": {
                    "type": "boolean",
                    "description": "Send cancellation email (default: true)",
                },
                "refund": {"type": "boolean", "description": "Issue refund (default: false)"},
                "restock": {"type": "boolean", "description": "Restock items (default: true)"},
            },
            "required": ["id"],
        },
        handler=cancel_order,
    ),
    FunctionTool(
        name="add_order_note",
        description="Add or update an order note",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Order ID"},
                "note": {"type": "string", "description": "Note text"},
            },
            "required": ["id", "note"],
        },
        handler=add_order_note,
    ),
]
