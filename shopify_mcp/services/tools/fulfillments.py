"""
Fulfillment tools: ship order line items, update tracking, cancel.

Shopify fulfills against fulfillment orders, not orders. ``create_fulfillment``
accepts order line item ids and resolves them to the order's open
fulfillment order line items before calling ``fulfillmentCreateV2``.
"""

from typing import Any, Dict, List

from shopify_mcp.services.tools.base import (
    FunctionTool,
    ToolContext,
    ToolResult,
    compact,
    mutation_failed,
    not_found,
    success_result,
)
from shopify_mcp.utils.gid import from_gid, to_gid
from shopify_mcp.utils.logger import get_logger
from shopify_mcp.utils.pagination import extract_nodes

logger = get_logger(__name__)

GET_FULFILLMENT_ORDERS = """
query GetFulfillmentOrders($id: ID!) {
  order(id: $id) {
    id
    name
    fulfillmentOrders(first: 20) {
      edges {
        node {
          id
          status
          lineItems(first: 100) {
            edges {
              node {
                id
                remainingQuantity
                lineItem {
                  id
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

CREATE_FULFILLMENT = """
mutation CreateFulfillment($fulfillment: FulfillmentV2Input!) {
  fulfillmentCreateV2(fulfillment: $fulfillment) {
    fulfillment {
      id
      status
      createdAt
      updatedAt
      trackingInfo {
        number
        url
        company
      }
      fulfillmentLineItems(first: 50) {
        edges {
          node {
            id
            quantity
            lineItem {
              id
              title
              sku
            }
          }
        }
      }
      order {
        id
        name
        displayFulfillmentStatus
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

UPDATE_TRACKING = """
mutation UpdateTracking($fulfillmentId: ID!, $trackingInfoInput: FulfillmentTrackingInput!, $notifyCustomer: Boolean) {
  fulfillmentTrackingInfoUpdateV2(fulfillmentId: $fulfillmentId, trackingInfoInput: $trackingInfoInput, notifyCustomer: $notifyCustomer) {
    fulfillment {
      id
      status
      updatedAt
      trackingInfo {
        number
        url
        company
      }
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

CANCEL_FULFILLMENT = """
mutation CancelFulfillment($id: ID!) {
  fulfillmentCancel(id: $id) {
    fulfillment {
      id
      status
      order {
        id
        name
        displayFulfillmentStatus
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

FULFILLABLE_STATUSES = {"OPEN", "IN_PROGRESS"}


def group_line_items_by_fulfillment_order(
    fulfillment_orders: List[Dict[str, Any]],
    line_items: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Map requested order line items onto fulfillment order line items.

    Args:
        fulfillment_orders: Fulfillment order nodes of the order.
        line_items: ``[{"id": <LineItem id>, "quantity": n}]`` as given by the caller.

    Returns:
        ``lineItemsByFulfillmentOrder`` entries, one per fulfillment order
        touched, in the order they were first needed.

    Raises:
        ValueError: If a line item is not open on any fulfillment order.
    """
    # LineItem gid -> (fulfillment order id, fulfillment order line item id)
    index: Dict[str, tuple] = {}
    for fo in fulfillment_orders:
        if fo.get("status") not in FULFILLABLE_STATUSES:
            continue
        for fo_line in extract_nodes(fo.get("lineItems")):
            line_item_id = (fo_line.get("lineItem") or {}).get("id")
            if line_item_id and line_item_id not in index:
                index[line_item_id] = (fo["id"], fo_line["id"])

    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for item in line_items:
        line_item_gid = to_gid("LineItem", item["id"])
        if line_item_gid not in index:
            raise ValueError(
                f"Line item {item['id']} is not open for fulfillment on this order"
            )
        fo_id, fo_line_id = index[line_item_gid]
        grouped.setdefault(fo_id, []).append(
            {"id": fo_line_id, "quantity": item["quantity"]}
        )

    return [
        {"fulfillmentOrderId": fo_id, "fulfillmentOrderLineItems": items}
        for fo_id, items in grouped.items()
    ]


async def create_fulfillment(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(
        GET_FULFILLMENT_ORDERS, {"id": to_gid("Order", args["orderId"])}
    )
    order = data.get("order")
    if not order:
        return not_found("Order", args["orderId"])

    line_items_by_fo = group_line_items_by_fulfillment_order(
        extract_nodes(order.get("fulfillmentOrders")), args["lineItems"]
    )
    logger.debug(
        "Resolved fulfillment orders",
        order=order.get("name"),
        fulfillment_orders=len(line_items_by_fo),
    )

    fulfillment_input: Dict[str, Any] = {
        "notifyCustomer": args.get("notifyCustomer", True),
        "lineItemsByFulfillmentOrder": line_items_by_fo,
    }
    tracking = args.get("trackingInfo") or {}
    if tracking.get("number"):
        fulfillment_input["trackingInfo"] = compact({
            "company": tracking.get("company"),
            "number": tracking["number"],
            "url": tracking.get("url"),
        })

    result = await ctx.client.mutate(
        CREATE_FULFILLMENT, {"fulfillment": fulfillment_input}, "fulfillmentCreateV2"
    )
    if not result.success:
        return mutation_failed("create fulfillment", result)

    fulfillment = (result.data.get("fulfillmentCreateV2") or {}).get("fulfillment") or {}
    return success_result({
        "message": "Fulfillment created successfully",
        "fulfillment": {
            "id": from_gid(fulfillment["id"]) if fulfillment.get("id") else None,
            "gid": fulfillment.get("id"),
            "status": fulfillment.get("status"),
            "trackingInfo": fulfillment.get("trackingInfo"),
            "createdAt": fulfillment.get("createdAt"),
            "lineItems": [
                {
                    "id": from_gid(line["id"]),
                    "quantity": line.get("quantity"),
                    "itemName": (line.get("lineItem") or {}).get("title"),
                }
                for line in extract_nodes(fulfillment.get("fulfillmentLineItems"))
            ],
        },
    })


async def update_tracking(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    tracking = args["trackingInfo"]
    result = await ctx.client.mutate(
        UPDATE_TRACKING,
        {
            "fulfillmentId": to_gid("Fulfillment", args["fulfillmentId"]),
            "trackingInfoInput": compact({
                "company": tracking.get("company"),
                "number": tracking.get("number"),
                "url": tracking.get("url"),
            }),
            "notifyCustomer": args.get("notifyCustomer", False),
        },
        "fulfillmentTrackingInfoUpdateV2",
    )
    if not result.success:
        return mutation_failed("update tracking info", result)

    fulfillment = (result.data.get("fulfillmentTrackingInfoUpdateV2") or {}).get("fulfillment") or {}
    return success_result({
        "message": "Tracking info updated successfully",
        "fulfillment": {
            "id": from_gid(fulfillment["id"]) if fulfillment.get("id") else None,
            "gid": fulfillment.get("id"),
            "status": fulfillment.get("status"),
            "trackingInfo": fulfillment.get("trackingInfo"),
            "updatedAt": fulfillment.get("updatedAt"),
        },
    })


async def cancel_fulfillment(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        CANCEL_FULFILLMENT,
        {"id": to_gid("Fulfillment", args["fulfillmentId"])},
        "fulfillmentCancel",
    )
    if not result.success:
        return mutation_failed("cancel fulfillment", result)

    fulfillment = (result.data.get("fulfillmentCancel") or {}).get("fulfillment") or {}
    return success_result({
        "message": "Fulfillment cancelled successfully",
        "fulfillmentId": args["fulfillmentId"],
        "status": fulfillment.get("status"),
    })


TRACKING_INFO_SCHEMA = {
    "type": "object",
    "description": "Tracking information",
    "properties": {
        "number": {"type": "string", "description": "Tracking number"},
        "company": {"type": "string", "description": "Shipping carrier/company"},
        "url": {"type": "string", "description": "URL to track shipment"},
    },
}

TOOLS = [
    FunctionTool(
        name="create_fulfillment",
        description="Create a fulfillment for an order (mark items as shipped)",
        input_schema={
            "type": "object",
            "properties": {
                "orderId": {"type": "string", "description": "Order ID to fulfill"},
                "lineItems": {
                    "type": "array",
                    "description": "Order line items to fulfill",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string", "description": "Line item ID"},
                            "quantity": {
                                "type": "integer",
                                "description": "Quantity to fulfill",
                                "minimum": 1,
                            },
                        },
                        "required": ["id", "quantity"],
                    },
                },
                "trackingInfo": TRACKING_INFO_SCHEMA,
                "notifyCustomer": {
                    "type": "boolean",
                    "description": "Send shipping notification to customer (default: true)",
                },
            },
            "required": ["orderId", "lineItems"],
        },
        handler=create_fulfillment,
    ),
    FunctionTool(
        name="update_tracking",
        description="Update tracking information for a fulfillment",
        input_schema={
            "type": "object",
            "properties": {
                "fulfillmentId": {"type": "string", "description": "Fulfillment ID to update"},
                "trackingInfo": TRACKING_INFO_SCHEMA,
                "notifyCustomer": {
                    "type": "boolean",
                    "description": "Notify customer of tracking update (default: false)",
                },
            },
            "required": ["fulfillmentId", "trackingInfo"],
        },
        handler=update_tracking,
    ),
    FunctionTool(
        name="cancel_fulfillment",
        description="Cancel a fulfillment",
        input_schema={
            "type": "object",
            "properties": {
                "fulfillmentId": {"type": "string", "description": "Fulfillment ID to cancel"},
            },
            "required": ["fulfillmentId"],
        },
        handler=cancel_fulfillment,
    ),
]
