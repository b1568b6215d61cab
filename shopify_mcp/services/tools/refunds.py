"""Refund and return tools."""

from typing import Any, Dict

from shopify_mcp.services.tools.base import (
    FunctionTool,
    ToolContext,
    ToolResult,
    compact,
    mutation_failed,
    not_found,
    success_result,
)
from shopify_mcp.utils.formatters import format_date, format_money_bag
from shopify_mcp.utils.gid import from_gid, to_gid
from shopify_mcp.utils.pagination import extract_nodes

LIST_REFUNDS = """
query ListRefunds($orderId: ID!) {
  order(id: $orderId) {
    id
    name
    refunds {
      id
      createdAt
      note
      totalRefundedSet { shopMoney { amount currencyCode } }
      refundLineItems(first: 50) {
        edges {
          node {
            lineItem {
              id
              title
              sku
            }
            quantity
            restockType
            subtotalSet { shopMoney { amount currencyCode } }
          }
        }
      }
    }
  }
}
"""

CALCULATE_REFUND = """
query CalculateRefund($orderId: ID!, $refundLineItems: [RefundLineItemInput!], $suggestFullRefund: Boolean) {
  order(id: $orderId) {
    id
    suggestedRefund(refundLineItems: $refundLineItems, suggestFullRefund: $suggestFullRefund) {
      amountSet { shopMoney { amount currencyCode } }
      subtotalSet { shopMoney { amount currencyCode } }
      totalTaxSet { shopMoney { amount currencyCode } }
      maximumRefundableSet { shopMoney { amount currencyCode } }
      refundLineItems {
        lineItem {
          id
          title
        }
        quantity
        subtotalSet { shopMoney { amount currencyCode } }
      }
    }
  }
}
"""

CREATE_REFUND = """
mutation CreateRefund($input: RefundInput!) {
  refundCreate(input: $input) {
    refund {
      id
      createdAt
      note
      totalRefundedSet { shopMoney { amount currencyCode } }
      refundLineItems(first: 50) {
        edges {
          node {
            lineItem {
              id
              title
            }
            quantity
            restockType
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

CREATE_RETURN = """
mutation CreateReturn($input: ReturnInput!) {
  returnCreate(returnInput: $input) {
    return {
      id
      status
      name
      order {
        id
        name
      }
      returnLineItems(first: 50) {
        edges {
          node {
            ... on ReturnLineItem {
              id
              quantity
              returnReason
              customerNote
              fulfillmentLineItem {
                id
                lineItem {
                  title
                  sku
                }
              }
            }
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

RESTOCK_TYPES = ["RETURN", "CANCEL", "NO_RESTOCK"]
RETURN_REASONS = [
    "COLOR", "DEFECTIVE", "NOT_AS_DESCRIBED", "OTHER", "SIZE_TOO_LARGE",
    "SIZE_TOO_SMALL", "STYLE", "UNKNOWN", "UNWANTED", "WRONG_ITEM",
]


def _shop_money(money_bag) -> Dict[str, Any]:
    return (money_bag or {}).get("shopMoney") or {}


async def list_refunds(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(LIST_REFUNDS, {"orderId": to_gid("Order", args["orderId"])})
    order = data.get("order")
    if not order:
        return not_found("Order", args["orderId"])

    refunds = []
    for refund in order.get("refunds") or []:
        refunds.append({
            "id": from_gid(refund["id"]),
            "gid": refund["id"],
            "createdAt": format_date(refund.get("createdAt")),
            "note": refund.get("note"),
            "totalRefunded": _shop_money(refund.get("totalRefundedSet")),
            "lineItems": [
                {
                    "lineItemId": from_gid(item["lineItem"]["id"]),
                    "name": item["lineItem"].get("title"),
                    "quantity": item.get("quantity"),
                    "restockType": item.get("restockType"),
                    "subtotal": _shop_money(item.get("subtotalSet")).get("amount"),
                }
                for item in extract_nodes(refund.get("refundLineItems"))
            ],
        })

    return success_result({
        "orderId": args["orderId"],
        "refunds": refunds,
        "count": len(refunds),
    })


async def calculate_refund(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    line_items = args.get("refundLineItems")
    refund_line_items = [
        {"lineItemId": to_gid("LineItem", item["lineItemId"]), "quantity": item["quantity"]}
        for item in line_items or []
    ]

    data = await ctx.client.query(
        CALCULATE_REFUND,
        {
            "orderId": to_gid("Order", args["orderId"]),
            "refundLineItems": refund_line_items or None,
            # No explicit line items means "what would a full refund be"
            "suggestFullRefund": not line_items,
        },
    )
    order = data.get("order")
    if not order:
        return not_found("Order", args["orderId"])

    suggested = order.get("suggestedRefund") or {}
    return success_result({
        "orderId": args["orderId"],
        "calculation": {
            "amount": format_money_bag(suggested.get("amountSet")),
            "subtotal": format_money_bag(suggested.get("subtotalSet")),
            "totalTaxes": format_money_bag(suggested.get("totalTaxSet")),
            "maximumRefundable": format_money_bag(suggested.get("maximumRefundableSet")),
            "lineItems": [
                {
                    "lineItemId": from_gid(item["lineItem"]["id"]),
                    "name": item["lineItem"].get("title"),
                    "quantity": item.get("quantity"),
                    "subtotal": format_money_bag(item.get("subtotalSet")),
                }
                for item in suggested.get("refundLineItems") or []
            ],
        },
    })


async def create_refund(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    refund_input: Dict[str, Any] = compact({
        "orderId": to_gid("Order", args["orderId"]),
        "note": args.get("note"),
        "notify": args.get("notify", True),
    })
    if args.get("refundLineItems"):
        refund_input["refundLineItems"] = [
            {
                "lineItemId": to_gid("LineItem", item["lineItemId"]),
                "quantity": item["quantity"],
                "restockType": item.get("restockType", "NO_RESTOCK"),
            }
            for item in args["refundLineItems"]
        ]

    shipping = args.get("shipping")
    if shipping:
        amount = shipping.get("amount")
        refund_input["shipping"] = compact({
            "fullRefund": shipping.get("fullRefund"),
            "amount": str(amount) if amount is not None else None,
        })

    result = await ctx.client.mutate(CREATE_REFUND, {"input": refund_input}, "refundCreate")
    if not result.success:
        return mutation_failed("create refund", result)

    refund = (result.data.get("refundCreate") or {}).get("refund") or {}
    return success_result({
        "message": "Refund created successfully",
        "refund": {
            "id": from_gid(refund["id"]) if refund.get("id") else None,
            "gid": refund.get("id"),
            "createdAt": format_date(refund.get("createdAt")),
            "note": refund.get("note"),
            "totalRefunded": _shop_money(refund.get("totalRefundedSet")),
        },
    })


async def create_return(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    return_input = {
        "orderId": to_gid("Order", args["orderId"]),
        "returnLineItems": [
            compact({
                "fulfillmentLineItemId": to_gid(
                    "FulfillmentLineItem", item["fulfillmentLineItemId"]
                ),
                "quantity": item["quantity"],
                "returnReason": item.get("returnReason", "UNKNOWN"),
                "customerNote": item.get("returnReasonNote"),
            })
            for item in args["returnLineItems"]
        ],
        "notifyCustomer": args.get("notifyCustomer", True),
    }

    result = await ctx.client.mutate(CREATE_RETURN, {"input": return_input}, "returnCreate")
    if not result.success:
        return mutation_failed("create return", result)

    ret = (result.data.get("returnCreate") or {}).get("return") or {}
    return success_result({
        "message": "Return created successfully",
        "return": {
            "id": from_gid(ret["id"]) if ret.get("id") else None,
            "gid": ret.get("id"),
            "name": ret.get("name"),
            "status": ret.get("status"),
            "lineItems": [
                {
                    "id": from_gid(line["id"]),
                    "quantity": line.get("quantity"),
                    "returnReason": line.get("returnReason"),
                    "customerNote": line.get("customerNote"),
                    "itemName": ((line.get("fulfillmentLineItem") or {}).get("lineItem") or {}).get("title"),
                }
                for line in extract_nodes(ret.get("returnLineItems"))
            ],
        },
    })


_REFUND_LINE_ITEM = {
    "lineItemId": {"type": "string", "description": "Line item ID"},
    "quantity": {"type": "integer", "description": "Quantity to refund", "minimum": 1},
}

TOOLS = [
    FunctionTool(
        name="list_refunds",
        description="List all refunds for a specific order",
        input_schema={
            "type": "object",
            "properties": {
                "orderId": {"type": "string", "description": "Order ID to get refunds for"},
            },
            "required": ["orderId"],
        },
        handler=list_refunds,
    ),
    FunctionTool(
        name="calculate_refund",
        description="Calculate refund amount for an order before processing",
        input_schema={
            "type": "object",
            "properties": {
                "orderId": {"type": "string", "description": "Order ID to calculate refund for"},
                "refundLineItems": {
                    "type": "array",
                    "description": "Specific line items to refund (optional, calculates full refund if not specified)",
                    "items": {
                        "type": "object",
                        "properties": _REFUND_LINE_ITEM,
                        "required": ["lineItemId", "quantity"],
                    },
                },
            },
            "required": ["orderId"],
        },
        handler=calculate_refund,
    ),
    FunctionTool(
        name="create_refund",
        description="Create a refund for an order",
        input_schema={
            "type": "object",
            "properties": {
                "orderId": {"type": "string", "description": "Order ID to refund"},
                "note": {"type": "string", "description": "Note/reason for the refund"},
                "notify": {
                    "type": "boolean",
                    "description": "Notify customer about the refund (default: true)",
                },
                "refundLineItems": {
                    "type": "array",
                    "description": "Line items to refund",
                    "items": {
                        "type": "object",
                        "properties": {
                            **_REFUND_LINE_ITEM,
                            "restockType": {
                                "type": "string",
                                "enum": RESTOCK_TYPES,
                                "description": "How to handle inventory (default: NO_RESTOCK)",
                            },
                        },
                        "required": ["lineItemId", "quantity"],
                    },
                },
                "shipping": {
                    "type": "object",
                    "description": "Shipping refund options",
                    "properties": {
                        "fullRefund": {"type": "boolean", "description": "Refund full shipping cost"},
                        "amount": {
                            "type": "number",
                            "description": "Specific shipping amount to refund",
                            "minimum": 0,
                        },
                    },
                },
            },
            "required": ["orderId"],
        },
        handler=create_refund,
    ),
    FunctionTool(
        name="create_return",
        description="Create a return request for fulfilled items",
        input_schema={
            "type": "object",
            "properties": {
                "orderId": {"type": "string", "description": "Order ID to create return for"},
                "returnLineItems": {
                    "type": "array",
                    "description": "Items to return",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "properties": {
                            "fulfillmentLineItemId": {
                                "type": "string",
                                "description": "Fulfillment line item ID",
                            },
                            "quantity": {
                                "type": "integer",
                                "description": "Quantity to return",
                                "minimum": 1,
                            },
                            "returnReason": {
                                "type": "string",
                                "enum": RETURN_REASONS,
                                "description": "Reason for return (default: UNKNOWN)",
                            },
                            "returnReasonNote": {
                                "type": "string",
                                "description": "Additional note about the return reason",
                            },
                        },
                        "required": ["fulfillmentLineItemId", "quantity"],
                    },
                },
                "notifyCustomer": {
                    "type": "boolean",
                    "description": "Notify customer about the return (default: true)",
                },
            },
            "required": ["orderId", "returnLineItems"],
        },
        handler=create_return,
    ),
]
