"""Discount code tools."""

from typing import Any, Dict

from shopify_mcp.services.tools.base import (
    PAGINATION_PROPERTIES,
    FunctionTool,
    ToolContext,
    ToolResult,
    compact,
    fetch_connection,
    mutation_failed,
    success_result,
)
from shopify_mcp.utils.gid import from_gid, to_gid
from shopify_mcp.utils.pagination import extract_nodes

_CODE_DISCOUNT_FIELDS = """
title
status
startsAt
endsAt
usageLimit
asyncUsageCount
codes(first: 5) {
  edges {
    node {
      code
      usageCount
    }
  }
}
summary
"""

LIST_DISCOUNTS = """
query ListDiscounts($first: Int!, $after: String, $query: String) {
  discountNodes(first: $first, after: $after, query: $query) {
    edges {
      cursor
      node {
        id
        discount {
          ... on DiscountCodeBasic {
            %(fields)s
          }
          ... on DiscountCodeBxgy {
            %(fields)s
          }
          ... on DiscountCodeFreeShipping {
            %(fields)s
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
""" % {"fields": _CODE_DISCOUNT_FIELDS}

CREATE_BASIC_DISCOUNT = """
mutation CreateBasicDiscount($basicCodeDiscount: DiscountCodeBasicInput!) {
  discountCodeBasicCreate(basicCodeDiscount: $basicCodeDiscount) {
    codeDiscountNode {
      id
      codeDiscount {
        ... on DiscountCodeBasic {
          title
          status
          startsAt
          endsAt
          usageLimit
          codes(first: 1) {
            edges {
              node {
                code
              }
            }
          }
          summary
        }
      }
    }
    userErrors {
      field
      message
      code
    }
  }
}
"""

DELETE_DISCOUNT = """
mutation DeleteDiscount($id: ID!) {
  discountCodeDelete(id: $id) {
    deletedCodeDiscountId
    userErrors {
      field
      message
      code
    }
  }
}
"""


def _format_discount_node(node: Dict[str, Any]) -> Dict[str, Any]:
    # Automatic discounts match none of the fragments and come back empty
    discount = node.get("discount") or {}
    return {
        "id": from_gid(node["id"]),
        "gid": node["id"],
        "title": discount.get("title"),
        "status": discount.get("status"),
        "codes": [c.get("code") for c in extract_nodes(discount.get("codes"))],
        "usageCount": discount.get("asyncUsageCount"),
        "usageLimit": discount.get("usageLimit"),
        "startsAt": discount.get("startsAt"),
        "endsAt": discount.get("endsAt"),
        "summary": discount.get("summary"),
    }


def build_customer_gets_value(discount_type: str, value: float) -> Dict[str, Any]:
    """Map a caller-facing discount value to ``DiscountCustomerGetsValueInput``.

    Percentages are given as whole numbers (10 for 10%) and sent as a
    fraction; fixed amounts apply once to the order, not per item.
    """
    if discount_type == "PERCENTAGE":
        if value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return {"percentage": value / 100}
    return {"discountAmount": {"amount": str(value), "appliesOnEachItem": False}}


def build_minimum_requirement(requirement: Dict[str, Any]) -> Dict[str, Any]:
    value = requirement["value"]
    if requirement["type"] == "SUBTOTAL":
        return {"subtotal": {"greaterThanOrEqualToSubtotal": str(value)}}
    return {"quantity": {"greaterThanOrEqualToQuantity": str(int(value))}}


async def list_discounts(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await fetch_connection(
        ctx,
        LIST_DISCOUNTS,
        {
            "first": args.get("first", 50),
            "after": args.get("after"),
            "query": args.get("query"),
        },
        "discountNodes",
        fetch_all=args.get("fetchAll", False),
    )
    discounts = [_format_discount_node(node) for node in result.items]
    return success_result({
        "discounts": discounts,
        "pageInfo": result.page_info,
        "count": len(discounts),
    })


async def create_discount_code(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    discount_input = compact({
        "title": args["title"],
        "code": args["code"],
        "startsAt": args["startsAt"],
        "endsAt": args.get("endsAt"),
        "usageLimit": args.get("usageLimit"),
        "appliesOncePerCustomer": args.get("appliesOncePerCustomer", True),
        "customerSelection": {"all": True},
        "customerGets": {
            "items": {"all": True},
            "value": build_customer_gets_value(args["discountType"], args["discountValue"]),
        },
    })
    if args.get("minimumRequirement"):
        discount_input["minimumRequirement"] = build_minimum_requirement(
            args["minimumRequirement"]
        )

    result = await ctx.client.mutate(
        CREATE_BASIC_DISCOUNT,
        {"basicCodeDiscount": discount_input},
        "discountCodeBasicCreate",
    )
    if not result.success:
        return mutation_failed("create discount", result)

    node = (result.data.get("discountCodeBasicCreate") or {}).get("codeDiscountNode") or {}
    code_discount = node.get("codeDiscount") or {}
    codes = extract_nodes(code_discount.get("codes"))
    return success_result({
        "message": "Discount code created successfully",
        "discount": {
            "id": from_gid(node["id"]) if node.get("id") else None,
            "gid": node.get("id"),
            "title": code_discount.get("title"),
            "code": codes[0].get("code") if codes else None,
            "status": code_discount.get("status"),
            "summary": code_discount.get("summary"),
        },
    })


async def delete_discount(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        DELETE_DISCOUNT,
        {"id": to_gid("DiscountCodeNode", args["id"])},
        "discountCodeDelete",
    )
    if not result.success:
        return mutation_failed("delete discount", result)

    return success_result({
        "message": "Discount deleted successfully",
        "deletedDiscountId": args["id"],
    })


TOOLS = [
    FunctionTool(
        name="list_discounts",
        description="List discount codes from the Shopify store",
        input_schema={
            "type": "object",
            "properties": {
                **PAGINATION_PROPERTIES,
                "query": {"type": "string", "description": "Search query to filter discounts"},
            },
        },
        handler=list_discounts,
    ),
    FunctionTool(
        name="create_discount_code",
        description="Create a new discount code",
        input_schema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Internal title for the discount"},
                "code": {"type": "string", "description": "Discount code customers will enter"},
                "startsAt": {"type": "string", "description": "Start date (ISO 8601 format)"},
                "endsAt": {"type": "string", "description": "End date (ISO 8601 format, optional)"},
                "usageLimit": {
                    "type": "integer",
                    "description": "Maximum number of times discount can be used",
                    "minimum": 1,
                },
                "appliesOncePerCustomer": {
                    "type": "boolean",
                    "description": "Limit to one use per customer (default: true)",
                },
                "discountType": {
                    "type": "string",
                    "enum": ["PERCENTAGE", "FIXED_AMOUNT"],
                    "description": "Type of discount",
                },
                "discountValue": {
                    "type": "number",
                    "description": "Discount value (percentage as whole number, e.g., 10 for 10%)",
                    "minimum": 0,
                },
                "minimumRequirement": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string", "enum": ["SUBTOTAL", "QUANTITY"]},
                        "value": {
                            "type": "number",
                            "description": "Minimum subtotal or quantity",
                            "minimum": 0,
                        },
                    },
                    "required": ["type", "value"],
                },
            },
            "required": ["title", "code", "startsAt", "discountType", "discountValue"],
        },
        handler=create_discount_code,
    ),
    FunctionTool(
        name="delete_discount",
        description="Delete a discount code",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Discount ID"},
            },
            "required": ["id"],
        },
        handler=delete_discount,
    ),
]
