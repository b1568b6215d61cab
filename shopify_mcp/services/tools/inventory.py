"""Inventory tools: read levels per location, adjust by a delta, or set exact quantities."""

from typing import Any, Dict, List

from shopify_mcp.services.tools.base import (
    FunctionTool,
    ToolContext,
    ToolResult,
    mutation_failed,
    not_found,
    success_result,
)
from shopify_mcp.utils.gid import from_gid, to_gid
from shopify_mcp.utils.pagination import extract_nodes

INVENTORY_LEVEL_FIELDS = """
id
quantities(names: ["available", "incoming", "committed", "on_hand"]) {
  name
  quantity
}
location {
  id
  name
  isActive
}
"""

GET_INVENTORY_ITEM = """
query GetInventoryItem($id: ID!) {
  inventoryItem(id: $id) {
    id
    sku
    tracked
    countryCodeOfOrigin
    harmonizedSystemCode
    createdAt
    updatedAt
    inventoryLevels(first: 50) {
      edges {
        node {
          %s
        }
      }
    }
  }
}
""" % INVENTORY_LEVEL_FIELDS

ADJUST_INVENTORY = """
mutation AdjustInventory($input: InventoryAdjustQuantitiesInput!) {
  inventoryAdjustQuantities(input: $input) {
    inventoryAdjustmentGroup {
      createdAt
      reason
      changes {
        name
        delta
        quantityAfterChange
        item {
          id
          sku
        }
        location {
          id
          name
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

SET_INVENTORY = """
mutation SetInventory($input: InventorySetOnHandQuantitiesInput!) {
  inventorySetOnHandQuantities(input: $input) {
    inventoryAdjustmentGroup {
      createdAt
      reason
      changes {
        name
        quantityAfterChange
        item {
          id
          sku
        }
        location {
          id
          name
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

DEFAULT_REASON = "correction"


def _format_levels(item: Dict[str, Any]) -> List[Dict[str, Any]]:
    levels = []
    for level in extract_nodes(item.get("inventoryLevels")):
        location = level.get("location") or {}
        levels.append({
            "id": from_gid(level["id"]),
            "locationId": from_gid(location["id"]) if location.get("id") else None,
            "locationName": location.get("name"),
            "isActive": location.get("isActive"),
            "quantities": {q["name"]: q["quantity"] for q in level.get("quantities") or []},
        })
    return levels


async def _fetch_item(ctx: ToolContext, item_id: str):
    data = await ctx.client.query(GET_INVENTORY_ITEM, {"id": to_gid("InventoryItem", item_id)})
    return data.get("inventoryItem")


async def get_inventory_levels(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    item = await _fetch_item(ctx, args["inventoryItemId"])
    if not item:
        return not_found("Inventory item", args["inventoryItemId"])

    return success_result({
        "inventoryItemId": args["inventoryItemId"],
        "sku": item.get("sku"),
        "tracked": item.get("tracked"),
        "levels": _format_levels(item),
    })


async def get_inventory_item(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    item = await _fetch_item(ctx, args["id"])
    if not item:
        return not_found("Inventory item", args["id"])

    return success_result({
        "id": from_gid(item["id"]),
        "gid": item["id"],
        "sku": item.get("sku"),
        "tracked": item.get("tracked"),
        "countryCodeOfOrigin": item.get("countryCodeOfOrigin"),
        "harmonizedSystemCode": item.get("harmonizedSystemCode"),
        "levels": _format_levels(item),
    })


async def adjust_inventory(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        ADJUST_INVENTORY,
        {
            "input": {
                "reason": args.get("reason") or DEFAULT_REASON,
                "name": "available",
                "changes": [
                    {
                        "inventoryItemId": to_gid("InventoryItem", args["inventoryItemId"]),
                        "locationId": to_gid("Location", args["locationId"]),
                        "delta": args["delta"],
                    }
                ],
            }
        },
        "inventoryAdjustQuantities",
    )
    if not result.success:
        return mutation_failed("adjust inventory", result)

    group = (result.data.get("inventoryAdjustQuantities") or {}).get("inventoryAdjustmentGroup") or {}
    changes = group.get("changes") or []
    return success_result({
        "message": "Inventory adjusted successfully",
        "adjustment": {
            "inventoryItemId": args["inventoryItemId"],
            "locationId": args["locationId"],
            "delta": args["delta"],
            "newQuantity": changes[0].get("quantityAfterChange") if changes else None,
        },
    })


async def set_inventory(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        SET_INVENTORY,
        {
            "input": {
                "reason": args.get("reason") or DEFAULT_REASON,
                "setQuantities": [
                    {
                        "inventoryItemId": to_gid("InventoryItem", args["inventoryItemId"]),
                        "locationId": to_gid("Location", args["locationId"]),
                        "quantity": args["available"],
                    }
                ],
            }
        },
        "inventorySetOnHandQuantities",
    )
    if not result.success:
        return mutation_failed("set inventory", result)

    return success_result({
        "message": "Inventory set successfully",
        "inventory": {
            "inventoryItemId": args["inventoryItemId"],
            "locationId": args["locationId"],
            "quantity": args["available"],
        },
    })


_ITEM_AND_LOCATION = {
    "inventoryItemId": {"type": "string", "description": "Inventory item ID"},
    "locationId": {"type": "string", "description": "Location ID"},
}

TOOLS = [
    FunctionTool(
        name="get_inventory_levels",
        description="Get inventory levels for an inventory item across all locations",
        input_schema={
            "type": "object",
            "properties": {
                "inventoryItemId": {
                    "type": "string",
                    "description": "Inventory item ID (get from product variant)",
                },
            },
            "required": ["inventoryItemId"],
        },
        handler=get_inventory_levels,
    ),
    FunctionTool(
        name="get_inventory_item",
        description="Get detailed information about an inventory item",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Inventory item ID"},
            },
            "required": ["id"],
        },
        handler=get_inventory_item,
    ),
    FunctionTool(
        name="adjust_inventory",
        description="Adjust inventory quantity by a delta (positive or negative)",
        input_schema={
            "type": "object",
            "properties": {
                **_ITEM_AND_LOCATION,
                "delta": {
                    "type": "integer",
                    "description": "Quantity change (positive to add, negative to subtract)",
                },
                "reason": {"type": "string", "description": "Reason for adjustment (default: correction)"},
            },
            "required": ["inventoryItemId", "locationId", "delta"],
        },
        handler=adjust_inventory,
    ),
    FunctionTool(
        name="set_inventory",
        description="Set inventory to an exact quantity",
        input_schema={
            "type": "object",
            "properties": {
                **_ITEM_AND_LOCATION,
                "available": {
                    "type": "integer",
                    "description": "Exact quantity to set",
                    "minimum": 0,
                },
                "reason": {"type": "string", "description": "Reason for adjustment (default: correction)"},
            },
            "required": ["inventoryItemId", "locationId", "available"],
        },
        handler=set_inventory,
    ),
]
