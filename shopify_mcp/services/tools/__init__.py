"""Resource tool modules, grouped by category in registration order."""

from shopify_mcp.services.tools import (
    collections,
    customers,
    discounts,
    fulfillments,
    inventory,
    orders,
    products,
    refunds,
    shop,
)

TOOL_CATEGORIES = {
    "products": products.TOOLS,
    "orders": orders.TOOLS,
    "customers": customers.TOOLS,
    "inventory": inventory.TOOLS,
    "collections": collections.TOOLS,
    "discounts": discounts.TOOLS,
    "fulfillments": fulfillments.TOOLS,
    "refunds": refunds.TOOLS,
    "shop": shop.TOOLS,
}
