"""Shop-level tools: store information and locations."""

from typing import Any, Dict

from shopify_mcp.services.tools.base import (
    PAGINATION_PROPERTIES,
    FunctionTool,
    ToolContext,
    ToolResult,
    fetch_connection,
    success_result,
)
from shopify_mcp.utils.formatters import format_address, format_date
from shopify_mcp.utils.gid import from_gid

GET_SHOP_INFO = """
query GetShopInfo {
  shop {
    id
    name
    email
    contactEmail
    url
    myshopifyDomain
    description
    createdAt
    primaryDomain {
      url
      host
      sslEnabled
    }
    plan {
      displayName
      partnerDevelopment
      shopifyPlus
    }
    billingAddress {
      address1
      address2
      city
      province
      country
      zip
      phone
      company
    }
    currencyCode
    currencyFormats {
      moneyFormat
      moneyWithCurrencyFormat
    }
    enabledPresentmentCurrencies
    timezoneAbbreviation
    ianaTimezone
    weightUnit
    unitSystem
    features {
      giftCards
      storefront
      sellsSubscriptions
    }
  }
}
"""

GET_LOCATIONS = """
query GetLocations($first: Int!, $after: String, $includeInactive: Boolean!) {
  locations(first: $first, after: $after, includeInactive: $includeInactive) {
    edges {
      cursor
      node {
        id
        name
        isActive
        fulfillsOnlineOrders
        shipsInventory
        hasActiveInventory
        address {
          address1
          address2
          city
          province
          country
          zip
          phone
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


async def get_shop_info(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(GET_SHOP_INFO)
    shop = data["shop"]
    plan = shop.get("plan") or {}
    formats = shop.get("currencyFormats") or {}
    features = shop.get("features") or {}

    return success_result({
        "shop": {
            "id": from_gid(shop["id"]),
            "gid": shop["id"],
            "name": shop.get("name"),
            "email": shop.get("email"),
            "contactEmail": shop.get("contactEmail"),
            "url": shop.get("url"),
            "myshopifyDomain": shop.get("myshopifyDomain"),
            "primaryDomain": shop.get("primaryDomain"),
            "plan": {
                "name": plan.get("displayName"),
                "isDevelopmentStore": plan.get("partnerDevelopment"),
                "isShopifyPlus": plan.get("shopifyPlus"),
            },
            "billingAddress": format_address(shop.get("billingAddress")),
            "currency": {
                "code": shop.get("currencyCode"),
                "format": formats.get("moneyFormat"),
                "formatWithCurrency": formats.get("moneyWithCurrencyFormat"),
            },
            "enabledCurrencies": shop.get("enabledPresentmentCurrencies"),
            "timezone": {
                "abbreviation": shop.get("timezoneAbbreviation"),
                "iana": shop.get("ianaTimezone"),
            },
            "units": {
                "weight": shop.get("weightUnit"),
                "system": shop.get("unitSystem"),
            },
            "description": shop.get("description"),
            "createdAt": format_date(shop.get("createdAt")),
            "features": {
                "hasGiftCards": features.get("giftCards"),
                "hasStorefront": features.get("storefront"),
                "sellsSubscriptions": features.get("sellsSubscriptions"),
            },
        },
    })


async def get_locations(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await fetch_connection(
        ctx,
        GET_LOCATIONS,
        {
            "first": args.get("first", 50),
            "after": args.get("after"),
            "includeInactive": args.get("includeInactive", False),
        },
        "locations",
        fetch_all=args.get("fetchAll", False),
    )

    locations = []
    for loc in result.items:
        locations.append({
            "id": from_gid(loc["id"]),
            "gid": loc["id"],
            "name": loc.get("name"),
            "isActive": loc.get("isActive"),
            "address": format_address(loc.get("address")),
            "capabilities": {
                "fulfillsOnlineOrders": loc.get("fulfillsOnlineOrders"),
                "hasActiveInventory": loc.get("hasActiveInventory"),
                "shipsInventory": loc.get("shipsInventory"),
            },
        })

    return success_result({
        "locations": locations,
        "pageInfo": result.page_info,
        "count": len(locations),
    })


TOOLS = [
    FunctionTool(
        name="get_shop_info",
        description="Get detailed information about the Shopify store",
        input_schema={"type": "object", "properties": {}},
        handler=get_shop_info,
    ),
    FunctionTool(
        name="get_locations",
        description="Get list of store locations (for inventory and fulfillment)",
        input_schema={
            "type": "object",
            "properties": {
                **PAGINATION_PROPERTIES,
                "includeInactive": {
                    "type": "boolean",
                    "description": "Include inactive locations (default: false)",
                },
            },
        },
        handler=get_locations,
    ),
]
