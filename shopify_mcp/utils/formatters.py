"""
Shape raw Admin API nodes into flat, caller-friendly records.

Every record carries the short numeric ``id`` alongside the full ``gid``.
Money renders as ``"1,234.50 USD"`` and timestamps as ``"Jan 15, 2024, 10:30 AM"``;
missing values render as ``"N/A"``.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from shopify_mcp.utils.gid import from_gid

NOT_AVAILABLE = "N/A"

_DATE_FORMAT = "%b %d, %Y, %I:%M %p"


def format_money(money: Optional[Dict[str, Any]]) -> str:
    """Format a MoneyV2 ``{amount, currencyCode}``."""
    if not money:
        return NOT_AVAILABLE
    try:
        amount = Decimal(str(money.get("amount")))
    except (InvalidOperation, ValueError):
        return NOT_AVAILABLE
    return f"{amount:,.2f} {money.get('currencyCode', '')}".strip()


def format_money_bag(money_bag: Optional[Dict[str, Any]]) -> str:
    """Format a MoneyBag using its shop currency amount."""
    if not money_bag:
        return NOT_AVAILABLE
    return format_money(money_bag.get("shopMoney"))


def format_date(date_string: Optional[str]) -> str:
    if not date_string:
        return NOT_AVAILABLE
    try:
        return date_parser.isoparse(date_string).strftime(_DATE_FORMAT)
    except (ValueError, OverflowError):
        return date_string


def format_address(address: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not address:
        return None
    return {
        "address1": address.get("address1"),
        "address2": address.get("address2"),
        "city": address.get("city"),
        "province": address.get("province"),
        "country": address.get("country"),
        "zip": address.get("zip"),
        "firstName": address.get("firstName"),
        "lastName": address.get("lastName"),
        "phone": address.get("phone"),
        "company": address.get("company"),
    }


def truncate(text: Optional[str], max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, ending with ``...`` if shortened."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def get_connection_count(connection: Optional[Dict[str, Any]]) -> int:
    """Number of edges in a connection page (not the total on the server)."""
    if not connection:
        return 0
    return len(connection.get("edges") or [])


def _short_id(global_id: Optional[str]) -> Optional[str]:
    return from_gid(global_id) if global_id else None


def _edges(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [edge["node"] for edge in (connection or {}).get("edges") or [] if edge.get("node")]


def format_product(product: Dict[str, Any]) -> Dict[str, Any]:
    variants = _edges(product.get("variants"))
    images = _edges(product.get("images"))
    featured_image = product.get("featuredImage") or {}

    return {
        "id": from_gid(product["id"]),
        "gid": product["id"],
        "title": product.get("title"),
        "handle": product.get("handle"),
        "status": product.get("status"),
        "vendor": product.get("vendor"),
        "productType": product.get("productType"),
        "tags": product.get("tags"),
        "totalInventory": product.get("totalInventory"),
        "description": product.get("descriptionHtml"),
        "featuredImage": featured_image.get("url"),
        "variantsCount": len(variants),
        "variants": [
            {
                "id": from_gid(v["id"]),
                "gid": v["id"],
                "title": v.get("title"),
                "sku": v.get("sku"),
                "price": v.get("price"),
                "compareAtPrice": v.get("compareAtPrice"),
                "inventoryQuantity": v.get("inventoryQuantity"),
                "inventoryItemId": _short_id((v.get("inventoryItem") or {}).get("id")),
            }
            for v in variants
        ],
        "images": [
            {
                "id": from_gid(img["id"]),
                "url": img.get("url"),
                "altText": img.get("altText"),
            }
            for img in images
        ],
        "createdAt": format_date(product.get("createdAt")),
        "updatedAt": format_date(product.get("updatedAt")),
    }


def format_order(order: Dict[str, Any]) -> Dict[str, Any]:
    customer = order.get("customer")
    line_items = _edges(order.get("lineItems"))

    return {
        "id": from_gid(order["id"]),
        "gid": order["id"],
        "name": order.get("name"),
        "email": order.get("email"),
        "phone": order.get("phone"),
        "financialStatus": order.get("displayFinancialStatus"),
        "fulfillmentStatus": order.get("displayFulfillmentStatus"),
        "confirmed": order.get("confirmed"),
        "test": order.get("test"),
        "currency": order.get("currencyCode"),
        "subtotal": format_money_bag(order.get("subtotalPriceSet")),
        "total": format_money_bag(order.get("totalPriceSet")),
        "totalTax": format_money_bag(order.get("totalTaxSet")),
        "totalDiscounts": format_money_bag(order.get("totalDiscountsSet")),
        "totalShipping": format_money_bag(order.get("totalShippingPriceSet")),
        "totalRefunded": format_money_bag(order.get("totalRefundedSet")),
        "customer": {
            "id": from_gid(customer["id"]),
            "email": customer.get("email"),
            "name": customer.get("displayName"),
        } if customer else None,
        "shippingAddress": format_address(order.get("shippingAddress")),
        "billingAddress": format_address(order.get("billingAddress")),
        "lineItemsCount": len(line_items),
        "lineItems": [
            {
                "id": from_gid(item["id"]),
                "title": item.get("title"),
                "quantity": item.get("quantity"),
                "sku": item.get("sku"),
                "variantTitle": item.get("variantTitle"),
                "fulfillmentStatus": item.get("fulfillmentStatus"),
                "unitPrice": format_money_bag(item.get("discountedUnitPriceSet")),
                "total": format_money_bag(item.get("discountedTotalSet")),
            }
            for item in line_items
        ],
        "note": order.get("note"),
        "tags": order.get("tags"),
        "cancelReason": order.get("cancelReason"),
        "createdAt": format_date(order.get("createdAt")),
        "processedAt": format_date(order.get("processedAt")),
        "cancelledAt": format_date(order.get("cancelledAt")),
        "closedAt": format_date(order.get("closedAt")),
    }


def format_customer(customer: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": from_gid(customer["id"]),
        "gid": customer["id"],
        "email": customer.get("email"),
        "phone": customer.get("phone"),
        "firstName": customer.get("firstName"),
        "lastName": customer.get("lastName"),
        "displayName": customer.get("displayName"),
        "state": customer.get("state"),
        "tags": customer.get("tags"),
        "verifiedEmail": customer.get("verifiedEmail"),
        "taxExempt": customer.get("taxExempt"),
        "note": customer.get("note"),
        "ordersCount": customer.get("numberOfOrders"),
        "totalSpent": format_money(customer.get("amountSpent")),
        "defaultAddress": format_address(customer.get("defaultAddress")),
        "createdAt": format_date(customer.get("createdAt")),
        "updatedAt": format_date(customer.get("updatedAt")),
    }


def format_collection(collection: Dict[str, Any]) -> Dict[str, Any]:
    image = collection.get("image") or {}
    products_count = collection.get("productsCount")
    if isinstance(products_count, dict):
        products_count = products_count.get("count")

    return {
        "id": from_gid(collection["id"]),
        "gid": collection["id"],
        "title": collection.get("title"),
        "handle": collection.get("handle"),
        "description": collection.get("descriptionHtml"),
        "image": image.get("url"),
        "productsCount": products_count,
        "sortOrder": collection.get("sortOrder"),
        # Smart collections carry a rule set; manual ones don't
        "isManual": collection.get("ruleSet") is None,
        "updatedAt": format_date(collection.get("updatedAt")),
    }
