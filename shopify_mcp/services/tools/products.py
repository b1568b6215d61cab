"""Product catalog tools: list, read, search and write products and variants."""

from typing import Any, Dict

from shopify_mcp.services.errors import ErrorCodes
from shopify_mcp.services.tools.base import (
    PAGINATION_PROPERTIES,
    FunctionTool,
    ToolContext,
    ToolResult,
    compact,
    error_result,
    fetch_connection,
    mutation_failed,
    not_found,
    success_result,
)
from shopify_mcp.utils.formatters import format_product
from shopify_mcp.utils.gid import to_gid
from shopify_mcp.utils.pagination import connection_to_result

PRODUCT_FRAGMENT = """
fragment ProductFields on Product {
  id
  title
  handle
  descriptionHtml
  vendor
  productType
  status
  tags
  totalInventory
  createdAt
  updatedAt
  publishedAt
  featuredImage {
    id
    url
    altText
    width
    height
  }
  options {
    id
    name
    values
  }
}
"""

PRODUCT_VARIANT_FRAGMENT = """
fragment ProductVariantFields on ProductVariant {
  id
  title
  sku
  price
  compareAtPrice
  inventoryQuantity
  barcode
  inventoryItem {
    id
  }
  selectedOptions {
    name
    value
  }
  image {
    id
    url
    altText
  }
}
"""

LIST_PRODUCTS = PRODUCT_FRAGMENT + """
query ListProducts($first: Int!, $after: String, $query: String, $sortKey: ProductSortKeys, $reverse: Boolean) {
  products(first: $first, after: $after, query: $query, sortKey: $sortKey, reverse: $reverse) {
    edges {
      cursor
      node {
        ...ProductFields
        variants(first: 3) {
          edges {
            node {
              id
              title
              price
              sku
              inventoryQuantity
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

GET_PRODUCT = PRODUCT_FRAGMENT + PRODUCT_VARIANT_FRAGMENT + """
query GetProduct($id: ID!) {
  product(id: $id) {
    ...ProductFields
    variants(first: 100) {
      edges {
        cursor
        node {
          ...ProductVariantFields
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
    images(first: 20) {
      edges {
        node {
          id
          url
          altText
          width
          height
        }
      }
    }
  }
}
"""

SEARCH_PRODUCTS = PRODUCT_FRAGMENT + """
query SearchProducts($query: String!, $first: Int!) {
  products(first: $first, query: $query) {
    edges {
      node {
        ...ProductFields
        variants(first: 1) {
          edges {
            node {
              id
              price
              sku
            }
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

CREATE_PRODUCT = PRODUCT_FRAGMENT + PRODUCT_VARIANT_FRAGMENT + """
mutation CreateProduct($input: ProductInput!) {
  productCreate(input: $input) {
    product {
      ...ProductFields
      variants(first: 10) {
        edges {
          node {
            ...ProductVariantFields
          }
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

UPDATE_PRODUCT = PRODUCT_FRAGMENT + """
mutation UpdateProduct($input: ProductInput!) {
  productUpdate(input: $input) {
    product {
      ...ProductFields
    }
    userErrors {
      field
      message
      code
    }
  }
}
"""

DELETE_PRODUCT = """
mutation DeleteProduct($input: ProductDeleteInput!) {
  productDelete(input: $input) {
    deletedProductId
    userErrors {
      field
      message
      code
    }
  }
}
"""

UPDATE_PRODUCT_VARIANT = PRODUCT_VARIANT_FRAGMENT + """
mutation UpdateProductVariant($input: ProductVariantInput!) {
  productVariantUpdate(input: $input) {
    productVariant {
      ...ProductVariantFields
    }
    userErrors {
      field
      message
      code
    }
  }
}
"""

PRODUCT_STATUSES = ["ACTIVE", "ARCHIVED", "DRAFT"]
PRODUCT_SORT_KEYS = [
    "TITLE", "CREATED_AT", "UPDATED_AT", "INVENTORY_TOTAL", "PRODUCT_TYPE", "VENDOR",
]
WEIGHT_UNITS = ["KILOGRAMS", "GRAMS", "POUNDS", "OUNCES"]

_PRODUCT_FIELDS = ("title", "descriptionHtml", "vendor", "productType", "tags", "status")


async def list_products(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    query = args.get("query") or ""
    status = args.get("status")
    if status:
        query = f"{query} AND status:{status}" if query else f"status:{status}"

    result = await fetch_connection(
        ctx,
        LIST_PRODUCTS,
        {
            "first": args.get("first", 50),
            "after": args.get("after"),
            "query": query or None,
            "sortKey": args.get("sortKey"),
            "reverse": args.get("reverse"),
        },
        "products",
        fetch_all=args.get("fetchAll", False),
    )
    return success_result({
        "products": [format_product(p) for p in result.items],
        "pageInfo": result.page_info,
        "count": len(result.items),
    })


async def get_product(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(GET_PRODUCT, {"id": to_gid("Product", args["id"])})
    product = data.get("product")
    if not product:
        return not_found("Product", args["id"])
    return success_result({"product": format_product(product)})


async def search_products(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(
        SEARCH_PRODUCTS, {"query": args["query"], "first": args.get("first", 20)}
    )
    result = connection_to_result(data.get("products"))
    return success_result({
        "products": [format_product(p) for p in result.items],
        "count": len(result.items),
        "pageInfo": result.page_info,
    })


async def create_product(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    product_input = compact({
        "title": args["title"],
        "descriptionHtml": args.get("descriptionHtml"),
        "vendor": args.get("vendor"),
        "productType": args.get("productType"),
        "tags": args.get("tags"),
        "status": args.get("status", "DRAFT"),
    })
    if args.get("variants"):
        product_input["variants"] = [
            compact({
                "price": v.get("price"),
                "sku": v.get("sku"),
                "barcode": v.get("barcode"),
                "compareAtPrice": v.get("compareAtPrice"),
                "options": v.get("options"),
            })
            for v in args["variants"]
        ]
    if args.get("options"):
        product_input["options"] = args["options"]

    result = await ctx.client.mutate(
        CREATE_PRODUCT, {"input": product_input}, "productCreate"
    )
    if not result.success:
        return mutation_failed("create product", result)

    product = (result.data.get("productCreate") or {}).get("product")
    if not product:
        return error_result(ErrorCodes.API_ERROR, "Product was not created")

    return success_result({
        "message": "Product created successfully",
        "product": format_product(product),
    })


async def update_product(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    product_input = {"id": to_gid("Product", args["id"])}
    for key in _PRODUCT_FIELDS:
        if key in args:
            product_input[key] = args[key]

    result = await ctx.client.mutate(
        UPDATE_PRODUCT, {"input": product_input}, "productUpdate"
    )
    if not result.success:
        return mutation_failed("update product", result)

    product = (result.data.get("productUpdate") or {}).get("product")
    if not product:
        return error_result(ErrorCodes.API_ERROR, "Product was not updated")

    return success_result({
        "message": "Product updated successfully",
        "product": format_product(product),
    })


async def delete_product(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        DELETE_PRODUCT,
        {"input": {"id": to_gid("Product", args["id"])}},
        "productDelete",
    )
    if not result.success:
        return mutation_failed("delete product", result)

    return success_result({
        "message": "Product deleted successfully",
        "deletedProductId": args["id"],
    })


async def update_product_variant(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    variant_input = {"id": to_gid("ProductVariant", args["id"])}
    for key in ("price", "compareAtPrice", "sku", "barcode", "weight", "weightUnit"):
        if key in args:
            variant_input[key] = args[key]

    result = await ctx.client.mutate(
        UPDATE_PRODUCT_VARIANT, {"input": variant_input}, "productVariantUpdate"
    )
    if not result.success:
        return mutation_failed("update variant", result)

    return success_result({
        "message": "Product variant updated successfully",
        "variant": (result.data.get("productVariantUpdate") or {}).get("productVariant"),
    })


TOOLS = [
    FunctionTool(
        name="list_products",
        description="List products from the Shopify store with optional filtering and pagination",
        input_schema={
            "type": "object",
            "properties": {
                **PAGINATION_PROPERTIES,
                "query": {
                    "type": "string",
                    "description": 'Search query to filter products (e.g., "title:shirt", "vendor:Nike")',
                },
                "status": {
                    "type": "string",
                    "enum": PRODUCT_STATUSES,
                    "description": "Filter by product status",
                },
                "sortKey": {
                    "type": "string",
                    "enum": PRODUCT_SORT_KEYS,
                    "description": "Sort field",
                },
                "reverse": {"type": "boolean", "description": "Reverse sort order"},
            },
        },
        handler=list_products,
    ),
    FunctionTool(
        name="get_product",
        description="Get detailed information about a specific product including variants and images",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Product ID (numeric or GID format)"},
            },
            "required": ["id"],
        },
        handler=get_product,
    ),
    FunctionTool(
        name="search_products",
        description="Search for products by keyword",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "first": {
                    "type": "integer",
                    "description": "Number of results to return (default: 20)",
                    "minimum": 1,
                    "maximum": 250,
                },
            },
            "required": ["query"],
        },
        handler=search_products,
    ),
    FunctionTool(
        name="create_product",
        description="Create a new product in the Shopify store",
        input_schema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Product title"},
                "descriptionHtml": {"type": "string", "description": "Product description (HTML)"},
                "vendor": {"type": "string", "description": "Product vendor"},
                "productType": {"type": "string", "description": "Product type"},
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Product tags",
                },
                "status": {
                    "type": "string",
                    "enum": PRODUCT_STATUSES,
                    "description": "Product status (default: DRAFT)",
                },
                "variants": {
                    "type": "array",
                    "description": "Product variants",
                    "items": {
                        "type": "object",
                        "properties": {
                            "price": {"type": "string"},
                            "sku": {"type": "string"},
                            "barcode": {"type": "string"},
                            "compareAtPrice": {"type": "string"},
                            "options": {"type": "array", "items": {"type": "string"}},
                        },
                        "required": ["price"],
                    },
                },
                "options": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": 'Product options (e.g., ["Size", "Color"])',
                },
            },
            "required": ["title"],
        },
        handler=create_product,
    ),
    FunctionTool(
        name="update_product",
        description="Update an existing product",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Product ID to update"},
                "title": {"type": "string", "description": "New title"},
                "descriptionHtml": {"type": "string", "description": "New description (HTML)"},
                "vendor": {"type": "string", "description": "New vendor"},
                "productType": {"type": "string", "description": "New product type"},
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "New tags (replaces existing)",
                },
                "status": {
                    "type": "string",
                    "enum": PRODUCT_STATUSES,
                    "description": "New status",
                },
            },
            "required": ["id"],
        },
        handler=update_product,
    ),
    FunctionTool(
        name="delete_product",
        description="Delete a product from the store",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Product ID to delete"},
            },
            "required": ["id"],
        },
        handler=delete_product,
    ),
    FunctionTool(
        name="update_product_variant",
        description="Update a product variant (price, SKU, barcode, weight)",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Variant ID to update"},
                "price": {"type": "string", "description": "New price"},
                "compareAtPrice": {"type": "string", "description": "Compare at price"},
                "sku": {"type": "string", "description": "New SKU"},
                "barcode": {"type": "string", "description": "New barcode"},
                "weight": {"type": "number", "description": "Weight value"},
                "weightUnit": {
                    "type": "string",
                    "enum": WEIGHT_UNITS,
                    "description": "Weight unit",
                },
            },
            "required": ["id"],
        },
        handler=update_product_variant,
    ),
]
