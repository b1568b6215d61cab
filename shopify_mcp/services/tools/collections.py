"""Collection tools."""

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
from shopify_mcp.utils.formatters import format_collection
from shopify_mcp.utils.gid import from_gid, to_gid
from shopify_mcp.utils.pagination import connection_to_result

COLLECTION_FRAGMENT = """
fragment CollectionFields on Collection {
  id
  title
  handle
  descriptionHtml
  updatedAt
  productsCount {
    count
  }
  sortOrder
  ruleSet {
    appliedDisjunctively
    rules {
      column
      relation
      condition
    }
  }
  image {
    id
    url
    altText
    width
    height
  }
}
"""

LIST_COLLECTIONS = COLLECTION_FRAGMENT + """
query ListCollections($first: Int!, $after: String, $query: String) {
  collections(first: $first, after: $after, query: $query) {
    edges {
      cursor
      node {
        ...CollectionFields
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

GET_COLLECTION = COLLECTION_FRAGMENT + """
query GetCollection($id: ID!, $productsFirst: Int!) {
  collection(id: $id) {
    ...CollectionFields
    products(first: $productsFirst) {
      edges {
        node {
          id
          title
          handle
          status
          featuredImage {
            url
          }
          totalInventory
          variants(first: 1) {
            edges {
              node {
                price
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
}
"""

CREATE_COLLECTION = COLLECTION_FRAGMENT + """
mutation CreateCollection($input: CollectionInput!) {
  collectionCreate(input: $input) {
    collection {
      ...CollectionFields
    }
    userErrors {
      field
      message
    }
  }
}
"""

ADD_PRODUCTS_TO_COLLECTION = """
mutation AddProductsToCollection($id: ID!, $productIds: [ID!]!) {
  collectionAddProducts(id: $id, productIds: $productIds) {
    collection {
      id
      title
      productsCount {
        count
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""


async def list_collections(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await fetch_connection(
        ctx,
        LIST_COLLECTIONS,
        {
            "first": args.get("first", 50),
            "after": args.get("after"),
            "query": args.get("query"),
        },
        "collections",
        fetch_all=args.get("fetchAll", False),
    )
    return success_result({
        "collections": [format_collection(c) for c in result.items],
        "pageInfo": result.page_info,
        "count": len(result.items),
    })


async def get_collection(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(
        GET_COLLECTION,
        {
            "id": to_gid("Collection", args["id"]),
            "productsFirst": args.get("productsFirst", 20),
        },
    )
    collection = data.get("collection")
    if not collection:
        return not_found("Collection", args["id"])

    formatted = format_collection(collection)
    if not args.get("includeProducts", True) or not collection.get("products"):
        return success_result({"collection": formatted})

    page = connection_to_result(collection["products"])
    products = []
    for product in page.items:
        variants = (product.get("variants") or {}).get("edges") or []
        products.append({
            "id": from_gid(product["id"]),
            "title": product.get("title"),
            "handle": product.get("handle"),
            "status": product.get("status"),
            "featuredImage": (product.get("featuredImage") or {}).get("url"),
            "totalInventory": product.get("totalInventory"),
            "price": variants[0]["node"].get("price") if variants else None,
        })

    return success_result({
        "collection": formatted,
        "products": products,
        "productsPageInfo": page.page_info,
    })


async def create_collection(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    collection_input = compact({
        "title": args["title"],
        "descriptionHtml": args.get("descriptionHtml"),
        "image": args.get("image"),
        "seo": args.get("seo"),
    })

    result = await ctx.client.mutate(
        CREATE_COLLECTION, {"input": collection_input}, "collectionCreate"
    )
    if not result.success:
        return mutation_failed("create collection", result)

    collection = (result.data.get("collectionCreate") or {}).get("collection")
    if not collection:
        return error_result(ErrorCodes.API_ERROR, "Collection was not created")

    return success_result({
        "message": "Collection created successfully",
        "collection": format_collection(collection),
    })


async def add_products_to_collection(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await ctx.client.mutate(
        ADD_PRODUCTS_TO_COLLECTION,
        {
            "id": to_gid("Collection", args["collectionId"]),
            "productIds": [to_gid("Product", pid) for pid in args["productIds"]],
        },
        "collectionAddProducts",
    )
    if not result.success:
        return mutation_failed("add products to collection", result)

    collection = (result.data.get("collectionAddProducts") or {}).get("collection") or {}
    return success_result({
        "message": "Products added to collection successfully",
        "collection": {
            "id": args["collectionId"],
            "title": collection.get("title"),
            "productsCount": (collection.get("productsCount") or {}).get("count"),
        },
        "addedProductIds": args["productIds"],
    })


TOOLS = [
    FunctionTool(
        name="list_collections",
        description="List collections from the Shopify store",
        input_schema={
            "type": "object",
            "properties": {
                **PAGINATION_PROPERTIES,
                "query": {"type": "string", "description": "Search query to filter collections"},
            },
        },
        handler=list_collections,
    ),
    FunctionTool(
        name="get_collection",
        description="Get detailed information about a specific collection including products",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Collection ID (numeric or GID format)"},
                "includeProducts": {
                    "type": "boolean",
                    "description": "Include products in the collection (default: true)",
                },
                "productsFirst": {
                    "type": "integer",
                    "description": "Number of products to include (default: 20)",
                    "minimum": 1,
                    "maximum": 250,
                },
            },
            "required": ["id"],
        },
        handler=get_collection,
    ),
    FunctionTool(
        name="create_collection",
        description="Create a new manual collection",
        input_schema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Collection title"},
                "descriptionHtml": {"type": "string", "description": "Collection description (HTML)"},
                "image": {
                    "type": "object",
                    "properties": {
                        "src": {"type": "string", "description": "Image URL"},
                        "altText": {"type": "string", "description": "Image alt text"},
                    },
                },
                "seo": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "description": "SEO title"},
                        "description": {"type": "string", "description": "SEO description"},
                    },
                },
            },
            "required": ["title"],
        },
        handler=create_collection,
    ),
    FunctionTool(
        name="add_products_to_collection",
        description="Add products to an existing collection",
        input_schema={
            "type": "object",
            "properties": {
                "collectionId": {"type": "string", "description": "Collection ID"},
                "productIds": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 1,
                    "description": "Product IDs to add",
                },
            },
            "required": ["collectionId", "productIds"],
        },
        handler=add_products_to_collection,
    ),
]
