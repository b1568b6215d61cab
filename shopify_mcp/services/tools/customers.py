"""Customer tools."""

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
from shopify_mcp.utils.formatters import (
    format_address,
    format_customer,
    format_date,
    format_money_bag,
)
from shopify_mcp.utils.gid import from_gid, to_gid
from shopify_mcp.utils.pagination import connection_to_result, extract_nodes

CUSTOMER_FRAGMENT = """
fragment CustomerFields on Customer {
  id
  email
  phone
  firstName
  lastName
  displayName
  note
  state
  tags
  verifiedEmail
  taxExempt
  createdAt
  updatedAt
  numberOfOrders
  amountSpent {
    amount
    currencyCode
  }
  defaultAddress {
    id
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
}
"""

LIST_CUSTOMERS = CUSTOMER_FRAGMENT + """
query ListCustomers($first: Int!, $after: String, $query: String, $sortKey: CustomerSortKeys, $reverse: Boolean) {
  customers(first: $first, after: $after, query: $query, sortKey: $sortKey, reverse: $reverse) {
    edges {
      cursor
      node {
        ...CustomerFields
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

GET_CUSTOMER = CUSTOMER_FRAGMENT + """
query GetCustomer($id: ID!, $includeOrders: Boolean!, $ordersFirst: Int!) {
  customer(id: $id) {
    ...CustomerFields
    addresses {
      id
      address1
      address2
      city
      province
      country
      zip
      phone
      firstName
      lastName
      company
    }
    orders(first: $ordersFirst) @include(if: $includeOrders) {
      edges {
        node {
          id
          name
          createdAt
          displayFinancialStatus
          displayFulfillmentStatus
          totalPriceSet { shopMoney { amount currencyCode } }
        }
      }
      pageInfo {
        hasNextPage
      }
    }
  }
}
"""

SEARCH_CUSTOMERS = CUSTOMER_FRAGMENT + """
query SearchCustomers($query: String!, $first: Int!) {
  customers(first: $first, query: $query) {
    edges {
      node {
        ...CustomerFields
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

CREATE_CUSTOMER = CUSTOMER_FRAGMENT + """
mutation CreateCustomer($input: CustomerInput!) {
  customerCreate(input: $input) {
    customer {
      ...CustomerFields
    }
    userErrors {
      field
      message
    }
  }
}
"""

UPDATE_CUSTOMER = CUSTOMER_FRAGMENT + """
mutation UpdateCustomer($input: CustomerInput!) {
  customerUpdate(input: $input) {
    customer {
      ...CustomerFields
    }
    userErrors {
      field
      message
    }
  }
}
"""

CUSTOMER_SORT_KEYS = ["CREATED_AT", "UPDATED_AT", "NAME", "LOCATION", "ID", "RELEVANCE"]

_CUSTOMER_FIELDS = ("email", "phone", "firstName", "lastName", "note", "tags")


async def list_customers(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    result = await fetch_connection(
        ctx,
        LIST_CUSTOMERS,
        {
            "first": args.get("first", 50),
            "after": args.get("after"),
            "query": args.get("query"),
            "sortKey": args.get("sortKey"),
            "reverse": args.get("reverse"),
        },
        "customers",
        fetch_all=args.get("fetchAll", False),
    )
    return success_result({
        "customers": [format_customer(c) for c in result.items],
        "pageInfo": result.page_info,
        "count": len(result.items),
    })


async def get_customer(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    include_orders = args.get("includeOrders", False)
    data = await ctx.client.query(
        GET_CUSTOMER,
        {
            "id": to_gid("Customer", args["id"]),
            "includeOrders": include_orders,
            "ordersFirst": args.get("ordersFirst", 10),
        },
    )
    customer = data.get("customer")
    if not customer:
        return not_found("Customer", args["id"])

    formatted = format_customer(customer)
    formatted["addresses"] = [format_address(a) for a in customer.get("addresses") or []]
    if include_orders:
        formatted["orders"] = [
            {
                "id": from_gid(o["id"]),
                "name": o.get("name"),
                "financialStatus": o.get("displayFinancialStatus"),
                "fulfillmentStatus": o.get("displayFulfillmentStatus"),
                "total": format_money_bag(o.get("totalPriceSet")),
                "createdAt": format_date(o.get("createdAt")),
            }
            for o in extract_nodes(customer.get("orders"))
        ]
    return success_result({"customer": formatted})


async def search_customers(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    data = await ctx.client.query(
        SEARCH_CUSTOMERS, {"query": args["query"], "first": args.get("first", 20)}
    )
    result = connection_to_result(data.get("customers"))
    return success_result({
        "customers": [format_customer(c) for c in result.items],
        "count": len(result.items),
        "pageInfo": result.page_info,
    })


async def create_customer(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    if not any(args.get(key) for key in ("email", "phone", "firstName", "lastName")):
        raise ValueError("A customer needs at least an email, phone, or name")

    customer_input = compact({key: args.get(key) for key in _CUSTOMER_FIELDS})
    if args.get("addresses"):
        customer_input["addresses"] = args["addresses"]
    if args.get("emailMarketingConsent"):
        customer_input["emailMarketingConsent"] = args["emailMarketingConsent"]

    result = await ctx.client.mutate(
        CREATE_CUSTOMER, {"input": customer_input}, "customerCreate"
    )
    if not result.success:
        return mutation_failed("create customer", result)

    customer = (result.data.get("customerCreate") or {}).get("customer")
    if not customer:
        return error_result(ErrorCodes.API_ERROR, "Customer was not created")

    return success_result({
        "message": "Customer created successfully",
        "customer": format_customer(customer),
    })


async def update_customer(ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
    customer_input = {"id": to_gid("Customer", args["id"])}
    for key in _CUSTOMER_FIELDS:
        if key in args:
            customer_input[key] = args[key]

    result = await ctx.client.mutate(
        UPDATE_CUSTOMER, {"input": customer_input}, "customerUpdate"
    )
    if not result.success:
        return mutation_failed("update customer", result)

    customer = (result.data.get("customerUpdate") or {}).get("customer")
    if not customer:
        return error_result(ErrorCodes.API_ERROR, "Customer was not updated")

    return success_result({
        "message": "Customer updated successfully",
        "customer": format_customer(customer),
    })


TOOLS = [
    FunctionTool(
        name="list_customers",
        description="List customers from the Shopify store with optional filtering and pagination",
        input_schema={
            "type": "object",
            "properties": {
                **PAGINATION_PROPERTIES,
                "query": {"type": "string", "description": "Search query to filter customers"},
                "sortKey": {"type": "string", "enum": CUSTOMER_SORT_KEYS, "description": "Sort field"},
                "reverse": {"type": "boolean", "description": "Reverse sort order"},
            },
        },
        handler=list_customers,
    ),
    FunctionTool(
        name="get_customer",
        description="Get detailed information about a specific customer",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Customer ID (numeric or GID format)"},
                "includeOrders": {
                    "type": "boolean",
                    "description": "Include customer orders (default: false)",
                },
                "ordersFirst": {
                    "type": "integer",
                    "description": "Number of orders to include (default: 10)",
                    "minimum": 1,
                    "maximum": 250,
                },
            },
            "required": ["id"],
        },
        handler=get_customer,
    ),
    FunctionTool(
        name="search_customers",
        description="Search for customers by email, name, or phone",
        input_schema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (email, name, or phone)"},
                "first": {
                    "type": "integer",
                    "description": "Number of results to return (default: 20)",
                    "minimum": 1,
                    "maximum": 250,
                },
            },
            "required": ["query"],
        },
        handler=search_customers,
    ),
    FunctionTool(
        name="create_customer",
        description="Create a new customer",
        input_schema={
            "type": "object",
            "properties": {
                "email": {"type": "string", "description": "Customer email"},
                "phone": {"type": "string", "description": "Customer phone"},
                "firstName": {"type": "string", "description": "First name"},
                "lastName": {"type": "string", "description": "Last name"},
                "note": {"type": "string", "description": "Internal note"},
                "tags": {"type": "array", "items": {"type": "string"}, "description": "Customer tags"},
                "addresses": {
                    "type": "array",
                    "description": "Customer addresses",
                    "items": {
                        "type": "object",
                        "properties": {
                            "address1": {"type": "string"},
                            "address2": {"type": "string"},
                            "city": {"type": "string"},
                            "province": {"type": "string"},
                            "country": {"type": "string"},
                            "zip": {"type": "string"},
                            "phone": {"type": "string"},
                            "firstName": {"type": "string"},
                            "lastName": {"type": "string"},
                        },
                        "required": ["address1", "city", "country", "zip"],
                    },
                },
                "emailMarketingConsent": {
                    "type": "object",
                    "properties": {
                        "marketingState": {
                            "type": "string",
                            "enum": ["NOT_SUBSCRIBED", "PENDING", "SUBSCRIBED", "UNSUBSCRIBED"],
                        },
                        "marketingOptInLevel": {
                            "type": "string",
                            "enum": ["SINGLE_OPT_IN", "CONFIRMED_OPT_IN", "UNKNOWN"],
                        },
                    },
                },
            },
        },
        handler=create_customer,
    ),
    FunctionTool(
        name="update_customer",
        description="Update an existing customer",
        input_schema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Customer ID"},
                "email": {"type": "string", "description": "New email"},
                "phone": {"type": "string", "description": "New phone"},
                "firstName": {"type": "string", "description": "New first name"},
                "lastName": {"type": "string", "description": "New last name"},
                "note": {"type": "string", "description": "New note"},
                "tags": {"type": "array", "items": {"type": "string"}, "description": "New tags"},
            },
            "required": ["id"],
        },
        handler=update_customer,
    ),
]
