"""
Tool definition base class, tool context and the result envelope.

Every tool returns ``{"success": True, "data": ...}`` or
``{"success": False, "error": {"code", "message", "details"?}}``.
``BaseTool.run`` is the boundary: it validates input, calls ``execute``
and converts any exception into an error envelope.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from shopify_mcp.config.settings import Settings
from shopify_mcp.services.errors import (
    ErrorCodes,
    ShopifyAPIError,
    ShopifyValidationError,
)
from shopify_mcp.services.shopify_graphql import MutationResult, ShopifyGraphQLClient
from shopify_mcp.utils.logger import get_logger
from shopify_mcp.utils.pagination import (
    PaginatedResult,
    accumulate_pages,
    connection_extractor,
    connection_to_result,
)

logger = get_logger(__name__)

ToolResult = Dict[str, Any]


@dataclass(frozen=True)
class ToolContext:
    """Dependencies handed to every tool handler."""

    client: ShopifyGraphQLClient
    settings: Settings


# ── Result envelope ─────────────────────────────────────────────────


def success_result(data: Any) -> ToolResult:
    return {"success": True, "data": data}


def error_result(
    code: str, message: str, details: Optional[Dict[str, Any]] = None
) -> ToolResult:
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def format_user_errors(user_errors: List[Dict[str, Any]]) -> ToolResult:
    """Build a VALIDATION_ERROR envelope from mutation ``userErrors``.

    The message joins ``field.path: message`` pairs with ``"; "``.
    """
    messages = []
    for error in user_errors:
        field_path = error.get("field")
        name = ".".join(str(part) for part in field_path) if field_path else "unknown"
        messages.append(f"{name}: {error.get('message')}")
    return error_result(
        ErrorCodes.VALIDATION_ERROR, "; ".join(messages), {"userErrors": user_errors}
    )


def mutation_failed(action: str, result: MutationResult) -> ToolResult:
    """Envelope for a mutation rejected with user errors, e.g. ``"create product"``."""
    return error_result(
        ErrorCodes.VALIDATION_ERROR,
        f"Failed to {action}",
        {"userErrors": result.user_errors},
    )


def not_found(resource: str, resource_id: Any) -> ToolResult:
    return error_result(
        ErrorCodes.NOT_FOUND, f"{resource} with ID {resource_id} not found"
    )


def handle_tool_error(error: Exception) -> ToolResult:
    """Convert an exception raised inside a tool into an error envelope."""
    if isinstance(error, ShopifyValidationError):
        return format_user_errors(error.user_errors)
    if isinstance(error, ShopifyAPIError):
        return error_result(error.code, error.message)
    if isinstance(error, ValueError):
        return error_result(ErrorCodes.INVALID_INPUT, str(error))
    return error_result(
        ErrorCodes.UNKNOWN_ERROR, str(error) or "An unexpected error occurred"
    )


# ── Input validation ────────────────────────────────────────────────

_JSON_TYPES = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


def _check_type(path: str, value: Any, expected: str) -> None:
    types = _JSON_TYPES.get(expected)
    if types is None:
        return
    # bool is an int subclass; JSON keeps them apart
    if isinstance(value, bool) and expected in ("integer", "number"):
        raise ValueError(f"Field '{path}' must be of type {expected}")
    if not isinstance(value, types):
        raise ValueError(f"Field '{path}' must be of type {expected}")


def validate_value(path: str, value: Any, schema: Dict[str, Any]) -> None:
    """Check ``value`` against a JSON-schema subset.

    Supports ``type``, ``enum``, ``minimum``/``maximum``, ``minItems``,
    array ``items`` and nested object ``properties``/``required``.

    Raises:
        ValueError: On the first violation found.
    """
    expected = schema.get("type")
    if expected:
        _check_type(path, value, expected)

    if "enum" in schema and value not in schema["enum"]:
        allowed = ", ".join(str(v) for v in schema["enum"])
        raise ValueError(f"Field '{path}' must be one of: {allowed}")

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if "minimum" in schema and value < schema["minimum"]:
            raise ValueError(f"Field '{path}' must be >= {schema['minimum']}")
        if "maximum" in schema and value > schema["maximum"]:
            raise ValueError(f"Field '{path}' must be <= {schema['maximum']}")

    if isinstance(value, list):
        if "minItems" in schema and len(value) < schema["minItems"]:
            raise ValueError(
                f"Field '{path}' must contain at least {schema['minItems']} item(s)"
            )
        item_schema = schema.get("items")
        if item_schema:
            for index, item in enumerate(value):
                validate_value(f"{path}[{index}]", item, item_schema)

    if isinstance(value, dict) and ("properties" in schema or "required" in schema):
        validate_object(value, schema, prefix=f"{path}.")


def validate_object(data: Dict[str, Any], schema: Dict[str, Any], prefix: str = "") -> None:
    for field_name in schema.get("required", []):
        if data.get(field_name) is None:
            raise ValueError(f"Missing required field: {prefix}{field_name}")

    properties = schema.get("properties", {})
    for key, value in data.items():
        if key in properties and value is not None:
            validate_value(f"{prefix}{key}", value, properties[key])


# ── Tool classes ────────────────────────────────────────────────────


class BaseTool(ABC):
    """Abstract base class for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Tool description."""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> Dict[str, Any]:
        """JSON schema for tool input."""
        pass

    @abstractmethod
    async def execute(self, ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
        """Run the tool and return a result envelope."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Return the MCP descriptor of the tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def validate(self, input_data: Dict[str, Any]) -> bool:
        """Validate input data against schema.

        Args:
            input_data: Tool input parameters

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails
        """
        validate_object(input_data, self.input_schema)
        return True

    async def run(self, ctx: ToolContext, args: Optional[Dict[str, Any]]) -> ToolResult:
        """Validate ``args``, execute, and convert failures to envelopes."""
        args = args or {}
        try:
            self.validate(args)
        except ValueError as e:
            logger.info("Tool input rejected", tool_name=self.name, error=str(e))
            return error_result(ErrorCodes.INVALID_INPUT, str(e))

        try:
            return await self.execute(ctx, args)
        except Exception as e:
            logger.warning(
                "Tool execution failed",
                tool_name=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return handle_tool_error(e)


Handler = Callable[[ToolContext, Dict[str, Any]], Awaitable[ToolResult]]


class FunctionTool(BaseTool):
    """A tool backed by a plain async handler function."""

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: Dict[str, Any],
        handler: Handler,
    ):
        self._name = name
        self._description = description
        self._input_schema = input_schema
        self._handler = handler

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self._input_schema

    async def execute(self, ctx: ToolContext, args: Dict[str, Any]) -> ToolResult:
        return await self._handler(ctx, args)

    def __repr__(self) -> str:
        return f"FunctionTool(name={self._name!r})"


# ── Shared helpers for resource tools ───────────────────────────────

# Pagination properties shared by list tools
PAGINATION_PROPERTIES: Dict[str, Any] = {
    "first": {
        "type": "integer",
        "description": "Number of items to return per page (1-250)",
        "minimum": 1,
        "maximum": 250,
    },
    "after": {
        "type": "string",
        "description": "Cursor for pagination (from a previous pageInfo.endCursor)",
    },
    "fetchAll": {
        "type": "boolean",
        "description": "Fetch every page and return all matching items (up to 10,000)",
    },
}


def compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None, for GraphQL input objects."""
    return {key: value for key, value in values.items() if value is not None}


async def fetch_connection(
    ctx: ToolContext,
    document: str,
    variables: Dict[str, Any],
    root_field: str,
    fetch_all: bool = False,
) -> PaginatedResult:
    """Fetch one page of a top-level connection, or all of them."""
    if fetch_all:
        variables = compact({k: v for k, v in variables.items() if k != "after"})
        return await accumulate_pages(
            ctx.client.query,
            document,
            variables,
            connection_extractor(root_field),
            max_items=ctx.settings.max_paginated_items,
        )

    data = await ctx.client.query(document, compact(variables))
    return connection_to_result(data.get(root_field))
