"""
MCP server over stdio.

Lists the registry's tools and dispatches calls to it. Successful results
are returned as indented JSON text; failed envelopes are raised so the
server marks the result as an error.
"""

import json
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from shopify_mcp.config.settings import ServerConfig
from shopify_mcp.services.tool_registry import ToolNotFoundError, ToolRegistry
from shopify_mcp.services.tools.base import ToolResult
from shopify_mcp.utils.logger import get_logger

logger = get_logger(__name__)


class ToolCallError(Exception):
    """A tool returned a failure envelope; the message is its JSON rendering."""

    def __init__(self, text: str, code: Optional[str] = None):
        super().__init__(text)
        self.code = code


def render_result(result: ToolResult) -> List[TextContent]:
    """Render an envelope as MCP text content.

    Raises:
        ToolCallError: For a failure envelope.
    """
    if result.get("success"):
        text = json.dumps(result.get("data"), indent=2, default=str)
        return [TextContent(type="text", text=text)]

    error = result.get("error") or {}
    text = json.dumps({"error": error}, indent=2, default=str)
    raise ToolCallError(text, code=error.get("code"))


def tool_descriptors(registry: ToolRegistry) -> List[Tool]:
    return [
        Tool(
            name=descriptor["name"],
            description=descriptor["description"],
            inputSchema=descriptor["inputSchema"],
        )
        for descriptor in registry.list_tools()
    ]


async def dispatch(
    registry: ToolRegistry, name: str, arguments: Optional[Dict[str, Any]]
) -> List[TextContent]:
    """Run a tool and render its result.

    Raises:
        ValueError: If the tool name is unknown.
        ToolCallError: If the tool failed.
    """
    try:
        result = await registry.call(name, arguments or {})
    except ToolNotFoundError as e:
        raise ValueError(str(e)) from e
    return render_result(result)


def create_server(registry: ToolRegistry, config: Optional[ServerConfig] = None) -> Server:
    """Build the MCP server bound to ``registry``."""
    config = config or ServerConfig()
    server = Server(config.name, version=config.version)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return tool_descriptors(registry)

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        return await dispatch(registry, name, arguments)

    return server


async def run_stdio(server: Server) -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    logger.info("Starting MCP server on stdio", server=server.name)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
