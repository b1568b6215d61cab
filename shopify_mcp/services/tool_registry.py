"""
Tool registry: the closed set of tools exposed over MCP.

Built once at startup from every resource module. Names are unique; a
collision is a programming error and fails the build.
"""

import time
from typing import Any, Dict, Iterable, List, Optional

from shopify_mcp.services.tools import TOOL_CATEGORIES
from shopify_mcp.services.tools.base import BaseTool, ToolContext, ToolResult
from shopify_mcp.utils.logger import get_logger, new_correlation_id

logger = get_logger(__name__)


class DuplicateToolError(ValueError):
    """Two tools were registered under the same name."""


class ToolNotFoundError(LookupError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolRegistry:
    """Name -> tool mapping bound to a single ToolContext."""

    def __init__(self, ctx: ToolContext):
        self._ctx = ctx
        self._tools: Dict[str, BaseTool] = {}
        self._categories: Dict[str, List[str]] = {}

    def register(self, tool: BaseTool, category: str = "general") -> None:
        """Add a tool.

        Raises:
            DuplicateToolError: If the name is already taken.
        """
        if tool.name in self._tools:
            raise DuplicateToolError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        self._categories.setdefault(category, []).append(tool.name)

    def register_all(self, tools: Iterable[BaseTool], category: str = "general") -> None:
        for tool in tools:
            self.register(tool, category)

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    @property
    def categories(self) -> Dict[str, List[str]]:
        return {category: list(names) for category, names in self._categories.items()}

    @property
    def counts(self) -> Dict[str, int]:
        counts = {category: len(names) for category, names in self._categories.items()}
        counts["total"] = len(self._tools)
        return counts

    def list_tools(self) -> List[Dict[str, Any]]:
        """MCP descriptors for every tool, in registration order."""
        return [tool.to_dict() for tool in self._tools.values()]

    async def call(self, name: str, args: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Invoke a tool by name.

        Args:
            name: Registered tool name.
            args: Tool arguments as received from the caller.

        Returns:
            The tool's result envelope. Tool failures never raise.

        Raises:
            ToolNotFoundError: If no tool has that name.
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("Unknown tool requested", tool_name=name)
            raise ToolNotFoundError(name)

        correlation_id = new_correlation_id()
        start_time = time.time()
        logger.info("Executing tool", tool_name=name, correlation_id=correlation_id)

        result = await tool.run(self._ctx, args)

        execution_time_ms = int((time.time() - start_time) * 1000)
        if result.get("success"):
            logger.info(
                "Tool execution successful",
                tool_name=name,
                execution_time_ms=execution_time_ms,
            )
        else:
            logger.warning(
                "Tool returned an error",
                tool_name=name,
                error_code=result["error"]["code"],
                execution_time_ms=execution_time_ms,
            )
        return result


def build_registry(ctx: ToolContext) -> ToolRegistry:
    """Register every resource tool against ``ctx``."""
    registry = ToolRegistry(ctx)
    for category, tools in TOOL_CATEGORIES.items():
        registry.register_all(tools, category)
    logger.info("Tool registry built", **registry.counts)
    return registry
