"""
Shopify Admin MCP Gateway - Main Entry Point

Exposes the Shopify GraphQL Admin API as MCP tools over stdio. Stdout is
the protocol channel, so every human-readable message goes to stderr.
"""

import asyncio
import sys

from shopify_mcp.config.settings import settings
from shopify_mcp.services.errors import ConfigurationError
from shopify_mcp.services.mcp_server import create_server, run_stdio
from shopify_mcp.services.shopify_graphql import ShopifyGraphQLClient
from shopify_mcp.services.tool_registry import ToolRegistry, build_registry
from shopify_mcp.services.tools.base import ToolContext
from shopify_mcp.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


class ShopifyMCPGateway:
    """Main application class that wires all components together."""

    def __init__(self):
        self.client: ShopifyGraphQLClient | None = None
        self.registry: ToolRegistry | None = None

    def initialize(self) -> bool:
        """Validate configuration and build the client and tool registry."""
        setup_logging(
            level=settings.logging.level,
            log_file=settings.logging.log_file or None,
        )
        logger.info("Initializing Shopify MCP gateway...")

        missing = settings.validate()
        if missing:
            logger.error("Missing required configuration", missing=missing)
            print(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "Please copy .env.example to .env and fill in your credentials.",
                file=sys.stderr,
            )
            return False

        try:
            self.client = ShopifyGraphQLClient(settings.shopify)
        except ConfigurationError as e:
            logger.error("Invalid Shopify configuration", error=str(e))
            return False

        ctx = ToolContext(client=self.client, settings=settings)
        self.registry = build_registry(ctx)
        logger.info("Gateway initialized", tools=len(self.registry))
        return True

    async def run(self):
        """Serve MCP on stdio until the client disconnects."""
        if not self.initialize():
            sys.exit(1)

        server = create_server(self.registry, settings.server)
        try:
            await run_stdio(server)
        finally:
            await self.shutdown()

    async def shutdown(self):
        if self.client:
            await self.client.close()
            logger.info("Shopify client closed")
        logger.info("Gateway shutdown complete")


def main():
    """Entry point."""
    gateway = ShopifyMCPGateway()

    try:
        asyncio.run(gateway.run())
    except KeyboardInterrupt:
        print("Shutting down...", file=sys.stderr)
    except Exception as e:
        logger.error("Fatal error", error=str(e))
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
