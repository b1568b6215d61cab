"""Configuration for the Shopify MCP gateway."""

from shopify_mcp.config.settings import (
    LoggingConfig,
    ServerConfig,
    Settings,
    ShopifyConfig,
    settings,
)

__all__ = [
    "LoggingConfig",
    "ServerConfig",
    "Settings",
    "ShopifyConfig",
    "settings",
]
