"""Shopify GraphQL client, tool registry and MCP server."""
