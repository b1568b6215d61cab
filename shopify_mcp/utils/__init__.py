"""Shared helpers: logging, global IDs, pagination and response formatting."""

from shopify_mcp.utils.gid import from_gid, parse_gid, to_gid
from shopify_mcp.utils.logger import get_logger, setup_logging

__all__ = [
    "from_gid",
    "parse_gid",
    "to_gid",
    "get_logger",
    "setup_logging",
]
