"""
Shopify global ID helpers.

Tools accept either a bare numeric id (``"123"``) or a global id
(``"gid://shopify/Product/123"``). Both directions are lenient: anything
that doesn't look like the other form is passed through unchanged.
"""

import re
from typing import Optional, Tuple, Union

GID_PREFIX = "gid://shopify/"

_GID_RE = re.compile(r"gid://shopify/(\w+)/(\d+)")


def to_gid(resource_type: str, resource_id: Union[str, int]) -> str:
    """Convert a numeric id to ``gid://shopify/{resource_type}/{id}``.

    Already-encoded ids are returned verbatim, whatever their type tag.
    """
    id_str = str(resource_id)
    if id_str.startswith(GID_PREFIX):
        return id_str
    return f"{GID_PREFIX}{resource_type}/{id_str}"


def from_gid(gid: str) -> str:
    """Extract the numeric id from a global id, or return the input as-is."""
    match = _GID_RE.search(gid)
    return match.group(2) if match else gid


def parse_gid(gid: str) -> Tuple[Optional[str], str]:
    """Split a global id into ``(type, numeric_id)``.

    For a bare id the type is ``None``.
    """
    match = _GID_RE.search(gid)
    if match:
        return match.group(1), match.group(2)
    return None, gid
