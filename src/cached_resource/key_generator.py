"""
Cache Key Generation

Key = parameterized resource identity + "/" + arguments joined by "/", lowercased.

    build_key("Widget", (42,))                       → "widget/42"
    build_key("shop.LineItem", ("all", {"q": 1}))    → "shop/lineitem/all/{'q': 1}"

Same identity + same arguments = identical key. No I/O, no randomness.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Sequence

SEPARATOR = "/"

# Underscores survive, every other run of non-alphanumerics becomes one separator
_NON_SLUG = re.compile(r"[^a-z0-9_]+")


def parameterize(resource_identity: str) -> str:
    """Lowercase ``resource_identity`` and turn separator runs into ``/``."""
    slug = _NON_SLUG.sub(SEPARATOR, str(resource_identity).lower())
    return slug.strip(SEPARATOR)


def _flatten(arguments: Iterable[Any]) -> List[Any]:
    parts: List[Any] = []
    for argument in arguments:
        if isinstance(argument, (list, tuple)):
            parts.extend(_flatten(argument))
        else:
            parts.append(argument)
    return parts


def build_key(resource_identity: str, arguments: Sequence[Any] = ()) -> str:
    """
    Build the cache key for one call.

    Args:
        resource_identity: Name of the remote resource type ("Widget", "shop::Order")
        arguments: Call arguments with any ``reload`` flag already stripped

    Returns:
        Lowercase path-like key
    """
    slug = parameterize(resource_identity)
    parts = [str(argument) for argument in _flatten(arguments)]
    if not parts:
        return slug
    return f"{slug}{SEPARATOR}{SEPARATOR.join(parts)}".lower()


def identity_for(obj: Any) -> str:
    """Resource identity for a class or callable: its qualified name."""
    return getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None) or type(obj).__name__
