"""Variable scopes for template rendering.

A scope is a plain dict of name -> value. Scopes only grow: descending into
a loop iteration creates a new dict from the parent plus the iteration's
bindings, and the parent is never touched.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Dict

Scope = Dict[str, Any]


def extend(parent: Mapping[str, Any], overrides: Mapping[str, Any]) -> Scope:
    """Create a child scope from a parent scope and overriding bindings.

    Args:
        parent: Bindings visible in the enclosing context
        overrides: Bindings introduced by the child context

    Returns:
        A new dict holding all parent entries plus overrides, with
        overrides winning on key collision

    Example:
        >>> extend({"name": "Faiz", "tier": "gold"}, {"name": "Item A"})
        {'name': 'Item A', 'tier': 'gold'}
    """
    return {**parent, **overrides}


def get_path(scope: Any, path: str) -> Any:
    """Resolve a dot-separated path against a scope.

    Each segment is looked up against the previous result: mappings by key,
    sequences by integer index and other objects by public attribute. The
    walk stops with None as soon as a segment is missing or the current
    value cannot hold the next segment.

    Args:
        scope: Root value to walk (normally a scope dict)
        path: Dotted path such as "user.name" or "items.0.price"

    Returns:
        The value at the path, or None when the path does not resolve

    Example:
        >>> get_path({"user": {"name": "Faiz"}}, "user.name")
        'Faiz'
        >>> get_path({"user": {"name": "Faiz"}}, "user.email.domain") is None
        True
    """
    path = path.strip()
    if not path:
        return None

    current = scope
    for part in path.split("."):
        part = part.strip()
        if current is None or not part:
            return None
        if isinstance(current, Mapping):
            if part not in current:
                return None
            current = current[part]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return None
        elif isinstance(current, (str, bytes, int, float, bool)):
            # Scalars are leaves
            return None
        elif part.startswith("_"):
            return None
        else:
            current = getattr(current, part, None)
    return current


def is_sequence(value: Any) -> bool:
    """Check whether a value is an ordered sequence a loop can iterate.

    Strings, bytes and mappings are not considered sequences here.
    """
    return isinstance(value, (list, tuple))
