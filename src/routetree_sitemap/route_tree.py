"""Flatten a router's route tree into static route descriptors."""

import logging
import re
from functools import lru_cache
from typing import Any, Iterable, List, Mapping, Optional, Pattern, Sequence
from .config import DYNAMIC_ROUTE_MARKERS, INDEX_ROUTE_PATH, ROOT_ROUTE_ID
from .types import RouteDescriptor

logger = logging.getLogger(__name__)


def _node_path(node: Any) -> str:
    if isinstance(node, Mapping):
        path = node.get("path")
    else:
        path = getattr(node, "path", None)
    return path if isinstance(path, str) else ""


def _node_children(node: Any) -> List[Any]:
    if isinstance(node, Mapping):
        children = node.get("children")
    else:
        children = getattr(node, "children", None)
    return children if isinstance(children, (list, tuple)) else []


def is_dynamic_route(route_path: str) -> bool:
    """Check if a route segment contains parameters like $id or [id]."""
    return any(marker in route_path for marker in DYNAMIC_ROUTE_MARKERS)


def build_full_path(parent_path: str, route_path: str) -> str:
    """
    Build the absolute path of a route from its parent path and own segment.

    Returns an empty string for routes that do not represent a real path
    (dynamic segments and the ``__root__`` marker).
    """
    if route_path.startswith("/"):
        return route_path

    if is_dynamic_route(route_path):
        return ""

    if not route_path or route_path == INDEX_ROUTE_PATH:
        return parent_path or "/"

    if route_path == ROOT_ROUTE_ID:
        return ""

    if parent_path == "/":
        full_path = f"/{route_path}"
    else:
        full_path = f"{parent_path}/{route_path}"

    return re.sub(r"/+", "/", full_path)


@lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> Pattern[str]:
    parts = []
    for char in pattern:
        if char == "*":
            if not parts or parts[-1] != ".*":
                parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + "$")


def matches_exclude_pattern(path: str, pattern: str) -> bool:
    """
    Check a path against one exclude pattern.

    Patterns containing ``*`` are globs (``*`` matches any sequence, ``?``
    any single character). A trailing ``/*`` also matches the bare prefix,
    so ``/admin/*`` excludes ``/admin`` as well as ``/admin/users``.
    """
    if path == pattern:
        return True

    if "*" not in pattern:
        return False

    if pattern.endswith("/*"):
        base_path = pattern[:-2]
        if path == base_path or path.startswith(base_path + "/"):
            return True

    return bool(_compile_glob(pattern).match(path))


def is_excluded_route(path: str, exclude_routes: Iterable[str]) -> bool:
    """Check if path matches any of the exclude patterns."""
    return any(matches_exclude_pattern(path, pattern) for pattern in exclude_routes)


def flatten_route_tree(
    route: Any,
    exclude_routes: Sequence[str] = (),
    route_options: Optional[Mapping[str, Mapping[str, Any]]] = None,
    parent_path: str = "",
) -> List[RouteDescriptor]:
    """
    Walk the route tree depth-first and collect static routes.

    Args:
        route: Root node (RouteNode, mapping or any object with
            ``path``/``children`` attributes)
        exclude_routes: Exact paths or glob patterns to leave out
        route_options: Per-path overrides attached to the descriptors
        parent_path: Absolute path of the parent node

    Returns:
        Route descriptors in document order, parents before children.
        Duplicates are kept; the entry resolver removes them.
    """
    descriptors: List[RouteDescriptor] = []

    if route is None:
        return descriptors

    route_options = route_options or {}
    route_path = _node_path(route)
    full_path = build_full_path(parent_path, route_path)

    # Absolute segments are kept verbatim, so check the built path for
    # parameters inherited from a dynamic ancestor as well.
    if full_path and not is_dynamic_route(full_path):
        if is_excluded_route(full_path, exclude_routes):
            logger.debug(f"Excluded route: {full_path}")
        else:
            descriptors.append(
                RouteDescriptor(
                    full_path=full_path,
                    overrides=dict(route_options.get(full_path, {})),
                )
            )

    for child in _node_children(route):
        descriptors.extend(
            flatten_route_tree(child, exclude_routes, route_options, full_path)
        )

    return descriptors
