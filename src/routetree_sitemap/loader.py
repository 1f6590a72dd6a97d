"""Locate and load route trees generated by router tooling."""

import importlib
import json
import logging
import os
import re
from typing import Any, Dict, List, Optional
from .config import ROOT_ROUTE_ID, ROUTE_TREE_BASE_PATHS, ROUTE_TREE_EXTENSIONS
from .types import RouteNode

logger = logging.getLogger(__name__)

ROUTE_MANIFEST_PATTERN = re.compile(
    r"/\*\s*ROUTE_MANIFEST_START\s*([\s\S]*?)\s*ROUTE_MANIFEST_END\s*\*/"
)
FULL_PATH_INTERFACE_PATTERN = re.compile(r"interface FileRoutesByFullPath\s*\{([^}]+)\}")
INTERFACE_KEY_PATTERN = re.compile(r"""['"]([^'"]+)['"]\s*:""")


class RouteTreeLoadError(Exception):
    """Raised when a route tree cannot be found or parsed."""


def find_route_tree_file(custom_path: Optional[str] = None, cwd: Optional[str] = None) -> Optional[str]:
    """
    Find a generated route tree file.

    An explicit path is tried as given first, then with its extension
    swapped, then the conventional ``routeTree.gen`` locations.
    """
    cwd = cwd or os.getcwd()
    base_paths = list(ROUTE_TREE_BASE_PATHS)

    if custom_path:
        if os.path.isfile(os.path.join(cwd, custom_path)):
            return os.path.abspath(os.path.join(cwd, custom_path))
        base_paths.insert(0, os.path.splitext(custom_path)[0])

    for base_path in base_paths:
        for ext in ROUTE_TREE_EXTENSIONS:
            full_path = os.path.abspath(os.path.join(cwd, base_path + ext))
            if os.path.isfile(full_path):
                return full_path

    return None


def _route_from_manifest(route_id: str, routes: Dict[str, Any], seen: set) -> Optional[RouteNode]:
    route_info = routes.get(route_id)
    if route_info is None or route_id in seen:
        return None

    seen = seen | {route_id}
    children = []
    for child_id in route_info.get("children") or []:
        child = _route_from_manifest(child_id, routes, seen)
        if child is not None:
            children.append(child)

    return RouteNode(
        path="/" if route_id == ROOT_ROUTE_ID else route_id,
        children=children,
        id=route_id,
    )


def parse_route_manifest(content: str) -> Optional[RouteNode]:
    """Build a route tree from the ROUTE_MANIFEST comment of a generated file."""
    match = ROUTE_MANIFEST_PATTERN.search(content)
    if not match:
        return None

    try:
        manifest = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise RouteTreeLoadError(f"Invalid route manifest: {e}") from e

    return _route_from_manifest(ROOT_ROUTE_ID, manifest.get("routes", {}), set())


def parse_full_path_interface(content: str) -> Optional[RouteNode]:
    """Build a flat route tree from the FileRoutesByFullPath interface keys."""
    match = FULL_PATH_INTERFACE_PATTERN.search(content)
    if not match:
        return None

    paths: List[str] = INTERFACE_KEY_PATTERN.findall(match.group(1))
    if not paths:
        return None

    return RouteNode(
        path="/",
        id=ROOT_ROUTE_ID,
        children=[RouteNode(path=path, id=path) for path in paths],
    )


def load_route_tree(path: str) -> RouteNode:
    """
    Load a route tree from a JSON file or a generated route tree source file.

    Raises:
        RouteTreeLoadError: If the file is missing or has no usable route data
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise RouteTreeLoadError(f"Failed to read route tree from {path}: {e}") from e

    if path.endswith(".json"):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise RouteTreeLoadError(f"Invalid JSON in {path}: {e}") from e

        if isinstance(data, dict) and isinstance(data.get("routeTree"), dict):
            data = data["routeTree"]
        if not isinstance(data, dict):
            raise RouteTreeLoadError(f"Route tree in {path} must be an object")
        return RouteNode.from_dict(data)

    route_tree = parse_route_manifest(content)
    if route_tree is not None:
        logger.debug(f"Loaded route tree from manifest in {path}")
        return route_tree

    route_tree = parse_full_path_interface(content)
    if route_tree is not None:
        logger.debug(f"Loaded route tree from FileRoutesByFullPath in {path}")
        return route_tree

    raise RouteTreeLoadError(f"Could not parse route tree file {path}")


def load_object(reference: str) -> Any:
    """Import an object from a ``package.module:attribute`` reference."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise RouteTreeLoadError(f"Expected 'module:attribute', got {reference!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RouteTreeLoadError(f"Failed to import {module_name}: {e}") from e

    obj = module
    for name in attribute.split("."):
        try:
            obj = getattr(obj, name)
        except AttributeError:
            raise RouteTreeLoadError(f"{module_name} has no attribute {attribute}") from None

    return obj
