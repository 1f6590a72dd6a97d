"""Configuration and constants for the sitemap generator."""

import os
from typing import Any, Mapping, Optional
from .types import ChangeFrequency, ManualRoutesProvider, SitemapConfig

# sitemaps.org protocol
SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Entry defaults
DEFAULT_CHANGEFREQ = ChangeFrequency.WEEKLY
DEFAULT_PRIORITY = 0.5
DEFAULT_TRAILING_SLASH = False
DEFAULT_PRETTY_PRINT = True

# Route tree conventions
INDEX_ROUTE_PATH = "index"
ROOT_ROUTE_ID = "__root__"
DYNAMIC_ROUTE_MARKERS = ("$", "[", "]")

# File paths
DEFAULT_OUTPUT_PATH = "public/sitemap.xml"
ROUTE_TREE_BASE_PATHS = [
    "src/routeTree.gen",
    "app/routeTree.gen",
    "routeTree.gen",
]
ROUTE_TREE_EXTENSIONS = [".ts", ".js", ".json"]


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def get_config_from_env(
    manual_routes: Optional[ManualRoutesProvider] = None,
    route_options: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> SitemapConfig:
    """Create configuration from environment variables with defaults."""
    exclude_str = os.getenv("SITEMAP_EXCLUDE_ROUTES", "")
    exclude_routes = [route.strip() for route in exclude_str.split(",") if route.strip()]

    return SitemapConfig(
        base_url=os.getenv("SITEMAP_BASE_URL", ""),
        default_changefreq=os.getenv("SITEMAP_DEFAULT_CHANGEFREQ", DEFAULT_CHANGEFREQ.value),
        default_priority=float(os.getenv("SITEMAP_DEFAULT_PRIORITY", DEFAULT_PRIORITY)),
        exclude_routes=tuple(exclude_routes),
        route_options=route_options or {},
        trailing_slash=_env_bool("SITEMAP_TRAILING_SLASH", DEFAULT_TRAILING_SLASH),
        lastmod=os.getenv("SITEMAP_LASTMOD") or None,
        pretty_print=_env_bool("SITEMAP_PRETTY_PRINT", DEFAULT_PRETTY_PRINT),
        manual_routes=manual_routes,
    )
