"""
Route Tree Sitemap Generator

Generates sitemaps.org compliant XML sitemaps from the route tree of a web
application router (e.g. TanStack Router's generated routeTree).

Key Features:
- Flattens nested route trees into absolute, normalized paths
- Skips dynamic routes ($param, [param]) and excluded glob patterns
- Per-route lastmod/changefreq/priority overrides on top of global defaults
- Manual routes from sync or async providers for database-backed pages
- Pretty printed or compact XML output
"""

__version__ = "1.0.1"

from .types import (
    ChangeFrequency,
    ConfigurationError,
    ManualEntry,
    RouteDescriptor,
    RouteNode,
    SitemapConfig,
    SitemapEntry,
)
from .config import get_config_from_env
from .generator import SitemapGenerator, generate_sitemap, generate_sitemap_entries
from .loader import RouteTreeLoadError, find_route_tree_file, load_route_tree
from .sitemap_writer import SitemapWriter, render_sitemap

__all__ = [
    "ChangeFrequency",
    "ConfigurationError",
    "ManualEntry",
    "RouteDescriptor",
    "RouteNode",
    "SitemapConfig",
    "SitemapEntry",
    "SitemapGenerator",
    "SitemapWriter",
    "RouteTreeLoadError",
    "find_route_tree_file",
    "generate_sitemap",
    "generate_sitemap_entries",
    "get_config_from_env",
    "load_route_tree",
    "render_sitemap",
]
