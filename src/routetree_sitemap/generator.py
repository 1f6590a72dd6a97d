"""Sitemap generator that turns a route tree into sitemap entries and XML."""

import logging
from datetime import datetime
from typing import Any, List, Optional
from .entry_resolver import EntryResolver
from .route_tree import flatten_route_tree
from .sitemap_writer import render_sitemap
from .types import SitemapConfig, SitemapEntry
from .utils import format_number, get_current_timestamp, to_iso8601

logger = logging.getLogger(__name__)


class SitemapGenerator:
    """
    Generates sitemaps from a router's route tree.

    The default ``lastmod`` comes from ``config.lastmod`` or, when unset,
    from ``now`` (current UTC time if not given), fixed at construction so
    repeated calls produce identical output.
    """

    def __init__(self, config: SitemapConfig, now: Optional[datetime] = None):
        self.config = config
        if config.lastmod:
            lastmod = config.lastmod
        elif now is not None:
            lastmod = to_iso8601(now)
        else:
            lastmod = get_current_timestamp()
        self.resolver = EntryResolver(config, lastmod)

    async def generate_entries(self, route_tree: Any) -> List[SitemapEntry]:
        """
        Generate sitemap entries from a route tree.

        Static routes come first in depth-first order, followed by the
        entries of the manual routes provider.
        """
        descriptors = flatten_route_tree(
            route_tree,
            exclude_routes=self.config.exclude_routes,
            route_options=self.config.route_options,
        )
        static_entries = self.resolver.resolve(descriptors)
        manual_entries = await self.resolver.resolve_manual()

        logger.debug(
            f"Generated {format_number(len(static_entries))} static and "
            f"{format_number(len(manual_entries))} manual entries"
        )
        return static_entries + manual_entries

    async def generate_xml(self, route_tree: Any) -> str:
        """Generate the XML sitemap document from a route tree."""
        entries = await self.generate_entries(route_tree)
        return self.entries_to_xml(entries)

    def entries_to_xml(self, entries: List[SitemapEntry]) -> str:
        """Render entries using the configured pretty print setting."""
        return render_sitemap(entries, pretty_print=self.config.pretty_print)


async def generate_sitemap(route_tree: Any, config: SitemapConfig) -> str:
    """Generate an XML sitemap from a route tree."""
    generator = SitemapGenerator(config)
    return await generator.generate_xml(route_tree)


async def generate_sitemap_entries(route_tree: Any, config: SitemapConfig) -> List[SitemapEntry]:
    """Generate the list of sitemap entries from a route tree."""
    generator = SitemapGenerator(config)
    return await generator.generate_entries(route_tree)
