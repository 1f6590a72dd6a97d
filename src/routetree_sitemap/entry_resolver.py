"""Resolve route descriptors and manual routes into sitemap entries."""

import inspect
import logging
from datetime import datetime
from typing import Any, Iterable, List, Set
from .route_tree import is_excluded_route
from .types import ManualEntry, RouteDescriptor, SitemapConfig, SitemapEntry, coerce_changefreq
from .utils import to_iso8601

logger = logging.getLogger(__name__)


class EntryResolver:
    """Builds sitemap entries from static routes and manual routes."""

    def __init__(self, config: SitemapConfig, lastmod: str):
        self.config = config
        self.lastmod = config.lastmod or lastmod
        self.base_url = config.base_url.strip()
        if self.base_url.endswith("/"):
            self.base_url = self.base_url[:-1]

    def build_full_url(self, path: str) -> str:
        """Join the base URL and a path, applying the trailing slash setting."""
        if self.config.trailing_slash and not path.endswith("/") and path != "/":
            path += "/"
        return f"{self.base_url}{path}"

    def resolve(self, descriptors: Iterable[RouteDescriptor]) -> List[SitemapEntry]:
        """
        Convert route descriptors into sitemap entries.

        The first descriptor for each path wins; later duplicates are
        dropped while the original order is preserved.
        """
        seen: Set[str] = set()
        entries = []

        for descriptor in descriptors:
            if descriptor.full_path in seen:
                continue
            seen.add(descriptor.full_path)
            entries.append(self._create_sitemap_entry(descriptor))

        return entries

    def _create_sitemap_entry(self, descriptor: RouteDescriptor) -> SitemapEntry:
        overrides = descriptor.overrides
        priority = overrides.get("priority")
        changefreq = coerce_changefreq(overrides.get("changefreq"))

        return SitemapEntry(
            url=self.build_full_url(descriptor.full_path),
            lastmod=overrides.get("lastmod") or self.lastmod,
            changefreq=changefreq or self.config.default_changefreq,
            priority=priority if priority is not None else self.config.default_priority,
        )

    async def resolve_manual(self) -> List[SitemapEntry]:
        """
        Run the manual routes provider and convert its results.

        The provider may be a plain function or a coroutine function. A
        failing provider is logged and contributes no entries; a single
        malformed entry is logged and skipped.
        """
        provider = self.config.manual_routes
        if provider is None:
            return []

        try:
            result = provider()
            if inspect.isawaitable(result):
                result = await result
            raw_routes = list(result or [])
        except Exception as e:
            logger.warning(f"Failed to generate manual routes: {e}")
            return []

        entries = []
        for raw_route in raw_routes:
            try:
                route = self._coerce_manual_entry(raw_route)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping invalid manual route {raw_route!r}: {e}")
                continue

            if is_excluded_route(route.location, self.config.exclude_routes):
                logger.debug(f"Excluded manual route: {route.location}")
                continue
            entries.append(self._create_manual_sitemap_entry(route))

        logger.debug(f"Resolved {len(entries)} manual routes")
        return entries

    @staticmethod
    def _coerce_manual_entry(route: Any) -> ManualEntry:
        if isinstance(route, ManualEntry):
            return route
        return ManualEntry.from_dict(route)

    def _create_manual_sitemap_entry(self, route: ManualEntry) -> SitemapEntry:
        lastmod = route.last_modified
        if isinstance(lastmod, datetime):
            lastmod = to_iso8601(lastmod)

        return SitemapEntry(
            url=self.build_full_url(route.location),
            lastmod=lastmod or self.lastmod,
            changefreq=route.change_frequency or self.config.default_changefreq,
            priority=route.priority if route.priority is not None else self.config.default_priority,
        )
