"""Sitemap rendering and writing, compliant with sitemaps.org standards."""

import logging
import os
from typing import Dict, Iterable
from lxml import etree
from .config import SITEMAP_NAMESPACE, XML_DECLARATION
from .types import SitemapEntry
from .utils import clean_xml_text, create_directory_if_not_exists, format_priority

logger = logging.getLogger(__name__)

# lxml escapes & < > in text nodes itself; quotes are emitted as entity
# references so <loc> matches the escaping of string-built sitemaps.
_QUOTE_ENTITIES = {'"': "quot", "'": "apos"}


def _tag(name: str) -> str:
    return f"{{{SITEMAP_NAMESPACE}}}{name}"


def _set_escaped_text(element: etree._Element, text: str) -> None:
    """Set element text, writing quote characters as entity references."""
    current = None
    chunk = []

    for char in text:
        if char not in _QUOTE_ENTITIES:
            chunk.append(char)
            continue

        if current is None:
            element.text = "".join(chunk)
        else:
            current.tail = "".join(chunk)
        chunk = []
        current = etree.Entity(_QUOTE_ENTITIES[char])
        element.append(current)

    if current is None:
        element.text = "".join(chunk)
    else:
        current.tail = "".join(chunk) or None


def build_urlset(entries: Iterable[SitemapEntry]) -> etree._Element:
    """Build the <urlset> element tree for the given entries."""
    root = etree.Element(_tag("urlset"), nsmap={None: SITEMAP_NAMESPACE})

    for entry in entries:
        url_element = etree.SubElement(root, _tag("url"))

        # Location (required)
        loc_element = etree.SubElement(url_element, _tag("loc"))
        _set_escaped_text(loc_element, clean_xml_text(entry.url))

        if entry.lastmod:
            lastmod_element = etree.SubElement(url_element, _tag("lastmod"))
            lastmod_element.text = clean_xml_text(entry.lastmod)

        if entry.changefreq:
            changefreq_element = etree.SubElement(url_element, _tag("changefreq"))
            changefreq_element.text = entry.changefreq.value

        if entry.priority is not None:
            priority_element = etree.SubElement(url_element, _tag("priority"))
            priority_element.text = format_priority(entry.priority)

    return root


def render_sitemap(entries: Iterable[SitemapEntry], pretty_print: bool = True) -> str:
    """
    Render sitemap entries to an XML document string.

    Args:
        entries: Entries in document order
        pretty_print: Indent with two spaces per level and put each element
            on its own line; otherwise emit a single line

    Returns:
        The XML document, starting with the XML declaration
    """
    root = build_urlset(entries)
    if len(root) == 0:
        # Keep an explicit closing tag for empty sitemaps
        root.text = "\n" if pretty_print else ""

    body = etree.tostring(root, encoding="unicode", pretty_print=pretty_print)

    if pretty_print:
        return f"{XML_DECLARATION}\n{body.rstrip()}"
    return f"{XML_DECLARATION}{body}"


class SitemapWriter:
    """Writes rendered sitemaps to disk and checks written files."""

    def __init__(self, output_path: str):
        self.output_path = output_path
        self.sitemap_namespace = SITEMAP_NAMESPACE

    def write_sitemap(self, xml: str) -> str:
        """Write the sitemap document, creating parent directories as needed."""
        try:
            create_directory_if_not_exists(os.path.dirname(self.output_path))

            with open(self.output_path, "w", encoding="utf-8") as f:
                f.write(xml)

            logger.debug(f"Written sitemap to {self.output_path}")
            return self.output_path

        except OSError as e:
            logger.error(f"Error writing sitemap to {self.output_path}: {e}")
            raise

    def validate_sitemap(self, filepath: str = None) -> bool:
        """Validate the basic structure of a sitemap file."""
        filepath = filepath or self.output_path

        try:
            tree = etree.parse(filepath)
            root = tree.getroot()

            if root.tag != f"{{{self.sitemap_namespace}}}urlset":
                logger.error(f"Invalid root element in {filepath}")
                return False

            for url_elem in root.findall(f"{{{self.sitemap_namespace}}}url"):
                loc_elem = url_elem.find(f"{{{self.sitemap_namespace}}}loc")
                if loc_elem is None or not loc_elem.text:
                    logger.error("URL missing location")
                    return False

                if not loc_elem.text.startswith(("http://", "https://")):
                    logger.error(f"Invalid URL format: {loc_elem.text}")
                    return False

                priority_elem = url_elem.find(f"{{{self.sitemap_namespace}}}priority")
                if priority_elem is not None and not 0.0 <= float(priority_elem.text) <= 1.0:
                    logger.error(f"Priority out of range for {loc_elem.text}: {priority_elem.text}")
                    return False

            logger.info(f"Sitemap validation passed: {filepath}")
            return True

        except (OSError, ValueError, etree.XMLSyntaxError) as e:
            logger.error(f"Error validating sitemap {filepath}: {e}")
            return False

    def get_sitemap_stats(self, filepath: str = None) -> Dict:
        """Get statistics about a sitemap file."""
        filepath = filepath or self.output_path

        try:
            tree = etree.parse(filepath)
        except (OSError, etree.XMLSyntaxError) as e:
            logger.error(f"Error getting sitemap stats for {filepath}: {e}")
            return {}

        urls = tree.getroot().findall(f"{{{self.sitemap_namespace}}}url")
        stats = {
            "total_urls": len(urls),
            "file_size_kb": os.path.getsize(filepath) / 1024,
            "has_lastmod": 0,
            "changefreq_distribution": {},
            "priority_distribution": {},
        }

        for url_elem in urls:
            if url_elem.find(f"{{{self.sitemap_namespace}}}lastmod") is not None:
                stats["has_lastmod"] += 1

            changefreq_elem = url_elem.find(f"{{{self.sitemap_namespace}}}changefreq")
            if changefreq_elem is not None:
                freq = changefreq_elem.text
                stats["changefreq_distribution"][freq] = stats["changefreq_distribution"].get(freq, 0) + 1

            priority_elem = url_elem.find(f"{{{self.sitemap_namespace}}}priority")
            if priority_elem is not None:
                priority = priority_elem.text
                stats["priority_distribution"][priority] = stats["priority_distribution"].get(priority, 0) + 1

        return stats
