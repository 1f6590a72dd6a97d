"""Main CLI entry point for the route tree sitemap generator."""

import asyncio
import json
import logging
import os
import sys
from typing import Optional, Tuple
import click
from .config import DEFAULT_CHANGEFREQ, DEFAULT_OUTPUT_PATH, DEFAULT_PRIORITY
from .generator import SitemapGenerator
from .loader import RouteTreeLoadError, find_route_tree_file, load_object, load_route_tree
from .sitemap_writer import SitemapWriter
from .types import ChangeFrequency, SitemapConfig
from .utils import format_number, setup_logging

CHANGEFREQ_CHOICES = [freq.value for freq in ChangeFrequency]
PREVIEW_URL_COUNT = 5


@click.command()
@click.option(
    '--base-url',
    envvar='SITEMAP_BASE_URL',
    help='Base URL of the site, e.g. https://example.com',
)
@click.option(
    '--route-tree',
    help='Path to the generated route tree file (auto-detected if omitted)',
    type=click.Path(dir_okay=False)
)
@click.option(
    '--route-tree-object',
    help='Python route tree given as module:attribute'
)
@click.option(
    '--output-path',
    default=DEFAULT_OUTPUT_PATH,
    help='Output path for the sitemap file',
    show_default=True
)
@click.option(
    '--default-changefreq',
    default=DEFAULT_CHANGEFREQ.value,
    type=click.Choice(CHANGEFREQ_CHOICES),
    help='Change frequency for routes without their own value',
    show_default=True
)
@click.option(
    '--default-priority',
    default=DEFAULT_PRIORITY,
    type=click.FloatRange(0.0, 1.0),
    help='Priority for routes without their own value',
    show_default=True
)
@click.option(
    '--exclude',
    multiple=True,
    help='Route path or glob pattern to exclude (repeatable)'
)
@click.option(
    '--route-options',
    help='JSON file mapping route paths to lastmod/changefreq/priority overrides',
    type=click.Path(exists=True, dir_okay=False)
)
@click.option(
    '--manual-routes',
    help='Manual routes provider given as module:callable'
)
@click.option(
    '--trailing-slash',
    is_flag=True,
    help='Add a trailing slash to every URL'
)
@click.option(
    '--lastmod',
    help='lastmod value for all routes (defaults to the current time)'
)
@click.option(
    '--compact',
    is_flag=True,
    help='Write the sitemap on a single line'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Print a summary of the generated URLs'
)
@click.option(
    '--log-level',
    default='INFO',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
    help='Logging level',
    show_default=True
)
@click.option(
    '--log-file',
    help='Log file path (optional)',
    type=click.Path()
)
@click.option(
    '--validate-only',
    is_flag=True,
    help='Only validate an existing sitemap at the output path'
)
def main(
    base_url: Optional[str],
    route_tree: Optional[str],
    route_tree_object: Optional[str],
    output_path: str,
    default_changefreq: str,
    default_priority: float,
    exclude: Tuple[str, ...],
    route_options: Optional[str],
    manual_routes: Optional[str],
    trailing_slash: bool,
    lastmod: Optional[str],
    compact: bool,
    verbose: bool,
    log_level: str,
    log_file: Optional[str],
    validate_only: bool
) -> None:
    """
    Generate an XML sitemap from a router's route tree.

    Static routes are read from the generated route tree (routeTree.gen.ts,
    a JSON file or a Python object). Dynamic routes such as /posts/$id are
    skipped; add them through a manual routes provider instead.
    """
    setup_logging(log_level, log_file)
    logger = logging.getLogger(__name__)

    if validate_only:
        validate_existing_sitemap(output_path)
        return

    try:
        config = SitemapConfig(
            base_url=base_url or "",
            default_changefreq=default_changefreq,
            default_priority=default_priority,
            exclude_routes=exclude,
            route_options=load_route_options(route_options) if route_options else {},
            trailing_slash=trailing_slash,
            lastmod=lastmod,
            pretty_print=not compact,
            manual_routes=load_object(manual_routes) if manual_routes else None,
        )

        tree = resolve_route_tree(route_tree, route_tree_object, verbose)

        generator = SitemapGenerator(config)
        entries = asyncio.run(generator.generate_entries(tree))
        xml = generator.entries_to_xml(entries)

        writer = SitemapWriter(output_path)
        writer.write_sitemap(xml)
        logger.info(f"Sitemap generated with {format_number(len(entries))} URLs at {output_path}")

        if verbose:
            print_summary(entries, output_path)

    except (ValueError, RouteTreeLoadError, OSError) as e:
        logger.error(f"Error generating sitemap: {e}")
        if log_level == 'DEBUG':
            import traceback
            traceback.print_exc()
        sys.exit(1)


def resolve_route_tree(route_tree: Optional[str], route_tree_object: Optional[str], verbose: bool):
    """Load the route tree from a Python object, an explicit file or auto-detection."""
    if route_tree_object:
        return load_object(route_tree_object)

    if verbose and not route_tree:
        click.echo("Auto-detecting routeTree.gen.ts...")

    route_tree_path = find_route_tree_file(route_tree)
    if not route_tree_path:
        raise RouteTreeLoadError(
            "Could not find a routeTree.gen file. Make sure the router has generated "
            "the route tree, or pass --route-tree."
        )

    if verbose:
        click.echo(f"Found route tree at: {route_tree_path}")

    return load_route_tree(route_tree_path)


def load_route_options(path: str) -> dict:
    """Read per-route overrides from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        options = json.load(f)

    if not isinstance(options, dict):
        raise ValueError(f"Route options in {path} must be a JSON object")
    return options


def print_summary(entries, output_path: str) -> None:
    """Print the generated URL count and the first few URLs."""
    click.echo(f"Sitemap generated with {format_number(len(entries))} URLs at {output_path}")

    if entries:
        click.echo("Generated URLs:")
        for index, entry in enumerate(entries[:PREVIEW_URL_COUNT], 1):
            click.echo(f"   {index}. {entry.url}")
        if len(entries) > PREVIEW_URL_COUNT:
            click.echo(f"   ... and {format_number(len(entries) - PREVIEW_URL_COUNT)} more URLs")


def validate_existing_sitemap(output_path: str) -> None:
    """Validate an existing sitemap file and print its statistics."""
    if not os.path.exists(output_path):
        click.echo(f"Sitemap file does not exist: {output_path}")
        sys.exit(1)

    writer = SitemapWriter(output_path)
    if not writer.validate_sitemap():
        click.echo(f"✗ {os.path.basename(output_path)}: INVALID")
        sys.exit(1)

    stats = writer.get_sitemap_stats()
    click.echo(f"✓ {os.path.basename(output_path)}: {format_number(stats['total_urls'])} URLs")
    for freq, count in sorted(stats['changefreq_distribution'].items()):
        click.echo(f"  changefreq {freq}: {format_number(count)}")
    for priority, count in sorted(stats['priority_distribution'].items()):
        click.echo(f"  priority {priority}: {format_number(count)}")


if __name__ == '__main__':
    main()
