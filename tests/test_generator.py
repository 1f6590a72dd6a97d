"""Tests for the sitemap generator pipeline."""

import asyncio
from datetime import datetime, timezone
import pytest
from routetree_sitemap import (
    ManualEntry,
    RouteNode,
    SitemapConfig,
    SitemapGenerator,
    generate_sitemap,
    generate_sitemap_entries,
)
from routetree_sitemap.types import ChangeFrequency

FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def simple_tree():
    return {"path": "/", "children": [{"path": "home"}, {"path": "about"}]}


@pytest.fixture
def config():
    return SitemapConfig(base_url="https://example.com")


@pytest.mark.asyncio
async def test_simple_tree_entries(simple_tree, config):
    """Test the basic tree produces root, home and about in order."""
    entries = await SitemapGenerator(config, now=FIXED_NOW).generate_entries(simple_tree)

    assert [entry.url for entry in entries] == [
        "https://example.com/",
        "https://example.com/home",
        "https://example.com/about",
    ]
    assert all(entry.lastmod == "2024-01-01T00:00:00.000Z" for entry in entries)


@pytest.mark.asyncio
async def test_dynamic_sibling_skipped(config):
    """Test that a dynamic route is skipped while its siblings remain."""
    tree = RouteNode(
        path="/",
        children=[RouteNode(path="post/$id"), RouteNode(path="contact")],
    )

    entries = await generate_sitemap_entries(tree, config)

    urls = [entry.url for entry in entries]
    assert urls == ["https://example.com/", "https://example.com/contact"]


@pytest.mark.asyncio
async def test_duplicate_siblings_emit_once(config):
    """Test that siblings normalizing to the same path yield one entry."""
    tree = {
        "path": "/",
        "children": [
            {"path": "blog"},
            {"path": "/blog"},
            {"path": "blog//"},
        ],
    }

    entries = await SitemapGenerator(config, now=FIXED_NOW).generate_entries(tree)

    assert [entry.url for entry in entries].count("https://example.com/blog") == 1


@pytest.mark.asyncio
async def test_urls_start_with_base_url(simple_tree):
    """Test every URL starts with the slash-normalized base URL."""
    config = SitemapConfig(base_url="https://example.com/", trailing_slash=True)

    entries = await generate_sitemap_entries(simple_tree, config)

    for entry in entries:
        assert entry.url.startswith("https://example.com/")
        assert "//" not in entry.url[len("https://"):]
    assert [entry.url for entry in entries][1] == "https://example.com/home/"


@pytest.mark.asyncio
async def test_manual_routes_follow_static_routes(simple_tree):
    """Test manual entries come after static ones without cross deduplication."""
    async def manual_routes():
        await asyncio.sleep(0)
        return [
            ManualEntry(location="/posts/1", priority=0.9),
            ManualEntry(location="/home"),
        ]

    config = SitemapConfig(base_url="https://example.com", manual_routes=manual_routes)
    entries = await SitemapGenerator(config, now=FIXED_NOW).generate_entries(simple_tree)

    assert [entry.url for entry in entries] == [
        "https://example.com/",
        "https://example.com/home",
        "https://example.com/about",
        "https://example.com/posts/1",
        "https://example.com/home",
    ]
    assert entries[3].priority == 0.9


@pytest.mark.asyncio
async def test_failing_manual_routes_do_not_abort(simple_tree):
    """Test that generation continues when the provider fails."""
    def manual_routes():
        raise ConnectionError("no database")

    config = SitemapConfig(base_url="https://example.com", manual_routes=manual_routes)
    xml = await generate_sitemap(simple_tree, config)

    assert xml.count("<url>") == 3


@pytest.mark.asyncio
async def test_manual_routes_called_once_per_generation(simple_tree):
    """Test the provider runs once per call and is not cached."""
    calls = []

    def manual_routes():
        calls.append(1)
        return [{"location": "/extra"}]

    config = SitemapConfig(base_url="https://example.com", manual_routes=manual_routes)
    generator = SitemapGenerator(config, now=FIXED_NOW)

    await generator.generate_xml(simple_tree)
    await generator.generate_xml(simple_tree)

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_generation_is_idempotent(simple_tree):
    """Test repeated generation yields byte-identical output."""
    config = SitemapConfig(base_url="https://example.com", lastmod="2024-05-05")

    first = await generate_sitemap(simple_tree, config)
    second = await generate_sitemap(simple_tree, config)

    assert first == second


@pytest.mark.asyncio
async def test_compact_output(simple_tree):
    """Test compact output for a small sitemap."""
    config = SitemapConfig(
        base_url="https://example.com",
        pretty_print=False,
        exclude_routes=["/about"],
    )

    xml = await generate_sitemap(simple_tree, config)

    assert xml.count("\n") < 10
    assert xml.count("<url>") == 2


@pytest.mark.asyncio
async def test_manual_route_escaping():
    """Test query strings in manual routes are escaped in the document."""
    config = SitemapConfig(
        base_url="https://example.com",
        manual_routes=lambda: [ManualEntry(location="/path?query=test&other=value")],
    )

    xml = await generate_sitemap({"path": "__root__"}, config)

    assert "<loc>https://example.com/path?query=test&amp;other=value</loc>" in xml
    assert "&other=" not in xml


@pytest.mark.asyncio
async def test_route_options_in_document(simple_tree):
    """Test per-route overrides reach the rendered document."""
    config = SitemapConfig(
        base_url="https://example.com",
        route_options={"/": {"priority": 1.0, "changefreq": ChangeFrequency.DAILY}},
    )

    xml = await SitemapGenerator(config, now=FIXED_NOW).generate_xml(simple_tree)

    assert "<priority>1.0</priority>" in xml
    assert "<changefreq>daily</changefreq>" in xml
    assert xml.count("<changefreq>weekly</changefreq>") == 2


@pytest.mark.asyncio
async def test_concurrent_generation_shares_config(simple_tree, config):
    """Test concurrent calls against one configuration are independent."""
    generator = SitemapGenerator(config, now=FIXED_NOW)

    results = await asyncio.gather(*(generator.generate_xml(simple_tree) for _ in range(5)))

    assert len(set(results)) == 1
