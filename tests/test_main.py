"""Tests for the command line interface."""

import json
import logging
import os
from click.testing import CliRunner
from lxml import etree
import pytest
from routetree_sitemap.main import main

NS = "{http://www.sitemaps.org/schemas/sitemap/0.9}"

ROUTE_TREE = {
    "path": "/",
    "children": [
        {"path": "about"},
        {"path": "admin", "children": [{"path": "users"}]},
        {"path": "posts", "children": [{"path": "$postId"}]},
    ],
}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the handlers installed by setup_logging during CLI runs."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level

    yield

    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)


def read_locs(path):
    root = etree.parse(path).getroot()
    return [loc.text for loc in root.iter(f"{NS}loc")]


def test_generate_from_json_tree(runner):
    """Test generating a sitemap file from a JSON route tree."""
    with runner.isolated_filesystem():
        with open("routes.json", "w") as f:
            json.dump(ROUTE_TREE, f)

        result = runner.invoke(main, [
            "--base-url", "https://example.com",
            "--route-tree", "routes.json",
            "--exclude", "/admin/*",
            "--lastmod", "2024-01-01",
        ])

        assert result.exit_code == 0, result.output
        assert os.path.exists("public/sitemap.xml")
        assert read_locs("public/sitemap.xml") == [
            "https://example.com/",
            "https://example.com/about",
            "https://example.com/posts",
        ]


def test_auto_detects_route_tree(runner):
    """Test auto-detection of a generated routeTree.gen.ts file."""
    source = (
        "export interface FileRoutesByFullPath {\n"
        "  '/': typeof IndexRoute\n"
        "  '/pricing': typeof PricingRoute\n"
        "}\n"
    )

    with runner.isolated_filesystem():
        os.makedirs("src")
        with open("src/routeTree.gen.ts", "w") as f:
            f.write(source)

        result = runner.invoke(main, [
            "--base-url", "https://example.com",
            "--output-path", "dist/sitemap.xml",
            "--compact",
            "--verbose",
        ])

        assert result.exit_code == 0, result.output
        assert "Found route tree at:" in result.output
        assert "1. https://example.com/" in result.output
        assert "2. https://example.com/pricing" in result.output

        with open("dist/sitemap.xml") as f:
            assert f.read().count("\n") == 0


def test_route_options_file(runner):
    """Test per-route overrides from a JSON file."""
    with runner.isolated_filesystem():
        with open("routes.json", "w") as f:
            json.dump(ROUTE_TREE, f)
        with open("options.json", "w") as f:
            json.dump({"/": {"priority": 1.0, "changefreq": "daily"}}, f)

        result = runner.invoke(main, [
            "--base-url", "https://example.com",
            "--route-tree", "routes.json",
            "--route-options", "options.json",
            "--trailing-slash",
        ])

        assert result.exit_code == 0, result.output
        with open("public/sitemap.xml") as f:
            content = f.read()
        assert "<priority>1.0</priority>" in content
        assert "<changefreq>daily</changefreq>" in content
        assert "<loc>https://example.com/about/</loc>" in content


def test_base_url_from_environment(runner):
    """Test that SITEMAP_BASE_URL is used when --base-url is omitted."""
    with runner.isolated_filesystem():
        with open("routes.json", "w") as f:
            json.dump({"path": "/"}, f)

        result = runner.invoke(
            main,
            ["--route-tree", "routes.json"],
            env={"SITEMAP_BASE_URL": "https://env.example"},
        )

        assert result.exit_code == 0, result.output
        assert read_locs("public/sitemap.xml") == ["https://env.example/"]


def test_missing_base_url_fails(runner):
    """Test that generation fails without a base URL."""
    with runner.isolated_filesystem():
        with open("routes.json", "w") as f:
            json.dump({"path": "/"}, f)

        result = runner.invoke(main, ["--route-tree", "routes.json"], env={"SITEMAP_BASE_URL": ""})

        assert result.exit_code == 1
        assert not os.path.exists("public/sitemap.xml")


def test_missing_route_tree_fails(runner):
    """Test that a missing route tree file is a fatal error."""
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["--base-url", "https://example.com"])

        assert result.exit_code == 1


def test_validate_only(runner):
    """Test validating a previously generated sitemap."""
    with runner.isolated_filesystem():
        with open("routes.json", "w") as f:
            json.dump(ROUTE_TREE, f)

        runner.invoke(main, [
            "--base-url", "https://example.com",
            "--route-tree", "routes.json",
        ])
        result = runner.invoke(main, ["--validate-only"])

        assert result.exit_code == 0, result.output
        assert "sitemap.xml: 5 URLs" in result.output


def test_validate_only_missing_file(runner):
    """Test validating when no sitemap exists."""
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["--validate-only"])

        assert result.exit_code == 1
        assert "does not exist" in result.output
