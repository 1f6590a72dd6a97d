"""Type definitions for the route tree sitemap generator."""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import (
    Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
)
from enum import Enum


class ChangeFrequency(Enum):
    """Sitemap change frequency values."""
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


def coerce_changefreq(
    value: Union[str, ChangeFrequency, None]
) -> Optional[ChangeFrequency]:
    """Convert a string change frequency into a ChangeFrequency member."""
    if value is None or isinstance(value, ChangeFrequency):
        return value
    return ChangeFrequency(value.strip().lower())


@dataclass
class RouteNode:
    """One node of a router's route tree."""
    path: Optional[str] = None
    children: List["RouteNode"] = field(default_factory=list)
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RouteNode":
        """Build a route tree from nested mappings (e.g. parsed JSON)."""
        children = data.get("children")
        if not isinstance(children, list):
            children = []

        return cls(
            path=data.get("path"),
            children=[cls.from_dict(child) for child in children if isinstance(child, Mapping)],
            id=data.get("id"),
        )


@dataclass
class RouteDescriptor:
    """A static route found while flattening the route tree."""
    full_path: str
    overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ManualEntry:
    """Sitemap entry supplied directly by the caller, e.g. database-backed pages."""
    location: str
    priority: Optional[float] = None
    last_modified: Optional[Union[datetime, str]] = None
    change_frequency: Optional[ChangeFrequency] = None

    def __post_init__(self) -> None:
        self.change_frequency = coerce_changefreq(self.change_frequency)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ManualEntry":
        """Create a manual entry from a mapping.

        Both snake_case keys and the camelCase keys used by JavaScript
        router tooling (``lastMod``, ``changeFrequency``) are accepted.
        """
        return cls(
            location=data["location"],
            priority=data.get("priority"),
            last_modified=data.get("last_modified", data.get("lastMod")),
            change_frequency=data.get("change_frequency", data.get("changeFrequency")),
        )


@dataclass
class SitemapEntry:
    """Entry in a sitemap XML file."""
    url: str
    lastmod: Optional[str] = None
    changefreq: Optional[ChangeFrequency] = None
    priority: Optional[float] = None


class ConfigurationError(ValueError):
    """Raised when sitemap configuration is invalid."""


ManualRoutesProvider = Callable[[], Union[Iterable[Any], Awaitable[Iterable[Any]]]]


@dataclass(frozen=True)
class SitemapConfig:
    """Configuration for sitemap generation.

    Validated once at construction and immutable afterwards, so a single
    instance can be shared between concurrent generation calls.
    """
    base_url: str
    default_changefreq: Optional[ChangeFrequency] = ChangeFrequency.WEEKLY
    default_priority: Optional[float] = 0.5
    exclude_routes: Tuple[str, ...] = ()
    route_options: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    trailing_slash: bool = False
    lastmod: Optional[str] = None
    pretty_print: bool = True
    manual_routes: Optional[ManualRoutesProvider] = None

    def __post_init__(self) -> None:
        if not self.base_url or not str(self.base_url).strip():
            raise ConfigurationError("base_url is required and cannot be empty")

        try:
            default_changefreq = coerce_changefreq(self.default_changefreq)
        except ValueError:
            raise ConfigurationError(
                f"Invalid default change frequency: {self.default_changefreq}"
            ) from None

        if self.default_priority is not None and not 0.0 <= self.default_priority <= 1.0:
            raise ConfigurationError(
                f"Default priority must be between 0.0 and 1.0, got {self.default_priority}"
            )

        route_options = {}
        for path, options in self.route_options.items():
            options = dict(options)
            if "changefreq" in options:
                try:
                    options["changefreq"] = coerce_changefreq(options["changefreq"])
                except ValueError:
                    raise ConfigurationError(
                        f"Invalid change frequency for route {path}: {options['changefreq']}"
                    ) from None
            route_options[path] = MappingProxyType(options)

        object.__setattr__(self, "default_changefreq", default_changefreq)
        object.__setattr__(self, "exclude_routes", tuple(self.exclude_routes))
        object.__setattr__(self, "route_options", MappingProxyType(route_options))
