"""Flatten link groups into a searchable list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .schemas import GoLinkConfig, Link


@dataclass(frozen=True)
class LinkEntry:
    link: Link
    group_name: str
    group_title: str

    @property
    def markdown(self) -> str:
        return f"[{self.link.title}]({self.link.url})"


def flatten(config: GoLinkConfig) -> List[LinkEntry]:
    return [
        LinkEntry(link=link, group_name=group.name, group_title=group.title)
        for group in config.groups
        for link in group.links
    ]


def matches(link: Link, query: str) -> bool:
    needle = query.lower()
    if needle in link.title.lower() or needle in link.url.lower():
        return True
    return any(needle in keyword.lower() for keyword in link.keywords or [])


def filter_entries(entries: Iterable[LinkEntry], query: str = "") -> List[LinkEntry]:
    if not query:
        return list(entries)
    return [entry for entry in entries if matches(entry.link, query)]


class SearchIndex:
    """Recomputed on every query; there is no incremental index."""

    def __init__(self, config: GoLinkConfig) -> None:
        self.config = config

    def search(self, query: str = "") -> List[LinkEntry]:
        return filter_entries(flatten(self.config), query)
