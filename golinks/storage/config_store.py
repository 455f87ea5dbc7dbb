"""YAML/JSON backed store for the link configuration file."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union
from urllib.parse import urlparse

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import (
    ConfigEmpty,
    ConfigNotFound,
    ConfigParseError,
    ConfigSchemaError,
    ConfigUnreadable,
    ConfigWriteError,
    GroupNotFound,
    LinkNotFound,
    ValidationError,
)
from ..core.schemas import GoLinkConfig, Link, LinkGroup

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def is_absolute_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def validate_config(data: Any) -> GoLinkConfig:
    """Check *data* structurally and stop at the first violation, in file order."""
    if not isinstance(data, dict):
        raise ConfigSchemaError("Configuration file is empty or invalid")
    if not _is_number(data.get("version")):
        raise ConfigSchemaError("Configuration missing required 'version' field (must be a number)")
    groups = data.get("groups")
    if not isinstance(groups, list):
        raise ConfigSchemaError("Configuration missing required 'groups' field (must be an array)")
    if not groups:
        raise ConfigSchemaError("Configuration must contain at least one group")

    for gidx, group in enumerate(groups, start=1):
        if not isinstance(group, dict) or not _non_empty_str(group.get("name")):
            raise ConfigSchemaError(f"Group {gidx} is missing required 'name' field")
        name = group["name"]
        if not _non_empty_str(group.get("title")):
            raise ConfigSchemaError(f"Group '{name}' is missing required 'title' field")
        links = group.get("links")
        if not isinstance(links, list):
            raise ConfigSchemaError(f"Group '{name}' is missing required 'links' field (must be an array)")
        for lidx, link in enumerate(links, start=1):
            if not isinstance(link, dict) or not _non_empty_str(link.get("title")):
                raise ConfigSchemaError(f"Link {lidx} in group '{name}' is missing required 'title' field")
            title = link["title"]
            url = link.get("url")
            if not _non_empty_str(url):
                raise ConfigSchemaError(f"Link '{title}' in group '{name}' is missing required 'url' field")
            if not is_absolute_url(url):
                raise ConfigSchemaError(f"Link '{title}' in group '{name}' has invalid URL: {url}")

    try:
        return GoLinkConfig.model_validate(data)
    except PydanticValidationError as exc:
        # Optional fields of the wrong type (e.g. keywords: "abc").
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ConfigSchemaError(f"Invalid value at '{location}': {first['msg']}") from exc


class ConfigStore:
    """Read, validate, and rewrite the configuration file at *path*."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    @property
    def is_yaml(self) -> bool:
        return self.path.suffix.lower() in YAML_SUFFIXES

    @property
    def format_name(self) -> str:
        return "YAML" if self.is_yaml else "JSON"

    async def load(self) -> GoLinkConfig:
        return await asyncio.to_thread(self._load_sync)

    def _load_sync(self) -> GoLinkConfig:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigNotFound(
                f"Configuration file not found: {self.path}\n\n"
                "Please check the configured path or create the file."
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigUnreadable(f"Failed to read configuration file: {exc}") from exc
        if not content.strip():
            raise ConfigEmpty("Configuration file is empty")

        try:
            if self.is_yaml:
                parsed = yaml.safe_load(content)
            else:
                parsed = json.loads(content)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigParseError(f"Failed to parse {self.format_name} configuration: {exc}") from exc
        if parsed is None and self.is_yaml:
            raise ConfigEmpty("YAML file appears to be empty or invalid")

        config = validate_config(parsed)
        logger.debug("Loaded %d groups from %s", len(config.groups), self.path)
        return config

    async def write(self, config: GoLinkConfig) -> None:
        await asyncio.to_thread(self._write_sync, config)

    def serialize(self, config: GoLinkConfig) -> str:
        document = config.to_document()
        if self.is_yaml:
            return yaml.safe_dump(
                document,
                indent=2,
                width=float("inf"),
                sort_keys=False,
                allow_unicode=True,
                default_flow_style=False,
            )
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"

    def _write_sync(self, config: GoLinkConfig) -> None:
        text = self.serialize(config)
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ConfigWriteError(f"Failed to write configuration file: {exc}") from exc
        logger.info("Saved configuration to %s", self.path)

    async def update_link(self, group_name: str, original_url: str, updated: Link) -> GoLinkConfig:
        async with self._lock:
            config = await self.load()
            group = config.find_group(group_name)
            if group is None:
                raise GroupNotFound(f"Group '{group_name}' not found")
            index = _index_of_url(group.links, original_url)
            if index is None:
                raise LinkNotFound(f"Link with URL '{original_url}' not found in group '{group_name}'")
            group.links[index] = updated
            await self.write(config)
            return config

    async def add_link(
        self,
        group_name: str,
        new_link: Link,
        new_group_title: Optional[str] = None,
    ) -> GoLinkConfig:
        async with self._lock:
            config = await self.load()
            group = config.find_group(group_name)
            if group is not None:
                group.links.append(new_link)
            else:
                if not new_group_title:
                    raise ValidationError(
                        f"Group '{group_name}' does not exist and no title was given for a new group",
                        title="Group Title Required",
                    )
                config.groups.append(LinkGroup(name=group_name, title=new_group_title, links=[new_link]))
            await self.write(config)
            return config


def _index_of_url(links: List[Link], url: str) -> Optional[int]:
    for idx, link in enumerate(links):
        if link.url == url:
            return idx
    return None
