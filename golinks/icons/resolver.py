"""Resolve icon specifier strings into renderable icon descriptors.

Supported specifier shapes, in precedence order:

- ``iconify:<set>:<name>`` (e.g. ``iconify:simple-icons:github``)
- ``http://`` / ``https://`` image URLs
- built-in catalog keys (e.g. ``Link``, ``Globe``, ``Code``)
- ``sf-symbol:<name>`` / ``sf.<name>`` symbol references
- image asset paths (``icon.png``)
- dotted symbol names (``house.fill``)
"""

from __future__ import annotations

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel

ICONIFY_API = "https://api.iconify.design"

ICON_CATALOG = frozenset(
    {
        "AppWindow",
        "ArrowClockwise",
        "Bolt",
        "Book",
        "Bookmark",
        "Bug",
        "Calendar",
        "Check",
        "Cloud",
        "Code",
        "Document",
        "Envelope",
        "ExclamationMark",
        "Folder",
        "Gear",
        "Globe",
        "Heart",
        "House",
        "Key",
        "Link",
        "List",
        "Lock",
        "MagnifyingGlass",
        "Message",
        "Music",
        "Person",
        "Plus",
        "PlusCircle",
        "Star",
        "Terminal",
        "Video",
    }
)

DEFAULT_ICON_KEY = "Link"

_ASSET_RE = re.compile(r"\.(png|jpg|jpeg|svg|gif)$", re.IGNORECASE)


class DefaultIcon(BaseModel):
    kind: Literal["default"] = "default"
    key: str = DEFAULT_ICON_KEY

    @property
    def source(self) -> str:
        return self.key


class IconifyRef(BaseModel):
    kind: Literal["iconify"] = "iconify"
    set: str
    name: str

    @property
    def url(self) -> str:
        return f"{ICONIFY_API}/{self.set}/{self.name}.svg"

    @property
    def source(self) -> str:
        return self.url


class UrlRef(BaseModel):
    kind: Literal["url"] = "url"
    url: str

    @property
    def source(self) -> str:
        return self.url


class NamedCatalogRef(BaseModel):
    kind: Literal["catalog"] = "catalog"
    key: str

    @property
    def source(self) -> str:
        return self.key


class SymbolRef(BaseModel):
    kind: Literal["symbol"] = "symbol"
    name: str

    @property
    def source(self) -> str:
        return f"sf-symbol:{self.name}"


class AssetPath(BaseModel):
    kind: Literal["asset"] = "asset"
    path: str

    @property
    def source(self) -> str:
        return self.path


IconDescriptor = Union[DefaultIcon, IconifyRef, UrlRef, NamedCatalogRef, SymbolRef, AssetPath]


def parse_iconify(spec: str) -> Optional[IconifyRef]:
    parts = spec.split(":")
    if len(parts) != 3 or parts[0] != "iconify":
        return None
    return IconifyRef(set=parts[1], name=parts[2])


def resolve_icon(spec: Optional[str] = None) -> IconDescriptor:
    """Map an icon specifier to a descriptor; the first matching rule wins."""
    if not spec:
        return DefaultIcon()

    iconify = parse_iconify(spec)
    if iconify is not None:
        return iconify

    if spec.startswith("http://") or spec.startswith("https://"):
        return UrlRef(url=spec)

    if spec in ICON_CATALOG:
        return NamedCatalogRef(key=spec)

    if spec.startswith("sf-symbol:"):
        return SymbolRef(name=spec[len("sf-symbol:"):])
    if spec.startswith("sf."):
        return SymbolRef(name=spec[len("sf."):])

    if _ASSET_RE.search(spec):
        return AssetPath(path=spec)

    # Dotted names such as "house.fill" are treated as symbols.
    if "." in spec:
        return SymbolRef(name=spec)

    return DefaultIcon()
