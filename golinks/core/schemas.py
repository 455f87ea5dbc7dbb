"""Pydantic models for the link configuration and the public API contracts."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _FileModel(BaseModel):
    # Unknown keys survive a load/save round-trip.
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        """Plain data in the on-disk key spelling.

        Declared fields left unset are omitted; unknown keys are kept verbatim,
        nulls included.
        """
        document: Dict[str, Any] = {}
        for name, field in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None:
                continue
            document[field.alias or name] = _document_value(value)
        document.update(self.model_extra or {})
        return document


def _document_value(value: Any) -> Any:
    if isinstance(value, _FileModel):
        return value.to_document()
    if isinstance(value, list):
        return [_document_value(item) for item in value]
    return value


class Link(_FileModel):
    title: str
    url: str
    keywords: Optional[List[str]] = None
    icon: Optional[str] = None
    application: Optional[str] = None
    profile: Optional[str] = None


class LinkGroup(_FileModel):
    name: str
    title: str
    icon: Optional[str] = None
    links: List[Link] = Field(default_factory=list)


class LinkTemplate(_FileModel):
    name: str
    pattern: str
    icon: Optional[str] = None


class LinkSettings(_FileModel):
    default_browser: Optional[str] = Field(None, alias="defaultBrowser")
    default_profile: Optional[str] = Field(None, alias="defaultProfile")
    show_favicons: Optional[bool] = Field(None, alias="showFavicons")


class GoLinkConfig(_FileModel):
    version: Union[int, float]
    settings: Optional[LinkSettings] = None
    groups: List[LinkGroup]
    templates: Optional[List[LinkTemplate]] = None

    def find_group(self, name: str) -> Optional[LinkGroup]:
        for group in self.groups:
            if group.name == name:
                return group
        return None

    @property
    def link_count(self) -> int:
        return sum(len(group.links) for group in self.groups)


class Toast(BaseModel):
    style: Literal["success", "failure", "animated"]
    title: str
    message: str = ""


class IconOut(BaseModel):
    kind: str
    source: str


class LinkEntryOut(BaseModel):
    group_name: str
    group_title: str
    link: Link
    icon: IconOut
    action_title: str
    accessories: List[str] = Field(default_factory=list)


class LinkFormValues(BaseModel):
    title: str = ""
    url: str = ""
    icon: str = ""
    keywords: str = Field("", description="Comma-separated search keywords")
    application: str = ""
    profile: str = ""
    group_name: Optional[str] = None
    new_group_name: Optional[str] = None
    new_group_title: Optional[str] = None


class UpdateLinkRequest(LinkFormValues):
    original_url: str


class OpenRequest(BaseModel):
    group_name: str
    url: str


class OpenResponse(BaseModel):
    status: Literal["opened", "fallback", "failed"]
    strategy: Optional[str] = None
    toasts: List[Toast] = Field(default_factory=list)


class ReloadResponse(BaseModel):
    status: Literal["ok", "error"]
    links: int = 0
    error: Optional[str] = None
