"""Create/edit form handling shared by the CLI and the HTTP service."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from .errors import ValidationError
from .schemas import Link, LinkFormValues, Toast
from ..storage.config_store import ConfigStore, is_absolute_url

logger = logging.getLogger(__name__)

NEW_GROUP_VALUE = "__new_group__"

FormMode = Literal["create", "edit"]


def parse_keywords(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def build_link(values: LinkFormValues) -> Link:
    """Validate the link fields and drop empty optional ones."""
    title = values.title.strip()
    if not title:
        raise ValidationError("Please enter a title for the link", title="Title Required")
    url = values.url.strip()
    if not is_absolute_url(url):
        raise ValidationError("Please enter a valid URL", title="Invalid URL")

    data: Dict[str, Any] = {"title": title, "url": url}
    keywords = parse_keywords(values.keywords)
    if keywords:
        data["keywords"] = keywords
    if values.icon.strip():
        data["icon"] = values.icon.strip()
    if values.application:
        data["application"] = values.application
    if values.profile.strip():
        data["profile"] = values.profile.strip()
    return Link(**data)


def form_defaults(link: Optional[Link] = None) -> LinkFormValues:
    if link is None:
        return LinkFormValues()
    return LinkFormValues(
        title=link.title,
        url=link.url,
        icon=link.icon or "",
        keywords=", ".join(link.keywords or []),
        application=link.application or "",
        profile=link.profile or "",
    )


async def submit_link_form(
    store: ConfigStore,
    values: LinkFormValues,
    mode: FormMode = "create",
    original_group: Optional[str] = None,
    original_url: Optional[str] = None,
) -> Toast:
    link = build_link(values)

    if mode == "edit":
        if not original_group or original_url is None:
            raise ValidationError("Editing needs the link's group and original URL", title="Nothing To Edit")
        await store.update_link(original_group, original_url, link)
        logger.info("Updated %s in group %s", link.url, original_group)
        return Toast(style="success", title="Link Updated", message=f'"{link.title}" has been saved')

    new_group_title: Optional[str] = None
    group_name = (values.group_name or "").strip()
    if not group_name or group_name == NEW_GROUP_VALUE:
        group_name = (values.new_group_name or "").strip()
        if not group_name:
            raise ValidationError("Please enter a name for the new group", title="Group Name Required")
        new_group_title = (values.new_group_title or "").strip()
        if not new_group_title:
            raise ValidationError("Please enter a title for the new group", title="Group Title Required")

    await store.add_link(group_name, link, new_group_title)
    logger.info("Added %s to group %s", link.url, group_name)
    return Toast(style="success", title="Link Created", message=f'"{link.title}" has been added')
