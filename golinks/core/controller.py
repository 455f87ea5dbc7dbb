"""Runtime controller tying together the config store, search, icons, and launching."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional

from .errors import ConfigError, LaunchError
from .forms import FormMode, submit_link_form
from .schemas import GoLinkConfig, LinkFormValues, Toast
from .search import LinkEntry, SearchIndex
from ..icons.domains import icon_for_link
from ..icons.resolver import IconDescriptor
from ..launcher.browser import BrowserLauncher, browser_short_name, open_action_title
from ..storage.config_store import ConfigStore
from ..storage.watcher import ConfigWatcher

logger = logging.getLogger(__name__)

Notifier = Callable[[Toast], None]


def _log_toast(toast: Toast) -> None:
    level = logging.WARNING if toast.style == "failure" else logging.INFO
    logger.log(level, "%s: %s", toast.title, toast.message)


@dataclass
class OpenOutcome:
    status: str
    strategy: Optional[str] = None


@dataclass
class LaunchTarget:
    application: Optional[str]
    profile: Optional[str]


class LinkController:
    """Own the current configuration and coordinate user actions on it."""

    def __init__(
        self,
        store: ConfigStore,
        launcher: Optional[BrowserLauncher] = None,
        notify: Notifier = _log_toast,
    ) -> None:
        self.store = store
        self.launcher = launcher or BrowserLauncher()
        self.notify = notify
        self.config: Optional[GoLinkConfig] = None
        self.error: Optional[str] = None
        self._issued = 0
        self._applied = 0

    async def reload(self, announce: bool = False) -> Optional[GoLinkConfig]:
        """Load the file; a result older than the last applied one is dropped."""
        self._issued += 1
        seq = self._issued
        try:
            config = await self.store.load()
        except ConfigError as exc:
            if seq < self._applied:
                logger.debug("Discarding stale reload #%d", seq)
                return self.config
            self._applied = seq
            self.config = None
            self.error = exc.message
            self.notify(Toast(style="failure", title=exc.title, message=exc.message))
            return None
        if seq < self._applied:
            logger.debug("Discarding stale reload #%d", seq)
            return self.config
        self._applied = seq
        self.config = config
        self.error = None
        logger.info("Loaded %d links from %s", config.link_count, self.store.path)
        if announce:
            self.notify(
                Toast(
                    style="success",
                    title="Configuration Reloaded",
                    message=f"Loaded {config.link_count} links",
                )
            )
        return config

    def search(self, query: str = "") -> List[LinkEntry]:
        if self.config is None:
            return []
        return SearchIndex(self.config).search(query)

    def find_entry(self, group_name: str, url: str) -> Optional[LinkEntry]:
        for entry in self.search():
            if entry.group_name == group_name and entry.link.url == url:
                return entry
        return None

    def target_for(self, entry: LinkEntry) -> LaunchTarget:
        settings = self.config.settings if self.config else None
        default_browser = settings.default_browser if settings else None
        default_profile = settings.default_profile if settings else None
        application = entry.link.application or (
            default_browser if default_browser != "default" else None
        )
        return LaunchTarget(
            application=application or None,
            profile=entry.link.profile or default_profile or None,
        )

    def icon_for(self, entry: LinkEntry) -> IconDescriptor:
        return icon_for_link(entry.link)

    def action_title(self, entry: LinkEntry) -> str:
        target = self.target_for(entry)
        return open_action_title(target.application, target.profile)

    def accessories(self, entry: LinkEntry) -> List[str]:
        target = self.target_for(entry)
        items: List[str] = []
        if target.application:
            items.append(browser_short_name(target.application))
        if target.profile:
            items.append(target.profile)
        return items

    async def open_entry(self, entry: LinkEntry) -> OpenOutcome:
        target = self.target_for(entry)
        url = entry.link.url
        try:
            result = await self.launcher.open(url, target.application, target.profile)
            return OpenOutcome(status="opened", strategy=result.strategy)
        except LaunchError as exc:
            logger.warning("Launch failed: %s", exc)
            where = target.application or "browser"
            title = f"Could not open in {where} ({target.profile})" if target.profile else f"Could not open in {where}"
            self.notify(Toast(style="animated", title=title, message="Falling back to default browser..."))

        try:
            result = await self.launcher.open_default(url)
        except LaunchError as exc:
            logger.warning("Default browser fallback failed: %s", exc)
            self.notify(Toast(style="failure", title=exc.title, message=exc.message))
            return OpenOutcome(status="failed")
        return OpenOutcome(status="fallback", strategy=result.strategy)

    async def submit(
        self,
        values: LinkFormValues,
        mode: FormMode = "create",
        original_group: Optional[str] = None,
        original_url: Optional[str] = None,
    ) -> Toast:
        toast = await submit_link_form(self.store, values, mode, original_group, original_url)
        self.notify(toast)
        await self.reload()
        return toast

    def watcher(self, debounce: float = 0.3, rename_delay: float = 0.5, announce: bool = False) -> ConfigWatcher:
        return ConfigWatcher(
            self.store.path,
            on_reload=partial(self.reload, announce=announce),
            debounce=debounce,
            rename_delay=rename_delay,
        )
