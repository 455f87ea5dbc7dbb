"""Open URLs in a chosen browser and profile through an ordered strategy chain."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import subprocess
import sys
import webbrowser
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal, Optional, Sequence, Tuple

from ..core.errors import LaunchError
from .profiles import resolve_profile_directory

logger = logging.getLogger(__name__)

Family = Literal["chromium", "firefox", "other"]

BROWSER_APP_NAMES: Dict[str, str] = {
    "com.google.Chrome": "Google Chrome",
    "com.brave.Browser": "Brave Browser",
    "org.mozilla.firefox": "Firefox",
    "com.apple.Safari": "Safari",
    "company.thebrowser.Browser": "Arc",
    "com.microsoft.edgemac": "Microsoft Edge",
}

BROWSER_SHORT_NAMES: Dict[str, str] = {
    "com.google.Chrome": "Chrome",
    "Google Chrome": "Chrome",
    "com.brave.Browser": "Brave",
    "Brave Browser": "Brave",
    "org.mozilla.firefox": "Firefox",
    "Firefox": "Firefox",
    "com.apple.Safari": "Safari",
    "Safari": "Safari",
    "company.thebrowser.Browser": "Arc",
    "Arc": "Arc",
    "com.microsoft.edgemac": "Edge",
    "Microsoft Edge": "Edge",
}

CHROMIUM_BROWSERS = (
    "com.google.Chrome",
    "com.brave.Browser",
    "com.microsoft.edgemac",
    "Google Chrome",
    "Brave Browser",
    "Microsoft Edge",
)

# Direct invocation reaches an already-running instance; "open -a" drops the
# profile flags in that case.
MACOS_BINARY_PATHS: Dict[str, str] = {
    "Google Chrome": "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "Brave Browser": "/Applications/Brave Browser.app/Contents/MacOS/Brave Browser",
    "Microsoft Edge": "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
    "Firefox": "/Applications/Firefox.app/Contents/MacOS/firefox",
}

COMMAND_NAMES: Dict[str, Sequence[str]] = {
    "Google Chrome": ("google-chrome", "google-chrome-stable", "chrome"),
    "Brave Browser": ("brave-browser", "brave"),
    "Microsoft Edge": ("microsoft-edge", "microsoft-edge-stable", "msedge"),
    "Firefox": ("firefox",),
}

BROWSER_OPTIONS = [
    ("System Default", ""),
    ("Google Chrome", "com.google.Chrome"),
    ("Brave Browser", "com.brave.Browser"),
    ("Firefox", "org.mozilla.firefox"),
    ("Safari", "com.apple.Safari"),
    ("Arc", "company.thebrowser.Browser"),
    ("Microsoft Edge", "com.microsoft.edgemac"),
]


@dataclass
class BrowserApp:
    identifier: str
    name: str
    family: Family
    binary: Optional[str] = None


@dataclass
class LaunchResult:
    ok: bool
    strategy: str
    detail: str = ""
    command: Optional[List[str]] = None


@dataclass
class LaunchRequest:
    url: str
    app: Optional[BrowserApp] = None
    profile: Optional[str] = None
    profile_args: List[str] = field(default_factory=list)


def browser_family(identifier: str, name: str) -> Family:
    lowered = {identifier.lower(), name.lower()}
    if any(browser.lower() in lowered for browser in CHROMIUM_BROWSERS):
        return "chromium"
    if any("firefox" in value for value in lowered):
        return "firefox"
    return "other"


def find_binary(
    name: str,
    identifier: str,
    platform: str,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Optional[str]:
    if platform == "darwin":
        return MACOS_BINARY_PATHS.get(name)
    for command in COMMAND_NAMES.get(name, (identifier,)):
        found = which(command)
        if found:
            return found
    return None


def describe_application(
    application: str,
    platform: Optional[str] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> BrowserApp:
    platform = platform or sys.platform
    name = BROWSER_APP_NAMES.get(application, application)
    return BrowserApp(
        identifier=application,
        name=name,
        family=browser_family(application, name),
        binary=find_binary(name, application, platform, which),
    )


def profile_flags(
    app: BrowserApp,
    profile: str,
    resolve: Callable[[str, str], str] = resolve_profile_directory,
) -> List[str]:
    if app.family == "chromium":
        return [f"--profile-directory={resolve(app.name, profile)}"]
    if app.family == "firefox":
        return ["-P", profile]
    return [f"--profile-directory={profile}"]


def browser_short_name(application: str) -> str:
    return BROWSER_SHORT_NAMES.get(application, application)


def open_action_title(application: Optional[str], profile: Optional[str]) -> str:
    if application and profile:
        return f"Open in {application} ({profile})"
    if application:
        return f"Open in {application}"
    return "Open in Browser"


class ProcessRunner:
    """Spawn external processes; replaced by a fake in tests."""

    async def run(self, argv: List[str]) -> int:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode:
            logger.debug("%s exited with %s: %s", argv[0], proc.returncode, stderr.decode(errors="replace").strip())
        return proc.returncode or 0

    async def spawn(self, argv: List[str]) -> None:
        # Browsers keep running after the URL opens, so the child is detached.
        await asyncio.to_thread(
            subprocess.Popen,
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )


class LaunchStrategy:
    name = "strategy"

    async def attempt(self, request: LaunchRequest) -> LaunchResult:
        raise NotImplementedError


class SystemDefaultStrategy(LaunchStrategy):
    name = "system-default"

    def __init__(self, open_url: Callable[[str], bool] = webbrowser.open) -> None:
        self.open_url = open_url

    async def attempt(self, request: LaunchRequest) -> LaunchResult:
        try:
            opened = await asyncio.to_thread(self.open_url, request.url)
        except webbrowser.Error as exc:
            return LaunchResult(False, self.name, str(exc))
        if not opened:
            return LaunchResult(False, self.name, "no usable default browser")
        return LaunchResult(True, self.name)


class _CommandStrategy(LaunchStrategy):
    def __init__(self, runner: ProcessRunner, platform: str) -> None:
        self.runner = runner
        self.platform = platform

    def build(self, request: LaunchRequest) -> Optional[List[str]]:
        raise NotImplementedError

    async def execute(self, argv: List[str]) -> None:
        await self.runner.spawn(argv)

    async def attempt(self, request: LaunchRequest) -> LaunchResult:
        argv = self.build(request)
        if argv is None:
            return LaunchResult(False, self.name, "not applicable")
        logger.debug("Launching: %s", shlex.join(argv))
        try:
            await self.execute(argv)
        except (OSError, LaunchError) as exc:
            return LaunchResult(False, self.name, str(exc), argv)
        return LaunchResult(True, self.name, command=argv)


class _OpenCommandMixin:
    runner: ProcessRunner

    async def execute(self, argv: List[str]) -> None:
        code = await self.runner.run(argv)
        if code != 0:
            raise LaunchError(f"'{argv[0]}' exited with status {code}")


class OpenWithApplicationStrategy(_OpenCommandMixin, _CommandStrategy):
    name = "open-with-application"

    def build(self, request: LaunchRequest) -> Optional[List[str]]:
        app = request.app
        if app is None:
            return None
        if self.platform == "darwin":
            return ["open", "-a", app.name, request.url]
        if app.binary:
            return [app.binary, request.url]
        return None

    async def execute(self, argv: List[str]) -> None:
        if self.platform == "darwin":
            await _OpenCommandMixin.execute(self, argv)
        else:
            await self.runner.spawn(argv)


class DirectBinaryStrategy(_CommandStrategy):
    name = "direct-binary"

    def __init__(
        self,
        runner: ProcessRunner,
        platform: str,
        path_exists: Callable[[str], bool] = os.path.exists,
    ) -> None:
        super().__init__(runner, platform)
        self.path_exists = path_exists

    def build(self, request: LaunchRequest) -> Optional[List[str]]:
        app = request.app
        if app is None or not app.binary or not self.path_exists(app.binary):
            return None
        return [app.binary, *request.profile_args, request.url]


class OpenApplicationArgsStrategy(_OpenCommandMixin, _CommandStrategy):
    name = "open-application-args"

    def build(self, request: LaunchRequest) -> Optional[List[str]]:
        if request.app is None or self.platform != "darwin":
            return None
        return ["open", "-a", request.app.name, "--args", *request.profile_args, request.url]


class BrowserLauncher:
    """Pick the launch strategies for an application/profile pair and run them in order."""

    def __init__(
        self,
        platform: Optional[str] = None,
        runner: Optional[ProcessRunner] = None,
        open_url: Callable[[str], bool] = webbrowser.open,
        which: Callable[[str], Optional[str]] = shutil.which,
        path_exists: Callable[[str], bool] = os.path.exists,
        resolve_profile: Callable[[str, str], str] = resolve_profile_directory,
    ) -> None:
        self.platform = platform or sys.platform
        self.runner = runner or ProcessRunner()
        self.which = which
        self.resolve_profile = resolve_profile
        self.system_default = SystemDefaultStrategy(open_url)
        self.open_with_application = OpenWithApplicationStrategy(self.runner, self.platform)
        self.direct_binary = DirectBinaryStrategy(self.runner, self.platform, path_exists)
        self.open_application_args = OpenApplicationArgsStrategy(self.runner, self.platform)

    def plan(
        self,
        url: str,
        application: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> Tuple[LaunchRequest, List[LaunchStrategy]]:
        if not application:
            return LaunchRequest(url=url), [self.system_default]
        app = describe_application(application, self.platform, self.which)
        if not profile:
            return LaunchRequest(url=url, app=app), [self.open_with_application]
        request = LaunchRequest(
            url=url,
            app=app,
            profile=profile,
            profile_args=profile_flags(app, profile, self.resolve_profile),
        )
        return request, [self.direct_binary, self.open_application_args]

    async def open(
        self,
        url: str,
        application: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> LaunchResult:
        request, strategies = self.plan(url, application, profile)
        attempts: List[LaunchResult] = []
        for strategy in strategies:
            result = await strategy.attempt(request)
            attempts.append(result)
            if result.ok:
                logger.info("Opened %s via %s", url, strategy.name)
                return result
            logger.debug("Strategy %s failed: %s", strategy.name, result.detail)
        details = "; ".join(f"{item.strategy}: {item.detail}" for item in attempts)
        raise LaunchError(f"Could not open {url} ({details})", attempts)

    async def open_default(self, url: str) -> LaunchResult:
        return await self.open(url)
