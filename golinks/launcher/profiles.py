"""Map human-readable Chromium profile names to on-disk profile directories."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Vendor directory of each Chromium browser, relative to the per-user
# application-support root of the platform.
LOCAL_STATE_DIRS: Dict[str, Dict[str, str]] = {
    "darwin": {
        "chrome": "Google/Chrome",
        "brave": "BraveSoftware/Brave-Browser",
        "edge": "Microsoft Edge",
    },
    "linux": {
        "chrome": "google-chrome",
        "brave": "BraveSoftware/Brave-Browser",
        "edge": "microsoft-edge",
    },
    "win32": {
        "chrome": "Google/Chrome/User Data",
        "brave": "BraveSoftware/Brave-Browser/User Data",
        "edge": "Microsoft/Edge/User Data",
    },
}

BROWSER_KEYS = {
    "com.google.Chrome": "chrome",
    "Google Chrome": "chrome",
    "com.brave.Browser": "brave",
    "Brave Browser": "brave",
    "com.microsoft.edgemac": "edge",
    "Microsoft Edge": "edge",
}


def _platform_key(platform: Optional[str] = None) -> str:
    platform = platform or sys.platform
    if platform.startswith("linux"):
        return "linux"
    return platform


def app_support_root(platform: Optional[str] = None, home: Optional[Path] = None) -> Path:
    home = home or Path.home()
    key = _platform_key(platform)
    if key == "darwin":
        return home / "Library" / "Application Support"
    if key == "win32":
        return Path(os.environ.get("LOCALAPPDATA") or home / "AppData" / "Local")
    return Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")


def local_state_path(
    application: str,
    platform: Optional[str] = None,
    home: Optional[Path] = None,
) -> Optional[Path]:
    browser = BROWSER_KEYS.get(application)
    if browser is None:
        return None
    vendor_dir = LOCAL_STATE_DIRS.get(_platform_key(platform), {}).get(browser)
    if vendor_dir is None:
        return None
    return app_support_root(platform, home) / vendor_dir / "Local State"


def find_profile_directory(local_state: Path, profile: str) -> Optional[str]:
    """Return the directory key whose profile matches *profile*, or None.

    Raises OSError / ValueError when the file cannot be read or parsed.
    """
    data = json.loads(local_state.read_text(encoding="utf-8"))
    section = data.get("profile") if isinstance(data, dict) else None
    info_cache = section.get("info_cache") if isinstance(section, dict) else None
    if not isinstance(info_cache, dict):
        return None
    for directory, info in info_cache.items():
        if directory == profile:
            return directory
        if not isinstance(info, dict):
            continue
        if profile in (info.get("name"), info.get("gaia_name"), info.get("user_name")):
            return directory
    return None


def list_profiles(local_state: Path) -> Dict[str, str]:
    """Directory -> display name for every profile in *local_state*."""
    data = json.loads(local_state.read_text(encoding="utf-8"))
    section = data.get("profile") if isinstance(data, dict) else None
    info_cache = section.get("info_cache") if isinstance(section, dict) else None
    if not isinstance(info_cache, dict):
        return {}
    return {
        directory: str(info.get("name", "")) if isinstance(info, dict) else ""
        for directory, info in info_cache.items()
    }


def resolve_profile_directory(
    application: str,
    profile: str,
    local_state: Optional[Path] = None,
) -> str:
    """Translate a display name like "Work" into a directory like "Profile 1".

    Falls back to *profile* unchanged when nothing matches, assuming the
    caller already passed a directory name.
    """
    path = local_state or local_state_path(application)
    if path is None or not path.exists():
        return profile
    try:
        directory = find_profile_directory(path, profile)
    except (OSError, ValueError) as exc:
        logger.debug("Could not read %s: %s", path, exc)
        return profile
    if directory is None:
        logger.debug("No profile named %r in %s", profile, path)
        return profile
    return directory
