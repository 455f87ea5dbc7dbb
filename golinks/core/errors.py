"""Error kinds raised by the go-links core."""

from __future__ import annotations

from typing import Any, List, Optional


class GoLinksError(Exception):
    """Base class for every error surfaced to the user."""

    title = "Error"

    def __init__(self, message: str, *, title: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title


class ConfigError(GoLinksError):
    """Raised when the link configuration cannot be loaded or saved."""

    title = "Configuration Error"


class ConfigNotFound(ConfigError):
    pass


class ConfigUnreadable(ConfigError):
    pass


class ConfigEmpty(ConfigError):
    pass


class ConfigParseError(ConfigError):
    """Raised when the file is not valid YAML or JSON."""


class ConfigSchemaError(ConfigError):
    """Raised for the first structural violation found in a parsed file."""


class ConfigWriteError(ConfigError):
    title = "Save Failed"


class NotFoundError(GoLinksError):
    title = "Not Found"


class GroupNotFound(NotFoundError):
    title = "Group Not Found"


class LinkNotFound(NotFoundError):
    title = "Link Not Found"


class ValidationError(GoLinksError):
    """Raised when form input is rejected before touching the file."""

    title = "Invalid Input"


class LaunchError(GoLinksError):
    """Raised when no launch strategy managed to open the URL."""

    title = "Launch Failed"

    def __init__(self, message: str, attempts: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.attempts = list(attempts or [])
