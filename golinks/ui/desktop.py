"""Desktop file actions for the configuration file."""

from __future__ import annotations

from pathlib import Path

import typer

from ..core.errors import ConfigNotFound


def open_config_file(path: Path) -> int:
    """Open the configuration file in the user's default editor."""
    if not path.exists():
        raise ConfigNotFound(f"Configuration file not found: {path}")
    return typer.launch(str(path))


def reveal_config_file(path: Path) -> int:
    """Show the configuration file in the system file manager."""
    if not path.exists():
        raise ConfigNotFound(f"Configuration file not found: {path}")
    return typer.launch(str(path), locate=True)
