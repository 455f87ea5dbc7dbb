"""Command-line interface for the go-links launcher."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.config import get_settings
from ..core.controller import LinkController
from ..core.errors import GoLinksError
from ..core.forms import NEW_GROUP_VALUE, form_defaults
from ..core.schemas import GoLinkConfig, LinkFormValues, Toast
from ..core.search import LinkEntry
from ..icons.domains import icon_for_url
from ..icons.resolver import resolve_icon
from ..launcher.browser import BROWSER_OPTIONS
from ..launcher.profiles import list_profiles, local_state_path
from ..storage.config_store import ConfigStore
from .desktop import open_config_file, reveal_config_file

app = typer.Typer(help="Search and open your go links")
console = Console()

TOAST_STYLES = {"success": "green", "failure": "bold red", "animated": "yellow"}


def print_toast(toast: Toast) -> None:
    style = TOAST_STYLES.get(toast.style, "white")
    message = f" {toast.message}" if toast.message else ""
    console.print(f"[{style}]{toast.title}[/{style}]{message}")


def _config_path(ctx: typer.Context) -> Path:
    return ctx.obj["config_path"]


def _controller(ctx: typer.Context) -> LinkController:
    return LinkController(ConfigStore(_config_path(ctx)), notify=print_toast)


def _load_or_exit(ctl: LinkController) -> GoLinkConfig:
    config = asyncio.run(ctl.reload())
    if config is None:
        console.print(
            Panel(
                f"{ctl.error}\n\n"
                "Run [bold]golinks check[/bold] after fixing it, or "
                "[bold]golinks config --edit[/bold] to open the file.",
                title="Configuration Error",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)
    return config


def _render_links(ctl: LinkController, entries: List[LinkEntry], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Group", style="magenta")
    table.add_column("Title")
    table.add_column("URL", overflow="fold")
    table.add_column("Opens with")
    table.add_column("Icon", style="dim")
    for idx, entry in enumerate(entries, start=1):
        table.add_row(
            str(idx),
            entry.group_title,
            entry.link.title,
            entry.link.url,
            " / ".join(ctl.accessories(entry)),
            ctl.icon_for(entry).source,
        )
    return table


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Link configuration file (YAML or JSON)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    settings = get_settings()
    logging.basicConfig(level=logging.DEBUG if verbose else (settings.log_level or "WARNING").upper())
    ctx.obj = {"config_path": (config or settings.config_file).expanduser()}


@app.command("list")
def list_links(ctx: typer.Context, query: str = typer.Argument("", help="Filter by title, URL, or keyword")) -> None:
    """List links, optionally filtered."""
    ctl = _controller(ctx)
    _load_or_exit(ctl)
    entries = ctl.search(query)
    if not entries:
        console.print(f'No links match "{query}"' if query else "No links configured")
        return
    console.print(_render_links(ctl, entries, "Go Links"))


@app.command("open")
def open_link(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text matched against title, URL, and keywords"),
    index: Optional[int] = typer.Option(None, "--index", "-n", help="Pick the Nth match (1-based)"),
) -> None:
    """Open the link matching QUERY in its configured browser and profile."""
    ctl = _controller(ctx)
    _load_or_exit(ctl)
    entries = ctl.search(query)
    if not entries:
        console.print(f'[red]No links match "{query}"[/red]')
        raise typer.Exit(code=1)
    if index is None and len(entries) > 1:
        console.print(_render_links(ctl, entries, f'Matches for "{query}"'))
        index = typer.prompt("Open which link?", type=int, default=1)
    position = (1 if index is None else index) - 1
    if not 0 <= position < len(entries):
        console.print(f"[red]Pick a number between 1 and {len(entries)}[/red]")
        raise typer.Exit(code=1)
    entry = entries[position]
    console.print(f"{ctl.action_title(entry)}: {entry.link.url}")
    outcome = asyncio.run(ctl.open_entry(entry))
    if outcome.status == "failed":
        raise typer.Exit(code=1)


def _choose_browser(default: str = "") -> str:
    for idx, (title, value) in enumerate(BROWSER_OPTIONS):
        console.print(f"  [cyan]{idx}[/cyan] {title}" + (f" [dim]({value})[/dim]" if value else ""))
    values = [value for _, value in BROWSER_OPTIONS]
    choice = typer.prompt("Browser", default=str(values.index(default)) if default in values else "0")
    if choice.isdigit() and int(choice) < len(values):
        return values[int(choice)]
    return choice


def _submit(ctl: LinkController, values: LinkFormValues, **kwargs) -> None:
    try:
        asyncio.run(ctl.submit(values, **kwargs))
    except GoLinksError as exc:
        print_toast(Toast(style="failure", title=exc.title, message=exc.message))
        raise typer.Exit(code=1)


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option(..., prompt=True, help="Display name for the link"),
    url: str = typer.Option(..., prompt=True, help="URL to open"),
    group: Optional[str] = typer.Option(None, help="Existing group name, or a new one"),
    new_group_title: Optional[str] = typer.Option(None, help="Title when GROUP does not exist yet"),
    keywords: str = typer.Option("", help="Comma-separated search keywords"),
    icon: str = typer.Option("", help="Icon name, iconify:<set>:<name>, URL, or asset path"),
    browser: Optional[str] = typer.Option(None, help="Application name or bundle id"),
    profile: str = typer.Option("", help="Browser profile name"),
) -> None:
    """Create a new link, optionally in a new group."""
    ctl = _controller(ctx)
    loaded = _load_or_exit(ctl)
    names = [g.name for g in loaded.groups]
    if group is None:
        for g in loaded.groups:
            console.print(f"  [cyan]{g.name}[/cyan] {g.title}")
        group = typer.prompt("Group (existing name or a new one)", default=names[0])
    new_group_name = None
    if group not in names:
        new_group_name, group = group, NEW_GROUP_VALUE
        if new_group_title is None:
            new_group_title = typer.prompt("Title for the new group")
    if browser is None:
        browser = _choose_browser()
    values = LinkFormValues(
        title=title,
        url=url,
        icon=icon,
        keywords=keywords,
        application=browser,
        profile=profile,
        group_name=group,
        new_group_name=new_group_name,
        new_group_title=new_group_title,
    )
    _submit(ctl, values, mode="create")


@app.command()
def edit(
    ctx: typer.Context,
    group: str = typer.Argument(..., help="Name of the group holding the link"),
    url: str = typer.Argument(..., help="Current URL of the link"),
) -> None:
    """Edit an existing link; current values are offered as defaults."""
    ctl = _controller(ctx)
    _load_or_exit(ctl)
    entry = ctl.find_entry(group, url)
    if entry is None:
        console.print(f"[red]No link with URL {url} in group {group}[/red]")
        raise typer.Exit(code=1)
    current = form_defaults(entry.link)
    values = LinkFormValues(
        title=typer.prompt("Title", default=current.title),
        url=typer.prompt("URL", default=current.url),
        icon=typer.prompt("Icon", default=current.icon, show_default=bool(current.icon)),
        keywords=typer.prompt("Keywords", default=current.keywords, show_default=bool(current.keywords)),
        application=_choose_browser(current.application),
        profile=typer.prompt("Browser profile", default=current.profile, show_default=bool(current.profile)),
    )
    _submit(ctl, values, mode="edit", original_group=group, original_url=url)


@app.command()
def check(ctx: typer.Context) -> None:
    """Validate the configuration file."""
    ctl = _controller(ctx)
    loaded = _load_or_exit(ctl)
    table = Table(title=f"{_config_path(ctx)}")
    table.add_column("Group", style="magenta")
    table.add_column("Title")
    table.add_column("Links", justify="right")
    for group in loaded.groups:
        table.add_row(group.name, group.title, str(len(group.links)))
    console.print(table)
    console.print(f"[green]OK[/green] {loaded.link_count} links in {len(loaded.groups)} groups")


@app.command()
def watch(ctx: typer.Context) -> None:
    """Reload and re-validate the configuration whenever it changes."""
    settings = get_settings()
    ctl = _controller(ctx)

    async def _run() -> None:
        await ctl.reload(announce=True)
        watcher = ctl.watcher(settings.watch_debounce, settings.watch_rename_delay, announce=True)
        console.print(f"Watching {ctl.store.path} (Ctrl-C to stop)")
        await watcher.run(poll_interval=settings.watch_poll_interval)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("Stopped")


@app.command()
def icon(
    spec: str = typer.Argument("", help="Icon specifier"),
    url: Optional[str] = typer.Option(None, help="Infer the icon from a URL instead"),
) -> None:
    """Show how an icon specifier (or a URL's domain) resolves."""
    descriptor = icon_for_url(url) if url else resolve_icon(spec)
    if descriptor is None:
        console.print("No brand icon for this domain; the default Link icon is used")
        return
    console.print(f"{descriptor.kind}: {descriptor.source}")


@app.command()
def profiles(application: str = typer.Argument("com.google.Chrome", help="Chromium browser name or bundle id")) -> None:
    """List the Chromium profiles known to APPLICATION."""
    path = local_state_path(application)
    if path is None or not path.exists():
        console.print(f"[red]No Local State file for {application}[/red]")
        raise typer.Exit(code=1)
    try:
        known = list_profiles(path)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Could not read {path}: {exc}[/red]")
        raise typer.Exit(code=1)
    table = Table(title=str(path))
    table.add_column("Directory", style="cyan")
    table.add_column("Name")
    for directory, name in known.items():
        table.add_row(directory, name)
    console.print(table)


@app.command()
def config(
    ctx: typer.Context,
    edit_file: bool = typer.Option(False, "--edit", help="Open the file in the default editor"),
    reveal: bool = typer.Option(False, "--reveal", help="Show the file in its folder"),
) -> None:
    """Print, open, or reveal the configuration file."""
    path = _config_path(ctx)
    try:
        if edit_file:
            open_config_file(path)
        elif reveal:
            reveal_config_file(path)
        else:
            console.print(str(path))
    except GoLinksError as exc:
        print_toast(Toast(style="failure", title=exc.title, message=exc.message))
        raise typer.Exit(code=1)


@app.command()
def serve() -> None:
    """Run the HTTP service for launcher front-ends."""
    from ..core.server import run

    run()


def _api_url(server: Optional[str]) -> str:
    settings = get_settings()
    return server or f"http://{settings.api_host}:{settings.api_port}"


async def _get(endpoint: str) -> dict:
    async with httpx.AsyncClient(timeout=10) as client:
        res = await client.get(endpoint)
        res.raise_for_status()
        return res.json()


async def _post(endpoint: str, payload: Optional[dict] = None) -> dict:
    async with httpx.AsyncClient(timeout=10) as client:
        res = await client.post(endpoint, json=payload)
        res.raise_for_status()
        return res.json()


@app.command()
def ping(server: Optional[str] = typer.Option(None, help="Service base URL")) -> None:
    """Check that the HTTP service is up."""
    try:
        console.print(asyncio.run(_get(f"{_api_url(server)}/ping")))
    except httpx.HTTPError as exc:
        console.print(f"[red]Service unreachable: {exc}[/red]")
        raise typer.Exit(code=1)


@app.command("reload")
def reload_service(server: Optional[str] = typer.Option(None, help="Service base URL")) -> None:
    """Ask a running service to reload the configuration now."""
    try:
        body = asyncio.run(_post(f"{_api_url(server)}/v1/reload"))
    except httpx.HTTPError as exc:
        console.print(f"[red]Service unreachable: {exc}[/red]")
        raise typer.Exit(code=1)
    if body["status"] == "error":
        print_toast(Toast(style="failure", title="Configuration Error", message=body.get("error") or ""))
        raise typer.Exit(code=1)
    console.print(f"[green]Reloaded[/green] {body['links']} links")


if __name__ == "__main__":
    app()
