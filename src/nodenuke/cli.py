"""CLI interface for nodenuke."""

from __future__ import annotations

import json
import logging
import shutil
import time

import click

from nodenuke import __version__
from nodenuke.core.app import App, Phase
from nodenuke.models.entry import DiscoveredEntry
from nodenuke.settings import CONFIRM_KEY, TARGET_NAME_KEY, TICK_MS_KEY, WORKERS_KEY, Settings
from nodenuke.utils import bytes_to_human, format_age, format_elapsed, truncate_left


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_app(root: str | None, name: str | None) -> App:
    settings = Settings.instance()
    return App(root, target_name=name or settings.target_name(), workers=settings.workers())


def _term_width() -> int:
    return shutil.get_terminal_size((80, 24)).columns


def _status(text: str) -> None:
    """Overwrite the current stderr line with *text*."""
    width = _term_width() - 1
    click.echo(f"\r{truncate_left(text, width):<{width}}", nl=False, err=True)


def _clear_status() -> None:
    click.echo(f"\r{' ' * (_term_width() - 1)}\r", nl=False, err=True)


def _run_scan(app: App, show_progress: bool) -> float:
    """Drive a scan to completion and return the elapsed time."""
    tick = Settings.instance().tick_seconds()
    started = time.monotonic()
    app.begin_scan()
    try:
        while app.phase is Phase.SCANNING:
            app.tick()
            if show_progress and app.phase is Phase.SCANNING:
                _status(f"Found {len(app.entries)} so far · {app.current_scanning_path()}")
            time.sleep(tick)
    except KeyboardInterrupt:
        app.abandon()
        raise click.Abort()
    finally:
        if show_progress:
            _clear_status()
    return time.monotonic() - started


def _run_delete(app: App) -> None:
    tick = Settings.instance().tick_seconds()
    app.begin_delete()
    try:
        while app.phase is Phase.DELETING:
            app.tick()
            if app.phase is Phase.DELETING:
                _status(f"Deleting {app.delete_done}/{app.delete_total} · {app.delete_current}")
            time.sleep(tick)
    except KeyboardInterrupt:
        _clear_status()
        click.echo("Interrupted. Directories already queued will still be removed.", err=True)
        app.abandon()
        raise click.Abort()
    _clear_status()


def _entry_line(index: int, entry: DiscoveredEntry, now: int) -> str:
    if entry.selected:
        mark = click.style("[✓]", fg="yellow" if entry.sensitive else "green")
    else:
        mark = "[ ]"
    warn = click.style("⚠ ", fg="red") if entry.sensitive else ""
    age = format_age(now - entry.last_modified) if entry.last_modified is not None else "-"
    path = truncate_left(entry.path, max(20, _term_width() - 40))
    return f"  {index:>3}  {mark}  {warn}{path}  {click.style(age, fg='bright_black')}  {bytes_to_human(entry.size_bytes):>10}"


def _print_entries(app: App) -> None:
    now = int(time.time())
    for i, entry in enumerate(app.entries, 1):
        click.echo(_entry_line(i, entry, now))


def _print_header(app: App, elapsed: float) -> None:
    count = len(app.entries)
    click.echo(
        f"\n{click.style('💥 nodenuke', fg='red', bold=True)}  ·  {count} found  ·  "
        f"{click.style(bytes_to_human(app.total_size()), bold=True)} total  ·  "
        f"scanned in {format_elapsed(elapsed)}\n"
    )


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.version_option(__version__, prog_name="nodenuke")
def main(verbose: int) -> None:
    """nodenuke — find and delete node_modules directories."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("root", required=False)
@click.option("--name", "-n", default=None, help="Directory name to look for (default: node_modules)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(root: str | None, name: str | None, as_json: bool) -> None:
    """List matching directories under ROOT (preview only, never deletes)."""
    app = _build_app(root, name)
    elapsed = _run_scan(app, show_progress=not as_json)

    if as_json:
        data = [
            {
                "path": e.path,
                "size_bytes": e.size_bytes,
                "sensitive": e.sensitive,
                "selected": e.selected,
                "last_modified": e.last_modified,
            }
            for e in app.entries
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not app.entries:
        click.echo(f"No {app.target_name} found in {app.scan_root}.")
        return

    _print_header(app, elapsed)
    _print_entries(app)
    click.echo(f"\nSelected by default: {app.selected_count()} ({bytes_to_human(app.selected_size())})\n")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("root", required=False)
@click.option("--name", "-n", default=None, help="Directory name to look for (default: node_modules)")
@click.option("--yes", "-y", is_flag=True, help="Skip review and confirmation")
@click.option("--all", "select_all", is_flag=True, help="Also select sensitive directories")
def clean(root: str | None, name: str | None, yes: bool, select_all: bool) -> None:
    """Scan ROOT, review matches and delete the selected ones."""
    app = _build_app(root, name)
    elapsed = _run_scan(app, show_progress=True)

    if app.phase is Phase.FINISHED:
        click.echo(f"No {app.target_name} found in {app.scan_root}.")
        return

    _print_header(app, elapsed)
    if select_all:
        for i in range(len(app.entries)):
            app.set_selected(i, True)

    confirm = not yes and Settings.instance().confirm_before_deleting()
    while True:
        if not yes and not _review(app):
            click.echo("Aborted.")
            return
        if not app.request_delete():
            click.echo("Nothing selected.")
            if yes:
                return
            continue
        if not confirm or _confirm(app):
            break
        app.cancel_delete()

    click.echo(f"\n{click.style('🧹', bold=True)} Deleting...\n")
    _run_delete(app)
    _print_summary(app)


def _review(app: App) -> bool:
    """Let the operator toggle entries. Returns False if they quit."""
    while True:
        _print_entries(app)
        click.echo(
            f"\n  Selected: {app.selected_count()} of {len(app.entries)} "
            f"({click.style(bytes_to_human(app.selected_size()), fg='green', bold=True)})\n"
        )
        raw = click.prompt(
            "Toggle [numbers, a = all safe, A = all incl. ⚠, Enter = delete, q = quit]",
            default="",
            show_default=False,
        ).strip()
        match raw:
            case "":
                return True
            case "q" | "Q":
                return False
            case "a":
                app.toggle_all()
            case "A":
                app.toggle_all_force()
            case _:
                _toggle_numbers(app, raw)
        click.echo()


def _toggle_numbers(app: App, raw: str) -> None:
    for part in raw.replace(",", " ").split():
        if not part.isdecimal():
            click.echo(f"  Ignoring {part!r}", err=True)
            continue
        idx = int(part) - 1
        if 0 <= idx < len(app.entries):
            app.highlighted = idx
            app.toggle_selected()


def _confirm(app: App) -> bool:
    count = app.selected_count()
    click.echo(
        f"\nDelete {count} director{'y' if count == 1 else 'ies'} "
        f"freeing ~{click.style(bytes_to_human(app.selected_size()), bold=True)}?"
    )
    if app.has_sensitive_selected():
        click.echo(click.style("⚠  Warning: sensitive paths are selected!", fg="red", bold=True))
    return click.confirm("Confirm", default=False)


def _print_summary(app: App) -> None:
    removed = app.removed_count()
    click.echo(f"  Removed   {click.style(str(removed), fg='green', bold=True)}  director{'y' if removed == 1 else 'ies'}")
    click.echo(f"  Freed     {click.style(bytes_to_human(app.delete_freed), fg='green', bold=True)}")
    if app.delete_errors:
        click.echo(f"  Failed    {click.style(str(len(app.delete_errors)), fg='red', bold=True)}\n")
        for error in app.delete_errors:
            click.echo(f"  {click.style('✗', fg='red')}  {error}")
    click.echo()


# ── config ───────────────────────────────────────────────────────────────

_CONFIG_KEYS = (TARGET_NAME_KEY, WORKERS_KEY, TICK_MS_KEY, CONFIRM_KEY)


@main.group()
def config() -> None:
    """Settings management commands."""


@config.command("show")
def config_show() -> None:
    """Show the effective settings."""
    settings = Settings.instance()
    click.echo(f"\n  {click.style('File:', bold=True)} {settings.path}\n")
    click.echo(f"  {TARGET_NAME_KEY:28s} {settings.target_name()}")
    click.echo(f"  {WORKERS_KEY:28s} {settings.workers()}")
    click.echo(f"  {TICK_MS_KEY:28s} {int(settings.tick_seconds() * 1000)}")
    click.echo(f"  {CONFIRM_KEY:28s} {settings.confirm_before_deleting()}")
    click.echo()


@config.command("set")
@click.argument("key", type=click.Choice(_CONFIG_KEYS))
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set KEY to VALUE (parsed as JSON when possible)."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    Settings.instance().set(key, parsed)
    click.echo(f"{key} = {json.dumps(parsed)}")
