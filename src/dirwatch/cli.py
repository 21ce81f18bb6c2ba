"""Command-line interface for dirwatch."""

from __future__ import annotations

import asyncio
import difflib
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax

from dirwatch.config import ConfigError, ConfigManager, DirwatchConfig, resolve_with_precedence
from dirwatch.watcher import DirectoryWatcher, FieldDifference, FileDetail, ScanError, WatchEvent

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}}, indent=None)
        raise SystemExit(1)

    raise click.ClickException(message) from original


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _render_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _event_payload(event: WatchEvent, *args: Any) -> dict[str, Any]:
    """Return a JSON-ready description of a watcher event."""
    payload: dict[str, Any] = {"event": event.value}
    if event in (WatchEvent.FILE_ADDED, WatchEvent.FILE_CHANGED):
        detail: FileDetail = args[0]
        payload["path"] = detail.full_path
        payload["file"] = detail.model_dump(mode="json")
        if event is WatchEvent.FILE_CHANGED:
            differences: dict[str, FieldDifference] = args[1]
            payload["changes"] = {
                name: {
                    "from": _render_value(change.base_value),
                    "to": _render_value(change.compared_value),
                }
                for name, change in differences.items()
            }
    else:
        payload["path"] = args[0]
    return payload


def _event_lines(event: WatchEvent, *args: Any) -> list[str]:
    """Return console lines describing a watcher event."""
    if event is WatchEvent.FILE_ADDED:
        return [f"[green]File Added:[/green] {escape(args[0].full_path)}"]
    if event is WatchEvent.FILE_CHANGED:
        lines = [f"[yellow]File Changed:[/yellow] {escape(args[0].full_path)}"]
        for name, change in args[1].items():
            lines.append(f"  + {name} changed...")
            lines.append(f"    - From: {escape(str(_render_value(change.base_value)))}")
            lines.append(f"    - To  : {escape(str(_render_value(change.compared_value)))}")
        return lines
    if event is WatchEvent.FILE_REMOVED:
        return [f"[red]File Deleted:[/red] {escape(args[0])}"]
    if event is WatchEvent.FOLDER_ADDED:
        return [f"[green]Folder Added:[/green] {escape(args[0])}"]
    if event is WatchEvent.FOLDER_REMOVED:
        return [f"[red]Folder Removed:[/red] {escape(args[0])}"]
    return []


def _attach_console_handlers(watcher: DirectoryWatcher, *, json_output: bool, quiet: bool) -> None:
    """Subscribe console renderers for every watcher event."""
    if quiet:
        return

    def _make_handler(event: WatchEvent):
        def _handler(*args: Any) -> None:
            if json_output:
                console.print_json(data=_event_payload(event, *args), indent=None)
                return
            for line in _event_lines(event, *args):
                console.print(line, soft_wrap=True)

        return _handler

    for event in WatchEvent:
        if event is WatchEvent.SCANNED_DIRECTORY and not json_output:
            continue
        watcher.on(event, _make_handler(event))


async def _run_watch(watcher: DirectoryWatcher, *, interval_ms: int, once: bool) -> None:
    """Drive the watcher until cancelled, or for a single pass when ``once`` is set."""
    if once:
        await watcher.scan()
        return

    try:
        await watcher.start(interval_ms)
        if not watcher.is_running:
            return
        await asyncio.Event().wait()
    finally:
        watcher.stop()


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="dirwatch")
def cli() -> None:
    """dirwatch reports file and folder changes by polling a directory."""


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("-r", "--recursive", is_flag=True, help="Monitor all subdirectories too.")
@click.option("--interval", "interval_ms", type=int, help="Milliseconds between scan passes.")
@click.option(
    "--emit-initial",
    is_flag=True,
    help="Report pre-existing content as added during the first pass.",
)
@click.option("--once", is_flag=True, help="Run a single reporting pass and exit.")
@click.option("--json", "json_output", is_flag=True, help="Emit one JSON object per event.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def watch(
    ctx: click.Context,
    path: str,
    recursive: bool,
    interval_ms: int | None,
    emit_initial: bool,
    once: bool,
    json_output: bool,
    quiet: bool,
) -> None:
    """Monitor PATH and print changes as they are detected.

    Args:
        ctx: Click context for parameter source inspection.
        path: Directory to monitor.
        recursive: Whether subdirectories are monitored.
        interval_ms: Optional polling interval override in milliseconds.
        emit_initial: When True, the baseline pass reports existing content.
        once: When True, run one reporting pass and exit.
        json_output: When True, emit JSON lines instead of text.
        quiet: When True, suppress non-error output entirely.

    Raises:
        click.ClickException: If options or configuration are invalid.
    """
    if interval_ms is not None and interval_ms < 0:
        raise click.ClickException("--interval must not be negative.")

    cli_overrides: dict[str, Any] = {}
    if ctx.get_parameter_source("recursive") == ParameterSource.COMMANDLINE:
        cli_overrides["watch.recursive"] = recursive
    if interval_ms is not None:
        cli_overrides["watch.interval_ms"] = interval_ms
    if ctx.get_parameter_source("emit_initial") == ParameterSource.COMMANDLINE:
        cli_overrides["watch.suppress_initial_events"] = not emit_initial

    try:
        config = ConfigManager().load(cli_overrides=cli_overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    if json_output and quiet:
        raise click.ClickException("--json cannot be combined with --quiet.")
    _configure_logging(config.logging.level)
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default and not json_output

    root = Path(path).expanduser().resolve()
    watcher = DirectoryWatcher(
        root,
        config.watch.recursive,
        suppress_initial_events=config.watch.suppress_initial_events,
    )
    _attach_console_handlers(watcher, json_output=json_output, quiet=quiet_enabled)

    if not once and not json_output and not quiet_enabled:
        console.print(
            f"[cyan]Directory monitoring of {escape(str(root))} has started. "
            "Press Ctrl+C to stop.[/cyan]",
            soft_wrap=True,
        )

    try:
        asyncio.run(_run_watch(watcher, interval_ms=config.watch.interval_ms, once=once))
    except KeyboardInterrupt:
        if not json_output and not quiet_enabled:
            console.print("[yellow]Watch stopped by user request.[/yellow]")
    except ScanError as exc:
        _handle_cli_error(str(exc), code="scan_error", json_output=json_output, original=exc)


@cli.group()
def config() -> None:
    """Manage dirwatch configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        config = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing or validation fails.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        file_data = manager.load_file_overrides()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'watch.interval_ms'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    node = file_data
    for segment in segments[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise click.ClickException(f"Cannot assign into '{segment}'; it is not a mapping.")
        node = existing
    node[segments[-1]] = parsed_value

    try:
        resolve_with_precedence(defaults=DirwatchConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    before = manager.read_text().splitlines()
    manager.save(file_data)
    after = manager.read_text().splitlines()
    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if "Last updated:" not in line
    ]

    if any(line.startswith(("+", "-")) and not line.startswith(("+++", "---")) for line in diff):
        console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
        console.print(f"[green]Updated {'.'.join(segments)}.[/green]")
    else:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
