"""
Main CLI for skillboard using Click.

Every command opens the board for the active project (``--project``,
``SKILLBOARD_PROJECT``, the YAML config, or the remembered setting, in that
order of precedence), applies one operation and waits for the config save
before exiting.
"""

import json
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from pydantic import ValidationError

from . import __version__
from .config import AppConfig, load_config
from .core import CurationEngine, LoadError
from .logging import configure_logging
from .settings import load_settings, set_project_path
from .units import ProjectBackend, Unit, UnitKind

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2
EXIT_CONFIG_ERROR = 3
EXIT_INTERRUPTED = 130


def _kind(command: bool) -> UnitKind:
    return UnitKind.COMMAND if command else UnitKind.SKILL


def _load_app_config(ctx: click.Context, json_output: bool = False) -> AppConfig:
    opts = ctx.obj
    try:
        app_config = load_config(config_path=opts["config"], cli_args=opts)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    configure_logging(app_config.logging, json_output=json_output, quiet=opts["quiet"])
    return app_config


@contextmanager
def _open_board(ctx: click.Context, json_output: bool = False) -> Iterator[CurationEngine]:
    """Load the board for the active project; flush pending saves on exit."""
    app_config = _load_app_config(ctx, json_output)
    ctx.obj["app_config"] = app_config
    project = app_config.workspace.project or load_settings().project_path
    if not project:
        click.echo("Error: no project selected. Use 'skillboard project set PATH'.", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    backend = ProjectBackend(project, default_category=app_config.engine.default_category)
    engine = CurationEngine(backend, max_relocation_workers=app_config.engine.max_relocation_workers)
    try:
        try:
            engine.reload()
        except LoadError as e:
            click.echo(f"Error loading skills: {e}", err=True)
            sys.exit(EXIT_FAILED)
        yield engine
    finally:
        engine.close()


def _unit_line(unit: Unit) -> str:
    mark = "●" if unit.enabled else "○"
    return f"  {mark} {unit.name:<28s} {unit.description}"


@click.group()
@click.version_option(version=__version__, prog_name="skillboard")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to the YAML configuration file",
)
@click.option("-p", "--project", type=click.Path(file_okay=False, path_type=Path), help="Project to manage")
@click.option("-v", "--verbose", count=True, help="More technical output (-v info, -vv debug)")
@click.option("--quiet", is_flag=True, help="Only print command output")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Write JSON logs to a file")
@click.pass_context
def main(
    ctx: click.Context,
    config: Path | None,
    project: Path | None,
    verbose: int,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """skillboard - Organize Claude skills and slash commands.

    Group skills into categories and enable or disable them by moving
    them between .claude/skills and .claude/disabled-skills.
    """
    ctx.obj = {
        "config": config,
        "project": str(project) if project else None,
        "verbose": verbose,
        "quiet": quiet,
        "log_file": str(log_file) if log_file else None,
    }


# ── PROJECT ──────────────────────────────────────────────────────────────


@main.group()
def project() -> None:
    """Select the project whose .claude directory is managed."""
    pass


@project.command("show")
def project_show() -> None:
    """Print the remembered project path."""
    path = load_settings().project_path
    if path:
        click.echo(path)
    else:
        click.echo("No project selected.", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


@project.command("set")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
def project_set(path: Path) -> None:
    """Remember PATH as the active project."""
    try:
        settings = set_project_path(path)
    except OSError as e:
        click.echo(f"Could not save settings: {e}", err=True)
        sys.exit(EXIT_FAILED)
    click.echo(f"Project set to {settings.project_path}")


# ── UNITS ────────────────────────────────────────────────────────────────


@main.command("list")
@click.option("--category", help="Only this category (default: every category)")
@click.option("--filter", "query", default="", help="Case-insensitive match on name or description")
@click.option("--commands", is_flag=True, help="List slash commands instead of skills")
@click.option("--json", "as_json", is_flag=True, help="Machine-readable output")
@click.pass_context
def list_units(ctx: click.Context, category: str | None, query: str, commands: bool, as_json: bool) -> None:
    """List units grouped by category."""
    kind = _kind(commands)
    with _open_board(ctx, json_output=as_json) as engine:
        categories = [category] if category else engine.categories(kind)
        counts = engine.unit_counts(kind)
        enabled = engine.enabled_counts(kind)

        if as_json:
            payload = {
                cat: [u.to_dict() for u in engine.filtered_units(query, cat, kind)]
                for cat in categories
            }
            click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
            return

        total, on = engine.total_units(kind), engine.enabled_units(kind)
        click.echo(f"{kind.value}s: {on}/{total} enabled\n")
        for cat in categories:
            units = engine.filtered_units(query, cat, kind)
            if query and not units:
                continue
            click.echo(f"{cat} ({enabled.get(cat, 0)}/{counts.get(cat, 0)})")
            for unit in units:
                click.echo(_unit_line(unit))
            click.echo()


@main.command()
@click.argument("name")
@click.option("--command", is_flag=True, help="NAME is a slash command")
@click.pass_context
def show(ctx: click.Context, name: str, command: bool) -> None:
    """Show a unit's content and auxiliary files."""
    kind = _kind(command)
    with _open_board(ctx) as engine:
        unit = engine.select_unit(name, kind)
        if unit is None:
            click.echo(f"'{name}' not found", err=True)
            sys.exit(EXIT_FAILED)
        state = "enabled" if unit.enabled else "disabled"
        click.echo(f"{unit.name} ({state}, {engine.category_of(name, kind) or 'no category'})")
        click.echo(f"  {unit.path}")
        for f in unit.files:
            click.echo(f"  {'▸' if f.is_directory else '·'} {f.name}")
        click.echo()
        click.echo(unit.content)


@main.command()
@click.argument("name")
@click.option("--command", is_flag=True, help="NAME is a slash command")
@click.pass_context
def toggle(ctx: click.Context, name: str, command: bool) -> None:
    """Enable a disabled unit or disable an enabled one."""
    with _open_board(ctx) as engine:
        outcome = engine.toggle_unit(name, _kind(command))
        if outcome is None:
            click.echo(f"'{name}' not found", err=True)
            sys.exit(EXIT_FAILED)
        if not outcome.ok:
            click.echo(f"Error: {outcome.error}", err=True)
            sys.exit(EXIT_FAILED)
        click.echo(f"{name}: {'enabled' if outcome.enabled else 'disabled'}")


def _set_category_enabled(ctx: click.Context, category: str, enabled: bool, command: bool) -> None:
    kind = _kind(command)
    with _open_board(ctx) as engine:
        if category not in engine.categories(kind):
            click.echo(f"Category '{category}' not found", err=True)
            sys.exit(EXIT_FAILED)
        result = engine.set_enabled_for_category(category, enabled, kind)
        for failure in result.failures:
            click.echo(f"  failed: {failure.name}: {failure.error}", err=True)
        done = len(result.outcomes) - len(result.failures)
        click.echo(f"{'Enabled' if enabled else 'Disabled'} {done}/{len(result.outcomes)} in {category}")
        if result.failures:
            sys.exit(EXIT_PARTIAL)


@main.command("enable-all")
@click.argument("category")
@click.option("--command", is_flag=True, help="Work on slash-command categories")
@click.pass_context
def enable_all(ctx: click.Context, category: str, command: bool) -> None:
    """Enable every unit in CATEGORY."""
    _set_category_enabled(ctx, category, True, command)


@main.command("disable-all")
@click.argument("category")
@click.option("--command", is_flag=True, help="Work on slash-command categories")
@click.pass_context
def disable_all(ctx: click.Context, category: str, command: bool) -> None:
    """Disable every unit in CATEGORY."""
    _set_category_enabled(ctx, category, False, command)


@main.command()
@click.argument("name")
@click.argument("category")
@click.option("--command", is_flag=True, help="NAME is a slash command")
@click.pass_context
def move(ctx: click.Context, name: str, category: str, command: bool) -> None:
    """Move unit NAME into CATEGORY."""
    kind = _kind(command)
    with _open_board(ctx) as engine:
        if category not in engine.categories(kind):
            click.echo(f"Category '{category}' not found", err=True)
            sys.exit(EXIT_FAILED)
        engine.move_unit_to_category(name, category, kind)
        click.echo(f"{name} -> {category}")


@main.command()
@click.argument("name")
@click.option("--command", is_flag=True, help="NAME is a slash command")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, name: str, command: bool, yes: bool) -> None:
    """Delete unit NAME from disk."""
    kind = _kind(command)
    with _open_board(ctx) as engine:
        if engine.get_unit(name, kind) is None:
            click.echo(f"'{name}' not found", err=True)
            sys.exit(EXIT_FAILED)
        if not yes:
            click.confirm(f"Delete {kind.value} '{name}'?", abort=True)
        error = engine.delete_unit(name, kind)
        if error:
            click.echo(f"Error: {error}", err=True)
            sys.exit(EXIT_FAILED)
        click.echo(f"Deleted {name}")


# ── CATEGORIES ───────────────────────────────────────────────────────────


@main.group()
def category() -> None:
    """Manage categories."""
    pass


@category.command("list")
@click.option("--commands", is_flag=True, help="Slash-command categories")
@click.pass_context
def category_list(ctx: click.Context, commands: bool) -> None:
    """List categories in display order with unit counts."""
    kind = _kind(commands)
    with _open_board(ctx) as engine:
        counts = engine.unit_counts(kind)
        enabled = engine.enabled_counts(kind)
        for name in engine.categories(kind):
            click.echo(f"  {name:<24s} {enabled.get(name, 0)}/{counts.get(name, 0)}")


@category.command("add")
@click.argument("name")
@click.option("--commands", is_flag=True, help="Slash-command categories")
@click.pass_context
def category_add(ctx: click.Context, name: str, commands: bool) -> None:
    """Add an empty category at the end."""
    kind = _kind(commands)
    name = name.strip()
    with _open_board(ctx) as engine:
        if not name or name in engine.categories(kind):
            click.echo(f"Category '{name}' already exists or is empty", err=True)
            sys.exit(EXIT_FAILED)
        engine.add_category(name, kind)
        click.echo(f"Added {name}")


@category.command("rename")
@click.argument("old")
@click.argument("new")
@click.option("--commands", is_flag=True, help="Slash-command categories")
@click.pass_context
def category_rename(ctx: click.Context, old: str, new: str, commands: bool) -> None:
    """Rename category OLD to NEW, keeping its position."""
    kind = _kind(commands)
    new = new.strip()
    with _open_board(ctx) as engine:
        categories = engine.categories(kind)
        if old not in categories:
            click.echo(f"Category '{old}' not found", err=True)
            sys.exit(EXIT_FAILED)
        if new in categories and new != old:
            click.echo(f"Category '{new}' already exists", err=True)
            sys.exit(EXIT_FAILED)
        engine.rename_category(old, new, kind)
        click.echo(f"{old} -> {new or old}")


@category.command("remove")
@click.argument("name")
@click.option("--commands", is_flag=True, help="Slash-command categories")
@click.pass_context
def category_remove(ctx: click.Context, name: str, commands: bool) -> None:
    """Remove a category; its units move to the first category."""
    kind = _kind(commands)
    with _open_board(ctx) as engine:
        categories = engine.categories(kind)
        if name not in categories:
            click.echo(f"Category '{name}' not found", err=True)
            sys.exit(EXIT_FAILED)
        if len(categories) <= 1:
            click.echo("The last category cannot be removed", err=True)
            sys.exit(EXIT_FAILED)
        engine.remove_category(name, kind)
        click.echo(f"Removed {name}")


@category.command("reorder")
@click.argument("names", nargs=-1, required=True)
@click.option("--commands", is_flag=True, help="Slash-command categories")
@click.pass_context
def category_reorder(ctx: click.Context, names: tuple[str, ...], commands: bool) -> None:
    """Set the display order. NAMES must list every category exactly once."""
    kind = _kind(commands)
    with _open_board(ctx) as engine:
        current = engine.categories(kind)
        if sorted(names) != sorted(current):
            click.echo(f"Order must be a permutation of: {', '.join(current)}", err=True)
            sys.exit(EXIT_FAILED)
        engine.reorder_categories(list(names), kind)
        click.echo(", ".join(names))


# ── SETTINGS ─────────────────────────────────────────────────────────────


@main.command("slash-commands")
@click.argument("state", type=click.Choice(["on", "off"]))
@click.pass_context
def slash_commands(ctx: click.Context, state: str) -> None:
    """Turn loading of slash commands on or off."""
    with _open_board(ctx) as engine:
        engine.set_load_slash_commands(state == "on")
        click.echo(f"Slash commands: {state}")


@main.command("validate-config")
@click.pass_context
def validate_config(ctx: click.Context) -> None:
    """Validate the YAML configuration file."""
    app_config = _load_app_config(ctx)
    click.echo("Valid configuration")
    click.echo(f"  Project: {app_config.workspace.project or load_settings().project_path or '-'}")
    click.echo(f"  Default category: {app_config.engine.default_category}")
    click.echo(f"  Relocation workers: {app_config.engine.max_relocation_workers}")


@main.command()
@click.option("--interval", type=float, help="Seconds between reloads (default: engine.reload_interval or 5)")
@click.option("--iterations", type=int, default=0, help="Stop after N reloads (0 = run until Ctrl+C)")
@click.pass_context
def watch(ctx: click.Context, interval: float | None, iterations: int) -> None:
    """Reload periodically and print per-category counts when they change."""
    if interval is not None:
        ctx.obj["interval"] = interval
    with _open_board(ctx) as engine:
        delay = ctx.obj["app_config"].engine.reload_interval or 5.0
        last: tuple | None = None
        count = 0
        try:
            while True:
                snapshot = (
                    tuple(engine.categories()),
                    tuple(sorted(engine.unit_counts().items())),
                    tuple(sorted(engine.enabled_counts().items())),
                )
                if snapshot != last:
                    enabled = engine.enabled_counts()
                    counts = engine.unit_counts()
                    line = ", ".join(
                        f"{c} {enabled.get(c, 0)}/{counts.get(c, 0)}" for c in engine.categories()
                    )
                    click.echo(f"[{time.strftime('%H:%M:%S')}] {line}")
                    last = snapshot
                count += 1
                if iterations and count >= iterations:
                    break
                time.sleep(delay)
                try:
                    engine.reload()
                except LoadError as e:
                    click.echo(f"Reload failed: {e}", err=True)
        except KeyboardInterrupt:
            sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    main()
