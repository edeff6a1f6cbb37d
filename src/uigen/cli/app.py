"""CLI entry point for uigen."""

import json
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.prompt import Confirm

from uigen import __version__
from uigen.cli.constants import ExitCodes
from uigen.cli.display import (
    build_file_tree,
    build_projects_table,
    build_results_table,
    build_settings_table,
)
from uigen.cli.utils import get_console, read_command_lines, read_snapshot, setup_logging
from uigen.codec import TreeCodec
from uigen.config import (
    ConfigurationError,
    WorkspaceSettings,
    get_config_path,
    load_settings,
    save_config,
)
from uigen.exceptions import MalformedSnapshotError
from uigen.persistence import ProjectStore
from uigen.tools import ToolExecutor
from uigen.utils.responses import CommandResult

app = typer.Typer(help="UIGen workspace - replay tool commands against virtual file trees")

console = get_console()

logger = logging.getLogger(__name__)

# Context meta key for the settings file the root callback loaded
CONFIG_PATH_KEY = "uigen.config_path"


def _settings(ctx: typer.Context) -> WorkspaceSettings:
    settings = ctx.find_root().obj
    if isinstance(settings, WorkspaceSettings):
        return settings
    return WorkspaceSettings()


def _codec(settings: WorkspaceSettings, strict: bool | None = None) -> TreeCodec:
    return TreeCodec(strict=settings.strict_snapshots if strict is None else strict)


def _store(settings: WorkspaceSettings) -> ProjectStore:
    return ProjectStore(settings.projects_dir, codec=_codec(settings))


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool = typer.Option(False, "--version", help="Show version"),
    log_level: str = typer.Option(
        None, "--log-level", help="Log level (debug, info, warning, error, critical)"
    ),
    config_file: Path = typer.Option(
        None, "--config", help="Settings file (defaults to ~/.uigen/settings.json)"
    ),
) -> None:
    """UIGen workspace tools.

    \b
    Examples:
        uigen replay snapshot.json commands.jsonl     # Apply commands to a snapshot
        uigen replay - commands.jsonl -o out.json     # Start from an empty tree
        uigen show snapshot.json                      # Render a snapshot as a tree
        uigen project list                            # List stored projects
        uigen config show                             # Show effective configuration
    """
    if version_flag:
        console.print(f"UIGen version {__version__}")
        raise typer.Exit()

    load_dotenv()

    try:
        settings = load_settings(config_file)
    except ConfigurationError as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    setup_logging(log_level, settings)
    ctx.obj = settings
    ctx.meta[CONFIG_PATH_KEY] = config_file or get_config_path()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command("replay")
def replay_command(
    ctx: typer.Context,
    snapshot: str = typer.Argument(..., help="Snapshot JSON file, or '-' for an empty tree"),
    commands: Path = typer.Argument(..., help="JSON-lines file with one command per line"),
    output: Path = typer.Option(None, "-o", "--output", help="Write the resulting snapshot here"),
    save_as: str = typer.Option(None, "--save-as", help="Store the result as a project"),
    strict: bool = typer.Option(
        None, "--strict/--lenient", help="Snapshot decode policy (defaults to settings)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON lines"),
) -> None:
    """Apply a stream of tool commands to a snapshot."""
    settings = _settings(ctx)
    codec = _codec(settings, strict)

    try:
        tree = read_snapshot(snapshot, codec)
    except (FileNotFoundError, MalformedSnapshotError) as e:
        console.print(f"[red]Cannot load snapshot:[/red] {e}")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    if not commands.exists():
        console.print(f"[red]Command file not found:[/red] {commands}")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    executor = ToolExecutor(tree, settings)
    results: list[tuple[int, CommandResult]] = []
    try:
        for number, result in enumerate(executor.run(read_command_lines(commands)), start=1):
            results.append((number, result))
    except KeyboardInterrupt:
        console.print(f"\n[yellow]Interrupted after {len(results)} commands[/yellow]\n")
        raise typer.Exit(ExitCodes.INTERRUPTED)

    if json_output:
        for _, result in results:
            typer.echo(json.dumps(result.to_dict()))
    else:
        console.print(build_results_table(results))

    if output is not None:
        output.write_text(codec.encode_json(tree, indent=2), encoding="utf-8")
        if not json_output:
            console.print(f"[dim]Snapshot written to {output}[/dim]")

    if save_as:
        try:
            _store(settings).save_project(save_as, tree)
        except ValueError as e:
            console.print(f"[red]Cannot save project:[/red] {e}")
            raise typer.Exit(ExitCodes.GENERAL_ERROR)
        if not json_output:
            console.print(f"[dim]Saved project '{save_as}'[/dim]")

    failed = sum(1 for _, result in results if not result.success)
    logger.info(f"Replayed {len(results)} commands, {failed} failed")
    if failed:
        raise typer.Exit(ExitCodes.COMMAND_FAILED)


@app.command("show")
def show_command(
    ctx: typer.Context,
    snapshot: Path = typer.Argument(..., help="Snapshot JSON file"),
    strict: bool = typer.Option(
        None, "--strict/--lenient", help="Snapshot decode policy (defaults to settings)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the re-encoded snapshot"),
) -> None:
    """Render a snapshot as a tree."""
    codec = _codec(_settings(ctx), strict)

    try:
        tree = read_snapshot(str(snapshot), codec)
    except (FileNotFoundError, MalformedSnapshotError) as e:
        console.print(f"[red]Cannot load snapshot:[/red] {e}")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    if json_output:
        typer.echo(codec.encode_json(tree, indent=2))
        return

    console.print(build_file_tree(tree))
    summary = tree.summary()
    console.print(f"[dim]{summary['files']} files, {summary['directories']} directories[/dim]")


# Project command group
project_app = typer.Typer(help="Manage stored projects")
app.add_typer(project_app, name="project")


@project_app.callback(invoke_without_command=True)
def project_callback(ctx: typer.Context) -> None:
    """Project command callback - shows help if no subcommand given."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@project_app.command("list")
def project_list_command(ctx: typer.Context) -> None:
    """List stored projects."""
    projects = _store(_settings(ctx)).list_projects()
    if not projects:
        console.print("[yellow]No stored projects.[/yellow]")
        return
    console.print(build_projects_table(projects))


@project_app.command("show")
def project_show_command(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project identifier"),
) -> None:
    """Render a stored project's file tree."""
    try:
        tree, metadata = _store(_settings(ctx)).load_project(project_id)
    except (FileNotFoundError, ValueError, MalformedSnapshotError) as e:
        console.print(f"[red]Cannot load project:[/red] {e}")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    console.print(build_file_tree(tree, title=project_id))
    if metadata:
        console.print(f"[dim]Metadata keys: {', '.join(sorted(metadata))}[/dim]")


@project_app.command("delete")
def project_delete_command(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project identifier"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a stored project."""
    if not yes and not Confirm.ask(f"Delete project '{project_id}'?", default=False):
        console.print("[dim]Cancelled.[/dim]")
        return

    try:
        _store(_settings(ctx)).delete_project(project_id)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Cannot delete project:[/red] {e}")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    console.print(f"[green]✓[/green] Deleted project '{project_id}'")


# Config command group
config_app = typer.Typer(help="Manage uigen configuration")
app.add_typer(config_app, name="config")


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    """Config command callback - shows help if no subcommand given."""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@config_app.command("show")
def config_show_command(ctx: typer.Context) -> None:
    """Display the effective configuration (file plus environment overrides)."""
    console.print(build_settings_table(_settings(ctx)))
    config_path = ctx.meta.get(CONFIG_PATH_KEY) or get_config_path()
    console.print(f"[dim]Configuration file: {config_path}[/dim]", soft_wrap=True)


@config_app.command("init")
def config_init_command(
    data_dir: str = typer.Option(None, "--data-dir", help="Root directory for stored projects"),
    max_file_bytes: int = typer.Option(None, "--max-file-bytes", help="Maximum file size"),
    strict: bool = typer.Option(
        None, "--strict/--lenient", help="Reject snapshots with undeclared parent directories"
    ),
    log_level: str = typer.Option(None, "--log-level", help="Default log level"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing settings file"),
    config_file: Path = typer.Option(None, "--config", help="Settings file to write"),
) -> None:
    """Create a settings file."""
    config_path = config_file or get_config_path()
    if config_path.exists() and not force:
        console.print(
            f"[yellow]Configuration already exists at {config_path}[/yellow] "
            "(use --force to overwrite)"
        )
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    values: dict = {}
    if data_dir:
        values["storage"] = {"data_dir": data_dir}
    if max_file_bytes is not None:
        values["editor"] = {"max_file_bytes": max_file_bytes}
    if strict is not None:
        values["snapshot"] = {"strict": strict}
    if log_level:
        values["logging"] = {"level": log_level}

    try:
        settings = WorkspaceSettings(**values)
        save_config(settings, config_path)
    except (ValueError, ConfigurationError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(ExitCodes.GENERAL_ERROR)

    console.print(f"[green]✓[/green] Configuration saved to {config_path}")


if __name__ == "__main__":
    app()
