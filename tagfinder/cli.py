"""Command-line interface for tag-finder."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from tagfinder import __version__
from tagfinder.config import Config, load_config
from tagfinder.utils.output import (
    error,
    set_color,
    set_verbosity,
    warning,
)


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def _setup_logging(debug: bool) -> None:
    """Configure logging level."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Path to config file (default: ~/.config/tag-finder/config.toml)",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (implies --verbose)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress non-error output",
)
@click.version_option(version=__version__, prog_name="tag-finder")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """tag-finder: Search tagged files with a small boolean query language.

    Queries combine tags with implicit AND, " | " for OR, a leading "-" for
    NOT, parentheses for grouping and key:value path filters.

    Examples:

    \b
        # Show the SQL a query compiles to
        tag-finder compile "kick drum -snare (clap | fx) in:Drums/"

    \b
        # Run a query against the item database
        tag-finder search "kick -snare ext:wav"
    """
    ctx.ensure_object(Context)
    app_ctx = ctx.obj
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet

    set_verbosity(verbose=verbose, debug=debug)
    _setup_logging(debug)

    # Configure color output: disabled by --no-color, NO_COLOR env, or config
    disable_color = no_color or os.environ.get("NO_COLOR") is not None

    if disable_color:
        set_color(False)

    try:
        loaded_config, warnings = load_config(config)
        app_ctx.config = loaded_config

        if not disable_color and not loaded_config.colored_output:
            set_color(False)

        if not quiet:
            for warn in warnings:
                warning(warn)

    except Exception as e:
        error(str(e))
        ctx.exit(1)


@cli.command("help")
@click.argument("command", required=False, nargs=-1)
@click.pass_context
def help_cmd(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Show help for a command."""
    group = cli
    for name in command:
        cmd = group.get_command(ctx, name)
        if cmd is None:
            error(f"Unknown command: {name}")
            ctx.exit(1)
            return
        if isinstance(cmd, click.Group):
            group = cmd
        else:
            click.echo(cmd.get_help(ctx))
            return
    click.echo(group.get_help(ctx))


def register_commands() -> None:
    """Register all commands from the commands package."""
    from tagfinder.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


# Register commands on import
register_commands()
