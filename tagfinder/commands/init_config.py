"""Initialize configuration file for tag-finder."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from tagfinder.cli import Context, pass_context
from tagfinder.config import get_default_config_path
from tagfinder.utils.output import error, info, success


def _load_example_config() -> str:
    """Load the example configuration from package data."""
    return resources.files("tagfinder").joinpath("config.example.toml").read_text()


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/tag-finder/config.toml)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None) -> None:
    """Create a new configuration file with default settings.

    The generated file lists every option with its default and a short
    description.

    \b
    Examples:
      tag-finder init-config
      tag-finder init-config --output ./my-config.toml
      tag-finder init-config --force
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(1)

    config_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        config_path.write_text(_load_example_config())
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1)

    success(f"Created config file: {config_path}")
    info("Edit this file to customize your settings.")
