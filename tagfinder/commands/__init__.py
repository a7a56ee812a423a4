"""Command discovery and registration."""

from __future__ import annotations

import importlib
import pkgutil

import click


def discover_commands(package: str = __name__) -> list[click.Command]:
    """Return the click commands defined in the modules of ``package``.

    Every public module exposing a ``cli`` attribute that is a click
    command contributes it. Commands are sorted by name so help output is
    stable.
    """
    pkg = importlib.import_module(package)
    commands: list[click.Command] = []
    for module_info in pkgutil.iter_modules(pkg.__path__):
        if module_info.name.startswith("_"):
            continue

        module = importlib.import_module(f"{package}.{module_info.name}")
        cmd = getattr(module, "cli", None)
        if isinstance(cmd, click.Command):
            commands.append(cmd)

    return sorted(commands, key=lambda c: c.name or "")
