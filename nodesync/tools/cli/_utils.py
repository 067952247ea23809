"""
Utilities specific to CLI functionality.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NoReturn

import typer
from click import Parameter
from rich.console import Console
from rich.logging import RichHandler
from typer import Context, Exit, Typer

from ...core.exceptions import SyncError

if TYPE_CHECKING:
    from .main import RootContext


console = Console()

rich_handler = RichHandler(
    console=console,
    rich_tracebacks=True,
    show_level=True,
    show_time=True,
    show_path=False,
)
rich_handler.setFormatter(logging.Formatter("%(message)s"))

logger = logging.getLogger("nodesync")
logger.setLevel(logging.INFO)
logger.addHandler(rich_handler)
logger.propagate = False


class MainTyper(Typer):
    """
    Typer app with preconfigured settings.
    """

    def __init__(self, name: str, *, help: str):
        return super().__init__(
            name=name,
            help=help,
            rich_markup_mode="markdown",
            no_args_is_help=True,
            add_completion=False,
        )


def get_root_context(ctx: Context) -> RootContext:
    from .main import RootContext

    root_context = ctx.obj
    assert isinstance(root_context, RootContext)
    return root_context


def lookup_param(ctx: Context, name: str) -> Parameter:
    """
    Lookup param by name.
    """
    param = next((p for p in ctx.command.params if p.name == name), None)
    assert param, f"Could not find param with name: {name}"
    return param


def confirm(message: str, *, dry_run: bool, yes: bool):
    """
    Ask for confirmation before a destructive operation unless not applicable,
    exiting if declined.
    """
    if dry_run or yes:
        return

    if not typer.confirm(message):
        logger.info("Aborted")
        raise Exit(code=0)


def report_error(error: SyncError) -> NoReturn:
    """
    Log sync error and exit with failure.
    """
    logger.error(f"{error.kind} error: {error}")
    raise Exit(code=1)
