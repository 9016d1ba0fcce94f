"""Command-line entry point: `pascal-run run FILE` and `pascal-run select-compiler`."""

from __future__ import annotations

import asyncio
import logging
import platform as py_platform
import sys
from pathlib import Path
from typing import Optional

import click

from pascal_run.app_factory import RUN_COMMAND, SELECT_COMPILER_COMMAND, App, create_app

ACTIVATED_EVENT = "extension_activated"


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[pascal-run] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    # keep httpx request lines out of the default output
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _announce_activation(app: App) -> None:
    app.orchestrator.fire_and_forget(
        "analytics:" + ACTIVATED_EVENT,
        lambda: app.analytics.send_event(
            ACTIVATED_EVENT,
            {"platform": sys.platform, "python_version": py_platform.python_version()},
        ),
    )


async def _run(app: App) -> int:
    _announce_activation(app)
    result = await app.commands.execute(RUN_COMMAND)
    await app.orchestrator.drain()
    return 0 if result.ok else 1


async def _select_compiler(app: App) -> int:
    _announce_activation(app)
    compiler_path = await app.commands.execute(SELECT_COMPILER_COMMAND)
    await app.orchestrator.drain()
    if compiler_path:
        click.echo(compiler_path)
        return 0
    return 1


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="INI settings file (default: $PASCAL_RUN_INI or ~/.config/pascal-run/pascal_run.ini)",
)
@click.option("--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Compile and run Free Pascal programs.

    Usage analytics are off by default. They are sent only when measurement_id
    and api_secret are set in the [analytics] section of the settings file
    (set enabled = false there to turn them off again).
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("file", required=False)
@click.pass_context
def run(ctx: click.Context, file: Optional[str]):
    """Compile FILE and run the program in this terminal."""
    app = create_app(source_file=file, config_path=ctx.obj["config_path"])
    ctx.exit(asyncio.run(_run(app)))


@cli.command("select-compiler")
@click.pass_context
def select_compiler(ctx: click.Context):
    """Choose the fpc executable and save it to the settings file."""
    app = create_app(config_path=ctx.obj["config_path"])
    ctx.exit(asyncio.run(_select_compiler(app)))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
