"""Click CLI definitions - main entry point."""

from __future__ import annotations

import logging
import sys

import click

from worktimer.commands.config_cmd import config_group
from worktimer.commands.dashboard_cmd import dashboard_command
from worktimer.commands.timer_cmd import timer_group


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug: bool) -> None:
    """worktimer - track work sessions with pause/resume timers."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(timer_group, "timer")
cli.add_command(config_group, "config")
cli.add_command(dashboard_command, "dashboard")


if __name__ == "__main__":
    cli()
