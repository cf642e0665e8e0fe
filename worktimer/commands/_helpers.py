"""CLI helpers: context setup and error reporting."""

from __future__ import annotations

import asyncio
import logging

import click
from pymongo.errors import PyMongoError

from worktimer.errors import TimerError

logger = logging.getLogger(__name__)


def run(coro):
    """Run an async command body, reporting engine errors as exit status 1."""
    try:
        return asyncio.run(coro)
    except TimerError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e


async def get_context():
    """Create and initialize an AppContext. Exits if MongoDB is unreachable."""
    from worktimer.context import AppContext

    ctx = AppContext()
    try:
        await ctx.initialize()
    except PyMongoError as e:
        await ctx.close()
        raise SystemExit(
            f"Cannot reach MongoDB at {ctx.config.mongodb.uri}: {e}"
        ) from e
    return ctx
