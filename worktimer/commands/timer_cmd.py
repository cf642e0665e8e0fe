"""CLI handlers for timer commands."""

from __future__ import annotations

import asyncio

import click

from worktimer.commands._helpers import get_context, run
from worktimer.engine import codec
from worktimer.engine.duration import format_duration
from worktimer.engine.ticker import LiveTicker
from worktimer.models.session import SubjectKind


@click.group("timer")
def timer_group():
    """Start, pause, resume and stop work timers."""
    pass


@timer_group.command("start")
@click.argument("subject_id")
@click.option("--subtask", is_flag=True, help="Subject is a subtask rather than a task")
@click.option("--name", "-n", default="", help="Subject name for the creation note")
def timer_start(subject_id: str, subtask: bool, name: str):
    """Start a timer for a task or subtask."""
    kind = SubjectKind.SUBTASK if subtask else SubjectKind.TASK

    async def _start():
        ctx = await get_context()
        try:
            session = await ctx.timer_service.start(subject_id, kind, subject_name=name)
            await ctx.subject_repo.set_status(
                subject_id, kind, ctx.config.timer.in_progress_status
            )
            click.echo(f"Started session: {session.id}")
            click.echo(f"  Subject: {kind.value} {subject_id}")
            click.echo(f"  Start: {codec.format_timestamp(session.start_time)}")
        finally:
            await ctx.close()

    run(_start())


@timer_group.command("pause")
@click.argument("session_id")
def timer_pause(session_id: str):
    """Pause a running timer."""

    async def _pause():
        ctx = await get_context()
        try:
            await ctx.timer_service.pause(session_id)
            click.echo(f"Paused: {session_id}")
        finally:
            await ctx.close()

    run(_pause())


@timer_group.command("resume")
@click.argument("session_id")
def timer_resume(session_id: str):
    """Resume a paused timer."""

    async def _resume():
        ctx = await get_context()
        try:
            await ctx.timer_service.resume(session_id)
            click.echo(f"Resumed: {session_id}")
        finally:
            await ctx.close()

    run(_resume())


@timer_group.command("stop")
@click.argument("session_id")
@click.option("--comment", "-c", required=True, help="What was done during the session")
def timer_stop(session_id: str, comment: str):
    """Stop a timer and log the worked time."""

    async def _stop():
        ctx = await get_context()
        try:
            session = await ctx.timer_service.stop(session_id, comment)
            click.echo(f"Stopped: {session.id}")
            click.echo(f"  Duration: {format_duration(session.duration_minutes or 0)}")
        finally:
            await ctx.close()

    run(_stop())


@timer_group.command("status")
@click.argument("session_id")
def timer_status(session_id: str):
    """Show a session's timer state."""

    async def _status():
        ctx = await get_context()
        try:
            view = await ctx.board_service.session_view(session_id)
            s = view.session
            click.echo(f"Session: {s.id}")
            click.echo(f"  Subject: {s.subject_kind.value} {s.subject_name or s.subject_id}")
            click.echo(f"  Status: {view.status.value}")
            click.echo(f"  Elapsed: {view.display}")
            click.echo(f"  Paused total: {view.snapshot.total_paused_ms // 1000}s")
            if s.duration_minutes is not None:
                click.echo(f"  Duration: {format_duration(s.duration_minutes)}")
            if s.comment:
                click.echo(f"  Comment: {s.comment}")
        finally:
            await ctx.close()

    run(_status())


@timer_group.command("list")
def timer_list():
    """List open timers."""

    async def _list():
        ctx = await get_context()
        try:
            board = await ctx.board_service.load_board()
            click.echo(board.summary_text())
        finally:
            await ctx.close()

    run(_list())


@timer_group.command("log")
@click.argument("session_id")
def timer_log(session_id: str):
    """Print the decoded pause/resume/stop timeline of a session."""

    async def _log():
        ctx = await get_context()
        try:
            view = await ctx.board_service.session_view(session_id)
            click.echo(f"start    {codec.format_timestamp(view.session.start_time)}")
            for event in view.events:
                click.echo(f"{event.kind.value:<8} {codec.format_timestamp(event.at)}")
        finally:
            await ctx.close()

    run(_log())


@timer_group.command("history")
@click.argument("subject_id")
@click.option("--subtask", is_flag=True, help="Subject is a subtask rather than a task")
@click.option("--limit", default=20, help="Max sessions to show")
def timer_history(subject_id: str, subtask: bool, limit: int):
    """List past and open sessions for a task or subtask."""
    kind = SubjectKind.SUBTASK if subtask else SubjectKind.TASK

    async def _history():
        ctx = await get_context()
        try:
            sessions = await ctx.session_repo.list_by_subject(subject_id, kind, limit=limit)
            if not sessions:
                click.echo(f"No sessions for {kind.value} {subject_id}.")
                return
            for s in sessions:
                if s.is_terminal:
                    worked = format_duration(s.duration_minutes or 0)
                else:
                    worked = "open"
                line = f"{s.id}  {codec.format_timestamp(s.start_time)}  {worked:>8}"
                if s.comment:
                    line += f"  {s.comment}"
                click.echo(line)
        finally:
            await ctx.close()

    run(_history())


@timer_group.command("watch")
@click.argument("session_id")
def timer_watch(session_id: str):
    """Show a live counter, refetching the session periodically."""

    async def _watch():
        ctx = await get_context()
        ticker = None
        try:
            session = await ctx.session_repo.get(session_id)
            ticker = LiveTicker(
                start_time=session.start_time,
                event_log=session.event_log,
                end_time=session.end_time,
                interval=ctx.config.timer.tick_interval,
                on_tick=lambda text: click.echo(
                    f"\r{text} [{ticker.snapshot.status.value}]   ", nl=False
                ),
            )
            ticker.start()
            while ticker.is_active:
                await asyncio.sleep(ctx.config.timer.refresh_interval)
                session = await ctx.session_repo.get(session_id)
                ticker.update(session.event_log, session.end_time)
            click.echo("")
        finally:
            if ticker is not None:
                ticker.stop()
            await ctx.close()

    run(_watch())
