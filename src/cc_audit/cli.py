"""CLI for cc-audit."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from cc_audit import __version__

app = typer.Typer(
    name="cc-audit",
    help="See what your Claude Code actually did.",
    add_completion=False,
)
console = Console(emoji=False, soft_wrap=True)
err_console = Console(stderr=True, emoji=False, soft_wrap=True)

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cc-audit {__version__}")
        raise typer.Exit()


def validate_date(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise typer.BadParameter("expected YYYY-MM-DD") from None
    return value


@app.command()
def main(
    date: Annotated[
        str | None,
        typer.Option(
            "--date", "-d", callback=validate_date, help="Show sessions from a specific date (YYYY-MM-DD)"
        ),
    ] = None,
    today: Annotated[bool, typer.Option("--today", "-t", help="Show all sessions from today")] = False,
    last: Annotated[int, typer.Option("--last", "-n", help="Show the N most recent sessions")] = 1,
    show_all: Annotated[bool, typer.Option("--all", "-a", help="Show all sessions (can be slow)")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
    projects_dir: Annotated[
        Path | None,
        typer.Option(
            "--projects-dir",
            envvar="CC_AUDIT_PROJECTS_DIR",
            help="Transcript directory (default: ~/.claude/projects)",
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log skipped sessions to stderr")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Audit Claude Code session transcripts.

    Reads session transcripts from ~/.claude/projects/ and generates a
    human-readable audit trail of AI actions. Runs entirely local.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from cc_audit.classifier import audit_session, shorten_path
    from cc_audit.models import AuditTotals
    from cc_audit.report import (
        build_json_report,
        print_header,
        print_session,
        print_share,
        print_totals,
    )
    from cc_audit.scanner import PROJECTS_DIR, ProjectsDirError, find_sessions, select_sessions
    from cc_audit.scanner import today as local_today

    target_date = date
    if today and target_date is None:
        target_date = local_today()
    root = projects_dir or PROJECTS_DIR

    if not json_output:
        print_header(console)
        console.print(f"  [dim]Scanning: {escape(shorten_path(str(root)))}[/dim]")

    try:
        sessions = find_sessions(target_date=target_date, root=root)
    except ProjectsDirError as e:
        err_console.print(f"  [red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    totals = AuditTotals()

    if not sessions:
        if json_output:
            console.print_json(data=build_json_report([], totals))
        else:
            suffix = f" for {target_date}" if target_date else ""
            console.print(f"\n  No sessions found{suffix}.")
        return

    to_audit = select_sessions(sessions, last_n=max(1, last), show_all=show_all, target_date=target_date)

    if not json_output:
        on_date = f" on {target_date}" if target_date else ""
        console.print(f"  [dim]Found {len(sessions)} sessions{on_date}. Auditing {len(to_audit)}.[/dim]")

    audited = []
    for session in to_audit:
        try:
            with err_console.status(f"Auditing {escape(session.project)}..."):
                result = audit_session(session)
        except OSError as e:
            logger.debug("Skipping %s: %s", session.path, e)
            continue

        audited.append((session, result))
        totals.add(result)
        if not json_output:
            print_session(console, session, result)

    if json_output:
        console.print_json(data=build_json_report(audited, totals))
        return

    if totals.sessions > 1:
        print_totals(console, totals)
    print_share(console, totals)


if __name__ == "__main__":
    app()
