"""Human-readable and JSON rendering of audit results."""

from datetime import datetime, timedelta
from typing import Any

from rich.console import Console
from rich.markup import escape

from cc_audit import __version__
from cc_audit.models import ActionKind, ActionRecord, AuditResult, AuditTotals, Session
from cc_audit.scanner import local_date

JSON_SCHEMA_VERSION = "1.0"

MAX_ACTIONS = 30
MAX_FILES_PER_KIND = 15

RULE = "═" * 39
THIN_RULE = "─" * 39

ACTION_ICONS = {
    ActionKind.CREATE: "[green]+[/green]",
    ActionKind.MODIFY: "[yellow]~[/yellow]",
    ActionKind.GIT: "[magenta]G[/magenta]",
    ActionKind.BASH: "[cyan]$[/cyan]",
    ActionKind.TASK: "[cyan]T[/cyan]",
}
DEFAULT_ICON = "[dim].[/dim]"


def format_time(ts: datetime | None) -> str:
    """Local HH:MM, or ??:?? when unknown."""
    if ts is None:
        return "??:??"
    return ts.astimezone().strftime("%H:%M")


def format_date(ts: datetime | None) -> str:
    if ts is None:
        return "????-??-??"
    return local_date(ts)


def duration_ms(session: Session) -> int | None:
    if session.ended_at is None:
        return None
    return (session.ended_at - session.started_at) // timedelta(milliseconds=1)


def duration_minutes(session: Session) -> int | None:
    """Whole minutes between start and end, floored."""
    ms = duration_ms(session)
    if ms is None:
        return None
    return ms // 60000


def format_duration(ms: int) -> str:
    """Render a duration as "1h 5m" or "5m"."""
    hours = ms // 3600000
    minutes = (ms % 3600000) // 60000
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def dedupe_actions(actions: list[ActionRecord]) -> list[ActionRecord]:
    """Collapse runs of consecutive actions with identical detail text."""
    shown: list[ActionRecord] = []
    last_detail: str | None = None
    for action in actions:
        if action.detail == last_detail:
            continue
        last_detail = action.detail
        shown.append(action)
    return shown


def timeline(actions: list[ActionRecord], limit: int = MAX_ACTIONS) -> tuple[list[ActionRecord], int]:
    """Deduplicated actions capped at `limit`, plus the number left out."""
    shown = dedupe_actions(actions)
    return shown[:limit], max(0, len(shown) - limit)


def share_text(totals: AuditTotals) -> str:
    """One-line shareable summary of the audited sessions."""
    text = (
        f"My AI did {totals.tool_calls} tool calls, created {totals.files_created} files, "
        f"ran {totals.bash_commands} commands, and made {totals.git_commits} commits"
    )
    if totals.risk_flags > 0:
        text += f" ({totals.risk_flags} risk flags!)"
    return text + "."


def print_header(console: Console) -> None:
    console.print(f"  [bold cyan]Claude Code Audit Log v{__version__}[/bold cyan]")
    console.print(f"  [dim]{RULE}[/dim]")


def print_session(console: Console, session: Session, result: AuditResult) -> None:
    """Print the full report for one session."""
    ms = duration_ms(session)
    duration = format_duration(ms) if ms is not None else "?"
    size_mb = session.size_bytes / 1048576
    subagent = " (subagent)" if session.is_subagent else ""

    console.print()
    console.print(
        f"  [bold]▸ Session: {format_date(session.started_at)} {format_time(session.started_at)}"
        f" → {format_time(session.ended_at)} ({duration})[/bold]"
    )
    console.print(
        f"    [dim]Project: {escape(session.project)}{subagent}  |  {size_mb:.1f}MB transcript[/dim]",
        emoji=False,
        soft_wrap=True,
    )

    console.print()
    console.print("  [bold]▸ Summary[/bold]")
    console.print(f"    Tool calls:     [bold]{result.tool_call_count}[/bold]")
    console.print(f"    Files created:  [bold]{len(result.files_created)}[/bold]")
    console.print(f"    Files modified: [bold]{len(result.files_modified)}[/bold]")
    console.print(f"    Files read:     [bold]{len(result.files_read)}[/bold]")
    console.print(f"    Bash commands:  [bold]{len(result.bash_commands)}[/bold]")
    console.print(f"    Git commits:    [bold]{len(result.git_commits)}[/bold]")

    if result.actions:
        shown, hidden = timeline(result.actions)
        console.print()
        console.print("  [bold]▸ Key Actions[/bold]")
        for action in shown:
            icon = ACTION_ICONS.get(action.kind, DEFAULT_ICON)
            console.print(
                f"    [dim]{format_time(action.timestamp)}[/dim]  {icon} {escape(action.detail)}",
                emoji=False,
                soft_wrap=True,
            )
        if hidden:
            console.print(f"    [dim]... and {hidden} more actions[/dim]")

    console.print()
    console.print("  [bold]▸ Risk Flags[/bold]")
    if not result.risk_flags:
        console.print("    [green]None detected[/green]")
    for flag in result.risk_flags:
        console.print(
            f"    [red]⚠ {escape(flag.label)}[/red] at {format_time(flag.timestamp)}", emoji=False, soft_wrap=True
        )
        console.print(f"      [dim]{escape(flag.command)}[/dim]", emoji=False, soft_wrap=True)

    if result.files_created or result.files_modified:
        console.print()
        console.print("  [bold]▸ Files Touched[/bold]")
        created = result.files_created[:MAX_FILES_PER_KIND]
        modified = result.files_modified[:MAX_FILES_PER_KIND]
        for path in created:
            console.print(f"    [green]NEW[/green]  {escape(path)}", emoji=False, soft_wrap=True)
        for path in modified:
            console.print(f"    [yellow]MOD[/yellow]  {escape(path)}", emoji=False, soft_wrap=True)
        hidden = len(result.files_created) + len(result.files_modified) - len(created) - len(modified)
        if hidden:
            console.print(f"    [dim]... and {hidden} more files[/dim]")


def print_totals(console: Console, totals: AuditTotals) -> None:
    console.print()
    console.print(f"  [dim]{THIN_RULE}[/dim]")
    console.print(f"  [bold]Totals across {totals.sessions} sessions:[/bold]")
    console.print(
        f"    Tool calls: {totals.tool_calls}  |  Created: {totals.files_created}  |  "
        f"Modified: {totals.files_modified}  |  Bash: {totals.bash_commands}  |  "
        f"Commits: {totals.git_commits}  |  Risks: {totals.risk_flags}",
        soft_wrap=True,
    )


def print_share(console: Console, totals: AuditTotals) -> None:
    console.print()
    console.print("  [dim]─── Share ───[/dim]")
    console.print(f"  [dim]{share_text(totals)}[/dim]", soft_wrap=True)
    console.print("  [dim]#ClaudeCode #AIAudit[/dim]")
    console.print()


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


def session_to_dict(session: Session, result: AuditResult) -> dict[str, Any]:
    """Structured form of one audited session."""
    shown, _ = timeline(result.actions)
    return {
        "project": session.project,
        "path": str(session.path),
        "is_subagent": session.is_subagent,
        "start": _iso(session.started_at),
        "end": _iso(session.ended_at),
        "duration_minutes": duration_minutes(session),
        "size_bytes": session.size_bytes,
        "summary": {
            "tool_calls": result.tool_call_count,
            "files_created": len(result.files_created),
            "files_modified": len(result.files_modified),
            "files_read": len(result.files_read),
            "bash_commands": len(result.bash_commands),
            "git_commits": len(result.git_commits),
            "risk_flags": len(result.risk_flags),
        },
        "actions": [
            {"time": _iso(a.timestamp), "type": a.kind, "detail": a.detail} for a in shown
        ],
        "risks": [flag.label for flag in result.risk_flags],
    }


def build_json_report(
    audited: list[tuple[Session, AuditResult]], totals: AuditTotals
) -> dict[str, Any]:
    """Assemble the structured report document."""
    return {
        "version": JSON_SCHEMA_VERSION,
        "session_count": len(audited),
        "sessions": [session_to_dict(session, result) for session, result in audited],
        "totals": {
            "sessions": totals.sessions,
            "tool_calls": totals.tool_calls,
            "files_created": totals.files_created,
            "files_modified": totals.files_modified,
            "bash_commands": totals.bash_commands,
            "git_commits": totals.git_commits,
            "risk_flags": totals.risk_flags,
        },
    }
