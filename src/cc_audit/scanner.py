"""Session discovery and selection."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from cc_audit.classifier import parse_timestamp
from cc_audit.models import Session
from cc_audit.reader import read_first_last_line

logger = logging.getLogger(__name__)

# Claude Code sessions location
PROJECTS_DIR = Path.home() / ".claude" / "projects"
SUBAGENTS_DIR_NAME = "subagents"


class CcAuditError(Exception):
    """Base error for cc-audit."""


class ProjectsDirError(CcAuditError):
    """The projects directory cannot be read."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        message = f"Cannot read {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


def clean_project_name(dir_name: str) -> str:
    """Turn an encoded project directory name into a readable one.

    Path format: ~/.claude/projects/-home-name-projects-myapp/session.jsonl
    Returns: myapp (home prefix and a leading "projects" component dropped)
    """
    if dir_name.startswith("-tmp"):
        return "/tmp"

    parts = [p for p in dir_name.split("-") if p]
    if parts and parts[0] == "home" and len(parts) >= 2:
        rest = parts[2:]
        if not rest:
            return "~"
        if rest[0] == "projects":
            rest = rest[1:]
        return "-".join(rest) or "~"
    return dir_name


def local_date(dt: datetime) -> str:
    """Format the local calendar date of a timestamp as YYYY-MM-DD."""
    return dt.astimezone().strftime("%Y-%m-%d")


def today() -> str:
    """Today's local date as YYYY-MM-DD."""
    return datetime.now().strftime("%Y-%m-%d")


def _record_timestamp(record: Any) -> datetime | None:
    """Top-level timestamp, falling back to snapshot.timestamp."""
    if not isinstance(record, dict):
        return None
    value = record.get("timestamp")
    if not value:
        snapshot = record.get("snapshot")
        if isinstance(snapshot, dict):
            value = snapshot.get("timestamp")
    return parse_timestamp(value)


def load_session(path: Path, project: str, is_subagent: bool = False) -> Session | None:
    """Build a Session from a transcript's first and last records.

    Returns None when the file cannot be read or parsed, or has no start
    timestamp.
    """
    try:
        first_line, last_line, size = read_first_last_line(path)
        first = json.loads(first_line)
        last = json.loads(last_line)
    except (OSError, ValueError) as e:
        logger.debug("Skipping %s: %s", path, e)
        return None

    started_at = _record_timestamp(first)
    if started_at is None:
        logger.debug("Skipping %s: no start timestamp", path)
        return None

    return Session(
        path=path,
        project=project,
        started_at=started_at,
        ended_at=_record_timestamp(last),
        size_bytes=size,
        is_subagent=is_subagent,
    )


def _list_jsonl(directory: Path) -> list[Path]:
    try:
        return sorted(p for p in directory.iterdir() if p.name.endswith(".jsonl") and p.is_file())
    except OSError:
        return []


def find_sessions(target_date: str | None = None, root: Path | None = None) -> list[Session]:
    """Discover sessions under the projects directory.

    Args:
        target_date: Only keep sessions that started on this local date (YYYY-MM-DD).
        root: Projects directory, defaults to ~/.claude/projects.

    Returns sessions sorted by start time.

    Raises:
        ProjectsDirError: If the projects directory cannot be listed.
    """
    root = PROJECTS_DIR if root is None else root
    try:
        project_dirs = sorted(root.iterdir())
    except OSError as e:
        raise ProjectsDirError(root, e.strerror or str(e)) from e

    sessions: list[Session] = []
    for project_dir in project_dirs:
        if not project_dir.is_dir():
            continue
        project = clean_project_name(project_dir.name)

        candidates = [(p, False) for p in _list_jsonl(project_dir)]
        candidates += [(p, True) for p in _list_jsonl(project_dir / SUBAGENTS_DIR_NAME)]

        for path, is_subagent in candidates:
            session = load_session(path, project, is_subagent)
            if session is None:
                continue
            if target_date and local_date(session.started_at) != target_date:
                continue
            sessions.append(session)

    sessions.sort(key=lambda s: s.started_at)
    return sessions


def select_sessions(
    sessions: list[Session],
    last_n: int = 1,
    show_all: bool = False,
    target_date: str | None = None,
) -> list[Session]:
    """Pick the sessions to audit.

    With show_all or a target date every session is kept (subagents
    included); otherwise the last_n most recent main sessions.
    """
    if show_all or target_date:
        return list(sessions)
    main_sessions = [s for s in sessions if not s.is_subagent]
    if last_n <= 0:
        return []
    return main_sessions[-last_n:]
