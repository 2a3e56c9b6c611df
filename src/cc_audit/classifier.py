"""Classify transcript records into an audit trail."""

import json
import logging
import os
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from cc_audit.models import (
    ActionKind,
    ActionRecord,
    AuditResult,
    BashCommand,
    GitCommit,
    Session,
)
from cc_audit.reader import iter_file_lines
from cc_audit.risk import flag_command

logger = logging.getLogger(__name__)

COMMAND_DETAIL_LIMIT = 80
OTHER_INPUT_LIMIT = 60

# Read-only programs whose invocations are left out of the timeline
NOISY_COMMAND = re.compile(r"^(ls|cat|head|tail|echo|pwd|date|wc|grep|find)\s")
MIN_COMMAND_LENGTH = 5

GIT_COMMIT = re.compile(r"git\s+commit")
GIT_PUSH = re.compile(r"git\s+push")

# High-volume tools with no audit value
SUPPRESSED_TOOLS = frozenset({"Glob", "Grep"})
IGNORED_TOOLS = frozenset({"NotebookEdit", "WebFetch", "WebSearch", "TaskOutput", "TaskStop"})


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware datetime, or return None.

    A "Z" suffix is accepted; naive timestamps are read as local time.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def shorten_path(path: str, home: str | None = None) -> str:
    """Replace a leading home directory with ~."""
    if home is None:
        home = str(Path.home())
    home = home.rstrip(os.sep)
    if home and (path == home or path.startswith(home + os.sep)):
        return "~" + path[len(home):]
    return path


def shorten_command(command: str, limit: int = COMMAND_DETAIL_LIMIT) -> str:
    """Truncate a command to at most `limit` characters, ending in "..."."""
    if len(command) > limit:
        return command[: limit - 3] + "..."
    return command


def is_notable_command(command: str) -> bool:
    """Whether a shell command deserves its own timeline entry."""
    trimmed = command.strip()
    return len(trimmed) > MIN_COMMAND_LENGTH and not NOISY_COMMAND.match(trimmed)


class AuditAccumulator:
    """Mutable state built up while scanning one transcript."""

    def __init__(self, home: str | None = None):
        self.home = home if home is not None else str(Path.home())
        self.result = AuditResult()
        # dicts keep first-seen order while collapsing repeats
        self.created: dict[str, None] = {}
        self.modified: dict[str, None] = {}
        self.read: dict[str, None] = {}

    def add_action(self, timestamp: datetime | None, kind: str, detail: str) -> None:
        self.result.actions.append(ActionRecord(timestamp=timestamp, kind=kind, detail=detail))

    def touch(self, bucket: dict[str, None], raw_path: Any) -> str:
        path = shorten_path(raw_path if isinstance(raw_path, str) else "", self.home)
        bucket.setdefault(path, None)
        return path

    def finish(self) -> AuditResult:
        """Return the finished result with file sets materialised as lists."""
        self.result.files_created = list(self.created)
        self.result.files_modified = list(self.modified)
        self.result.files_read = list(self.read)
        return self.result


def _handle_bash(acc: AuditAccumulator, timestamp: datetime | None, tool_input: dict) -> None:
    command = tool_input.get("command") or ""
    description = tool_input.get("description") or ""
    if not isinstance(command, str):
        command = str(command)
    if not isinstance(description, str):
        description = str(description)
    shown = shorten_command(command)

    acc.result.bash_commands.append(
        BashCommand(timestamp=timestamp, command=command, description=description)
    )

    if GIT_COMMIT.search(command):
        acc.result.git_commits.append(GitCommit(timestamp=timestamp, command=shown))
        acc.add_action(timestamp, ActionKind.GIT, "Git commit")
    elif GIT_PUSH.search(command):
        acc.add_action(timestamp, ActionKind.GIT, f"Git push: {shown}")

    acc.result.risk_flags.extend(flag_command(command, timestamp, shown))

    if is_notable_command(command):
        acc.add_action(timestamp, ActionKind.BASH, description or shown)


def classify_tool_use(acc: AuditAccumulator, timestamp: datetime | None, block: dict) -> None:
    """Record a single tool_use content block."""
    acc.result.tool_call_count += 1
    name = block.get("name")
    if not isinstance(name, str):
        name = None
    tool_input = block.get("input")
    if not isinstance(tool_input, dict):
        tool_input = {}

    if name == "Write":
        path = acc.touch(acc.created, tool_input.get("file_path"))
        acc.add_action(timestamp, ActionKind.CREATE, f"Created {path}")
    elif name == "Edit":
        path = acc.touch(acc.modified, tool_input.get("file_path"))
        acc.add_action(timestamp, ActionKind.MODIFY, f"Modified {path}")
    elif name == "Read":
        acc.touch(acc.read, tool_input.get("file_path"))
    elif name == "Bash":
        _handle_bash(acc, timestamp, tool_input)
    elif name == "Task":
        description = tool_input.get("description") or "subagent"
        acc.add_action(timestamp, ActionKind.TASK, f"Spawned agent: {description}")
    elif name in SUPPRESSED_TOOLS:
        pass
    elif name and name not in IGNORED_TOOLS:
        serialized = json.dumps(tool_input, ensure_ascii=False, separators=(",", ":"))
        acc.add_action(timestamp, ActionKind.OTHER, f"{name}: {serialized[:OTHER_INPUT_LIMIT]}")


def classify_record(record: Any, acc: AuditAccumulator) -> None:
    """Fold one parsed transcript record into the accumulator.

    Only assistant records with a list of content blocks are considered;
    every tool_use block counts as a tool call.
    """
    if not isinstance(record, dict) or record.get("type") != "assistant":
        return
    message = record.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, list):
        return

    timestamp = parse_timestamp(record.get("timestamp"))
    for block in content:
        if isinstance(block, dict) and block.get("type") == "tool_use":
            classify_tool_use(acc, timestamp, block)


def classify_line(line: str, acc: AuditAccumulator) -> None:
    """Parse one JSONL line and classify it; invalid JSON is skipped."""
    if not line.strip():
        return
    try:
        record = json.loads(line)
    except json.JSONDecodeError:
        # Partial or corrupted writes, usually at the end of a live transcript
        logger.debug("Skipping unparseable line: %.60s", line)
        return
    classify_record(record, acc)


def audit_lines(lines: Iterable[str], home: str | None = None) -> AuditResult:
    """Build an AuditResult from an iterable of JSONL lines."""
    acc = AuditAccumulator(home=home)
    for line in lines:
        classify_line(line, acc)
    return acc.finish()


def audit_session(session: Session, home: str | None = None) -> AuditResult:
    """Scan a full transcript file.

    Raises OSError if the file disappears or cannot be read.
    """
    return audit_lines(iter_file_lines(session.path), home=home)
