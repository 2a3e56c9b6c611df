"""Data models for cc-audit."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


class ActionKind:
    """Kinds of entries in a session's action timeline."""

    CREATE = "create"
    MODIFY = "modify"
    BASH = "bash"
    GIT = "git"
    TASK = "task"
    OTHER = "other"


@dataclass(frozen=True)
class Session:
    """A Claude Code session transcript (JSONL file)."""

    path: Path
    project: str
    started_at: datetime
    ended_at: datetime | None
    size_bytes: int
    is_subagent: bool = False


@dataclass
class ActionRecord:
    """A single entry in the action timeline."""

    timestamp: datetime | None
    kind: str
    detail: str


@dataclass
class BashCommand:
    timestamp: datetime | None
    command: str
    description: str


@dataclass
class GitCommit:
    timestamp: datetime | None
    command: str


@dataclass
class RiskFlag:
    """A shell command that matched a risk signature."""

    timestamp: datetime | None
    label: str
    command: str


@dataclass
class AuditResult:
    """Everything extracted from one full scan of a transcript."""

    actions: list[ActionRecord] = field(default_factory=list)
    files_created: list[str] = field(default_factory=list)
    files_modified: list[str] = field(default_factory=list)
    files_read: list[str] = field(default_factory=list)
    bash_commands: list[BashCommand] = field(default_factory=list)
    git_commits: list[GitCommit] = field(default_factory=list)
    risk_flags: list[RiskFlag] = field(default_factory=list)
    tool_call_count: int = 0


@dataclass
class AuditTotals:
    """Running totals across a batch of audited sessions."""

    sessions: int = 0
    tool_calls: int = 0
    files_created: int = 0
    files_modified: int = 0
    bash_commands: int = 0
    git_commits: int = 0
    risk_flags: int = 0

    def add(self, result: AuditResult) -> None:
        """Fold one session's result into the totals."""
        self.sessions += 1
        self.tool_calls += result.tool_call_count
        self.files_created += len(result.files_created)
        self.files_modified += len(result.files_modified)
        self.bash_commands += len(result.bash_commands)
        self.git_commits += len(result.git_commits)
        self.risk_flags += len(result.risk_flags)
