"""Pytest fixtures for cc-audit tests."""

import json
import tempfile
import time
from pathlib import Path

import pytest


def tool_use(name, **tool_input):
    """A tool_use content block."""
    return {"type": "tool_use", "id": f"toolu_{name}", "name": name, "input": tool_input}


def assistant(timestamp, *blocks):
    """An assistant record carrying the given content blocks."""
    return {
        "type": "assistant",
        "timestamp": timestamp,
        "message": {"role": "assistant", "content": list(blocks)},
    }


def user(timestamp, text="hello"):
    return {"type": "user", "timestamp": timestamp, "message": {"role": "user", "content": text}}


def write_jsonl(path: Path, records) -> Path:
    """Write records (dicts or raw strings) as a JSONL file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            line = record if isinstance(record, str) else json.dumps(record)
            f.write(line + "\n")
    return path


@pytest.fixture(autouse=True)
def utc_timezone(monkeypatch):
    """Run every test with UTC as the local timezone."""
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_session_jsonl(temp_dir):
    """Create a sample transcript with a few file, shell and agent actions."""
    records = [
        user("2024-01-15T10:00:00Z", "Build the thing"),
        assistant(
            "2024-01-15T10:00:05Z",
            {"type": "text", "text": "Sure."},
            tool_use("Write", file_path="/home/u/proj/a.py", content="print(1)"),
        ),
        assistant("2024-01-15T10:01:00Z", tool_use("Edit", file_path="/home/u/proj/a.py")),
        assistant("2024-01-15T10:02:00Z", tool_use("Read", file_path="/home/u/proj/b.py")),
        assistant(
            "2024-01-15T10:03:00Z",
            tool_use("Bash", command="pytest -q", description="Run tests"),
            tool_use("Bash", command="git commit -m 'x'"),
        ),
        assistant("2024-01-15T10:04:00Z", tool_use("Task", description="review code")),
        assistant("2024-01-15T10:05:00Z", tool_use("Grep", pattern="foo")),
    ]
    return write_jsonl(temp_dir / "test-session.jsonl", records)


@pytest.fixture
def projects_dir(temp_dir):
    """A fake ~/.claude/projects tree with main and subagent sessions."""
    root = temp_dir / "projects"
    project = root / "-home-u-projects-myapp"
    other = root / "-home-u-work-api"

    write_jsonl(
        project / "first.jsonl",
        [
            user("2024-01-15T09:00:00Z"),
            assistant("2024-01-15T09:10:00Z", tool_use("Bash", command="npm install")),
        ],
    )
    write_jsonl(
        project / "second.jsonl",
        [
            user("2024-01-16T09:00:00Z"),
            assistant("2024-01-16T09:30:00Z", tool_use("Write", file_path="/tmp/x.txt")),
        ],
    )
    write_jsonl(
        other / "third.jsonl",
        [
            user("2024-01-17T09:00:00Z"),
            assistant("2024-01-17T10:05:00Z", tool_use("Bash", command="sudo rm -rf /tmp/cache")),
        ],
    )
    write_jsonl(
        other / "subagents" / "agent-1.jsonl",
        [
            user("2024-01-17T09:30:00Z"),
            assistant("2024-01-17T09:40:00Z", tool_use("Edit", file_path="/tmp/y.txt")),
        ],
    )
    # Skipped: no timestamp on the first record, and unparseable head
    write_jsonl(project / "no-timestamp.jsonl", [{"type": "summary", "summary": "x"}])
    write_jsonl(project / "garbage.jsonl", ["not json at all"])
    (project / "notes.txt").write_text("ignored")

    return root
