"""Risk signatures for shell commands."""

import re
from datetime import datetime

from cc_audit.models import RiskFlag

# (pattern, label) pairs; a command is checked against every entry
RISK_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\brm\s+-rf\b"), "Recursive delete (rm -rf)"),
    (re.compile(r"\bgit\s+push\s+--force\b"), "Force push"),
    (re.compile(r"\bgit\s+reset\s+--hard\b"), "Hard reset"),
    (re.compile(r"\bgit\s+clean\s+-fd\b"), "Git clean"),
    # Flags start after whitespace, where \b cannot anchor a leading "-"
    (re.compile(r"\bcurl\b.*(?<!\S)-X\s*POST\b"), "HTTP POST request"),
    (re.compile(r"\bcurl\b.*(?<!\S)--data\b"), "HTTP POST with data"),
    (re.compile(r"\bnpm\s+publish\b"), "npm publish"),
    (re.compile(r"\bdrop\s+(table|database)\b", re.IGNORECASE), "Database drop"),
    (re.compile(r"\bsudo\b"), "Sudo command"),
    (re.compile(r"\bchmod\s+777\b"), "Chmod 777"),
    (re.compile(r"\bkill\s+-9\b"), "Force kill"),
]


def match_risks(command: str) -> list[str]:
    """Return the label of every risk signature the command matches."""
    return [label for pattern, label in RISK_PATTERNS if pattern.search(command)]


def flag_command(command: str, timestamp: datetime | None, shown: str | None = None) -> list[RiskFlag]:
    """Build risk flags for a command.

    Args:
        command: Raw command text, matched against the signatures.
        timestamp: When the command was issued.
        shown: Text to record on each flag (usually a truncated command).
    """
    text = command if shown is None else shown
    return [RiskFlag(timestamp=timestamp, label=label, command=text) for label in match_risks(command)]
