"""cc-audit: see what Claude Code actually did in a session."""

__version__ = "1.0.0"
