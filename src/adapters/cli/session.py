"""
adapters.cli.session - Local session credential storage.

Credentials (user_id + JWT access_token) are stored in
~/.mealplanner/session.json so the user stays signed in between CLI
invocations.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path

_SESSION_DIR  = Path.home() / ".mealplanner"
_SESSION_FILE = _SESSION_DIR / "session.json"


@dataclass
class Session:
    user_id: str
    access_token: str


def load_session() -> Session | None:
    """Return the stored session, or None if the user is not signed in."""
    if not _SESSION_FILE.exists():
        return None
    try:
        data = json.loads(_SESSION_FILE.read_text(encoding="utf-8"))
        return Session(**data)
    except (OSError, ValueError, TypeError):
        return None


def save_session(session: Session) -> None:
    """Persist session credentials to disk."""
    _SESSION_DIR.mkdir(parents=True, exist_ok=True)
    _SESSION_FILE.write_text(
        json.dumps(asdict(session), indent=2), encoding="utf-8"
    )


def clear_session() -> None:
    """Delete stored credentials (logout)."""
    if _SESSION_FILE.exists():
        _SESSION_FILE.unlink()
