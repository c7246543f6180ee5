"""
Session management: each session is a folder on disk holding one committed
dashboard layout.

Sessions are identified by a short timestamp-based ID and stored under
  <SESSIONS_DIR>/<session_id>/

A session folder contains:
  session.json: metadata (created, last_modified, name)
  layout.json : the committed item list, in interchange shape

The engine itself is stateless; this module is where the calling layer
keeps the last committed layout between requests.
"""

from __future__ import annotations

import json
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from dashgrid.config import SESSIONS_DIR
from dashgrid.layout import GridItem, layout_to_dict, parse_layout


_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")

LAYOUT_FILE = "layout.json"


@dataclass
class Session:
    id: str
    path: Path
    created: str                         # ISO 8601
    last_modified: str                   # ISO 8601
    name: str = ""

    def save(self) -> None:
        """Persist session metadata to session.json."""
        self.last_modified = datetime.now(timezone.utc).isoformat()
        self.path.mkdir(parents=True, exist_ok=True)
        meta = {
            "id": self.id,
            "created": self.created,
            "last_modified": self.last_modified,
            "name": self.name,
        }
        (self.path / "session.json").write_text(
            json.dumps(meta, indent=2), encoding="utf-8")

    def write_layout(self, items: list[GridItem]) -> Path:
        """Commit *items* as this session's layout."""
        p = self.path / LAYOUT_FILE
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(layout_to_dict(items), indent=2, ensure_ascii=False),
                     encoding="utf-8")
        self.save()  # update last_modified
        return p

    def read_layout(self) -> list[GridItem]:
        """Read the committed layout.  A session with no layout is empty."""
        p = self.path / LAYOUT_FILE
        if not p.exists():
            return []
        return parse_layout(json.loads(p.read_text(encoding="utf-8")))


def _sessions_root() -> Path:
    return Path(SESSIONS_DIR)


def _generate_session_id() -> str:
    """Generate a short, unique, human-readable session ID."""
    return f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


def create_session(name: str = "", items: list[GridItem] | None = None) -> Session:
    """Create a new session with a fresh folder on disk."""
    root = _sessions_root()
    sid = _generate_session_id()
    while (root / sid).exists():
        sid = _generate_session_id()

    now = datetime.now(timezone.utc).isoformat()
    session = Session(
        id=sid,
        path=root / sid,
        created=now,
        last_modified=now,
        name=name,
    )
    session.write_layout(items or [])
    return session


def load_session(session_id: str) -> Session | None:
    """Load an existing session by ID. Returns None if not found."""
    if not _SESSION_ID_RE.match(session_id):
        return None
    path = _sessions_root() / session_id
    meta_path = path / "session.json"
    if not meta_path.exists():
        return None
    try:
        meta = json.loads(meta_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return None
    return Session(
        id=meta["id"],
        path=path,
        created=meta["created"],
        last_modified=meta["last_modified"],
        name=meta.get("name", ""),
    )


def list_sessions() -> list[dict]:
    """List all sessions, newest first. Returns lightweight metadata dicts."""
    root = _sessions_root()
    sessions = []
    if not root.exists():
        return sessions
    for d in sorted(root.iterdir(), reverse=True):
        if not d.is_dir():
            continue
        meta_path = d / "session.json"
        if not meta_path.exists():
            continue
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
            sessions.append({
                "id": meta["id"],
                "created": meta["created"],
                "last_modified": meta["last_modified"],
                "name": meta.get("name", ""),
            })
        except (json.JSONDecodeError, OSError):
            continue
    return sessions
