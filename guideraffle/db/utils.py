import json
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Sequence


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


def dt_iso(dt: Optional[datetime]) -> Optional[str]:
    """Convert a datetime to an ISO 8601 string in UTC, or return None.

    Naive datetimes (SQLite drops tzinfo on read) are treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def encode_ticket_list(tickets: Sequence[int]) -> str:
    """Serialize ticket numbers to the compact JSON text stored per winner."""
    return json.dumps([int(t) for t in tickets], separators=(",", ":"))


def decode_ticket_list(raw: Optional[str]) -> list[int]:
    """Inverse of :func:`encode_ticket_list`; ``None`` or empty yields ``[]``."""
    if not raw:
        return []
    return [int(t) for t in json.loads(raw)]
