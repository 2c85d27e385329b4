"""
Utility helpers shared across routers/services.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import secrets
import time

from .errors import AccessDeniedError

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def utc_now_iso() -> str:
    """
    Current time as ISO-8601 in UTC with millisecond precision ("...T12:00:00.000Z").
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms() -> int:
    return int(time.time() * 1000)


def random_suffix(length: int = 7) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_record_id(collection: str) -> str:
    """
    Server-side id for records posted without one: "<collection>-<epoch ms>-<base36>".
    """
    return f"{collection}-{epoch_ms()}-{random_suffix()}"


def resolve_within_root(root: Path | str, relative: str) -> Path:
    """
    Resolve ``relative`` against ``root`` and refuse anything that lands outside it.
    """
    base = Path(root).resolve()
    cleaned = (relative or "").replace("\\", "/").lstrip("/")
    target = (base / cleaned).resolve()
    if target != base and not target.is_relative_to(base):
        raise AccessDeniedError("Invalid file path")
    return target
