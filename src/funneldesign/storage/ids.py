"""Record identifiers and timestamps."""

from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone

_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LEN = 7


def new_id() -> str:
    """Millisecond clock prefix plus a random base36 suffix, e.g. ``1718000000000-k3x9q2a``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LEN))
    return f"{time.time_ns() // 1_000_000}-{suffix}"


def now() -> str:
    """UTC ISO-8601 timestamp with millisecond resolution, ``Z`` suffixed."""
    ts = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return ts.replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp. Values without an offset are taken as UTC."""
    ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts
