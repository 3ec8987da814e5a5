"""ID and timestamp utilities."""

import secrets
import string
from datetime import datetime, timezone

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 8


def generate_id() -> str:
    """Generate a short agent ID: 8 lowercase base-36 characters."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def now_ts() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def parse_ts(value: str) -> datetime:
    """Parse a timestamp produced by now_ts()."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
