# ─────────────────────────────────────────────────────────────────
# validation.py - Timestamp Parsing & Sanity Window
#
# Every sent_at value passes through here before it reaches the
# store. Two steps:
#   1. parse_timestamp()    → RFC 3339 string to an aware UTC datetime
#   2. validate_timestamp() → reject values outside the policy window
#
# A device with a broken clock would otherwise stretch the uptime
# window by days and drag its uptime towards zero.
# ─────────────────────────────────────────────────────────────────

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from exceptions import BadInputError

# 2025-10-25T10:00:00Z, 2025-10-25T12:00:00.123+02:00 ...
# The offset is mandatory: a naive timestamp cannot be placed in UTC.
_RFC3339 = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


@dataclass(frozen=True)
class TimestampPolicy:
    """
    Accepted window for incoming timestamps, relative to the server clock.

    enabled=False turns the window check off completely
    (parsing is still enforced).
    """

    enabled: bool = True
    max_age: timedelta = timedelta(hours=24)
    max_future: timedelta = timedelta(minutes=5)


def parse_timestamp(text: str) -> datetime:
    """Parses an RFC 3339 date-time and returns it converted to UTC."""
    match = _RFC3339.fullmatch(text or "")
    if match is None:
        raise BadInputError(f"invalid sent_at format: {text}")

    parts = match.groupdict()
    # Sub-microsecond digits are dropped, not rounded
    fraction = (parts["fraction"] or "")[:6].ljust(6, "0")
    offset = "+00:00" if parts["offset"] == "Z" else parts["offset"]

    try:
        parsed = datetime.fromisoformat(f"{parts['date']}T{parts['time']}.{fraction}{offset}")
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        raise BadInputError(f"invalid sent_at format: {text}") from None


def validate_timestamp(
    timestamp: datetime,
    policy: TimestampPolicy,
    now: Optional[datetime] = None,
) -> None:
    """Raises BadInputError if the timestamp is outside the policy window."""
    if not policy.enabled:
        return

    now = now or datetime.now(timezone.utc)

    if timestamp < now - policy.max_age:
        raise BadInputError(f"timestamp too old (>{_describe(policy.max_age)})")

    if timestamp > now + policy.max_future:
        raise BadInputError(f"timestamp too far in future (>{_describe(policy.max_future)})")


def parse_and_validate(
    text: str,
    policy: TimestampPolicy,
    now: Optional[datetime] = None,
) -> datetime:
    timestamp = parse_timestamp(text)
    validate_timestamp(timestamp, policy, now=now)
    return timestamp


def _describe(window: timedelta) -> str:
    seconds = int(window.total_seconds())
    if seconds % 3600 == 0:
        return f"{seconds // 3600}h"
    if seconds % 60 == 0:
        return f"{seconds // 60}min"
    return f"{seconds}s"
