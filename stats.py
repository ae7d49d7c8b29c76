# ─────────────────────────────────────────────────────────────────
# stats.py - Uptime & Upload Statistics
#
# Pure functions over a DeviceSnapshot. No locks, no I/O, no state.
# A missing snapshot (None) is treated exactly like an empty one.
#
# UPTIME:
#   every heartbeat is dropped into its UTC minute bucket
#   uptime = distinct buckets / minutes in the observed window * 100
#   e.g. 10:00 and 10:02 → 2 buckets / 3 minutes → 66.67%
#
# AVERAGE UPLOAD:
#   truncating integer mean of the nanosecond samples, formatted
#   as a duration string like "5ns", "1.5s" or "2m3s"
# ─────────────────────────────────────────────────────────────────

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, NamedTuple, Optional, Sequence

from database import DeviceSnapshot

MINUTE = timedelta(minutes=1)

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND


class AverageUpload(NamedTuple):
    """
    duration → formatted mean, "0s" when there is nothing to average
    has_data → False when no samples exist

    Callers must check has_data: "0s" is also a valid real average.
    """

    duration: str
    has_data: bool


def unique_minute_count(times: Iterable[datetime]) -> int:
    """Counts distinct UTC calendar minutes (seconds truncated)."""
    buckets = {
        t.astimezone(timezone.utc).replace(second=0, microsecond=0)
        for t in times
    }
    return len(buckets)


def minutes_between_first_and_last(times: Sequence[datetime]) -> int:
    """
    Inclusive minute span between the earliest and latest timestamp.

    10:00:00 → 10:02:00 is 3 minutes: both boundary minutes count.
    Raises ValueError with fewer than two timestamps or when the
    earliest and latest are the same instant.
    """
    if len(times) < 2:
        raise ValueError("need at least two timestamps to form a window")

    earliest, latest = min(times), max(times)
    if latest <= earliest:
        raise ValueError("non-positive window")

    return (latest - earliest) // MINUTE + 1


def compute_uptime(snapshot: Optional[DeviceSnapshot]) -> float:
    """Percentage (0-100) of minutes in the heartbeat window with a heartbeat."""
    if snapshot is None or not snapshot.heartbeats:
        return 0.0

    uniq = unique_minute_count(snapshot.heartbeats)

    try:
        window = minutes_between_first_and_last(snapshot.heartbeats)
    except ValueError:
        # A single occupied instant has no window to be absent from
        return 100.0 if uniq > 0 else 0.0

    # Two heartbeats seconds apart across a minute boundary give
    # 2 buckets in a 1-minute window; uptime never exceeds 100
    return min((uniq / window) * 100.0, 100.0)


def compute_avg_upload(snapshot: Optional[DeviceSnapshot]) -> AverageUpload:
    if snapshot is None or not snapshot.upload_samples:
        return AverageUpload("0s", False)

    total = sum(snapshot.upload_samples)
    count = len(snapshot.upload_samples)

    # Truncate toward zero, not floor: -7 / 2 → -3
    mean = abs(total) // count
    if total < 0:
        mean = -mean

    return AverageUpload(format_duration(mean), True)


def round2(value: float) -> float:
    """Rounds to 2 decimals, halves away from zero (66.665 → 66.67)."""
    rounded = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(rounded)


# ─────────────────────────────────────────────────────────────────
# DURATION FORMATTING
# Largest unit first, only as many decimals as needed:
#   5           → "5ns"
#   1500        → "1.5µs"
#   1500000000  → "1.5s"
#   123 seconds → "2m3s"
#   1 hour      → "1h0m0s"
# ─────────────────────────────────────────────────────────────────

_SUB_SECOND_UNITS = (
    (MICROSECOND, NANOSECOND, "ns"),
    (MILLISECOND, MICROSECOND, "µs"),
    (SECOND, MILLISECOND, "ms"),
)


def _with_fraction(value: int, scale: int) -> str:
    """Writes value / scale, dropping trailing zeros and a bare decimal point."""
    whole, remainder = divmod(value, scale)
    if not remainder:
        return str(whole)
    width = len(str(scale)) - 1
    digits = str(remainder).rjust(width, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(nanoseconds: int) -> str:
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    remaining = abs(nanoseconds)

    if remaining < SECOND:
        for limit, scale, unit in _SUB_SECOND_UNITS:
            if remaining < limit:
                return f"{sign}{_with_fraction(remaining, scale)}{unit}"

    total_seconds, fraction = divmod(remaining, SECOND)
    text = _with_fraction((total_seconds % 60) * SECOND + fraction, SECOND) + "s"

    total_minutes = total_seconds // 60
    if total_minutes:
        text = f"{total_minutes % 60}m{text}"
        hours = total_minutes // 60
        if hours:
            text = f"{hours}h{text}"

    return sign + text
