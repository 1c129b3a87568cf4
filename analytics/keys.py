"""Redis key names, calendar helpers and visitor identities for view counters.

Redis keys used (prefixes are configurable):
    pv:daily:{YYYY-MM-DD}  -- string counter of site-wide page views
    uv:daily:{YYYY-MM-DD}  -- HyperLogLog of site-wide unique visitors
    post:ranking:views     -- sorted set leaderboard, member = content id
"""

import hashlib
from datetime import date, datetime, timedelta

import pytz

from db.config import settings

# Largest value the durable INTEGER columns hold
INT32_MAX = 2**31 - 1

UNKNOWN_ADDRESS = "unknown"


def today(now: datetime | None = None) -> date:
    """Calendar date in the configured analytics timezone."""
    tz = pytz.timezone(settings.analytics_timezone)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    return now.astimezone(tz).date()


def yesterday(now: datetime | None = None) -> date:
    return today(now) - timedelta(days=1)


def page_view_key(day: date) -> str:
    return f"{settings.analytics_pv_key_prefix}{day.isoformat()}"


def unique_visitor_key(day: date) -> str:
    return f"{settings.analytics_uv_key_prefix}{day.isoformat()}"


def ranking_key() -> str:
    return settings.analytics_ranking_key


def _hash_address(address: str, day: date) -> str:
    """One-way digest of a client address, salted with the calendar day.

    The salt only has to be stable within a day, since each day's visitors
    go to their own HyperLogLog.
    """
    return hashlib.sha256(f"{address}:{day.isoformat()}".encode()).hexdigest()


def visitor_identity(
    user_id: int | str | None = None,
    client_ip: str | None = None,
    day: date | None = None,
) -> str:
    """Build the HyperLogLog input for one visitor.

    Authenticated users count as ``user:<id>`` wherever they browse from;
    anonymous visitors count by address as ``ip:<address>``.
    """
    if user_id is not None and str(user_id) != "":
        return f"user:{user_id}"

    address = (client_ip or "").strip() or UNKNOWN_ADDRESS
    if settings.analytics_hash_visitor_ip and address != UNKNOWN_ADDRESS:
        address = _hash_address(address, day or today())
    return f"ip:{address}"


def _decode(raw) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


def parse_counter(raw) -> int:
    """Parse a stored counter value; missing or corrupt values read as 0."""
    value = _decode(raw)
    if value is None:
        return 0
    try:
        parsed = int(value.strip())
    except ValueError:
        return 0
    return max(parsed, 0)


def parse_member_id(raw) -> int | None:
    """Content id from a leaderboard member, or None when it is not one."""
    value = _decode(raw)
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def clamp_to_int32(value: int) -> int:
    return max(0, min(INT32_MAX, int(value)))
