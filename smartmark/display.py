"""Presentation attributes derived from stored bookmarks.

Every function here is total: malformed input degrades to a fallback value
and never raises.
"""
from datetime import datetime, timezone

from .urls import parse_absolute_url

FAVICON_ENDPOINT = "https://www.google.com/s2/favicons?domain={host}&sz=32"

PALETTE = (
    "violet",
    "blue",
    "cyan",
    "emerald",
    "amber",
    "rose",
    "pink",
    "indigo",
)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def domain_of(url: str) -> str:
    """Hostname without a leading "www.", or the raw input if it does not parse."""
    parsed = parse_absolute_url(url)
    if parsed is None:
        return url
    host = parsed.hostname or ""
    if host.startswith("www."):
        host = host[len("www."):]
    return host


def favicon_url(url: str, endpoint: str = FAVICON_ENDPOINT) -> str | None:
    parsed = parse_absolute_url(url)
    if parsed is None:
        return None
    return endpoint.format(host=parsed.hostname)


def initial_of(domain: str) -> str:
    return domain[:1].upper() or "?"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def fallback_color(domain: str) -> str:
    """
    Pick a palette entry for `domain` with the 31x rolling string hash.

    The hash wraps to a signed 32-bit integer after every character so the
    choice is the same on every run and platform.
    """
    h = 0
    for ch in domain or "":
        h = _to_int32(ord(ch) + ((h << 5) - h))
    return PALETTE[abs(h) % len(PALETTE)]


def _parse_timestamp(value: datetime | str) -> datetime | None:
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def format_short_date(ts: datetime) -> str:
    ts = ts.astimezone(timezone.utc)
    return f"{MONTHS[ts.month - 1]} {ts.day}"


def time_ago(timestamp: datetime | str, now: datetime | None = None) -> str:
    """
    Relative age label for `timestamp`.

    Minutes, hours and days are floored before each comparison; anything
    30 days or older is shown as an absolute "Mon D" date. Naive datetimes
    are read as UTC. Unparseable input is returned as given.
    """
    ts = _parse_timestamp(timestamp)
    if ts is None:
        return str(timestamp)

    now = _parse_timestamp(now) if now is not None else datetime.now(timezone.utc)

    mins = int((now - ts).total_seconds() // 60)
    if mins < 1:
        return "just now"
    if mins < 60:
        return f"{mins}m ago"
    hrs = mins // 60
    if hrs < 24:
        return f"{hrs}h ago"
    days = hrs // 24
    if days < 7:
        return f"{days}d ago"
    if days < 30:
        return f"{days // 7}w ago"
    return format_short_date(ts)
