import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger("services.common")

_RELATIVE_RE = re.compile(r"^(-?\d+)([mhd])$")
_UNITS = {"m": "minutes", "h": "hours", "d": "days"}

# Characters with meaning in Telegram's legacy Markdown
_MARKDOWN_SPECIALS = ("_", "*", "`", "[")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return a timezone-aware UTC datetime (naive values are assumed UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_relative_time(text: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parse short relative delays like '30m', '2h' or '1d' into an absolute UTC time.
    Returns None for anything else.
    """
    if not text:
        return None
    match = _RELATIVE_RE.match(text.strip().lower())
    if not match:
        logger.debug("Unparseable relative time %r", text)
        return None
    amount, unit = int(match.group(1)), match.group(2)
    base = ensure_utc(now) if now else utc_now()
    try:
        return base + timedelta(**{_UNITS[unit]: amount})
    except OverflowError:
        logger.debug("Relative time out of range %r", text)
        return None


def format_datetime(dt: datetime) -> str:
    return ensure_utc(dt).strftime("%Y-%m-%d %H:%M UTC")


def truncate_text(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def escape_markdown(text: str) -> str:
    for ch in _MARKDOWN_SPECIALS:
        text = text.replace(ch, "\\" + ch)
    return text
