# feed_utils.py
import datetime as dt
from feedparser.datetimes import _parse_date


def first_group(pattern, text):
    m = pattern.search(text)
    return m.group(1) if m else None

def now_utc():
    return dt.datetime.now(dt.timezone.utc)

def iso_z(when):
    # 2024-01-01T00:00:00.000Z
    return when.astimezone(dt.timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')

def _parse_iso(s):
    s = s.strip()
    if s[-1:] in ('Z', 'z'):
        s = s[:-1] + '+00:00'
    try:
        when = dt.datetime.fromisoformat(s)
    except ValueError:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=dt.timezone.utc)
    return when.astimezone(dt.timezone.utc)

def parse_feed_date(s, default=None):
    """
    Parse a feed date into an aware UTC datetime. ISO 8601 keeps its
    fractional seconds; anything else feedparser understands (RFC 822,
    W3C-DTF variants, ...) is parsed to whole seconds. Returns `default`
    when nothing matches.
    """
    if not s:
        return default
    when = _parse_iso(s)
    if when is not None:
        return when
    t = _parse_date(s)
    if not t:
        return default
    return dt.datetime(*t[:5], min(t[5], 59), tzinfo=dt.timezone.utc)
