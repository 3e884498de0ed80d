"""
Options calendar: which weekly expiries to query, and days-to-expiry.

Expiries are searched in a short window around the Friday of the coming
week.  Early in the week (Mon/Tue) the current week's Friday is still far
enough away; from Wednesday on the window moves to next week.  Every
window starts on a Friday, so days-to-expiry always counts to a Friday.

    Mon -> Fri .. Sun (+4 .. +6)
    Tue -> Fri .. next Sat (+3 .. +11)
    Wed -> next Fri .. next Sun (+9 .. +11)
    Thu -> next Fri .. next Sun (+8 .. +10)
    Fri -> next Fri .. next Sun (+7 .. +9)
    Sat -> next Fri .. next Sun (+6 .. +8)
    Sun -> Fri .. Sun (+5 .. +7)
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

_EST = ZoneInfo("America/New_York")

# weekday() -> (days to window start, window length in days)
_WINDOWS = {
    0: (4, 2),
    1: (3, 8),
    2: (9, 2),
    3: (8, 2),
    4: (7, 2),
    5: (6, 2),
    6: (5, 2),
}


def _today(now: Optional[datetime]) -> date:
    if now is None:
        now = datetime.now(tz=_EST)
    elif now.tzinfo is not None:
        now = now.astimezone(_EST)
    return now.date()


def expiration_window(now: Optional[datetime] = None) -> tuple[date, date]:
    """Return ``(start, end)`` expiry dates to query, inclusive."""
    today = _today(now)
    offset, length = _WINDOWS[today.weekday()]
    start = today + timedelta(days=offset)
    return start, start + timedelta(days=length)


def days_to_expiry(expiry: Union[date, datetime], now: Optional[datetime] = None) -> int:
    """Calendar days from today (US/Eastern) to *expiry*; never negative."""
    if isinstance(expiry, datetime):
        expiry = expiry.astimezone(_EST).date() if expiry.tzinfo else expiry.date()
    return max((expiry - _today(now)).days, 0)
