# periods.py
import calendar
import re
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Optional

MONTH_NAMES = [calendar.month_name[i].lower() for i in range(1, 13)]

_ARGS_RE = re.compile(r"^(\w+)(?:\s+(\d{4}))?$")


class InvalidPeriod(ValueError):
    """Raised when the user names a month or year we can't look up."""


@dataclass(frozen=True)
class Period:
    start: date
    end: date  # inclusive

    @property
    def label(self) -> str:
        return self.start.strftime("%B %Y")

    def bounds(self):
        """Half-open datetime range covering every moment of the period."""
        lower = datetime.combine(self.start, datetime.min.time())
        upper = datetime.combine(self.end + timedelta(days=1), datetime.min.time())
        return lower, upper


def month_period(year: int, month: int) -> Period:
    last_day = calendar.monthrange(year, month)[1]
    return Period(date(year, month, 1), date(year, month, last_day))


def resolve_period(month_name: Optional[str] = None, year: Optional[int] = None,
                   today: Optional[date] = None) -> Period:
    """
    Turn a month name + year into a concrete month range.
    No month name means the current month; no year means the current year.
    """
    today = today or date.today()
    if not month_name:
        return month_period(today.year, today.month)

    name = month_name.strip().lower()
    if name not in MONTH_NAMES:
        raise InvalidPeriod(month_name)
    if year is None:
        year = today.year
    # bounds() needs the day after the period to exist
    if not MINYEAR <= year <= MAXYEAR - 1:
        raise InvalidPeriod(f"{month_name} {year}")
    return month_period(year, MONTH_NAMES.index(name) + 1)


def parse_period_args(args: Optional[str], today: Optional[date] = None) -> Period:
    """Parse the text after a command, e.g. "january 2024" or "march"."""
    args = (args or "").strip()
    if not args:
        return resolve_period(today=today)

    m = _ARGS_RE.match(args)
    if not m:
        raise InvalidPeriod(args)
    month_name, year = m.group(1), m.group(2)
    return resolve_period(month_name, int(year) if year else None, today=today)


def year_period(year: int) -> Period:
    return Period(date(year, 1, 1), date(year, 12, 31))
