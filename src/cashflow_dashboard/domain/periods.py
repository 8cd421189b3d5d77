from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta

from cashflow_dashboard.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PERIOD_KEY = "last_30_days"


class InvalidPeriodKeyError(ValueError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Invalid period key: {key!r}")
        self.key = key


def _years_ago(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return today.replace(year=today.year - years, day=28)


@dataclass(frozen=True)
class _PeriodDefinition:
    label: str
    label_short: str
    start: Callable[[date], date]


_PERIODS: dict[str, _PeriodDefinition] = {
    "last_day": _PeriodDefinition("Last Day", "1D", lambda today: today - timedelta(days=1)),
    "current_week": _PeriodDefinition(
        "Current Week", "WTD", lambda today: today - timedelta(days=today.weekday())
    ),
    "last_7_days": _PeriodDefinition("Last 7 Days", "7D", lambda today: today - timedelta(days=7)),
    "current_month": _PeriodDefinition("Current Month", "MTD", lambda today: today.replace(day=1)),
    "last_30_days": _PeriodDefinition("Last 30 Days", "30D", lambda today: today - timedelta(days=30)),
    "last_90_days": _PeriodDefinition("Last 90 Days", "90D", lambda today: today - timedelta(days=90)),
    "current_year": _PeriodDefinition("Current Year", "YTD", lambda today: today.replace(month=1, day=1)),
    "last_365_days": _PeriodDefinition(
        "Last 365 Days", "365D", lambda today: today - timedelta(days=365)
    ),
    "last_5_years": _PeriodDefinition("Last 5 Years", "5Y", lambda today: _years_ago(today, 5)),
}

PERIOD_KEYS = tuple(_PERIODS)


@dataclass(frozen=True)
class Period:
    """A named, inclusive date range used to scope aggregation."""

    key: str
    label: str
    label_short: str
    start_date: date
    end_date: date

    @classmethod
    def from_key(cls, key: str, today: date | None = None) -> Period:
        definition = _PERIODS.get(key)
        if definition is None:
            raise InvalidPeriodKeyError(key)
        current = today or date.today()
        return cls(
            key=key,
            label=definition.label,
            label_short=definition.label_short,
            start_date=definition.start(current),
            end_date=current,
        )

    @classmethod
    def last_30_days(cls, today: date | None = None) -> Period:
        return cls.from_key(DEFAULT_PERIOD_KEY, today=today)

    @classmethod
    def all(cls, today: date | None = None) -> list[Period]:
        return [cls.from_key(key, today=today) for key in PERIOD_KEYS]

    def contains(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date

    def to_dict(self) -> dict[str, str]:
        return {
            "key": self.key,
            "label": self.label,
            "label_short": self.label_short,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }


def resolve_period(key: str | None, today: date | None = None) -> Period:
    """Return the period for ``key``, falling back to the last 30 days."""
    if not key or not key.strip():
        return Period.last_30_days(today=today)
    try:
        return Period.from_key(key.strip(), today=today)
    except InvalidPeriodKeyError:
        logger.warning("[PERIOD] Unknown period key '%s'; falling back to %s.", key, DEFAULT_PERIOD_KEY)
        return Period.last_30_days(today=today)
