"""
Service calendar resolution.

Compiles calendar.txt (weekly recurrence plus date range) and
calendar_dates.txt (per-date additions and removals) into a predicate
"is service S running on date D".

Rules are evaluated in a fixed order and the first one that reaches a
decision wins:

1. exception     - a calendar_dates row for this exact service and date
2. no_calendar   - the service has no calendar.txt row
3. date_range    - the date falls outside start_date..end_date
4. weekday       - the weekday flag for the date
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

import pandas as pd

from .loader import iter_records
from .models import normalize_date_key

# Flag order matches the weekday index used everywhere else: 0=Sunday
WEEKDAY_COLUMNS = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

EXCEPTION_ADDED = "added"
EXCEPTION_REMOVED = "removed"
_EXCEPTION_TYPES = {"1": EXCEPTION_ADDED, "2": EXCEPTION_REMOVED}


@dataclass(frozen=True)
class Service:
    """
    A calendar.txt row.

    Attributes:
        service_id: Service identifier
        weekdays: Seven flags, Sunday first
        start_date: YYYYMMDD, or "" for no lower bound
        end_date: YYYYMMDD, or "" for no upper bound
    """
    service_id: str
    weekdays: Tuple[bool, ...] = (False,) * 7
    start_date: str = ""
    end_date: str = ""


class Resolution(NamedTuple):
    """Outcome of resolving one (service, date): which rule decided, and the answer."""
    rule: str
    active: bool


@dataclass(frozen=True)
class _Query:
    service_id: str
    date_key: str
    weekday: int


@dataclass(frozen=True)
class ServiceCalendar:
    """
    Read-only service calendar for one loaded feed.

    Attributes:
        services: service_id -> Service (from calendar.txt)
        exceptions: (service_id, YYYYMMDD) -> "added" | "removed" (from calendar_dates.txt)
    """
    services: Mapping[str, Service] = field(default_factory=lambda: MappingProxyType({}))
    exceptions: Mapping[Tuple[str, str], str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_tables(cls, calendar: pd.DataFrame, calendar_dates: pd.DataFrame) -> "ServiceCalendar":
        """
        Build the calendar from the two optional tables.

        Rows with a blank service_id, an unknown exception_type or a
        malformed exception date are ignored. Later rows overwrite earlier
        ones for the same key.
        """
        services: Dict[str, Service] = {}
        for row in iter_records(calendar):
            service_id = row.get("service_id", "")
            if not service_id:
                continue
            services[service_id] = Service(
                service_id=service_id,
                weekdays=tuple(row.get(day, "") == "1" for day in WEEKDAY_COLUMNS),
                start_date=normalize_date_key(row.get("start_date")),
                end_date=normalize_date_key(row.get("end_date")),
            )

        exceptions: Dict[Tuple[str, str], str] = {}
        for row in iter_records(calendar_dates):
            service_id = row.get("service_id", "")
            day = normalize_date_key(row.get("date"))
            kind = _EXCEPTION_TYPES.get(row.get("exception_type", ""))
            if not service_id or not day or kind is None:
                continue
            exceptions[(service_id, day)] = kind

        return cls(MappingProxyType(services), MappingProxyType(exceptions))

    def is_active(self, service_id: str, date_key: str, weekday: int) -> bool:
        """
        Check whether a service runs on a date.

        Args:
            service_id: Service to check
            date_key: Date as YYYYMMDD (other separators are tolerated)
            weekday: 0=Sunday ... 6=Saturday

        Returns:
            True if the service is active that day
        """
        return self.resolve(service_id, date_key, weekday).active

    def resolve(self, service_id: str, date_key: str, weekday: int) -> Resolution:
        """Run the rules in order and report which one decided."""
        query = _Query(service_id, normalize_date_key(date_key), weekday)
        for name, rule in self._rules():
            outcome = rule(query)
            if outcome is not None:
                return Resolution(name, outcome)
        return Resolution("weekday", False)

    def _rules(self) -> List[Tuple[str, Callable[[_Query], Optional[bool]]]]:
        return [
            ("exception", self._check_exception),
            ("no_calendar", self._check_has_calendar),
            ("date_range", self._check_date_range),
            ("weekday", self._check_weekday),
        ]

    def _check_exception(self, query: _Query) -> Optional[bool]:
        """
        calendar_dates override for this exact date.

        Returns:
            True if added, False if removed, None if there is no exception
        """
        if not query.date_key:
            return None
        kind = self.exceptions.get((query.service_id, query.date_key))
        if kind is None:
            return None
        return kind == EXCEPTION_ADDED

    def _check_has_calendar(self, query: _Query) -> Optional[bool]:
        if query.service_id not in self.services:
            return False
        return None

    def _check_date_range(self, query: _Query) -> Optional[bool]:
        """Reject dates before start_date or after end_date, where those are set."""
        service = self.services[query.service_id]
        if service.start_date and query.date_key < service.start_date:
            return False
        if service.end_date and query.date_key > service.end_date:
            return False
        return None

    def _check_weekday(self, query: _Query) -> Optional[bool]:
        service = self.services[query.service_id]
        if not 0 <= query.weekday <= 6:
            return False
        return service.weekdays[query.weekday]
