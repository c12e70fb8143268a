from __future__ import annotations

import calendar
import logging
from collections.abc import Iterator
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING

from ._ast import (
    Always,
    And,
    Between,
    CronFieldName,
    Every,
    FieldExpression,
    Last,
    LastDayOffset,
    NearestWeekday,
    On,
    QuestionMark,
    is_unspecified,
)
from ._definition import FieldConstraints

if TYPE_CHECKING:
    from ._schedule import Schedule

logger = logging.getLogger(__name__)

# =============================================================================
# Search Limits
# =============================================================================
# MAX_YEARS (100): years scanned on either side of the reference time before a
# search gives up and reports no execution. Schedules that can never fire
# (e.g. February 30) exhaust this bound; every other schedule fires within a
# few years, leap-day schedules within eight.
# =============================================================================

MAX_YEARS = 100

# =============================================================================
# DST (Daylight Saving Time) Handling
# =============================================================================
# Fields are matched against the wall clock of the query's timezone. A
# matching wall-clock time is resolved to instants like this:
#
# 1. DST Gap (Spring Forward):
#    - The time doesn't exist (e.g., 2:30 AM during spring forward)
#    - It fires once, pushed forward past the gap (2:30 AM -> 3:30 AM)
#
# 2. DST Fold (Fall Back):
#    - The time is ambiguous (e.g., 1:30 AM occurs twice)
#    - It fires at both instants, in order
#
# Comparisons between candidates go through POSIX timestamps: aware datetimes
# sharing a tzinfo compare by wall clock, ignoring fold.
# =============================================================================

# How far back to look for the offset in force before a forward jump.
_DST_PROBE = timedelta(hours=6)


# --- Timezone helpers ---


def _require_aware(dt: datetime) -> tzinfo:
    if dt is None:
        raise TypeError("datetime must not be None")
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError(f"datetime must be timezone-aware: {dt.isoformat()}")
    return dt.tzinfo


def _wall(dt: datetime) -> datetime:
    return dt.replace(tzinfo=None)


def _utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc)


def _normalize(aware: datetime) -> datetime:
    """Round-trip through UTC so skipped wall times land after the gap."""
    return datetime.fromtimestamp(aware.timestamp(), tz=aware.tzinfo)


def _instants(wall: datetime, tz: tzinfo) -> list[datetime]:
    """Every instant a wall-clock time denotes, earliest first."""
    first = _normalize(wall.replace(tzinfo=tz, fold=0))
    if _wall(first) != wall:
        return [first]
    second = _normalize(wall.replace(tzinfo=tz, fold=1))
    if second.timestamp() != first.timestamp():
        return [first, second]
    return [first]


def _forward_jump(dt: datetime) -> timedelta:
    """Size of a spring-forward jump in the `_DST_PROBE` window before `dt`, or zero."""
    earlier = datetime.fromtimestamp(dt.timestamp() - _DST_PROBE.total_seconds(), tz=dt.tzinfo)
    return max(dt.utcoffset() - earlier.utcoffset(), timedelta(0))


def _gap_origin(dt: datetime) -> datetime | None:
    """The skipped wall-clock time that resolves onto `dt`, if any."""
    tz = dt.tzinfo
    shift = _forward_jump(dt)
    if not shift:
        return None
    origin = _wall(dt) - shift
    resolved = _instants(origin, tz)
    if _wall(resolved[0]) != origin and resolved[0].timestamp() == dt.timestamp():
        return origin
    return None


# --- Calendar helpers ---


def _last_day_of_month(year: int, month: int) -> int:
    _, last = calendar.monthrange(year, month)
    return last


def _last_weekday_of_month(year: int, month: int) -> date:
    d = date(year, month, _last_day_of_month(year, month))
    while d.isoweekday() in (6, 7):
        d -= timedelta(days=1)
    return d


def _nearest_weekday(year: int, month: int, target_day: int) -> date | None:
    """Get the nearest weekday to a given day, never leaving the month.

    Returns None if target_day doesn't exist in the month.
    """
    last_day = _last_day_of_month(year, month)
    if target_day > last_day:
        return None

    d = date(year, month, target_day)
    dow = d.isoweekday()  # Monday=1, Sunday=7

    # Saturday: prefer Friday, but if at month start, use Monday
    if dow == 6:
        if target_day == 1:
            return d + timedelta(days=2)
        return d - timedelta(days=1)

    # Sunday: prefer Monday, but if at month end, use Friday
    if dow == 7:
        if target_day >= last_day:
            return d - timedelta(days=2)
        return d + timedelta(days=1)

    return d


# --- Field matching ---


def _matches(expr: FieldExpression, value: int, lo: int, hi: int) -> bool:
    """Test a plain numeric value. `lo`/`hi` are the field's bounds."""
    match expr:
        case Always() | QuestionMark():
            return True
        case On(value=v, nth=None):
            return v == value
        case Between(start=s, end=e):
            if s <= e:
                return s <= value <= e
            return value >= s or value <= e
        case Every(base=base, period=p):
            return _in_step(base, p, value, lo, hi)
        case And(expressions=exprs):
            return any(_matches(e, value, lo, hi) for e in exprs)
        case On() | Last() | LastDayOffset() | NearestWeekday():
            return False

    raise ValueError(f"unknown expression type: {type(expr)}")  # pragma: no cover


def _in_step(base: FieldExpression, period: int, value: int, lo: int, hi: int) -> bool:
    # Steps are phased from the start of their base, not from the query time.
    match base:
        case Always():
            start, end = lo, hi
        case On(value=v):
            start, end = v, hi
        case Between(start=s, end=e):
            start, end = s, e
        case QuestionMark() | Every() | And() | Last() | LastDayOffset() | NearestWeekday():
            # not a step base
            return False
        case _:
            raise ValueError(f"unknown expression type: {type(base)}")  # pragma: no cover

    if start <= end:
        return start <= value <= end and (value - start) % period == 0
    # Wrapping range, e.g. hours 22-2/2
    if value >= start:
        offset = value - start
    elif value <= end:
        offset = value + (hi - lo + 1) - start
    else:
        return False
    return offset % period == 0


def _dom_matches(expr: FieldExpression, d: date, c: FieldConstraints) -> bool:
    match expr:
        case Last(weekday=None):
            return d.day == _last_day_of_month(d.year, d.month)
        case LastDayOffset(offset=n):
            return d.day == _last_day_of_month(d.year, d.month) - n
        case NearestWeekday(day=None):
            return d == _last_weekday_of_month(d.year, d.month)
        case NearestWeekday(day=target):
            return _nearest_weekday(d.year, d.month, target) == d
        case And(expressions=exprs):
            return any(_dom_matches(e, d, c) for e in exprs)
        case _:
            return _matches(expr, d.day, c.min_value, c.max_value)


def _dow_matches(expr: FieldExpression, d: date, c: FieldConstraints) -> bool:
    value = c.from_iso_weekday(d.isoweekday())
    match expr:
        case On(value=w, nth=n) if n is not None:
            return c.normalize(w) == value and (d.day - 1) // 7 + 1 == n
        case Last(weekday=None):
            # A bare L is the last day of the week
            return d.isoweekday() == 6
        case Last(weekday=w):
            return c.normalize(w) == value and d.day + 7 > _last_day_of_month(d.year, d.month)
        case And(expressions=exprs):
            return any(_dow_matches(e, d, c) for e in exprs)
        case _:
            return any(_matches(expr, v, c.min_value, c.max_value) for v in c.numerals(value))


# --- Execution time ---


class ExecutionTime:
    """Next/previous fire times of a validated `Schedule`."""

    def __init__(self, schedule: Schedule, max_years: int = MAX_YEARS) -> None:
        if schedule is None:
            raise TypeError("Schedule must not be None")
        if max_years < 1:
            raise ValueError(f"max_years should be greater than 0 but was {max_years}")
        self._schedule = schedule
        self._max_years = max_years

        self._seconds = self._values(CronFieldName.SECOND, default=[0])
        self._minutes = self._values(CronFieldName.MINUTE, default=[0])
        self._hours = self._values(CronFieldName.HOUR, default=[0])
        self._months = self._values(CronFieldName.MONTH, default=list(range(1, 13)))

        self._year = self._field(CronFieldName.YEAR)
        self._dom = self._field(CronFieldName.DAY_OF_MONTH)
        self._dow = self._field(CronFieldName.DAY_OF_WEEK)
        self._doy = self._field(CronFieldName.DAY_OF_YEAR)

    @classmethod
    def for_cron(cls, schedule: Schedule, max_years: int = MAX_YEARS) -> ExecutionTime:
        if schedule is None:
            raise TypeError("Schedule must not be None")
        return cls(schedule.validate(), max_years)

    @property
    def schedule(self) -> Schedule:
        return self._schedule

    def _field(self, name: CronFieldName) -> tuple[FieldExpression, FieldConstraints] | None:
        field = self._schedule.retrieve(name)
        if field is None:
            return None
        definition = self._schedule.definition.field_definition(name)
        return field.expression, definition.constraints

    def _values(self, name: CronFieldName, default: list[int]) -> list[int]:
        field = self._field(name)
        if field is None:
            return default
        expr, c = field
        return [v for v in range(c.min_value, c.max_value + 1) if _matches(expr, v, c.min_value, c.max_value)]

    # --- Public API ---

    def next_execution(self, dt: datetime) -> datetime | None:
        """Earliest fire time strictly after `dt`, in `dt`'s timezone."""
        _require_aware(dt)
        return self._search(dt, forward=True)

    def last_execution(self, dt: datetime) -> datetime | None:
        """Latest fire time strictly before `dt`, in `dt`'s timezone."""
        _require_aware(dt)
        return self._search(dt, forward=False)

    def is_match(self, dt: datetime) -> bool:
        _require_aware(dt)
        if dt.microsecond:
            return False
        if self._wall_matches(_wall(dt)):
            return True
        origin = _gap_origin(dt)
        return origin is not None and self._wall_matches(origin)

    def time_to_next_execution(self, dt: datetime) -> timedelta | None:
        nxt = self.next_execution(dt)
        if nxt is None:
            return None
        return _utc(nxt) - _utc(dt)

    def time_from_last_execution(self, dt: datetime) -> timedelta | None:
        last = self.last_execution(dt)
        if last is None:
            return None
        return _utc(dt) - _utc(last)

    def occurrences(self, dt: datetime) -> Iterator[datetime]:
        """Returns a lazy iterator of fire times strictly after `dt`.

        The iterator is unbounded for schedules without a year restriction.
        """
        current = dt
        while True:
            nxt = self.next_execution(current)
            if nxt is None:
                return
            current = nxt
            yield nxt

    def between(self, start: datetime, end: datetime) -> Iterator[datetime]:
        """Returns a bounded iterator of fire times where `start < t <= end`."""
        _require_aware(end)
        limit = _utc(end)
        for dt in self.occurrences(start):
            if _utc(dt) > limit:
                return
            yield dt

    # --- Matching ---

    def _year_matches(self, year: int) -> bool:
        if self._year is None:
            return True
        expr, c = self._year
        return _matches(expr, year, c.min_value, c.max_value)

    def _day_matches(self, d: date) -> bool:
        if self._doy is not None and not is_unspecified(self._doy[0]):
            expr, c = self._doy
            if not _matches(expr, d.timetuple().tm_yday, c.min_value, c.max_value):
                return False

        dom_restricted = self._dom is not None and not is_unspecified(self._dom[0])
        dow_restricted = self._dow is not None and not is_unspecified(self._dow[0])
        if dom_restricted and dow_restricted:
            return _dom_matches(*self._dom_args(d)) or _dow_matches(*self._dow_args(d))
        if dom_restricted:
            return _dom_matches(*self._dom_args(d))
        if dow_restricted:
            return _dow_matches(*self._dow_args(d))
        return True

    def _dom_args(self, d: date) -> tuple[FieldExpression, date, FieldConstraints]:
        expr, c = self._dom
        return expr, d, c

    def _dow_args(self, d: date) -> tuple[FieldExpression, date, FieldConstraints]:
        expr, c = self._dow
        return expr, d, c

    def _wall_matches(self, wall: datetime) -> bool:
        return (
            self._year_matches(wall.year)
            and wall.month in self._months
            and wall.hour in self._hours
            and wall.minute in self._minutes
            and wall.second in self._seconds
            and self._day_matches(wall.date())
        )

    # --- Search ---

    def _years(self, start_year: int, forward: bool) -> Iterator[int]:
        if forward:
            candidates = range(start_year, min(start_year + self._max_years, MAXYEAR) + 1)
        else:
            candidates = range(start_year, max(start_year - self._max_years, MINYEAR) - 1, -1)
        return (y for y in candidates if self._year_matches(y))

    def _days(self, year: int, month: int) -> list[int]:
        last = _last_day_of_month(year, month)
        return [day for day in range(1, last + 1) if self._day_matches(date(year, month, day))]

    def _walk(self, start: datetime, forward: bool) -> Iterator[datetime]:
        """Matching wall-clock times from `start` (inclusive) in calendar order."""

        def order(values: list[int]) -> list[int]:
            return values if forward else values[::-1]

        def passed(value: int, bound: int) -> bool:
            return value < bound if forward else value > bound

        for year in self._years(start.year, forward):
            pin_year = year == start.year
            for month in order(self._months):
                if pin_year and passed(month, start.month):
                    continue
                pin_month = pin_year and month == start.month
                for day in order(self._days(year, month)):
                    if pin_month and passed(day, start.day):
                        continue
                    pin_day = pin_month and day == start.day
                    for hour in order(self._hours):
                        if pin_day and passed(hour, start.hour):
                            continue
                        pin_hour = pin_day and hour == start.hour
                        for minute in order(self._minutes):
                            if pin_hour and passed(minute, start.minute):
                                continue
                            pin_minute = pin_hour and minute == start.minute
                            for second in order(self._seconds):
                                if pin_minute and passed(second, start.second):
                                    continue
                                yield datetime(year, month, day, hour, minute, second)

    def _search(self, dt: datetime, forward: bool) -> datetime | None:
        tz = dt.tzinfo
        ref = dt.timestamp()

        def eligible(instant: datetime) -> bool:
            return instant.timestamp() > ref if forward else instant.timestamp() < ref

        def closer(a: datetime, b: datetime) -> bool:
            return a.timestamp() < b.timestamp() if forward else a.timestamp() > b.timestamp()

        start = _wall(dt).replace(microsecond=0)
        # Inside a repeated hour, the other pass of earlier (or later) wall
        # times can still lie on the searched side of `dt`.
        repeated = _instants(start, tz)
        if len(repeated) == 2:
            shift = repeated[0].utcoffset() - repeated[1].utcoffset()
            if forward and ref < repeated[1].timestamp():
                start -= shift
            elif not forward and ref > repeated[0].timestamp():
                start += shift
        elif forward:
            # Wall times skipped by a recent jump resolve after `dt`.
            # Backward searches reach them by walking down from `dt`.
            start -= _forward_jump(dt)

        best: datetime | None = None
        for wall in self._walk(start, forward):
            instants = _instants(wall, tz)
            if not forward:
                instants.reverse()
            candidates = [i for i in instants if eligible(i)]

            if best is not None:
                beyond = wall >= _wall(best) if forward else wall <= _wall(best)
                if beyond and not any(closer(i, best) for i in candidates):
                    return best

            for instant in candidates:
                if best is None or closer(instant, best):
                    best = instant
            # Plain wall times resolve in order; gaps and folds need one more look.
            if best is not None and best is instants[0] and _wall(best) == wall:
                return best

        if best is None:
            logger.debug(
                "no %s execution for %r within %d years of %s",
                "next" if forward else "last",
                self._schedule.as_string(),
                self._max_years,
                dt.isoformat(),
            )
        return best
