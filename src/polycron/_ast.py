from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering


@total_ordering
class CronFieldName(Enum):
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY_OF_MONTH = "day-of-month"
    MONTH = "month"
    DAY_OF_WEEK = "day-of-week"
    YEAR = "year"
    DAY_OF_YEAR = "day-of-year"

    @property
    def order(self) -> int:
        """Position in canonical rendering: second first, day-of-year last."""
        return _FIELD_ORDER[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CronFieldName):
            return NotImplemented
        return self.order < other.order

    def __str__(self) -> str:
        return self.value


_FIELD_ORDER = {name: i for i, name in enumerate(CronFieldName)}


# --- Field expressions ---


@dataclass(frozen=True, slots=True)
class Always:
    pass


@dataclass(frozen=True, slots=True)
class QuestionMark:
    pass


@dataclass(frozen=True, slots=True)
class On:
    value: int
    nth: int | None = None


@dataclass(frozen=True, slots=True)
class Between:
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Every:
    base: FieldExpression
    period: int


@dataclass(frozen=True, slots=True)
class And:
    expressions: tuple[FieldExpression, ...]


@dataclass(frozen=True, slots=True)
class Last:
    """`L` on day-of-month, `L` or `wL` on day-of-week."""

    weekday: int | None = None


@dataclass(frozen=True, slots=True)
class LastDayOffset:
    offset: int


@dataclass(frozen=True, slots=True)
class NearestWeekday:
    """Nearest weekday to a day of month, never crossing the month boundary.

    `day=None` is `LW`: the nearest weekday to the last day of the month.
    """

    day: int | None


FieldExpression = (
    Always
    | QuestionMark
    | On
    | Between
    | Every
    | And
    | Last
    | LastDayOffset
    | NearestWeekday
)


@dataclass(frozen=True, slots=True)
class CronField:
    name: CronFieldName
    expression: FieldExpression

    def __lt__(self, other: CronField) -> bool:
        return self.name < other.name


# --- Factories ---


def always() -> Always:
    return Always()


def question_mark() -> QuestionMark:
    return QuestionMark()


def on(value: int, nth: int | None = None) -> On:
    return On(value, nth)


def between(start: int, end: int) -> Between:
    return Between(start, end)


def every(base_or_period: FieldExpression | int, period: int | None = None) -> Every:
    """`every(5)` is `*/5`; `every(on(2), 5)` is `2/5`."""
    if period is None:
        if not isinstance(base_or_period, int):
            raise TypeError("period must be given when a base expression is passed")
        return Every(Always(), base_or_period)
    if isinstance(base_or_period, int):
        return Every(On(base_or_period), period)
    return Every(base_or_period, period)


def and_(*expressions: FieldExpression) -> And:
    flat: list[FieldExpression] = []
    for expr in expressions:
        if isinstance(expr, And):
            flat.extend(expr.expressions)
        else:
            flat.append(expr)
    return And(tuple(flat))


def last_day() -> Last:
    return Last()


def last_day_offset(offset: int) -> LastDayOffset:
    return LastDayOffset(offset)


def nearest_weekday(day: int | None = None) -> NearestWeekday:
    return NearestWeekday(day)


def nth_weekday(weekday: int, n: int) -> On:
    return On(weekday, n)


def last_weekday_of_month(weekday: int) -> Last:
    return Last(weekday)


# --- Helper functions ---


def is_unspecified(expr: FieldExpression | None) -> bool:
    """True for fields that put no restriction on the day: absent, `*` or `?`."""
    return expr is None or isinstance(expr, (Always, QuestionMark))
