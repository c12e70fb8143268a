from __future__ import annotations

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
)
from ._definition import FieldDefinition
from ._display import display
from ._error import CronError


def validate_field(expr: FieldExpression, definition: FieldDefinition) -> None:
    """Check that `expr` is legal for the field, raising `CronError` otherwise."""
    c = definition.constraints
    name = definition.name
    match expr:
        case Always():
            return
        case QuestionMark():
            _require(c.supports_question_mark, "?", name)
        case On(value=v, nth=n):
            _check_range(v, definition)
            if n is not None:
                _require(c.supports_hash, "#", name)
                if n < 1 or n > 5:
                    raise CronError.validation(
                        f"Invalid expression! Expression: {display(expr)} "
                        f"nth weekday must be between 1 and 5"
                    )
        case Between(start=s, end=e):
            _check_range(s, definition)
            _check_range(e, definition)
            if c.strict_range and s > e:
                raise CronError.validation(f"Invalid range! [{s},{e}]")
        case Every(base=base, period=p):
            if not isinstance(base, (Always, On, Between)) or (
                isinstance(base, On) and base.nth is not None
            ):
                raise CronError.validation(
                    f"Invalid expression! Expression: {display(expr)} has an invalid step base"
                )
            if p < 1:
                raise CronError.validation(f"Period should be greater than 0 but was {p}")
            validate_field(base, definition)
        case And(expressions=exprs):
            if not exprs:
                raise CronError.validation(f"Empty list expression for {name}")
            for e in exprs:
                if isinstance(e, (And, QuestionMark)):
                    raise CronError.validation(
                        f"Invalid expression! Expression: {display(expr)} "
                        f"can not be combined with other values"
                    )
                validate_field(e, definition)
        case Last(weekday=w):
            _require(c.supports_l, "L", name)
            if w is not None:
                if name != CronFieldName.DAY_OF_WEEK:
                    raise CronError.validation(
                        f"Invalid expression! Expression: {display(expr)} "
                        f"is only supported for {CronFieldName.DAY_OF_WEEK}"
                    )
                _check_range(w, definition)
        case LastDayOffset(offset=n):
            _require(c.supports_l, "L", name)
            if name != CronFieldName.DAY_OF_MONTH:
                raise CronError.validation(
                    f"Invalid expression! Expression: {display(expr)} "
                    f"is only supported for {CronFieldName.DAY_OF_MONTH}"
                )
            if n < 0 or n > c.max_value - c.min_value:
                raise CronError.validation(
                    f"Invalid expression! Expression: {display(expr)} "
                    f"offset must be between 0 and {c.max_value - c.min_value}"
                )
        case NearestWeekday(day=None):
            _require(c.supports_lw, "LW", name)
        case NearestWeekday(day=d):
            _require(c.supports_w, "W", name)
            _check_range(d, definition)
        case _:
            raise ValueError(f"unknown expression type: {type(expr)}")  # pragma: no cover


def _require(supported: bool, symbol: str, name: CronFieldName) -> None:
    if not supported:
        raise CronError.validation(f"Special character {symbol} is not supported for {name}")


def _check_range(value: int, definition: FieldDefinition) -> None:
    c = definition.constraints
    if value < c.min_value or value > c.max_value:
        raise CronError.validation(
            f"Value {value} not in range [{c.min_value}, {c.max_value}] for {definition.name}"
        )
