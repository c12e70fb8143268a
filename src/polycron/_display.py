from __future__ import annotations

from ._ast import (
    Always,
    And,
    Between,
    Every,
    FieldExpression,
    Last,
    LastDayOffset,
    NearestWeekday,
    On,
    QuestionMark,
)


def display(expr: FieldExpression) -> str:
    match expr:
        case Always():
            return "*"
        case QuestionMark():
            return "?"
        case On(value=v, nth=None):
            return str(v)
        case On(value=v, nth=n):
            return f"{v}#{n}"
        case Between(start=s, end=e):
            return f"{s}-{e}"
        case Every(base=base, period=p):
            return f"{display(base)}/{p}"
        case And(expressions=exprs):
            return ",".join(display(e) for e in exprs)
        case Last(weekday=None):
            return "L"
        case Last(weekday=w):
            return f"{w}L"
        case LastDayOffset(offset=n):
            return f"L-{n}"
        case NearestWeekday(day=None):
            return "LW"
        case NearestWeekday(day=d):
            return f"{d}W"

    # Should be unreachable
    raise ValueError(f"unknown expression type: {type(expr)}")  # pragma: no cover
