from __future__ import annotations

from ._ast import (
    Always,
    And,
    Between,
    CronField,
    CronFieldName,
    Every,
    FieldExpression,
    Last,
    LastDayOffset,
    NearestWeekday,
    On,
    QuestionMark,
    always,
    and_,
    between,
    every,
    is_unspecified,
    last_day,
    last_day_offset,
    last_weekday_of_month,
    nearest_weekday,
    nth_weekday,
    on,
    question_mark,
)
from ._constraints import (
    ensure_either_day_of_week_or_day_of_month,
    ensure_either_day_of_year_or_month,
    ensure_question_mark_on_day_of_month_or_day_of_week,
)
from ._definition import CronConstraint, CronDefinition, FieldConstraints, FieldDefinition
from ._dialects import CRON4J, QUARTZ, SPRING, UNIX, CronType, definition_for
from ._display import display
from ._error import CronError, CronErrorKind, Span
from ._eval import MAX_YEARS, ExecutionTime
from ._mapper import CronMapper
from ._parser import CronParser, parse, parse_field
from ._schedule import Schedule

__all__ = [
    "CronParser",
    "parse",
    "parse_field",
    "Schedule",
    "ExecutionTime",
    "MAX_YEARS",
    "CronMapper",
    "CronError",
    "CronErrorKind",
    "Span",
    "CronType",
    "definition_for",
    "UNIX",
    "CRON4J",
    "QUARTZ",
    "SPRING",
    "CronDefinition",
    "CronConstraint",
    "FieldDefinition",
    "FieldConstraints",
    "ensure_either_day_of_year_or_month",
    "ensure_either_day_of_week_or_day_of_month",
    "ensure_question_mark_on_day_of_month_or_day_of_week",
    "CronField",
    "CronFieldName",
    "FieldExpression",
    "Always",
    "QuestionMark",
    "On",
    "Between",
    "Every",
    "And",
    "Last",
    "LastDayOffset",
    "NearestWeekday",
    "always",
    "question_mark",
    "on",
    "between",
    "every",
    "and_",
    "last_day",
    "last_day_offset",
    "nearest_weekday",
    "nth_weekday",
    "last_weekday_of_month",
    "is_unspecified",
    "display",
]
