from __future__ import annotations

from typing import TYPE_CHECKING

from ._ast import CronFieldName, FieldExpression, QuestionMark, is_unspecified
from ._definition import CronConstraint

if TYPE_CHECKING:
    from ._schedule import Schedule


def _expression(schedule: Schedule, name: CronFieldName) -> FieldExpression | None:
    field = schedule.retrieve(name)
    return field.expression if field is not None else None


def ensure_either_day_of_year_or_month() -> CronConstraint:
    """A restricted day-of-year leaves day-of-month and day-of-week unspecified."""

    def validate(schedule: Schedule) -> bool:
        if is_unspecified(_expression(schedule, CronFieldName.DAY_OF_YEAR)):
            return True
        return is_unspecified(_expression(schedule, CronFieldName.DAY_OF_WEEK)) and is_unspecified(
            _expression(schedule, CronFieldName.DAY_OF_MONTH)
        )

    return CronConstraint(
        "Both, a day-of-year AND a day-of-month or day-of-week, are not supported.",
        validate,
    )


def ensure_either_day_of_week_or_day_of_month() -> CronConstraint:
    """At most one of day-of-month and day-of-week may be restricted."""

    def validate(schedule: Schedule) -> bool:
        if not is_unspecified(_expression(schedule, CronFieldName.DAY_OF_YEAR)):
            return True
        dom = _expression(schedule, CronFieldName.DAY_OF_MONTH)
        dow = _expression(schedule, CronFieldName.DAY_OF_WEEK)
        return is_unspecified(dom) or is_unspecified(dow)

    return CronConstraint(
        "Both, a day-of-week AND a day-of-month parameter, are not supported.",
        validate,
    )


def ensure_question_mark_on_day_of_month_or_day_of_week() -> CronConstraint:
    """Quartz: one of day-of-month and day-of-week must literally be `?`."""

    def validate(schedule: Schedule) -> bool:
        dom = _expression(schedule, CronFieldName.DAY_OF_MONTH)
        dow = _expression(schedule, CronFieldName.DAY_OF_WEEK)
        return isinstance(dom, QuestionMark) or isinstance(dow, QuestionMark)

    return CronConstraint(
        "Invalid cron expression: Both, a day-of-week AND a day-of-month parameter, "
        "must have at least one with a '?' character.",
        validate,
    )
