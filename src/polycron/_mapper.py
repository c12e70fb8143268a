from __future__ import annotations

import logging
from collections.abc import Callable

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
    is_unspecified,
)
from ._definition import CronDefinition, FieldConstraints
from ._dialects import CRON4J, QUARTZ, SPRING, UNIX
from ._eval import _matches
from ._schedule import Schedule

logger = logging.getLogger(__name__)

FieldMapping = Callable[[CronField | None], CronField]

_DAY_PAIR = (CronFieldName.DAY_OF_MONTH, CronFieldName.DAY_OF_WEEK)


class CronMapper:
    """Translates schedules written for one cron dialect into another."""

    def __init__(self, source: CronDefinition, target: CronDefinition) -> None:
        if source is None:
            raise TypeError("source CronDefinition must not be None")
        if target is None:
            raise TypeError("target CronDefinition must not be None")
        self._source = source
        self._target = target
        self._mappings: dict[CronFieldName, FieldMapping] = {
            d.name: self._mapping_for(d.name) for d in target.field_definitions
        }

    # --- Factories ---

    @classmethod
    def from_quartz_to_cron4j(cls) -> CronMapper:
        return cls(QUARTZ, CRON4J)

    @classmethod
    def from_quartz_to_spring(cls) -> CronMapper:
        return cls(QUARTZ, SPRING)

    @classmethod
    def from_quartz_to_unix(cls) -> CronMapper:
        return cls(QUARTZ, UNIX)

    @classmethod
    def from_spring_to_quartz(cls) -> CronMapper:
        return cls(SPRING, QUARTZ)

    @classmethod
    def from_unix_to_quartz(cls) -> CronMapper:
        return cls(UNIX, QUARTZ)

    @classmethod
    def from_cron4j_to_quartz(cls) -> CronMapper:
        return cls(CRON4J, QUARTZ)

    @classmethod
    def same_cron(cls, definition: CronDefinition) -> CronMapper:
        return cls(definition, definition)

    # --- Field policies ---

    @staticmethod
    def return_same_expression() -> FieldMapping:
        def mapping(field: CronField | None) -> CronField:
            return field

        return mapping

    @staticmethod
    def return_on_zero_expression(name: CronFieldName) -> FieldMapping:
        def mapping(field: CronField | None) -> CronField:
            return CronField(name, On(0))

        return mapping

    @staticmethod
    def return_always_expression(name: CronFieldName) -> FieldMapping:
        def mapping(field: CronField | None) -> CronField:
            return CronField(name, Always())

        return mapping

    @staticmethod
    def return_question_mark_expression(name: CronFieldName) -> FieldMapping:
        def mapping(field: CronField | None) -> CronField:
            return CronField(name, QuestionMark())

        return mapping

    def _mapping_for(self, name: CronFieldName) -> FieldMapping:
        if self._source.has_field(name):
            if name == CronFieldName.DAY_OF_WEEK:
                return self._day_of_week_mapping()
            return self.return_same_expression()
        return self._default_mapping(name)

    def _default_mapping(self, name: CronFieldName) -> FieldMapping:
        match name:
            case CronFieldName.SECOND | CronFieldName.MINUTE | CronFieldName.HOUR:
                return self.return_on_zero_expression(name)
            case CronFieldName.DAY_OF_YEAR if self._supports_question_mark(name):
                return self.return_question_mark_expression(name)
            case _:
                return self.return_always_expression(name)

    def _day_of_week_mapping(self) -> FieldMapping:
        source = self._constraints(self._source, CronFieldName.DAY_OF_WEEK)
        target = self._constraints(self._target, CronFieldName.DAY_OF_WEEK)

        def mapping(field: CronField | None) -> CronField:
            return CronField(
                CronFieldName.DAY_OF_WEEK,
                _renumber_weekdays(field.expression, source, target),
            )

        return mapping

    # --- Mapping ---

    def map(self, schedule: Schedule) -> Schedule:
        """Build the equivalent schedule for the target dialect and validate it."""
        if schedule is None:
            raise TypeError("Schedule must not be None")
        fields: dict[CronFieldName, CronField] = {}
        for name, mapping in self._mappings.items():
            source_field = schedule.retrieve(name)
            if source_field is None and self._source.has_field(name):
                # optional field left out of the source expression
                if self._target.field_definition(name).optional:
                    continue
                mapping = self._default_mapping(name)
            fields[name] = mapping(source_field)

        self._reconcile_day_pair(schedule, fields)

        mapped = Schedule(self._target, fields.values()).validate()
        logger.debug("mapped %r to %r", schedule.as_string(), mapped.as_string())
        return mapped

    def _reconcile_day_pair(self, schedule: Schedule, fields: dict[CronFieldName, CronField]) -> None:
        dom_name, dow_name = _DAY_PAIR
        if dom_name not in fields or dow_name not in fields:
            return

        if self._supports_question_mark(dom_name) and self._supports_question_mark(dow_name):
            source_dom = schedule.retrieve(dom_name)
            source_dow = schedule.retrieve(dow_name)
            source_has_question_mark = any(
                f is not None and isinstance(f.expression, QuestionMark)
                for f in (source_dom, source_dow)
            )
            if not source_has_question_mark:
                dom = fields[dom_name].expression
                dow = fields[dow_name].expression
                if is_unspecified(dom) and not is_unspecified(dow):
                    fields[dom_name] = CronField(dom_name, QuestionMark())
                else:
                    fields[dow_name] = CronField(dow_name, QuestionMark())

        for name in _DAY_PAIR:
            if isinstance(fields[name].expression, QuestionMark) and not self._supports_question_mark(name):
                fields[name] = CronField(name, Always())

    def _supports_question_mark(self, name: CronFieldName) -> bool:
        definition = self._target.field_definition(name)
        return definition is not None and definition.constraints.supports_question_mark

    @staticmethod
    def _constraints(definition: CronDefinition, name: CronFieldName) -> FieldConstraints:
        return definition.field_definition(name).constraints


# --- Day-of-week renumbering ---


def _renumber_weekdays(
    expr: FieldExpression, source: FieldConstraints, target: FieldConstraints
) -> FieldExpression:
    def weekday(value: int) -> int:
        return target.from_iso_weekday(source.to_iso_weekday(value))

    match expr:
        case Always() | QuestionMark() | Last(weekday=None):
            return expr
        case On(value=v, nth=n):
            return On(weekday(v), n)
        case Between(start=s, end=e):
            if len(_range_weekdays(s, e, source)) == 7:
                return Between(target.min_value, target.min_value + 6)
            return _weekday_range(weekday(s), weekday(e), target)
        case Every(base=base, period=p):
            renumbered = _renumber_weekdays(base, source, target)
            if isinstance(renumbered, And):
                # A split range cannot carry a step; list the days instead
                return _weekday_list(expr, source, target)
            return Every(renumbered, p)
        case And(expressions=exprs):
            return And(tuple(_renumber_weekdays(e, source, target) for e in exprs))
        case Last(weekday=w):
            return Last(weekday(w))
        case LastDayOffset() | NearestWeekday():
            # day-of-month only, never valid on day-of-week
            return expr

    raise ValueError(f"unknown expression type: {type(expr)}")  # pragma: no cover


def _range_weekdays(start: int, end: int, c: FieldConstraints) -> set[int]:
    """ISO weekdays covered by the range `start-end`, wrapping past the maximum."""
    if start <= end:
        values = list(range(start, end + 1))
    else:
        values = [*range(start, c.max_value + 1), *range(c.min_value, end + 1)]
    return {c.to_iso_weekday(v) for v in values}


def _weekday_range(start: int, end: int, target: FieldConstraints) -> FieldExpression:
    if start <= end or not target.strict_range:
        return Between(start, end)
    # Sunday written with its alternate numeral, e.g. Unix 5-7
    aliases = [raw for raw in target.numerals(end) if raw > start]
    if aliases:
        return Between(start, max(aliases))
    last = target.min_value + 6
    return And((_bounded(start, last), _bounded(target.min_value, end)))


def _bounded(start: int, end: int) -> FieldExpression:
    return On(start) if start == end else Between(start, end)


def _weekday_list(
    expr: FieldExpression, source: FieldConstraints, target: FieldConstraints
) -> FieldExpression:
    values = sorted(
        {
            target.from_iso_weekday(source.to_iso_weekday(v))
            for v in range(source.min_value, source.max_value + 1)
            if _matches(expr, v, source.min_value, source.max_value)
        }
    )
    if len(values) == 1:
        return On(values[0])
    return And(tuple(On(v) for v in values))
