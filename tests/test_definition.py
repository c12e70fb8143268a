from __future__ import annotations

import pytest

from polycron import (
    CRON4J,
    QUARTZ,
    SPRING,
    UNIX,
    CronDefinition,
    CronField,
    CronFieldName,
    CronType,
    FieldConstraints,
    FieldDefinition,
    FieldExpression,
    On,
    QuestionMark,
    Schedule,
    always,
    definition_for,
    ensure_either_day_of_week_or_day_of_month,
    ensure_either_day_of_year_or_month,
    ensure_question_mark_on_day_of_month_or_day_of_week,
)


class TestDialects:
    @pytest.mark.parametrize(
        ("cron_type", "definition"),
        [
            (CronType.UNIX, UNIX),
            (CronType.CRON4J, CRON4J),
            (CronType.QUARTZ, QUARTZ),
            (CronType.SPRING, SPRING),
        ],
    )
    def test_definition_for(self, cron_type: CronType, definition: CronDefinition) -> None:
        assert definition_for(cron_type) is definition

    def test_definition_for_none(self) -> None:
        with pytest.raises(TypeError):
            definition_for(None)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        ("definition", "lengths"),
        [(UNIX, [5]), (CRON4J, [5]), (QUARTZ, [6, 7]), (SPRING, [6])],
        ids=["unix", "cron4j", "quartz", "spring"],
    )
    def test_accepted_lengths(self, definition: CronDefinition, lengths: list[int]) -> None:
        assert definition.accepted_lengths == lengths

    def test_field_order(self) -> None:
        assert QUARTZ.field_names == (
            CronFieldName.SECOND,
            CronFieldName.MINUTE,
            CronFieldName.HOUR,
            CronFieldName.DAY_OF_MONTH,
            CronFieldName.MONTH,
            CronFieldName.DAY_OF_WEEK,
            CronFieldName.YEAR,
        )
        assert QUARTZ.position(CronFieldName.YEAR) == 6

    def test_position_of_missing_field(self) -> None:
        with pytest.raises(ValueError):
            UNIX.position(CronFieldName.SECOND)

    def test_nicknames(self) -> None:
        assert "@daily" in UNIX.nicknames
        assert "@daily" in SPRING.nicknames
        assert not QUARTZ.nicknames
        assert not CRON4J.nicknames


class TestFieldConstraints:
    @pytest.mark.parametrize(
        ("definition", "value", "iso"),
        [
            (UNIX, 0, 7),
            (UNIX, 7, 7),
            (UNIX, 1, 1),
            (CRON4J, 6, 6),
            (QUARTZ, 1, 7),
            (QUARTZ, 2, 1),
            (QUARTZ, 7, 6),
            (SPRING, 7, 7),
        ],
    )
    def test_to_iso_weekday(self, definition: CronDefinition, value: int, iso: int) -> None:
        constraints = definition.field_definition(CronFieldName.DAY_OF_WEEK).constraints
        assert constraints.to_iso_weekday(value) == iso

    @pytest.mark.parametrize(
        ("definition", "iso", "value"),
        [(UNIX, 7, 0), (UNIX, 6, 6), (CRON4J, 1, 1), (QUARTZ, 7, 1), (QUARTZ, 6, 7)],
    )
    def test_from_iso_weekday(self, definition: CronDefinition, iso: int, value: int) -> None:
        constraints = definition.field_definition(CronFieldName.DAY_OF_WEEK).constraints
        assert constraints.from_iso_weekday(iso) == value

    def test_numerals(self) -> None:
        constraints = UNIX.field_definition(CronFieldName.DAY_OF_WEEK).constraints
        assert constraints.numerals(0) == {0, 7}
        assert constraints.numerals(3) == {3}
        assert constraints.normalize(7) == 0


class TestCronDefinition:
    def test_duplicate_fields(self) -> None:
        minute = FieldDefinition(CronFieldName.MINUTE, FieldConstraints(0, 59))
        with pytest.raises(ValueError, match="duplicate"):
            CronDefinition.of([minute, minute])

    def test_required_after_optional(self) -> None:
        with pytest.raises(ValueError, match="follows an optional field"):
            CronDefinition.of(
                [
                    FieldDefinition(CronFieldName.MINUTE, FieldConstraints(0, 59), optional=True),
                    FieldDefinition(CronFieldName.HOUR, FieldConstraints(0, 23)),
                ]
            )

    def test_has_field(self) -> None:
        assert QUARTZ.has_field(CronFieldName.YEAR)
        assert not UNIX.has_field(CronFieldName.YEAR)
        assert UNIX.field_definition(CronFieldName.YEAR) is None


# =============================================================================
# Constraints
# =============================================================================


def _day_schedule(
    definition: CronDefinition, dom: FieldExpression, dow: FieldExpression
) -> Schedule:
    return Schedule(
        definition,
        [
            CronField(CronFieldName.DAY_OF_MONTH, dom),
            CronField(CronFieldName.DAY_OF_WEEK, dow),
        ],
    )


class TestConstraints:
    def test_question_mark_constraint(self) -> None:
        constraint = ensure_question_mark_on_day_of_month_or_day_of_week()
        assert constraint.validate(_day_schedule(QUARTZ, On(1), QuestionMark()))
        assert constraint.validate(_day_schedule(QUARTZ, QuestionMark(), On(2)))
        assert not constraint.validate(_day_schedule(QUARTZ, On(1), always()))
        assert constraint.description == (
            "Invalid cron expression: Both, a day-of-week AND a day-of-month parameter, "
            "must have at least one with a '?' character."
        )

    def test_day_of_week_or_day_of_month(self) -> None:
        constraint = ensure_either_day_of_week_or_day_of_month()
        assert constraint.validate(_day_schedule(CRON4J, On(1), always()))
        assert constraint.validate(_day_schedule(CRON4J, always(), On(1)))
        assert constraint.validate(_day_schedule(CRON4J, always(), always()))
        assert not constraint.validate(_day_schedule(CRON4J, On(1), On(1)))
        assert constraint.description == (
            "Both, a day-of-week AND a day-of-month parameter, are not supported."
        )

    def test_day_of_year_constraint_without_day_of_year_field(self) -> None:
        constraint = ensure_either_day_of_year_or_month()
        assert constraint.validate(_day_schedule(UNIX, On(1), On(1)))

    def test_validated_schedules_satisfy_every_constraint(self) -> None:
        for definition, dom, dow in [
            (QUARTZ, On(1), QuestionMark()),
            (CRON4J, always(), On(3)),
        ]:
            schedule = _day_schedule(definition, dom, dow).validate()
            assert all(c.validate(schedule) for c in definition.constraints)
