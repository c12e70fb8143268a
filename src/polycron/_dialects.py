from __future__ import annotations

from enum import Enum

from ._ast import CronFieldName
from ._constraints import (
    ensure_either_day_of_week_or_day_of_month,
    ensure_question_mark_on_day_of_month_or_day_of_week,
)
from ._definition import CronDefinition, FieldConstraints, FieldDefinition


class CronType(Enum):
    UNIX = "unix"
    QUARTZ = "quartz"
    SPRING = "spring"
    CRON4J = "cron4j"

    def __str__(self) -> str:
        return self.value


MONTH_NAMES: dict[str, int] = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

# Sunday-first numbering shared by Unix, Spring and Cron4j.
SUNDAY_ZERO_NAMES: dict[str, int] = {
    "SUN": 0,
    "MON": 1,
    "TUE": 2,
    "WED": 3,
    "THU": 4,
    "FRI": 5,
    "SAT": 6,
}

SUNDAY_ONE_NAMES: dict[str, int] = {name: n + 1 for name, n in SUNDAY_ZERO_NAMES.items()}

STANDARD_NICKNAMES = frozenset(
    {"@yearly", "@annually", "@monthly", "@weekly", "@daily", "@midnight", "@hourly"}
)


def _seconds(strict: bool) -> FieldDefinition:
    return FieldDefinition(CronFieldName.SECOND, FieldConstraints(0, 59, strict_range=strict))


def _minutes(strict: bool) -> FieldDefinition:
    return FieldDefinition(CronFieldName.MINUTE, FieldConstraints(0, 59, strict_range=strict))


def _hours(strict: bool) -> FieldDefinition:
    return FieldDefinition(CronFieldName.HOUR, FieldConstraints(0, 23, strict_range=strict))


def _months(strict: bool) -> FieldDefinition:
    return FieldDefinition(
        CronFieldName.MONTH,
        FieldConstraints(1, 12, names=dict(MONTH_NAMES), strict_range=strict),
    )


def _unix() -> CronDefinition:
    return CronDefinition.of(
        [
            _minutes(strict=True),
            _hours(strict=True),
            FieldDefinition(
                CronFieldName.DAY_OF_MONTH,
                FieldConstraints(
                    1,
                    31,
                    supports_l=True,
                    supports_w=True,
                    supports_lw=True,
                    strict_range=True,
                ),
            ),
            _months(strict=True),
            FieldDefinition(
                CronFieldName.DAY_OF_WEEK,
                FieldConstraints(
                    0,
                    7,
                    names=dict(SUNDAY_ZERO_NAMES),
                    int_mapping={7: 0},
                    supports_l=True,
                    supports_hash=True,
                    strict_range=True,
                    monday_value=1,
                ),
            ),
        ],
        nicknames=STANDARD_NICKNAMES,
    )


def _cron4j() -> CronDefinition:
    return CronDefinition.of(
        [
            _minutes(strict=True),
            _hours(strict=True),
            FieldDefinition(
                CronFieldName.DAY_OF_MONTH,
                FieldConstraints(1, 31, supports_l=True, strict_range=True),
            ),
            _months(strict=True),
            FieldDefinition(
                CronFieldName.DAY_OF_WEEK,
                FieldConstraints(
                    0,
                    6,
                    names=dict(SUNDAY_ZERO_NAMES),
                    supports_l=True,
                    supports_hash=True,
                    strict_range=True,
                    monday_value=1,
                ),
            ),
        ],
        constraints=[ensure_either_day_of_week_or_day_of_month()],
    )


def _quartz() -> CronDefinition:
    return CronDefinition.of(
        [
            _seconds(strict=False),
            _minutes(strict=False),
            _hours(strict=False),
            FieldDefinition(
                CronFieldName.DAY_OF_MONTH,
                FieldConstraints(
                    1,
                    31,
                    supports_l=True,
                    supports_w=True,
                    supports_lw=True,
                    supports_question_mark=True,
                ),
            ),
            _months(strict=False),
            FieldDefinition(
                CronFieldName.DAY_OF_WEEK,
                FieldConstraints(
                    1,
                    7,
                    names=dict(SUNDAY_ONE_NAMES),
                    supports_l=True,
                    supports_hash=True,
                    supports_question_mark=True,
                    monday_value=2,
                ),
            ),
            FieldDefinition(
                CronFieldName.YEAR,
                FieldConstraints(1970, 2099, strict_range=True),
                optional=True,
            ),
        ],
        constraints=[ensure_question_mark_on_day_of_month_or_day_of_week()],
    )


def _spring() -> CronDefinition:
    return CronDefinition.of(
        [
            _seconds(strict=False),
            _minutes(strict=False),
            _hours(strict=False),
            FieldDefinition(
                CronFieldName.DAY_OF_MONTH,
                FieldConstraints(
                    1,
                    31,
                    supports_l=True,
                    supports_w=True,
                    supports_lw=True,
                    supports_question_mark=True,
                ),
            ),
            _months(strict=False),
            FieldDefinition(
                CronFieldName.DAY_OF_WEEK,
                FieldConstraints(
                    0,
                    7,
                    names=dict(SUNDAY_ZERO_NAMES),
                    int_mapping={7: 0},
                    supports_l=True,
                    supports_hash=True,
                    supports_question_mark=True,
                    monday_value=1,
                ),
            ),
        ],
        nicknames=STANDARD_NICKNAMES,
    )


UNIX = _unix()
CRON4J = _cron4j()
QUARTZ = _quartz()
SPRING = _spring()

_DEFINITIONS: dict[CronType, CronDefinition] = {
    CronType.UNIX: UNIX,
    CronType.CRON4J: CRON4J,
    CronType.QUARTZ: QUARTZ,
    CronType.SPRING: SPRING,
}


def definition_for(cron_type: CronType) -> CronDefinition:
    if cron_type is None:
        raise TypeError("CronType must not be None")
    return _DEFINITIONS[cron_type]
