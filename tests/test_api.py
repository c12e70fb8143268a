"""Public API surface: exported names and the methods callers rely on."""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

import polycron
from polycron import CronError, CronMapper, CronParser, CronType, ExecutionTime, Schedule, parse


class TestExports:
    def test_all_names_resolve(self) -> None:
        for name in polycron.__all__:
            assert hasattr(polycron, name), name

    @pytest.mark.parametrize(
        "name",
        ["CronParser", "Schedule", "ExecutionTime", "CronMapper", "CronError", "CronType", "parse"],
    )
    def test_core_names_exported(self, name: str) -> None:
        assert name in polycron.__all__


# ===========================================================================
# Parsing
# ===========================================================================


class TestParsing:
    def test_parse_with_cron_type(self) -> None:
        assert isinstance(parse("0 9 * * *", CronType.UNIX), Schedule)

    def test_parse_with_definition(self) -> None:
        assert isinstance(parse("0 0 9 * * ?", polycron.QUARTZ), Schedule)

    def test_parser_exposes_definition(self) -> None:
        assert CronParser(polycron.SPRING).definition is polycron.SPRING

    def test_parse_error_type(self) -> None:
        with pytest.raises(CronError):
            parse("not a cron", CronType.UNIX)


# ===========================================================================
# Execution time
# ===========================================================================


class TestExecutionTimeMethods:
    _execution_time = ExecutionTime.for_cron(parse("0 9 * * *", CronType.UNIX))
    _now = datetime(2026, 2, 6, 12, 0, 0, tzinfo=ZoneInfo("UTC"))

    def test_next_execution(self) -> None:
        assert isinstance(self._execution_time.next_execution(self._now), datetime)

    def test_last_execution(self) -> None:
        assert isinstance(self._execution_time.last_execution(self._now), datetime)

    def test_is_match(self) -> None:
        assert self._execution_time.is_match(self._now) is False

    def test_time_to_next_execution(self) -> None:
        assert self._execution_time.time_to_next_execution(self._now) == timedelta(hours=21)

    def test_time_from_last_execution(self) -> None:
        assert self._execution_time.time_from_last_execution(self._now) == timedelta(hours=3)

    def test_schedule_property(self) -> None:
        assert self._execution_time.schedule.as_string() == "0 9 * * *"


# ===========================================================================
# Schedule and mapper
# ===========================================================================


class TestScheduleMethods:
    _schedule = parse("0 9 * * *", CronType.UNIX)

    def test_to_string(self) -> None:
        assert str(self._schedule) == "0 9 * * *"

    def test_hashable(self) -> None:
        assert len({self._schedule, parse("0 9 * * *", CronType.UNIX)}) == 1

    def test_map(self) -> None:
        mapped = CronMapper.from_unix_to_quartz().map(self._schedule)
        assert isinstance(mapped, Schedule)
        assert mapped.definition is polycron.QUARTZ
