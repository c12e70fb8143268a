from __future__ import annotations

import re
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from polycron import CronParser, CronType, Schedule, definition_for


def parse_zoned(s: str) -> datetime:
    """Parse '2026-02-06T12:00:00+00:00[UTC]' into a timezone-aware datetime."""
    # Extract the IANA timezone name from brackets
    m = re.match(r"^(.+)\[(.+)\]$", s)
    if not m:
        raise ValueError(f"expected format 'ISO[TZ]', got: {s}")
    iso_part, tz_name = m.group(1), m.group(2)
    tz = ZoneInfo(tz_name)
    dt = datetime.fromisoformat(iso_part)
    # Convert to the named timezone
    return dt.astimezone(tz)


def cron(expression: str, cron_type: CronType) -> Schedule:
    return CronParser(definition_for(cron_type)).parse(expression)


@pytest.fixture(scope="session")
def quartz_parser() -> CronParser:
    return CronParser(definition_for(CronType.QUARTZ))


@pytest.fixture(scope="session")
def unix_parser() -> CronParser:
    return CronParser(definition_for(CronType.UNIX))
