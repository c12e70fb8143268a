from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING

from ._ast import CronField, CronFieldName
from ._definition import CronDefinition
from ._display import display
from ._error import CronError
from ._eval import ExecutionTime
from ._validate import validate_field

if TYPE_CHECKING:
    from ._mapper import CronMapper

# Number of fire times each side of `overlap` inspects.
OVERLAP_ITERATIONS = 10


class Schedule:
    """A parsed cron: one expression per field of a `CronDefinition`."""

    _definition: CronDefinition
    _fields: dict[CronFieldName, CronField]
    _as_string: str | None

    def __init__(self, definition: CronDefinition, fields: Iterable[CronField]) -> None:
        if definition is None:
            raise TypeError("CronDefinition must not be None")
        if fields is None:
            raise TypeError("fields must not be None")
        self._definition = definition
        collected: dict[CronFieldName, CronField] = {}
        for field in fields:
            if not definition.has_field(field.name):
                raise ValueError(f"{field.name} is not defined for this cron definition")
            if field.name in collected:
                raise ValueError(f"duplicate field {field.name}")
            collected[field.name] = field
        # Iteration follows the definition's field order
        self._fields = {
            name: collected[name] for name in sorted(collected, key=definition.position)
        }
        self._as_string = None

    @property
    def definition(self) -> CronDefinition:
        return self._definition

    def retrieve(self, name: CronFieldName) -> CronField | None:
        if name is None:
            raise TypeError("CronFieldName must not be None")
        return self._fields.get(name)

    def retrieve_fields_as_map(self) -> Mapping[CronFieldName, CronField]:
        return MappingProxyType(self._fields)

    def as_string(self) -> str:
        if self._as_string is None:
            self._as_string = " ".join(
                display(f.expression) for f in self._fields.values()
            ).strip()
        return self._as_string

    def validate(self) -> Schedule:
        """Check every field, then every cross-field constraint. Returns `self`."""
        for definition in self._definition.field_definitions:
            field = self._fields.get(definition.name)
            if field is not None:
                validate_field(field.expression, definition)
        for constraint in self._definition.constraints:
            if not constraint.validate(self):
                raise CronError.validation(
                    f"Invalid cron expression: {self.as_string()}. {constraint.description}"
                )
        return self

    def equivalent(self, other: Schedule, mapper: CronMapper | None = None) -> bool:
        """Textual equality of canonical strings, mapping `other` first when a mapper is given."""
        if other is None:
            raise TypeError("Schedule must not be None")
        if mapper is not None:
            other = mapper.map(other)
        return self.as_string() == other.as_string()

    def overlap(self, other: Schedule, now: datetime | None = None) -> bool:
        """Whether both schedules fire at a common instant soon after `now`.

        Only the next `OVERLAP_ITERATIONS` fire times of each side are
        inspected, so coincidences further out are reported as no overlap.
        """
        if other is None:
            raise TypeError("Schedule must not be None")
        if now is None:
            now = datetime.now(timezone.utc)
        this_time = ExecutionTime.for_cron(self)
        other_time = ExecutionTime.for_cron(other)

        this_next = this_time.next_execution(now)
        other_next = other_time.next_execution(now)
        if this_next is None or other_next is None:
            return False

        return _walk_hits(this_time, this_next, other_time) or _walk_hits(
            other_time, other_next, this_time
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schedule):
            return NotImplemented
        return self._definition == other._definition and self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self.as_string())

    def __str__(self) -> str:
        return self.as_string()

    def __repr__(self) -> str:
        return f"Schedule({self.as_string()!r})"


def _walk_hits(walker: ExecutionTime, start: datetime, probe: ExecutionTime) -> bool:
    checkpoint: datetime | None = start
    for _ in range(OVERLAP_ITERATIONS):
        if checkpoint is None:
            return False
        if probe.is_match(checkpoint):
            return True
        checkpoint = walker.next_execution(checkpoint)
    return False
