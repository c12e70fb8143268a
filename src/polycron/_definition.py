from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._ast import CronFieldName

if TYPE_CHECKING:
    from ._schedule import Schedule


@dataclass(frozen=True, slots=True)
class FieldConstraints:
    min_value: int
    max_value: int
    names: dict[str, int] = field(default_factory=dict)
    int_mapping: dict[int, int] = field(default_factory=dict)
    supports_l: bool = False
    supports_w: bool = False
    supports_lw: bool = False
    supports_hash: bool = False
    supports_question_mark: bool = False
    strict_range: bool = False
    monday_value: int = 1

    def normalize(self, value: int) -> int:
        """Resolve alternate numerals, e.g. Unix day-of-week 7 is 0."""
        return self.int_mapping.get(value, value)

    def numerals(self, value: int) -> set[int]:
        """Every numeral that denotes the same value as `value`."""
        return {value} | {raw for raw, mapped in self.int_mapping.items() if mapped == value}

    def to_iso_weekday(self, value: int) -> int:
        """Dialect day-of-week numeral to ISO weekday (Monday=1, Sunday=7)."""
        return (self.normalize(value) - self.monday_value) % 7 + 1

    def from_iso_weekday(self, iso: int) -> int:
        """ISO weekday to this dialect's canonical day-of-week numeral."""
        value = (iso - 1 + self.monday_value) % 7
        if value < self.min_value:
            value += 7
        return value


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    name: CronFieldName
    constraints: FieldConstraints
    optional: bool = False


@dataclass(frozen=True, slots=True)
class CronConstraint:
    description: str
    validate: Callable[[Schedule], bool]


@dataclass(frozen=True, slots=True)
class CronDefinition:
    field_definitions: tuple[FieldDefinition, ...]
    constraints: tuple[CronConstraint, ...] = ()
    nicknames: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        seen: set[CronFieldName] = set()
        for definition in self.field_definitions:
            if definition.name in seen:
                raise ValueError(f"duplicate field definition: {definition.name}")
            seen.add(definition.name)
        # Optional fields may only trail the required ones.
        optional_seen = False
        for definition in self.field_definitions:
            if definition.optional:
                optional_seen = True
            elif optional_seen:
                raise ValueError(f"required field {definition.name} follows an optional field")

    @classmethod
    def of(
        cls,
        field_definitions: Iterable[FieldDefinition],
        constraints: Iterable[CronConstraint] = (),
        nicknames: Iterable[str] = (),
    ) -> CronDefinition:
        return cls(tuple(field_definitions), tuple(constraints), frozenset(nicknames))

    def field_definition(self, name: CronFieldName) -> FieldDefinition | None:
        for definition in self.field_definitions:
            if definition.name == name:
                return definition
        return None

    def has_field(self, name: CronFieldName) -> bool:
        return self.field_definition(name) is not None

    def position(self, name: CronFieldName) -> int:
        """Index of the field in this dialect's textual order."""
        for i, definition in enumerate(self.field_definitions):
            if definition.name == name:
                return i
        raise ValueError(f"{name} is not defined for this cron definition")

    @property
    def field_names(self) -> tuple[CronFieldName, ...]:
        return tuple(d.name for d in self.field_definitions)

    @property
    def accepted_lengths(self) -> list[int]:
        """Field counts a textual expression may have."""
        required = sum(1 for d in self.field_definitions if not d.optional)
        return list(range(required, len(self.field_definitions) + 1))
