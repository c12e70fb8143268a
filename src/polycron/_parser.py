from __future__ import annotations

import re

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
)
from ._definition import CronDefinition, FieldConstraints, FieldDefinition
from ._dialects import CronType, definition_for
from ._error import CronError, Span
from ._schedule import Schedule
from ._validate import validate_field

_STRUCTURAL_CHARS = frozenset("0123456789,-*/")

_TOKEN = re.compile(r"\S+")


# --- Field tokens ---


def parse_field(token: str, definition: FieldDefinition) -> FieldExpression:
    """Build the expression for one field token. No calendar arithmetic happens here."""
    if token is None:
        raise TypeError("field token must not be None")
    c = definition.constraints
    text = token.strip().upper()
    if not text:
        raise CronError.parse(f"Empty expression for {definition.name}")

    invalid = _invalid_chars(text, c)
    if invalid:
        raise CronError.parse(
            f"Invalid chars in expression! Expression: {token} Invalid chars: {invalid}"
        )

    parts = text.split(",")
    if len(parts) == 1:
        return _parse_part(text, c)
    if any(not p for p in parts):
        raise CronError.parse(f"Invalid expression! Expression: {token}")
    return And(tuple(_parse_part(p, c) for p in parts))


def _invalid_chars(text: str, c: FieldConstraints) -> str:
    remaining = text
    for name in sorted(c.names, key=len, reverse=True):
        remaining = remaining.replace(name, "")

    allowed = set(_STRUCTURAL_CHARS)
    if c.supports_question_mark:
        allowed.add("?")
    if c.supports_l or c.supports_lw:
        allowed.add("L")
    if c.supports_w or c.supports_lw:
        allowed.add("W")
    if c.supports_hash:
        allowed.add("#")

    found: list[str] = []
    for ch in remaining:
        if ch not in allowed and ch not in found:
            found.append(ch)
    return "".join(found)


def _parse_part(part: str, c: FieldConstraints) -> FieldExpression:
    if part == "*":
        return Always()
    if part == "?":
        return QuestionMark()
    if part in c.names:
        return On(c.names[part])

    if "/" in part:
        return _parse_step(part, c)

    if part == "L":
        return Last()
    if part == "LW":
        return NearestWeekday(None)
    if part.startswith("L-"):
        offset = part[2:]
        if not offset.isdigit():
            raise CronError.parse(f"Invalid expression! Expression: {part} has an invalid offset")
        return LastDayOffset(int(offset))
    if part.endswith("W") and _is_value(part[:-1], c):
        return NearestWeekday(_value(part[:-1], part, c))
    if part.endswith("L") and _is_value(part[:-1], c):
        return Last(_value(part[:-1], part, c))

    if "#" in part:
        weekday, _, nth = part.partition("#")
        if not nth.isdigit():
            raise CronError.parse(f"Invalid expression! Expression: {part} has an invalid nth value")
        return On(_value(weekday, part, c), int(nth))

    if part.startswith("-"):
        raise CronError.parse(
            f"Invalid expression! Expression: {part} does not describe a range. "
            "Negative numbers are not allowed."
        )
    if "-" in part:
        start, _, end = part.partition("-")
        if not start or not end or "-" in end:
            raise CronError.parse(f"Invalid expression! Expression: {part} does not describe a range.")
        return Between(_value(start, part, c), _value(end, part, c))

    return On(_value(part, part, c))


def _parse_step(part: str, c: FieldConstraints) -> Every:
    base_text, _, step = part.partition("/")
    if not step:
        raise CronError.parse(f"Missing steps for expression: {part}")
    if not step.isdigit():
        raise CronError.parse(f"Invalid expression! Expression: {part} has an invalid step")

    base = Always() if base_text in ("", "*") else _parse_part(base_text, c)
    match base:
        case Always() | Between() | On(nth=None):
            return Every(base, int(step))
        case _:
            raise CronError.parse(f"Invalid expression! Expression: {part} has an invalid step base")


def _is_value(text: str, c: FieldConstraints) -> bool:
    return text in c.names or text.isdigit()


def _value(text: str, part: str, c: FieldConstraints) -> int:
    if text in c.names:
        return c.names[text]
    if text.isdigit():
        return int(text)
    raise CronError.parse(f"Invalid expression! Expression: {part} contains an invalid value: {text}")


# --- Whole expressions ---


def _nickname_tokens(nickname: str) -> dict[CronFieldName, str] | None:
    match nickname:
        case "@yearly" | "@annually":
            return {
                CronFieldName.MINUTE: "0",
                CronFieldName.HOUR: "0",
                CronFieldName.DAY_OF_MONTH: "1",
                CronFieldName.MONTH: "1",
            }
        case "@monthly":
            return {
                CronFieldName.MINUTE: "0",
                CronFieldName.HOUR: "0",
                CronFieldName.DAY_OF_MONTH: "1",
            }
        case "@weekly":
            return {
                CronFieldName.MINUTE: "0",
                CronFieldName.HOUR: "0",
                CronFieldName.DAY_OF_WEEK: "SUN",
            }
        case "@daily" | "@midnight":
            return {CronFieldName.MINUTE: "0", CronFieldName.HOUR: "0"}
        case "@hourly":
            return {CronFieldName.MINUTE: "0"}
        case _:
            return None


class CronParser:
    def __init__(self, definition: CronDefinition) -> None:
        if definition is None:
            raise TypeError("CronDefinition must not be None")
        self._definition = definition

    @property
    def definition(self) -> CronDefinition:
        return self._definition

    def parse(self, expression: str) -> Schedule:
        """Parse and validate a cron expression written in this parser's dialect."""
        if expression is None:
            raise TypeError("cron expression must not be None")
        if not expression.strip():
            raise CronError.parse("Empty expression!")

        matches = list(_TOKEN.finditer(expression))
        if matches[0].group().startswith("@"):
            if len(matches) != 1:
                raise CronError.parse(
                    f"Nickname {matches[0].group()} takes no other fields",
                    Span(matches[1].start(), matches[-1].end()),
                    expression,
                )
            return self._parse_nickname(matches[0].group(), expression)

        lengths = self._definition.accepted_lengths
        if len(matches) not in lengths:
            raise CronError.parse(
                f"Cron expression contains {len(matches)} parts but we expect one of {lengths}"
            )

        fields: list[CronField] = []
        for m, definition in zip(matches, self._definition.field_definitions):
            try:
                expr = parse_field(m.group(), definition)
                validate_field(expr, definition)
            except CronError as e:
                raise CronError(e.kind, str(e), Span(m.start(), m.end()), expression) from e
            fields.append(CronField(definition.name, expr))

        return Schedule(self._definition, fields).validate()

    def _parse_nickname(self, token: str, expression: str) -> Schedule:
        nickname = token.lower()
        tokens = _nickname_tokens(nickname)
        if tokens is None or nickname not in self._definition.nicknames:
            raise CronError.parse(
                f"Nickname {token} is not supported",
                Span(0, len(expression.rstrip())),
                expression,
            )
        fields: list[CronField] = []
        for definition in self._definition.field_definitions:
            if definition.optional:
                continue
            default = "0" if definition.name == CronFieldName.SECOND else "*"
            text = tokens.get(definition.name, default)
            fields.append(CronField(definition.name, parse_field(text, definition)))
        return Schedule(self._definition, fields).validate()


def parse(expression: str, dialect: CronDefinition | CronType) -> Schedule:
    definition = definition_for(dialect) if isinstance(dialect, CronType) else dialect
    return CronParser(definition).parse(expression)
