"""Schema-builder vocabulary shared by the migration parser and emitter.

The parser dispatches on these tables instead of a cascade of regexes, so a
new builder method only needs an entry here.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from schemabridge.schema.model import Column

# Builder method -> column type
COLUMN_METHODS: Dict[str, str] = {
    "bigInteger": "bigint",
    "unsignedBigInteger": "bigint",
    "integer": "int",
    "unsignedInteger": "int",
    "smallInteger": "smallint",
    "unsignedSmallInteger": "smallint",
    "tinyInteger": "tinyint",
    "unsignedTinyInteger": "tinyint",
    "mediumInteger": "mediumint",
    "unsignedMediumInteger": "mediumint",
    "string": "varchar",
    "char": "char",
    "text": "text",
    "tinyText": "tinytext",
    "mediumText": "mediumtext",
    "longText": "longtext",
    "boolean": "boolean",
    "date": "date",
    "dateTime": "datetime",
    "dateTimeTz": "datetime",
    "timestamp": "timestamp",
    "timestampTz": "timestamp",
    "time": "time",
    "timeTz": "time",
    "year": "year",
    "decimal": "decimal",
    "unsignedDecimal": "decimal",
    "float": "float",
    "double": "double",
    "json": "json",
    "jsonb": "json",
    "enum": "enum",
    "uuid": "uuid",
    "ipAddress": "ipaddress",
    "macAddress": "macaddress",
    "binary": "binary",
}

# Auto-incrementing primary key helpers -> column type
INCREMENT_METHODS: Dict[str, str] = {
    "id": "bigint",
    "bigIncrements": "bigint",
    "increments": "int",
    "mediumIncrements": "mediumint",
    "smallIncrements": "smallint",
    "tinyIncrements": "tinyint",
}

SIZED_METHODS = {"string", "char"}
DECIMAL_METHODS = {"decimal", "unsignedDecimal"}
UNSIGNED_METHODS = {m for m in COLUMN_METHODS if m.startswith("unsigned")}

# Column type -> builder method used when emitting
TYPE_METHODS: Dict[str, str] = {
    "int": "integer",
    "bigint": "bigInteger",
    "smallint": "smallInteger",
    "tinyint": "tinyInteger",
    "mediumint": "mediumInteger",
    "varchar": "string",
    "char": "char",
    "text": "text",
    "tinytext": "tinyText",
    "mediumtext": "mediumText",
    "longtext": "longText",
    "boolean": "boolean",
    "date": "date",
    "datetime": "dateTime",
    "timestamp": "timestamp",
    "time": "time",
    "year": "year",
    "decimal": "decimal",
    "float": "float",
    "double": "double",
    "json": "json",
    "enum": "enum",
    "uuid": "uuid",
    "ipaddress": "ipAddress",
    "macaddress": "macAddress",
    "binary": "binary",
}
DEFAULT_METHOD = "string"

# Unsigned columns, and bigint foreign keys pointing at id(), use these
UNSIGNED_TYPE_METHODS: Dict[str, str] = {
    "int": "unsignedInteger",
    "bigint": "unsignedBigInteger",
    "smallint": "unsignedSmallInteger",
    "tinyint": "unsignedTinyInteger",
    "mediumint": "unsignedMediumInteger",
    "decimal": "unsignedDecimal",
}


@dataclass
class Call:
    """One ``->method(args)`` link of a builder statement."""

    method: str
    raw_args: str = ""
    args: List[Any] = field(default_factory=list)

    def arg(self, index: int, default: Any = None) -> Any:
        return self.args[index] if index < len(self.args) else default


class Raw(str):
    """An unquoted argument such as ``now()``, ``true`` or ``User::class``."""


# --- tokenizing -----------------------------------------------------------

_QUOTES = ("'", '"')
_OPEN = {"(": ")", "[": "]", "{": "}"}


def _unescape(value: str) -> str:
    out = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            nxt = next(chars, "")
            out.append(nxt)
        else:
            out.append(ch)
    return "".join(out)


def find_closing(text: str, start: int) -> int:
    """
    Index of the bracket closing ``text[start]``, skipping quoted strings.

    Returns -1 when the bracket is never closed.
    """
    stack = [_OPEN[text[start]]]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_string(text, i)
            continue
        if ch in _OPEN:
            stack.append(_OPEN[ch])
        elif stack and ch == stack[-1]:
            stack.pop()
            if not stack:
                return i
        i += 1
    return -1


def _skip_string(text: str, start: int) -> int:
    """Index just past the string literal opening at ``start``."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    return len(text)


def split_top_level(text: str, separator: str) -> List[str]:
    """Split on ``separator`` outside strings and brackets."""
    parts: List[str] = []
    depth = 0
    current = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            end = _skip_string(text, i)
            current.append(text[i:end])
            i = end
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        if ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def parse_value(token: str) -> Any:
    """Convert one PHP argument into a Python value."""
    token = token.strip()
    if not token:
        return None
    if token[0] in _QUOTES and token[-1] == token[0] and len(token) >= 2:
        return _unescape(token[1:-1])
    if token[0] == "[" and token[-1] == "]":
        return [parse_value(t) for t in split_top_level(token[1:-1], ",") if t.strip()]
    if token.lstrip("-").isdigit():
        return int(token)
    return Raw(token)


def parse_args(raw: str) -> List[Any]:
    if not raw.strip():
        return []
    return [parse_value(t) for t in split_top_level(raw, ",")]


def parse_chain(statement: str) -> Optional[List[Call]]:
    """
    Parse ``$table->a(...)->b(...)`` into its calls.

    Returns None when the statement is not a call chain on a variable.
    """
    text = statement.strip()
    if not text.startswith("$"):
        return None
    i = 1
    while i < len(text) and (text[i].isalnum() or text[i] == "_"):
        i += 1

    calls: List[Call] = []
    while i < len(text):
        while i < len(text) and text[i].isspace():
            i += 1
        if not text.startswith("->", i):
            break
        i += 2
        name_start = i
        while i < len(text) and (text[i].isalnum() or text[i] == "_"):
            i += 1
        method = text[name_start:i]
        while i < len(text) and text[i].isspace():
            i += 1
        if not method or i >= len(text) or text[i] != "(":
            break
        close = find_closing(text, i)
        if close < 0:
            break
        raw = text[i + 1 : close]
        calls.append(Call(method=method, raw_args=raw, args=parse_args(raw)))
        i = close + 1
    return calls or None


# --- column modifiers -----------------------------------------------------


def _nullable(column: Column, call: Call) -> None:
    column.nullable = str(call.arg(0, "true")).lower() != "false"


def _default(column: Column, call: Call) -> None:
    column.default = call.raw_args.strip()


def _unique(column: Column, call: Call) -> None:
    column.unique = True


def _minimum(column: Column, call: Call) -> None:
    value = call.arg(0)
    if isinstance(value, int):
        column.minimum = value


def _maximum(column: Column, call: Call) -> None:
    value = call.arg(0)
    if isinstance(value, int):
        column.maximum = value


def _unsigned(column: Column, call: Call) -> None:
    column.unsigned = True
    if column.minimum is None:
        column.minimum = 0


def _index(column: Column, call: Call) -> None:
    column.index = True


def _comment(column: Column, call: Call) -> None:
    value = call.arg(0)
    if isinstance(value, str) and not isinstance(value, Raw):
        column.comment = value


def _date_boundary(value: Any) -> Optional[str]:
    if isinstance(value, Raw):
        return "now" if value.replace(" ", "") == "now()" else None
    return value if isinstance(value, str) else None


def _before(column: Column, call: Call) -> None:
    column.before = _date_boundary(call.arg(0))


def _after(column: Column, call: Call) -> None:
    column.after = _date_boundary(call.arg(0))


def _regex(column: Column, call: Call) -> None:
    value = call.arg(0)
    if isinstance(value, str) and not isinstance(value, Raw):
        column.pattern = value


def _primary(column: Column, call: Call) -> None:
    column.primary = True
    column.nullable = False


def _use_current(column: Column, call: Call) -> None:
    column.nullable = False


MODIFIERS: Dict[str, Callable[[Column, Call], None]] = {
    "nullable": _nullable,
    "default": _default,
    "unique": _unique,
    "min": _minimum,
    "max": _maximum,
    "unsigned": _unsigned,
    "index": _index,
    "comment": _comment,
    "before": _before,
    "after": _after,
    "regex": _regex,
    "primary": _primary,
    "useCurrent": _use_current,
}


def apply_modifiers(column: Column, modifiers: List[Call]) -> None:
    """Apply every recognised modifier in the chain; unknown ones are ignored."""
    for call in modifiers:
        handler = MODIFIERS.get(call.method)
        if handler is not None:
            handler(column, call)
