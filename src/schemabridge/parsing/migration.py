"""Parse Laravel migration files into tables, foreign-key facts and unique sets."""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from schemabridge import naming
from schemabridge.config.logging import get_logger
from schemabridge.schema.model import Column, ForeignKeyRef
from .vocabulary import (
    COLUMN_METHODS,
    DECIMAL_METHODS,
    INCREMENT_METHODS,
    SIZED_METHODS,
    UNSIGNED_METHODS,
    Call,
    Raw,
    apply_modifiers,
    find_closing,
    parse_chain,
    split_top_level,
)

logger = get_logger(__name__)

CREATE_MARKER = re.compile(r"Schema::create\(\s*['\"](\w+)['\"]\s*,")


@dataclass
class ForeignKeyFact:
    """A foreign key as declared in a migration (column -> on.references)."""

    column: str
    on: str
    references: str = "id"


@dataclass
class ParsedTable:
    """Raw result of parsing one ``Schema::create`` block."""

    table_name: str
    columns: List[Column] = field(default_factory=list)
    foreign_keys: List[ForeignKeyFact] = field(default_factory=list)
    unique_sets: List[List[str]] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def entity_name(self) -> str:
        return naming.entity_name(self.table_name)

    def get_column(self, name: str) -> Optional[Column]:
        return next((c for c in self.columns if c.name == name), None)

    def add_column(self, column: Column) -> None:
        if self.get_column(column.name) is not None:
            logger.debug(f"{self.table_name}: column '{column.name}' already declared, skipping")
            return
        self.columns.append(column)


# --- source preprocessing -------------------------------------------------


def strip_comments(text: str) -> str:
    """Remove ``//``, ``#`` and ``/* */`` comments outside string literals."""
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in ("'", '"'):
            j = i + 1
            while j < len(text) and text[j] != ch:
                j += 2 if text[j] == "\\" else 1
            out.append(text[i : j + 1])
            i = j + 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = len(text) if end < 0 else end + 2
        elif text.startswith("//", i) or ch == "#":
            end = text.find("\n", i)
            i = len(text) if end < 0 else end
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def extract_create_blocks(content: str) -> List[tuple]:
    """Return ``(table_name, body)`` for every ``Schema::create`` block."""
    blocks = []
    for match in CREATE_MARKER.finditer(content):
        brace = content.find("{", match.end())
        if brace < 0:
            continue
        close = find_closing(content, brace)
        body = content[brace + 1 :] if close < 0 else content[brace + 1 : close]
        blocks.append((match.group(1), body))
    return blocks


# --- statement handlers ---------------------------------------------------

Handler = Callable[[ParsedTable, Call, List[Call]], None]


def _string_arg(call: Call, index: int = 0) -> Optional[str]:
    value = call.arg(index)
    if isinstance(value, str) and not isinstance(value, Raw):
        return value
    return None


def _column_list(call: Call) -> List[str]:
    value = call.arg(0)
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    if isinstance(value, str) and not isinstance(value, Raw):
        return [value]
    return []


def _record_chain_foreign_key(table: ParsedTable, column: Column, modifiers: List[Call]) -> None:
    """Handle ``->constrained()`` and ``->references()->on()`` chained on a column."""
    methods = {call.method: call for call in modifiers}
    if "constrained" in methods:
        call = methods["constrained"]
        target = _string_arg(call, 0) or naming.table_from_foreign_key(column.name)
        references = _string_arg(call, 1) or "id"
        table.foreign_keys.append(ForeignKeyFact(column=column.name, on=target, references=references))
    elif "on" in methods:
        target = _string_arg(methods["on"])
        if target:
            references = _string_arg(methods["references"]) if "references" in methods else None
            table.foreign_keys.append(
                ForeignKeyFact(column=column.name, on=target, references=references or "id")
            )


def _finish_column(table: ParsedTable, column: Column, modifiers: List[Call]) -> None:
    apply_modifiers(column, modifiers)
    if column.unique:
        table.unique_sets.append([column.name])
    _record_chain_foreign_key(table, column, modifiers)
    table.add_column(column)


def _typed_column(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    name = _string_arg(call)
    if name is None:
        return
    column = Column(name=name, type=COLUMN_METHODS[call.method], nullable=False)
    size = call.arg(1)
    if call.method in SIZED_METHODS and isinstance(size, int):
        column.size = size
    elif call.method in DECIMAL_METHODS:
        scale = call.arg(2)
        if isinstance(size, int):
            column.precision = size
        if isinstance(scale, int):
            column.scale = scale
    elif call.method == "enum" and isinstance(size, list):
        column.enum_values = [str(v) for v in size]
    if call.method in UNSIGNED_METHODS:
        column.unsigned = True
        column.minimum = 0
    _finish_column(table, column, modifiers)


def _increments(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    name = _string_arg(call) or "id"
    column = Column(name=name, type=INCREMENT_METHODS[call.method], nullable=False, primary=True)
    _finish_column(table, column, modifiers)


def _remember_token(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    table.add_column(Column(name="remember_token", type="varchar", size=100, nullable=True))


def _morphs(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    name = _string_arg(call)
    if name is None:
        return
    nullable = call.method.startswith("nullable")
    id_type = "uuid" if "Uuid" in call.method else "bigint"
    table.add_column(Column(name=f"{name}_type", type="varchar", size=255, nullable=nullable))
    table.add_column(Column(name=f"{name}_id", type=id_type, nullable=nullable))


def _foreign_id(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    name = _string_arg(call)
    if name is None:
        return
    _finish_column(table, Column(name=name, type="bigint", nullable=False), modifiers)


def _foreign_id_for(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    model = str(call.arg(0) or "")
    model = model.replace("::class", "").split("\\")[-1].strip()
    if not model:
        return
    name = _string_arg(call, 1) or naming.foreign_key_for(model)
    column = Column(name=name, type="bigint", nullable=False)
    apply_modifiers(column, modifiers)
    if column.unique:
        table.unique_sets.append([name])
    if any(c.method == "constrained" for c in modifiers):
        table.foreign_keys.append(ForeignKeyFact(column=name, on=naming.table_name_for(model)))
    table.add_column(column)


def _timestamps(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    table.add_column(Column(name="created_at", type="timestamp", nullable=True))
    table.add_column(Column(name="updated_at", type="timestamp", nullable=True))


def _soft_deletes(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    name = _string_arg(call) or "deleted_at"
    table.add_column(Column(name=name, type="timestamp", nullable=True))


def _foreign(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    columns = _column_list(call)
    methods = {m.method: m for m in modifiers}
    if len(columns) != 1 or "on" not in methods:
        return
    target = _string_arg(methods["on"])
    if not target:
        return
    references = _string_arg(methods["references"]) if "references" in methods else None
    table.foreign_keys.append(ForeignKeyFact(column=columns[0], on=target, references=references or "id"))


def _unique_constraint(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    columns = _column_list(call)
    if columns:
        table.unique_sets.append(columns)


def _primary_constraint(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    columns = _column_list(call)
    if len(columns) != 1:
        return  # composite keys are not modelled
    column = table.get_column(columns[0])
    if column is not None:
        column.primary = True
        column.nullable = False


def _index_constraint(table: ParsedTable, call: Call, modifiers: List[Call]) -> None:
    for name in _column_list(call):
        column = table.get_column(name)
        if column is not None:
            column.index = True


STATEMENT_HANDLERS: Dict[str, Handler] = {method: _typed_column for method in COLUMN_METHODS}
STATEMENT_HANDLERS.update({method: _increments for method in INCREMENT_METHODS})
STATEMENT_HANDLERS.update(
    {
        "rememberToken": _remember_token,
        "morphs": _morphs,
        "nullableMorphs": _morphs,
        "uuidMorphs": _morphs,
        "nullableUuidMorphs": _morphs,
        "foreignId": _foreign_id,
        "foreignIdFor": _foreign_id_for,
        "timestamps": _timestamps,
        "timestampsTz": _timestamps,
        "nullableTimestamps": _timestamps,
        "softDeletes": _soft_deletes,
        "softDeletesTz": _soft_deletes,
        "foreign": _foreign,
        "unique": _unique_constraint,
        "primary": _primary_constraint,
        "index": _index_constraint,
    }
)


# --- entry points ---------------------------------------------------------


def parse_block(table_name: str, body: str, source: Optional[str] = None) -> ParsedTable:
    """Parse the body of one ``Schema::create`` closure."""
    table = ParsedTable(table_name=table_name, source=source)
    for statement in split_top_level(strip_comments(body), ";"):
        if not statement.strip():
            continue
        calls = parse_chain(statement)
        if not calls:
            continue
        head, modifiers = calls[0], calls[1:]
        handler = STATEMENT_HANDLERS.get(head.method)
        if handler is None:
            logger.debug(f"{table_name}: ignoring unsupported builder call '{head.method}'")
            continue
        handler(table, head, modifiers)

    # Attach declared foreign keys to their columns
    for fact in table.foreign_keys:
        column = table.get_column(fact.column)
        if column is None:
            logger.debug(f"{table_name}: foreign key on undeclared column '{fact.column}'")
            continue
        if column.foreign_key is None:
            column.foreign_key = ForeignKeyRef(table=fact.on, column=fact.references)
    return table


def parse_migration(content: str, source: Optional[str] = None) -> List[ParsedTable]:
    """
    Parse the text of one migration file.

    Args:
        content: Full migration source
        source: Optional label (usually the file name) used in log messages

    Returns:
        One ParsedTable per ``Schema::create`` block; empty when the file
        creates no table.
    """
    blocks = extract_create_blocks(strip_comments(content))
    if not blocks:
        logger.debug(f"No Schema::create block in {source or 'migration'}")
    return [parse_block(name, body, source) for name, body in blocks]


def parse_migrations(contents: Iterable[str], sources: Optional[Iterable[str]] = None) -> List[ParsedTable]:
    """Parse several migration files, keeping their order."""
    labels = list(sources) if sources is not None else []
    tables: List[ParsedTable] = []
    for index, content in enumerate(contents):
        source = labels[index] if index < len(labels) else None
        parsed = parse_migration(content, source)
        for table in parsed:
            logger.info(f"Parsed table '{table.table_name}' ({len(table.columns)} columns)")
        tables.extend(parsed)
    return tables
