"""Render tables back into Laravel migration files."""

from dataclasses import dataclass
from datetime import datetime
from typing import Collection, List, Optional

from schemabridge.config.logging import get_logger
from schemabridge.config.settings import TranslationConfig
from schemabridge.errors import PivotTableShapeError
from schemabridge.parsing.vocabulary import DEFAULT_METHOD, TYPE_METHODS, UNSIGNED_TYPE_METHODS
from schemabridge.schema.model import Column, Table
from schemabridge.templates import load_template, render_template

logger = get_logger(__name__)

# Provided by the skeleton itself ($table->timestamps())
TIMESTAMP_COLUMNS = ("created_at", "updated_at")
# Integer primary key type -> auto-incrementing helper
INCREMENT_TYPE_METHODS = {
    "int": "increments",
    "mediumint": "mediumIncrements",
    "smallint": "smallIncrements",
    "tinyint": "tinyIncrements",
}
SOFT_DELETE_COLUMN = "deleted_at"


@dataclass
class MigrationDocument:
    """One generated migration file."""

    table_name: str
    filename: str
    content: str


def _php_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def migration_filename(table_name: str, timestamp: datetime) -> str:
    return f"{timestamp.strftime('%Y_%m_%d_%H%M%S')}_create_{table_name}_table.php"


def build_column_definition(column: Column) -> str:
    """
    Builder statement for one column, e.g.
    ``$table->decimal('price', 8, 2)->nullable()->comment('Unit price');``.
    """
    method = TYPE_METHODS.get(column.type, DEFAULT_METHOD)
    if column.unsigned or (column.foreign_key is not None and column.type == "bigint"):
        method = UNSIGNED_TYPE_METHODS.get(column.type, method)
    definition = f"$table->{method}({_php_string(column.name)}"

    if method in ("decimal", "unsignedDecimal") and column.precision is not None:
        definition += f", {column.precision}"
        if column.scale is not None:
            definition += f", {column.scale}"
    elif method in ("string", "char") and column.size is not None:
        definition += f", {column.size}"
    elif method == "enum":
        values = ", ".join(_php_string(v) for v in column.enum_values)
        definition += f", [{values}]"
    definition += ")"

    if column.nullable and not column.primary:
        definition += "->nullable()"
    if column.comment:
        definition += f"->comment({_php_string(column.comment)})"
    return definition + ";"


def primary_key_column(table: Table) -> Optional[Column]:
    return next((c for c in table.columns if c.primary), None)


def build_primary_key(table: Table) -> str:
    """
    Primary key statement opening the table body.

    Integer keys map to the auto-incrementing helpers (``id()`` for a bigint
    ``id``); any other key type is declared as a regular column with
    ``->primary()``. Tables without a primary column get ``id()``.
    """
    primary = primary_key_column(table)
    if primary is None or (primary.name == "id" and primary.type == "bigint"):
        return "$table->id();"
    if primary.type == "bigint":
        return f"$table->id({_php_string(primary.name)});"
    if primary.type in INCREMENT_TYPE_METHODS:
        return f"$table->{INCREMENT_TYPE_METHODS[primary.type]}({_php_string(primary.name)});"
    logger.info(f"{table.table_name}: primary key '{primary.name}' is {primary.type}, declared with primary()")
    return build_column_definition(primary)[:-1] + "->primary();"


def build_schema_lines(
    table: Table,
    config: TranslationConfig,
    known_tables: Optional[Collection[str]] = None,
) -> List[str]:
    """
    Column and constraint statements spliced between the primary key and
    ``timestamps()``.

    Raises:
        PivotTableShapeError: If a pivot table does not carry exactly two
            foreign key columns
    """
    foreign_keys = table.foreign_key_columns()
    if table.is_pivot:
        keys = [c.name for c in foreign_keys if c.name.endswith("_id")]
        if len(keys) != 2:
            raise PivotTableShapeError(table.table_name, keys)

    primary = primary_key_column(table)
    lines: List[str] = []
    for column in table.columns:
        if column is primary or column.name in TIMESTAMP_COLUMNS or column.name == SOFT_DELETE_COLUMN:
            continue
        if column.name == "id" and primary is None:
            continue
        lines.append(build_column_definition(column))

    constraints: List[str] = []
    for column in foreign_keys:
        target = column.foreign_key
        if known_tables is not None and target.table not in known_tables:
            logger.warning(
                f"{table.table_name}.{column.name}: referenced table '{target.table}' "
                f"is not part of the schema, omitting constraint"
            )
            continue
        constraints.append(
            f"$table->foreign({_php_string(column.name)})"
            f"->references({_php_string(target.column)})"
            f"->on({_php_string(target.table)})"
            f"->onDelete({_php_string(config.on_delete)});"
        )
    if constraints:
        lines.append("")
        lines.extend(constraints)

    pivot_keys = [c.name for c in foreign_keys if c.name.endswith("_id")]
    if len(pivot_keys) == 2:
        lines.append(f"$table->unique([{', '.join(_php_string(k) for k in pivot_keys)}]);")
    return lines


def emit_migration(
    table: Table,
    config: Optional[TranslationConfig] = None,
    known_tables: Optional[Collection[str]] = None,
    timestamp: Optional[datetime] = None,
) -> MigrationDocument:
    """
    Render one table into a migration file.

    Args:
        table: Table to render
        config: Translation configuration (indent, soft deletes, delete policy)
        known_tables: Storage names of every table in the schema; foreign keys
            to other tables are left out. None disables the check.
        timestamp: Time used for the file name prefix (defaults to now)

    Returns:
        MigrationDocument with file name and content
    """
    config = config or TranslationConfig()
    timestamp = timestamp or datetime.now()
    table_name = table.table_name

    lines = build_schema_lines(table, config, known_tables)
    columns = "".join(f"{config.indent}{line}\n" if line else "\n" for line in lines)

    soft_deletes = ""
    if table.get_column(SOFT_DELETE_COLUMN) is not None or (config.soft_deletes and not table.is_pivot):
        soft_deletes = f"{config.indent}$table->softDeletes();\n"

    content = render_template(
        load_template("migration.stub"),
        table=table_name,
        primary=f"{config.indent}{build_primary_key(table)}\n",
        columns=columns,
        soft_deletes=soft_deletes,
    )
    logger.debug(f"Rendered migration for {table_name} ({len(lines)} lines)")
    return MigrationDocument(
        table_name=table_name,
        filename=migration_filename(table_name, timestamp),
        content=content,
    )
