"""Pivot detection and relationship inference.

Both parse flows end here: migration tables arrive with explicit foreign-key
facts, diagram tables arrive with relationship lines. Either way the result
is a SchemaModel whose domain tables precede its pivot tables.
"""

from typing import Iterable, List, Optional, Sequence

from schemabridge import naming
from schemabridge.config.logging import get_logger
from schemabridge.config.settings import TranslationConfig
from schemabridge.parsing.diagram import DiagramDocument
from schemabridge.parsing.migration import ParsedTable
from schemabridge.schema.model import (
    SYSTEM_COLUMNS,
    Column,
    ForeignKeyRef,
    ManyToMany,
    OneToMany,
    OneToOne,
    Relationship,
    SchemaModel,
    Table,
    UnresolvedReference,
)

logger = get_logger(__name__)


def is_pivot_name(table_name: str) -> bool:
    """
    Naming test for join tables.

    ``item_user`` and ``post_tag`` (both parts singular) as well as
    ``product_categories`` (second part plural) qualify; the first part must
    always be singular.
    """
    parts = table_name.split("_")
    if len(parts) != 2 or not all(parts):
        return False
    return naming.is_singular(parts[0])


def has_pivot_shape(columns: Iterable[Column], system_columns: Sequence[str] = SYSTEM_COLUMNS) -> bool:
    """Exactly two ``_id`` columns and no other non-system columns."""
    foreign_keys = 0
    others = 0
    for column in columns:
        if column.name.endswith("_id"):
            foreign_keys += 1
        elif column.name not in system_columns:
            others += 1
    return foreign_keys == 2 and others == 0


def is_pivot_table(
    table_name: str, columns: Iterable[Column], system_columns: Sequence[str] = SYSTEM_COLUMNS
) -> bool:
    """Naming test first, then the structural test."""
    if not is_pivot_name(table_name):
        return False
    return has_pivot_shape(columns, system_columns)


def pivot_name_for(table1: str, table2: str, custom_name: Optional[str] = None) -> str:
    """Custom names are snake-cased; otherwise the sorted singular models joined by ``_``."""
    if custom_name:
        return naming.snake(custom_name)
    models = sorted([naming.snake(naming.singularize(table1)), naming.snake(naming.singularize(table2))])
    return "_".join(models)


def synthesize_pivot(table1: str, table2: str, custom_name: Optional[str] = None) -> Table:
    """
    Build the join table for a many-to-many relationship.

    Args:
        table1: First related entity (any case or number)
        table2: Second related entity
        custom_name: Explicit pivot name from the diagram, if any

    Returns:
        Pivot Table with ``id`` and one foreign key column per model
    """
    models = sorted({naming.snake(naming.singularize(table1)), naming.snake(naming.singularize(table2))})
    columns = [Column(name="id", type="bigint", primary=True, nullable=False)]
    for model in models:
        columns.append(
            Column(
                name=f"{model}_id",
                type="bigint",
                nullable=False,
                foreign_key=ForeignKeyRef(table=naming.pluralize(model), column="id"),
            )
        )
    return Table(name=pivot_name_for(table1, table2, custom_name), columns=columns, is_pivot=True)


def ensure_foreign_key(table: Table, parent: str) -> Column:
    """
    Make sure ``table`` holds the foreign key to ``parent``.

    Adds ``<parent>_id`` when missing; an existing same-named column only
    gets its missing foreign key metadata filled in, so running this twice
    never duplicates the column.
    """
    parent_model = naming.snake(naming.singularize(parent))
    name = f"{parent_model}_id"
    reference = ForeignKeyRef(table=naming.pluralize(parent_model), column="id")

    existing = table.get_column(name)
    if existing is not None:
        if existing.foreign_key is None:
            existing.foreign_key = reference
        return existing

    column = Column(name=name, type="bigint", nullable=False, foreign_key=reference)
    table.columns.append(column)
    return column


def classify_foreign_key(parent: str, child: str, column: str, unique_sets: List[List[str]]) -> Relationship:
    """One-to-one when the key column is itself unique, one-to-many otherwise."""
    if [column] in unique_sets:
        return OneToOne(parent=parent, child=child)
    return OneToMany(parent=parent, child=child)


def order_tables(tables: List[Table]) -> List[Table]:
    """Domain tables first, pivot tables after, each group in original order."""
    return [t for t in tables if not t.is_pivot] + [t for t in tables if t.is_pivot]


def infer_from_migrations(parsed_tables: List[ParsedTable], config: Optional[TranslationConfig] = None) -> SchemaModel:
    """
    Turn parsed migration tables into a SchemaModel.

    Args:
        parsed_tables: Output of the migration parser, in file order
        config: Translation configuration (skip list, system columns)

    Returns:
        SchemaModel with pivots flagged, relationships classified and
        unresolvable references recorded in ``unresolved``
    """
    config = config or TranslationConfig()
    known = {p.table_name for p in parsed_tables}
    tables: List[Table] = []
    relationships: List[Relationship] = []
    unresolved: List[UnresolvedReference] = []

    for parsed in parsed_tables:
        pivot = is_pivot_table(parsed.table_name, parsed.columns, config.system_columns)
        name = parsed.table_name if pivot else parsed.entity_name
        table = Table(name=name, columns=list(parsed.columns), is_pivot=pivot)
        tables.append(table)

        if pivot:
            logger.info(f"Detected pivot table: {parsed.table_name}")
            # Conventional foreign keys for pivot columns without explicit constraints
            for column in table.columns:
                if column.name.endswith("_id") and column.foreign_key is None:
                    column.foreign_key = ForeignKeyRef(table=naming.table_from_foreign_key(column.name))

        if parsed.table_name in config.skip_tables:
            continue

        facts = [(c.name, c.foreign_key.table) for c in table.columns if c.foreign_key is not None]
        missing = [on for _, on in facts if on not in known]
        for column_name, on in facts:
            if on not in known:
                logger.warning(f"{parsed.table_name}.{column_name} references unknown table '{on}'")
                unresolved.append(UnresolvedReference(table=parsed.table_name, column=column_name, references=on))

        if pivot:
            related = [naming.entity_name(on) for column_name, on in facts if column_name.endswith("_id")]
            if len(related) >= 2 and not missing:
                relationships.append(
                    ManyToMany(table1=related[0], table2=related[1], pivot_table=parsed.table_name)
                )
            continue

        for column_name, on in facts:
            if not column_name.endswith("_id") or on not in known:
                continue
            relationships.append(
                classify_foreign_key(naming.entity_name(on), parsed.entity_name, column_name, parsed.unique_sets)
            )

    return SchemaModel(tables=order_tables(tables), relationships=relationships, unresolved=unresolved)


def infer_from_diagram(document: DiagramDocument, config: Optional[TranslationConfig] = None) -> SchemaModel:
    """
    Apply relationship-driven augmentation to a parsed diagram.

    One-to-one and one-to-many lines add (or annotate) the child's foreign
    key column; many-to-many lines synthesize pivot tables appended after
    every domain table.
    """
    config = config or TranslationConfig()
    model = SchemaModel(tables=[t.model_copy(deep=True) for t in document.tables])
    relationships: List[Relationship] = []
    pivots: List[Table] = []

    for relationship in document.relationships:
        if isinstance(relationship, ManyToMany):
            if model.get_table(relationship.table1) is None or model.get_table(relationship.table2) is None:
                _record_missing(model, relationship.table1, relationship.table2)
                continue
            pivot = synthesize_pivot(relationship.table1, relationship.table2, relationship.pivot_table)
            drawn = find_drawn_pivot(model.tables, pivot.name)
            if drawn is not None:
                adopt_pivot(drawn, relationship.table1, relationship.table2)
            elif any(p.name == pivot.name for p in pivots):
                logger.debug(f"Pivot table '{pivot.name}' already present, skipping")
            else:
                pivots.append(pivot)
            relationships.append(relationship.model_copy(update={"pivot_table": pivot.name}))
            continue

        child = model.get_table(relationship.child)
        if child is None or model.get_table(relationship.parent) is None:
            _record_missing(model, relationship.parent, relationship.child)
            continue
        ensure_foreign_key(child, relationship.parent)
        relationships.append(relationship)

    model.tables = order_tables(model.tables + pivots)
    model.relationships = relationships
    return model


def find_drawn_pivot(tables: List[Table], pivot_name: str) -> Optional[Table]:
    """
    A table declared in the diagram under the pivot's exact storage name.

    Only ``entity role_user`` matches ``role_user``; ``RoleUser`` (stored as
    ``role_users``) is a domain table of its own.
    """
    for table in tables:
        if table.name == pivot_name or (table.is_pivot and table.table_name == pivot_name):
            return table
    return None


def adopt_pivot(table: Table, table1: str, table2: str) -> None:
    """Flag a drawn join table as a pivot and give it both foreign keys."""
    if not table.is_pivot:
        logger.info(f"Treating entity '{table.name}' as pivot table")
    table.is_pivot = True
    for model in sorted({naming.snake(naming.singularize(table1)), naming.snake(naming.singularize(table2))}):
        ensure_foreign_key(table, model)


def _record_missing(model: SchemaModel, first: str, second: str) -> None:
    for name in (first, second):
        if model.get_table(name) is None:
            logger.warning(f"Relationship references undeclared entity '{name}'")
            model.unresolved.append(
                UnresolvedReference(table=naming.table_name_for(name), column="", references=name)
            )
