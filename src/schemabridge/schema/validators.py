"""Invariant checks for a SchemaModel."""

from dataclasses import dataclass, field
from typing import List
from .model import ManyToMany, SchemaModel
from schemabridge.config.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SchemaIssue:
    """Invariant violation found in a schema model."""

    code: str  # e.g., "PIVOT_SHAPE", "FK_UNRESOLVED"
    location: str  # e.g., "table_name" or "table_name.column_name"
    message: str
    details: dict = field(default_factory=dict)


def validate_schema(model: SchemaModel) -> List[SchemaIssue]:
    """
    Validate the structural invariants of a schema model.

    Args:
        model: SchemaModel to validate

    Returns:
        List of SchemaIssue objects (empty if validation passes)
    """
    issues: List[SchemaIssue] = []
    seen_pivot = False

    for table in model.tables:
        name = table.table_name

        # Domain tables must precede every pivot table
        if table.is_pivot:
            seen_pivot = True
        elif seen_pivot:
            issues.append(
                SchemaIssue(
                    code="PIVOT_ORDER",
                    location=name,
                    message=f"{name}: domain table declared after a pivot table.",
                )
            )

        primaries = [c.name for c in table.columns if c.primary]
        if len(primaries) > 1:
            issues.append(
                SchemaIssue(
                    code="MULTIPLE_PRIMARY",
                    location=name,
                    message=f"{name}: more than one primary column ({', '.join(primaries)}).",
                    details={"columns": primaries},
                )
            )

        seen_columns = set()
        for column in table.columns:
            if column.name in seen_columns:
                issues.append(
                    SchemaIssue(
                        code="DUPLICATE_COLUMN",
                        location=f"{name}.{column.name}",
                        message=f"{name}: column '{column.name}' declared twice.",
                    )
                )
            seen_columns.add(column.name)

            if column.foreign_key is not None and not column.is_foreign_key_name:
                issues.append(
                    SchemaIssue(
                        code="FK_NAMING",
                        location=f"{name}.{column.name}",
                        message=f"{name}.{column.name}: foreign key column does not end in '_id'.",
                        details={"references": column.foreign_key.table},
                    )
                )

        if table.is_pivot:
            fk_columns = [c.name for c in table.columns if c.is_foreign_key_name]
            extra = [c.name for c in table.non_system_columns() if not c.is_foreign_key_name]
            if len(fk_columns) != 2 or extra:
                issues.append(
                    SchemaIssue(
                        code="PIVOT_SHAPE",
                        location=name,
                        message=(
                            f"{name}: pivot tables need exactly two '_id' columns and no other "
                            f"non-system columns (found {len(fk_columns)} keys, extra: {extra})."
                        ),
                        details={"foreign_keys": fk_columns, "extra": extra},
                    )
                )

    for relationship in model.relationships:
        if not isinstance(relationship, ManyToMany):
            continue
        pivot = model.get_pivot(relationship.pivot_table) if relationship.pivot_table else None
        if pivot is None:
            issues.append(
                SchemaIssue(
                    code="PIVOT_MISSING",
                    location=relationship.key(),
                    message=(
                        f"{relationship.table1} <-> {relationship.table2}: pivot table "
                        f"'{relationship.pivot_table}' is missing or not flagged as pivot."
                    ),
                )
            )

    for ref in model.unresolved:
        issues.append(
            SchemaIssue(
                code="FK_UNRESOLVED",
                location=f"{ref.table}.{ref.column}",
                message=f"{ref.table}.{ref.column}: references unknown table '{ref.references}'.",
                details={"references": ref.references},
            )
        )

    if issues:
        logger.debug(f"Schema validation found {len(issues)} issue(s)")
    return issues
