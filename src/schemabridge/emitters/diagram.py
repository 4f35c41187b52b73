"""Render a SchemaModel as a PlantUML entity-relationship diagram."""

from datetime import datetime
from typing import Dict, List, Optional

from schemabridge.config.logging import get_logger
from schemabridge.schema.model import (
    Column,
    ManyToMany,
    OneToMany,
    OneToOne,
    Relationship,
    SchemaModel,
    Table,
)

logger = get_logger(__name__)


def format_type(column: Column) -> str:
    """Column type with its parameters, e.g. ``varchar(100)`` or ``decimal(8,2)``."""
    if column.type == "enum" and column.enum_values:
        return f"enum({','.join(column.enum_values)})"
    if column.precision is not None and column.scale is not None:
        return f"{column.type}({column.precision},{column.scale})"
    if column.precision is not None:
        return f"{column.type}({column.precision})"
    if column.size is not None:
        return f"{column.type}({column.size})"
    return column.type


def format_column(column: Column) -> str:
    prefix = "* " if column.primary else "  "
    line = f"{prefix}{column.name} : {format_type(column)}"
    if not column.nullable and not column.primary:
        line += " NOT NULL"
    if column.comment:
        line += f' "{column.comment}"'
    return line


def format_entity(table: Table) -> List[str]:
    lines = [f"entity {table.name} {{"]
    lines.extend(format_column(column) for column in table.columns)
    lines.append("}")
    return lines


def dedupe_relationships(relationships: List[Relationship]) -> Dict[str, Dict[str, Relationship]]:
    """Group by kind, keeping the first relationship seen for each key."""
    groups: Dict[str, Dict[str, Relationship]] = {
        "one_to_one": {},
        "one_to_many": {},
        "many_to_many": {},
    }
    for relationship in relationships:
        groups[relationship.kind].setdefault(relationship.key(), relationship)
    return groups


def format_relationship(relationship: Relationship) -> str:
    if isinstance(relationship, OneToOne):
        return f"{relationship.parent} ||--|| {relationship.child}"
    if isinstance(relationship, OneToMany):
        return f"{relationship.parent} ||--o{{ {relationship.child}"
    if isinstance(relationship, ManyToMany):
        line = f"{relationship.table1} }}o--o{{ {relationship.table2}"
        if relationship.pivot_table:
            line += f" : {relationship.pivot_table}"
        return line
    raise TypeError(f"Unknown relationship type: {type(relationship).__name__}")


def emit_diagram(model: SchemaModel, generated_at: Optional[datetime] = None) -> str:
    """
    Render the whole schema as one PlantUML document.

    Pivot tables are not drawn as entities; their many-to-many line carries
    the pivot name instead.

    Args:
        model: Schema to render
        generated_at: Timestamp written in the header comment (defaults to now)

    Returns:
        PlantUML text wrapped in @startuml/@enduml
    """
    generated_at = generated_at or datetime.now()
    lines = ["@startuml", f"' Generated on {generated_at.strftime('%Y-%m-%d %H:%M:%S')}", ""]

    for table in model.domain_tables():
        lines.extend(format_entity(table))
        lines.append("")

    if model.relationships:
        lines.append("' Relationships")
        groups = dedupe_relationships(model.relationships)
        for kind in ("one_to_one", "one_to_many", "many_to_many"):
            lines.extend(format_relationship(r) for r in groups[kind].values())
        logger.debug(f"Rendered {sum(len(g) for g in groups.values())} relationships")

    lines.extend(["", "@enduml"])
    return "\n".join(lines)
