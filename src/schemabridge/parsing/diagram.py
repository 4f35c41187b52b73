"""Parse PlantUML entity-relationship text."""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from schemabridge.config.logging import get_logger
from schemabridge.schema.model import (
    Column,
    ManyToMany,
    OneToMany,
    OneToOne,
    Relationship,
    Table,
    normalize_type,
)

logger = get_logger(__name__)

ENTITY_LINE = re.compile(r"^entity\s+(\w+)\s*\{?$", re.IGNORECASE)
COLUMN_LINE = re.compile(r"^(\*)?\s*(\w+)\s*:\s*(\w+)(?:\(([^)]*)\))?(.*)$")
NOT_NULL = re.compile(r"\bNOT\s+NULL\b", re.IGNORECASE)
ONE_TO_MANY_LINE = re.compile(r"^(\w+)\s+\|\|--o\{\s+(\w+)$")
ONE_TO_ONE_LINE = re.compile(r"^(\w+)\s+\|\|--\|\|\s+(\w+)$")
MANY_TO_MANY_LINE = re.compile(r"^(\w+)\s+\}o--o\{\s+(\w+)(?:\s*:\s*(\w+))?$")
COMMENT_PREFIX = "'"


@dataclass
class DiagramDocument:
    """Tables and relationship lines exactly as written in the diagram."""

    tables: List[Table] = field(default_factory=list)
    relationships: List[Relationship] = field(default_factory=list)


def _parse_int(value: str) -> Optional[int]:
    value = value.strip()
    return int(value) if value.isdigit() else None


def parse_column(line: str) -> Optional[Column]:
    """
    Parse one column line such as ``* id : bigint`` or
    ``price : decimal(8,2) NOT NULL "Unit price"``.

    Returns None when the line is not a column definition.
    """
    match = COLUMN_LINE.match(line)
    if not match:
        return None
    star, name, raw_type, params, trailing = match.groups()
    primary = star is not None
    column_type = normalize_type(raw_type)
    if column_type == "varchar" and raw_type.lower() not in ("varchar", "string"):
        logger.debug(f"Unknown column type '{raw_type}' for '{name}', using varchar")

    remaining = (trailing or "").strip()
    not_null = bool(NOT_NULL.search(remaining))
    if not_null:
        remaining = NOT_NULL.sub("", remaining).strip()
    comment = remaining.strip("\"'").strip() or None

    column = Column(
        name=name,
        type=column_type,
        primary=primary,
        nullable=not (primary or not_null),
        comment=comment,
    )

    if params:
        if column_type == "enum":
            column.enum_values = [v.strip().strip("\"'") for v in params.split(",") if v.strip()]
        elif "," in params:
            precision, _, scale = params.partition(",")
            column.precision = _parse_int(precision)
            column.scale = _parse_int(scale) if scale.strip() else 0
        elif column_type == "decimal":
            column.precision = _parse_int(params)
        else:
            column.size = _parse_int(params)
    return column


RELATIONSHIP_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], Relationship]]] = [
    (ONE_TO_MANY_LINE, lambda m: OneToMany(parent=m.group(1), child=m.group(2))),
    (ONE_TO_ONE_LINE, lambda m: OneToOne(parent=m.group(1), child=m.group(2))),
    (
        MANY_TO_MANY_LINE,
        lambda m: ManyToMany(table1=m.group(1), table2=m.group(2), pivot_table=m.group(3)),
    ),
]


def parse_relationship(line: str) -> Optional[Relationship]:
    for pattern, build in RELATIONSHIP_PATTERNS:
        match = pattern.match(line)
        if match:
            return build(match)
    return None


def parse_diagram(content: str) -> DiagramDocument:
    """
    Parse PlantUML entity blocks and relationship lines.

    Unrecognised lines are skipped so hand-edited diagrams still parse.

    Args:
        content: Full diagram text

    Returns:
        DiagramDocument with tables in declaration order and the raw
        relationships (no foreign keys or pivot tables added yet)
    """
    document = DiagramDocument()
    current: Optional[Table] = None

    for line_no, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        entity = ENTITY_LINE.match(line)
        if entity:
            if current is not None:
                document.tables.append(current)
            current = Table(name=entity.group(1))
            continue

        relationship = parse_relationship(line)
        if relationship is not None:
            document.relationships.append(relationship)
            continue

        if line == "}":
            if current is not None:
                document.tables.append(current)
                current = None
            continue

        if current is not None:
            column = parse_column(line)
            if column is not None:
                if current.get_column(column.name) is None:
                    current.columns.append(column)
                continue

        logger.debug(f"Skipping unrecognised diagram line {line_no}: {line}")

    if current is not None:
        document.tables.append(current)

    logger.info(
        f"Parsed diagram: {len(document.tables)} entities, "
        f"{len(document.relationships)} relationships"
    )
    return document
