"""Normalized schema model and its invariant checks."""

from .model import (
    Column,
    ColumnType,
    ForeignKeyRef,
    ManyToMany,
    OneToMany,
    OneToOne,
    Relationship,
    SchemaModel,
    Table,
    UnresolvedReference,
    normalize_type,
)
from .validators import SchemaIssue, validate_schema

__all__ = [
    "Column",
    "ColumnType",
    "ForeignKeyRef",
    "ManyToMany",
    "OneToMany",
    "OneToOne",
    "Relationship",
    "SchemaModel",
    "Table",
    "UnresolvedReference",
    "normalize_type",
    "SchemaIssue",
    "validate_schema",
]
