"""Parsers for migration files and PlantUML diagrams."""

from .migration import ForeignKeyFact, ParsedTable, parse_migration, parse_migrations
from .diagram import DiagramDocument, parse_column, parse_diagram

__all__ = [
    "ForeignKeyFact",
    "ParsedTable",
    "parse_migration",
    "parse_migrations",
    "DiagramDocument",
    "parse_column",
    "parse_diagram",
]
