"""Emitters for migration files and PlantUML diagrams."""

from .migration import MigrationDocument, build_column_definition, emit_migration
from .diagram import emit_diagram

__all__ = ["MigrationDocument", "build_column_definition", "emit_migration", "emit_diagram"]
