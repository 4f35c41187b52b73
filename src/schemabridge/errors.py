"""Exceptions raised by the translation core."""

from typing import Optional


class SchemaBridgeError(Exception):
    """Base class for failures the caller is expected to report."""


class MissingPivotTableError(SchemaBridgeError):
    """A many-to-many relationship has no pivot table in the model."""

    def __init__(self, table1: str, table2: str, pivot_table: Optional[str] = None):
        self.table1 = table1
        self.table2 = table2
        self.pivot_table = pivot_table
        super().__init__(
            f"Many-to-many relationship {table1} <-> {table2} has no pivot table "
            f"'{pivot_table or '?'}' in the schema"
        )


class PivotTableShapeError(SchemaBridgeError):
    """A pivot table reached the emitter without exactly two foreign keys."""

    def __init__(self, table_name: str, foreign_keys: list):
        self.table_name = table_name
        self.foreign_keys = list(foreign_keys)
        super().__init__(
            f"Pivot table '{table_name}' must have exactly two foreign key columns, "
            f"found {len(self.foreign_keys)}: {', '.join(self.foreign_keys) or 'none'}"
        )
